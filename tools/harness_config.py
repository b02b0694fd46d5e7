"""
Configuration for the fixture and scenario tools.
"""

import os
from dataclasses import dataclass
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

FIXTURE_FORMATS = ("json", "yaml")


@dataclass
class HarnessConfig:
    """Settings shared by fill/consume/run_scenario."""
    fixture_dir: str = str(ROOT / "fixtures")
    fixture_format: str = "json"
    verbose: bool = False
    stop_on_first_failure: bool = False

    @classmethod
    def from_env(cls) -> "HarnessConfig":
        """Load configuration from environment variables."""
        config = cls()

        config.fixture_dir = os.environ.get("FIXTURE_DIR", config.fixture_dir)
        config.fixture_format = os.environ.get("FIXTURE_FORMAT", "json").lower()
        if config.fixture_format not in FIXTURE_FORMATS:
            raise ValueError(
                f"FIXTURE_FORMAT must be one of {FIXTURE_FORMATS}, got '{config.fixture_format}'"
            )

        config.verbose = os.environ.get("VERBOSE", "").lower() in ("true", "1", "yes")
        config.stop_on_first_failure = os.environ.get(
            "STOP_ON_FIRST_FAILURE", ""
        ).lower() in ("true", "1", "yes")

        return config
