"""Run pytest and generate fixtures (EEST-style flow)."""

from __future__ import annotations

import os
import subprocess
import sys

from harness_config import ROOT, HarnessConfig


def main() -> int:
    config = HarnessConfig.from_env()
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT / "src"), str(ROOT)])

    cmd = [
        sys.executable,
        "-m",
        "pytest",
        str(ROOT / "tests"),
        "-q",
        "--output",
        config.fixture_dir,
        "--fixture-format",
        config.fixture_format,
    ]
    print("Running:", " ".join(cmd))
    return subprocess.call(cmd, env=env, cwd=str(ROOT))


if __name__ == "__main__":
    raise SystemExit(main())
