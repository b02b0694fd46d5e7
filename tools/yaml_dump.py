"""Shared YAML dump helpers for fixture output."""

from __future__ import annotations

from pathlib import Path

import yaml


class PlainDumper(yaml.SafeDumper):
    pass


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=None)


PlainDumper.add_representer(str, _str_representer)


def dump_yaml(data: dict) -> str:
    return yaml.dump(data, Dumper=PlainDumper, sort_keys=False, width=4096)


def load_yaml(text: str) -> dict:
    return yaml.safe_load(text)


def write_yaml(path: Path, data: dict) -> None:
    path.write_text(dump_yaml(data))
