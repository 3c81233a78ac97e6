"""
Search configuration: defaults, YAML loading and the immutable
``SearchConfig`` value shared by every component of a run.
"""

import os
from dataclasses import dataclass, fields
from typing import Any, Mapping

import yaml

EXTENSIONS = ("xls", "xlsx", "xlsm", "xlt", "xltx")

DEFAULTS = {
    "ignore_case": False,
    "literal": False,
    "formula_result": False,
    "recursive": False,
    "parallel": False,
    "summary": False,
    "max_workers": None,
    "log_level": "WARNING",
}


def available_extensions() -> tuple[str, ...]:
    """Return the file extensions that are searched."""
    return EXTENSIONS


def load_config(config_path):
    """Load configuration from a YAML file on top of the defaults."""
    config = dict(DEFAULTS)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        config.update(user_config)
    return config


@dataclass(frozen=True)
class SearchConfig:
    """Options for one search run. Never mutated once built."""
    ignore_case: bool = False
    literal: bool = False
    formula_result: bool = False
    recursive: bool = False
    parallel: bool = False
    max_workers: int | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SearchConfig":
        names = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in mapping.items() if k in names}
        for name in sorted(names - {"max_workers"}):
            if name in kwargs and not isinstance(kwargs[name], bool):
                raise ValueError(f"{name} must be true or false, got {kwargs[name]!r}")
        if kwargs.get("max_workers") is not None:
            kwargs["max_workers"] = int(kwargs["max_workers"])
            if kwargs["max_workers"] < 1:
                raise ValueError("max_workers must be a positive integer")
        return cls(**kwargs)

    def worker_count(self) -> int:
        """Number of threads used when ``parallel`` is set."""
        cpus = os.cpu_count() or 1
        if self.max_workers is None:
            return cpus
        return min(self.max_workers, cpus)
