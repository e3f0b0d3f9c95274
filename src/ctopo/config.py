"""Settings shared by the assembly and topology routines."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml


@dataclass(frozen=True)
class CoreSettings:
    """Tunable behaviour of the core.

    check_incidence: verify the {0, +1, -1} / zero column-sum preconditions
        before topological reduction.
    max_denominator: when set, floats in element matrices are converted to
        the closest rational with at most this denominator instead of their
        exact binary value.
    """

    check_incidence: bool = True
    max_denominator: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_denominator is not None and self.max_denominator < 1:
            raise ValueError("max_denominator must be a positive integer.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CoreSettings:
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**dict(data))


def load_settings(path: Path | str) -> CoreSettings:
    """Load settings from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"settings file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return CoreSettings.from_mapping(data or {})
