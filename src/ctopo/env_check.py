"""Environment verification for ctopo dependencies."""

from __future__ import annotations

import importlib
import importlib.metadata
from dataclasses import dataclass
from typing import Dict, List

from packaging.specifiers import SpecifierSet
from packaging.version import InvalidVersion, Version


REQUIRED_PYTHON: Dict[str, str] = {
    "numpy": ">=1.24,<3",
    "scipy": ">=1.10,<2",
    "sympy": ">=1.12,<2",
    "networkx": ">=3.2,<4",
    "lark": ">=1.1,<2",
    "yaml": ">=6,<7",
    "packaging": ">=23",
}

OPTIONAL_PYTHON: Dict[str, str] = {
    "pytest": ">=7.4",
    "hypothesis": ">=6.100",
}

DISTRIBUTION_OVERRIDES: Dict[str, str] = {
    "yaml": "PyYAML",
}


@dataclass(frozen=True)
class EnvCheckResult:
    ok: bool
    errors: List[str]
    warnings: List[str]


def _check_module(module: str, spec: str) -> str | None:
    try:
        importlib.import_module(module)
    except Exception as exc:  # pragma: no cover - exercised via env
        return f"Missing Python package: {module} ({exc})"
    dist_name = DISTRIBUTION_OVERRIDES.get(module, module)
    try:
        version = importlib.metadata.version(dist_name)
    except importlib.metadata.PackageNotFoundError:
        return f"Package metadata missing for {module}."
    try:
        if spec and not SpecifierSet(spec).contains(Version(version)):
            return f"{module} version {version} does not satisfy {spec}."
    except InvalidVersion:
        return f"Unable to parse version for {module}: {version}."
    return None


def check_environment() -> EnvCheckResult:
    """Check required and test-only Python packages."""
    errors: List[str] = []
    warnings: List[str] = []

    for module, spec in REQUIRED_PYTHON.items():
        problem = _check_module(module, spec)
        if problem:
            errors.append(problem)

    for module, spec in OPTIONAL_PYTHON.items():
        problem = _check_module(module, spec)
        if problem:
            warnings.append(f"{problem} (needed for the test suite)")

    return EnvCheckResult(ok=not errors, errors=errors, warnings=warnings)


def main() -> None:
    result = check_environment()
    if result.ok:
        print("Environment check passed.")
        for warning in result.warnings:
            print(f"WARNING: {warning}")
        return
    for error in result.errors:
        print(f"ERROR: {error}")
    for warning in result.warnings:
        print(f"WARNING: {warning}")
    raise SystemExit(1)


if __name__ == "__main__":
    main()
