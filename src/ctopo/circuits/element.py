"""Element contract consumed by circuit assembly."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ctopo.config import CoreSettings
from ctopo.equations.ast import Block, EqExpr
from ctopo.equations.parser import parse_equation
from ctopo.errors import CircuitValidationError
from ctopo.linalg.rational import RationalMatrix, to_rational_matrix, zeros


BranchPolarity = Tuple[int, int]

# role -> (row count name, column count name)
MATRIX_ROLES: Dict[str, Tuple[str, str]] = {
    "mv": ("nl", "nb"),
    "mi": ("nl", "nb"),
    "mx": ("nl", "nx"),
    "mxd": ("nl", "nx"),
    "mq": ("nl", "nq"),
    "mu": ("nl", "nu"),
    "pv": ("ny", "nb"),
    "pi": ("ny", "nb"),
    "px": ("ny", "nx"),
    "pxd": ("ny", "nx"),
    "pq": ("ny", "nq"),
}


@dataclass(frozen=True, eq=False)
class Pin:
    """Terminal group of one element: its (local branch, polarity) pairs."""

    element: "Element"
    pairs: Tuple[BranchPolarity, ...]


class Element:
    """
    A circuit element described by its equation matrices.

    The element contributes ``nl`` rows of

        mv v + mi i + mx x + mxd dx/dt + mq q = mu u + u0

    and ``ny`` output rows ``y = pv v + pi i + px x + pxd dx/dt + pq q``.
    Counts are inferred from the matrix shapes; missing matrices are zero.
    Nonlinear behaviour is given by a template writing ``res`` and ``J``
    from ``q`` with element-local, 0-based indices.
    """

    def __init__(
        self,
        *,
        pins: Optional[Mapping[str, Sequence[BranchPolarity]]] = None,
        ports: Optional[Sequence[Tuple[str, str]]] = None,
        nonlinear_eq: Union[EqExpr, str, None] = None,
        name: Optional[str] = None,
        settings: Optional[CoreSettings] = None,
        **matrices: Any,
    ) -> None:
        settings = settings or CoreSettings()
        unknown = sorted(set(matrices) - set(MATRIX_ROLES) - {"u0"})
        if unknown:
            raise CircuitValidationError(f"Unknown element matrices: {', '.join(unknown)}")
        self.name = name

        given = {
            role: to_rational_matrix(value, settings.max_denominator)
            for role, value in matrices.items()
            if value is not None
        }
        counts = self._infer_counts(given)
        self.nb = counts["nb"]
        self.nx = counts["nx"]
        self.nq = counts["nq"]
        self.nu = counts["nu"]
        self.nl = counts["nl"]
        self.ny = counts["ny"]
        self.nn = self.nb + self.nx + self.nq - self.nl
        if self.nn < 0:
            raise CircuitValidationError(
                f"Element has more equations ({self.nl}) than unknowns ({self.nb + self.nx + self.nq})."
            )

        for role, (row_name, col_name) in MATRIX_ROLES.items():
            setattr(self, role, given.get(role, zeros(counts[row_name], counts[col_name])))
        self.u0 = given.get("u0", zeros(self.nl, 1))
        if self.u0.cols != 1:
            raise CircuitValidationError("u0 must be a column vector.")

        if pins is not None and ports is not None:
            raise CircuitValidationError("Specify either pins or ports, not both.")
        if pins is None:
            if ports is None:
                ports = [(str(2 * b + 1), str(2 * b + 2)) for b in range(self.nb)]
            pins = _pins_from_ports(ports, self.nb)
        self.pins: Dict[str, Tuple[BranchPolarity, ...]] = {
            pin_name: self._validate_pairs(pin_name, pairs) for pin_name, pairs in pins.items()
        }

        if nonlinear_eq is None:
            nonlinear_eq = Block(())
        elif isinstance(nonlinear_eq, str):
            nonlinear_eq = parse_equation(nonlinear_eq)
        self.nonlinear_eq: EqExpr = nonlinear_eq

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<Element{label} nb={self.nb} nx={self.nx} nq={self.nq} nl={self.nl} ny={self.ny}>"

    @staticmethod
    def _infer_counts(given: Mapping[str, RationalMatrix]) -> Dict[str, int]:
        counts: Dict[str, int] = {}

        def record(count_name: str, value: int, role: str) -> None:
            previous = counts.setdefault(count_name, value)
            if previous != value:
                raise CircuitValidationError(
                    f"Matrix {role} implies {count_name}={value}, inconsistent with {count_name}={previous}."
                )

        for role, matrix in given.items():
            if role == "u0":
                record("nl", matrix.rows, role)
                continue
            row_name, col_name = MATRIX_ROLES[role]
            record(row_name, matrix.rows, role)
            record(col_name, matrix.cols, role)
        for count_name in ("nb", "nx", "nq", "nu", "nl", "ny"):
            counts.setdefault(count_name, 0)
        return counts

    def _validate_pairs(self, pin_name: str, pairs: Iterable[BranchPolarity]) -> Tuple[BranchPolarity, ...]:
        result: List[BranchPolarity] = []
        for branch, polarity in pairs:
            if polarity not in (1, -1):
                raise CircuitValidationError(f"Pin {pin_name} has polarity {polarity}; expected +1 or -1.")
            if not 0 <= branch < self.nb:
                raise CircuitValidationError(f"Pin {pin_name} refers to branch {branch} of a {self.nb}-branch element.")
            result.append((int(branch), int(polarity)))
        return tuple(result)

    def pin(self, name: str) -> Pin:
        """Return the pin registered under ``name``."""
        try:
            return Pin(self, self.pins[name])
        except KeyError as exc:
            raise CircuitValidationError(f"Element has no pin named {name!r}.") from exc

    def matrix(self, role: str) -> RationalMatrix:
        if role not in MATRIX_ROLES:
            raise ValueError(f"Unknown matrix role: {role}")
        return getattr(self, role)


def _pins_from_ports(ports: Sequence[Tuple[str, str]], nb: int) -> Dict[str, List[BranchPolarity]]:
    if len(ports) != nb:
        raise CircuitValidationError(f"Expected {nb} ports, one per branch, got {len(ports)}.")
    pins: Dict[str, List[BranchPolarity]] = {}
    for branch, (pos, neg) in enumerate(ports):
        pins.setdefault(pos, []).append((branch, 1))
        pins.setdefault(neg, []).append((branch, -1))
    return pins
