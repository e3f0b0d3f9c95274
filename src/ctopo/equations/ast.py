"""Tagged expression tree for nonlinear equation templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


class EqExpr:
    """Base class for equation expressions and statements."""


@dataclass(frozen=True)
class Number(EqExpr):
    value: Union[int, float]


@dataclass(frozen=True)
class Name(EqExpr):
    name: str


@dataclass(frozen=True)
class Index(EqExpr):
    """Indexing operation ``array[indices...]``."""

    array: str
    indices: Tuple[EqExpr, ...]


@dataclass(frozen=True)
class Call(EqExpr):
    func: str
    args: Tuple[EqExpr, ...]


@dataclass(frozen=True)
class BinOp(EqExpr):
    op: str
    left: EqExpr
    right: EqExpr


@dataclass(frozen=True)
class Neg(EqExpr):
    operand: EqExpr


@dataclass(frozen=True)
class Assign(EqExpr):
    target: EqExpr
    value: EqExpr


@dataclass(frozen=True)
class Block(EqExpr):
    statements: Tuple[EqExpr, ...]


@dataclass(frozen=True)
class Let(EqExpr):
    """Block evaluated in its own local scope."""

    body: Block


BINARY_OPS = ("+", "-", "*", "/", "**")
