"""Exact rational sparse matrices built on sympy."""

from __future__ import annotations

from fractions import Fraction
from numbers import Integral, Real
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np
import scipy.sparse as sp
import sympy

from ctopo.errors import CircuitValidationError


RationalMatrix = sympy.SparseMatrix


def to_rational(value: Any, max_denominator: Optional[int] = None) -> sympy.Rational:
    """Convert a scalar to an exact sympy rational."""
    if isinstance(value, sympy.Rational):
        result = value
    elif isinstance(value, (Integral, np.integer)):
        result = sympy.Integer(int(value))
    elif isinstance(value, Fraction):
        result = sympy.Rational(value.numerator, value.denominator)
    elif isinstance(value, sympy.Float):
        result = sympy.Rational(value)
    elif isinstance(value, (Real, np.floating)):
        value = float(value)
        if not np.isfinite(value):
            raise CircuitValidationError(f"Matrix entry must be finite, got {value}.")
        result = sympy.Rational(value)
    else:
        raise CircuitValidationError(f"Matrix entry is not a real number: {value!r}")
    if max_denominator is not None and result.q > max_denominator:
        result = result.limit_denominator(max_denominator)
    return result


def _entries(value: Any) -> Tuple[int, int, Iterable[Tuple[Tuple[int, int], Any]]]:
    if isinstance(value, sympy.MatrixBase):
        return value.rows, value.cols, value.todok().items()
    if sp.issparse(value):
        coo = sp.coo_matrix(value)
        items = (((int(r), int(c)), v) for r, c, v in zip(coo.row, coo.col, coo.data))
        return coo.shape[0], coo.shape[1], items
    arr = np.asarray(value, dtype=object)
    if arr.ndim == 0:
        arr = arr.reshape(1, 1)
    elif arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    elif arr.ndim > 2:
        raise CircuitValidationError(f"Matrix must have at most two dimensions, got {arr.ndim}.")
    items = (((r, c), arr[r, c]) for r in range(arr.shape[0]) for c in range(arr.shape[1]))
    return arr.shape[0], arr.shape[1], items


def to_rational_matrix(value: Any, max_denominator: Optional[int] = None) -> RationalMatrix:
    """Convert scalars, sequences, numpy/scipy/sympy matrices to a rational SparseMatrix.

    Scalars become 1x1 matrices and one-dimensional input becomes a column.
    """
    rows, cols, items = _entries(value)
    entries: Dict[Tuple[int, int], sympy.Rational] = {}
    for key, raw in items:
        entry = to_rational(raw, max_denominator)
        if entry != 0:
            entries[key] = entry
    return sympy.SparseMatrix(rows, cols, entries)


def zeros(rows: int, cols: int) -> RationalMatrix:
    return sympy.SparseMatrix(rows, cols, {})


def block_diag(blocks: Iterable[RationalMatrix]) -> RationalMatrix:
    """Block-diagonal concatenation in iteration order; empty input gives 0x0."""
    n_rows = 0
    n_cols = 0
    entries: Dict[Tuple[int, int], sympy.Rational] = {}
    for block in [zeros(0, 0), *blocks]:
        for (row, col), entry in block.todok().items():
            entries[(row + n_rows, col + n_cols)] = entry
        n_rows += block.rows
        n_cols += block.cols
    return sympy.SparseMatrix(n_rows, n_cols, entries)


def vcat(blocks: Iterable[RationalMatrix], cols: int = 1) -> RationalMatrix:
    """Vertical concatenation in iteration order; empty input gives 0 x cols."""
    n_rows = 0
    entries: Dict[Tuple[int, int], sympy.Rational] = {}
    for block in [zeros(0, cols), *blocks]:
        if block.cols != cols:
            raise ValueError(f"Cannot stack a block with {block.cols} columns onto {cols} columns.")
        for (row, col), entry in block.todok().items():
            entries[(row + n_rows, col)] = entry
        n_rows += block.rows
    return sympy.SparseMatrix(n_rows, cols, entries)
