"""Splice per-element equation templates into one program with global indices."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Tuple

from ctopo.equations.ast import Assign, BinOp, Block, Call, EqExpr, Index, Let, Name, Neg, Number
from ctopo.errors import EquationTemplateError


NONLINEAR_ARRAYS = ("q", "J", "res")


def index_offsets(row_offset: int, col_offset: int) -> Dict[str, Tuple[int, ...]]:
    """Per-array offsets: ``q`` by column, ``J`` by (row, column), ``res`` by row."""
    return {
        "q": (col_offset,),
        "J": (row_offset, col_offset),
        "res": (row_offset,),
    }


def offset_indexes(expr: EqExpr, offsets: Mapping[str, Tuple[int, ...]]) -> EqExpr:
    """Return ``expr`` with ``offsets[array][k]`` added to the k-th index of every offset array."""
    if isinstance(expr, Index):
        indices = tuple(offset_indexes(index, offsets) for index in expr.indices)
        if expr.array not in offsets:
            return Index(expr.array, indices)
        shifts = offsets[expr.array]
        if len(indices) != len(shifts):
            raise EquationTemplateError(
                f"{expr.array} must be indexed with exactly {len(shifts)} index(es), got {len(indices)}."
            )
        return Index(
            expr.array,
            tuple(BinOp("+", Number(shift), index) for shift, index in zip(shifts, indices)),
        )
    if isinstance(expr, Name):
        if expr.name in offsets:
            raise EquationTemplateError(f"{expr.name} used without indexing expression.")
        return expr
    if isinstance(expr, Number):
        return expr
    if isinstance(expr, Call):
        if expr.func in offsets:
            raise EquationTemplateError(f"{expr.func} used without indexing expression.")
        return Call(expr.func, tuple(offset_indexes(arg, offsets) for arg in expr.args))
    if isinstance(expr, BinOp):
        return BinOp(expr.op, offset_indexes(expr.left, offsets), offset_indexes(expr.right, offsets))
    if isinstance(expr, Neg):
        return Neg(offset_indexes(expr.operand, offsets))
    if isinstance(expr, Assign):
        return Assign(offset_indexes(expr.target, offsets), offset_indexes(expr.value, offsets))
    if isinstance(expr, Block):
        return Block(tuple(offset_indexes(statement, offsets) for statement in expr.statements))
    if isinstance(expr, Let):
        return Let(offset_indexes(expr.body, offsets))
    raise TypeError(f"Unsupported expression: {expr}")


def splice_templates(templates: Iterable[Tuple[EqExpr, int, int]]) -> Block:
    """
    Concatenate ``(template, nn, nq)`` entries into one block.

    Each template is offset by the residual rows (``nn``) and nonlinear
    variables (``nq``) of the entries before it and wrapped in a ``Let`` so
    local names stay private to the element.
    """
    row_offset = 0
    col_offset = 0
    statements: List[EqExpr] = []
    for template, nn, nq in templates:
        shifted = offset_indexes(template, index_offsets(row_offset, col_offset))
        if not isinstance(shifted, Block):
            shifted = Block((shifted,))
        statements.append(Let(shifted))
        row_offset += nn
        col_offset += nq
    return Block(tuple(statements))
