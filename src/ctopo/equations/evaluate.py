"""Interpreter for assembled equation programs."""

from __future__ import annotations

from collections import ChainMap
from typing import Any, Callable, Dict, Mapping, MutableMapping, Optional

import numpy as np

from ctopo.equations.ast import Assign, BinOp, Block, Call, EqExpr, Index, Let, Name, Neg, Number
from ctopo.errors import EquationEvaluationError


DEFAULT_FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "exp": np.exp,
    "log": np.log,
    "sqrt": np.sqrt,
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "abs": np.abs,
    "sign": np.sign,
    "min": min,
    "max": max,
}

_BINARY: Dict[str, Callable[[Any, Any], Any]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": lambda a, b: a / b,
    "**": lambda a, b: a**b,
}


class _Interpreter:
    def __init__(self, arrays: Dict[str, np.ndarray], functions: Mapping[str, Callable[..., Any]]) -> None:
        self.arrays = arrays
        self.functions = functions

    def run(self, expr: EqExpr, scope: MutableMapping[str, Any]) -> Any:
        if isinstance(expr, Block):
            result = None
            for statement in expr.statements:
                result = self.run(statement, scope)
            return result
        if isinstance(expr, Let):
            return self.run(expr.body, scope.new_child())
        if isinstance(expr, Assign):
            value = self.run(expr.value, scope)
            self._store(expr.target, value, scope)
            return value
        if isinstance(expr, Number):
            return expr.value
        if isinstance(expr, Name):
            if expr.name in scope:
                return scope[expr.name]
            raise EquationEvaluationError(f"Undefined name: {expr.name}")
        if isinstance(expr, Index):
            array = self._array(expr.array, scope)
            try:
                return array[self._position(expr, scope)]
            except IndexError as exc:
                raise EquationEvaluationError(f"Index out of range reading {expr.array}: {exc}") from exc
        if isinstance(expr, Call):
            func = self.functions.get(expr.func)
            if func is None:
                raise EquationEvaluationError(f"Unknown function: {expr.func}")
            return func(*(self.run(arg, scope) for arg in expr.args))
        if isinstance(expr, BinOp):
            op = _BINARY.get(expr.op)
            if op is None:
                raise EquationEvaluationError(f"Unknown operator: {expr.op}")
            return op(self.run(expr.left, scope), self.run(expr.right, scope))
        if isinstance(expr, Neg):
            return -self.run(expr.operand, scope)
        raise TypeError(f"Unsupported expression: {expr}")

    def _array(self, name: str, scope: MutableMapping[str, Any]) -> Any:
        if name in scope:
            return scope[name]
        if name in self.arrays:
            return self.arrays[name]
        raise EquationEvaluationError(f"Undefined array: {name}")

    def _position(self, expr: Index, scope: MutableMapping[str, Any]) -> tuple:
        position = []
        for index in expr.indices:
            value = self.run(index, scope)
            if int(value) != value:
                raise EquationEvaluationError(f"Non-integer index {value} into {expr.array}.")
            position.append(int(value))
        return tuple(position)

    def _store(self, target: EqExpr, value: Any, scope: MutableMapping[str, Any]) -> None:
        if isinstance(target, Name):
            scope[target.name] = value
            return
        if isinstance(target, Index):
            array = self._array(target.array, scope)
            try:
                array[self._position(target, scope)] = value
            except IndexError as exc:
                raise EquationEvaluationError(f"Index out of range writing {target.array}: {exc}") from exc
            return
        raise EquationEvaluationError(f"Cannot assign to {target}.")


def evaluate(
    program: EqExpr,
    q: np.ndarray,
    J: np.ndarray,
    res: np.ndarray,
    functions: Optional[Mapping[str, Callable[..., Any]]] = None,
) -> None:
    """Run ``program`` reading ``q`` and writing ``J`` and ``res`` in place."""
    table = dict(DEFAULT_FUNCTIONS)
    if functions:
        table.update(functions)
    interpreter = _Interpreter({"q": q, "J": J, "res": res}, table)
    interpreter.run(program, ChainMap())
