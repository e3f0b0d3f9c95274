"""Parser and formatter for nonlinear equation templates."""

from __future__ import annotations

import math
from pathlib import Path
from typing import List, Union

from lark import Lark, Transformer, UnexpectedInput

from ctopo.equations.ast import Assign, BinOp, Block, Call, EqExpr, Index, Let, Name, Neg, Number
from ctopo.errors import EquationParseError


_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")


def _load_parser() -> Lark:
    return Lark(_GRAMMAR_PATH.read_text(encoding="utf-8"), parser="lalr", propagate_positions=True)


_PARSER = _load_parser()


class _EquationTransformer(Transformer):
    def start(self, items):
        return items[0]

    def body(self, items):
        return Block(statements=tuple(items))

    def let_block(self, items):
        return Let(body=items[0])

    def assign(self, items):
        return Assign(target=items[0], value=items[1])

    def name(self, items):
        return Name(name=str(items[0]))

    def number(self, items):
        return Number(value=items[0])

    def ref(self, items):
        return Index(array=str(items[0]), indices=tuple(items[1:]))

    def call(self, items):
        return Call(func=str(items[0]), args=tuple(items[1:]))

    def add(self, items):
        return BinOp("+", items[0], items[1])

    def sub(self, items):
        return BinOp("-", items[0], items[1])

    def mul(self, items):
        return BinOp("*", items[0], items[1])

    def div(self, items):
        return BinOp("/", items[0], items[1])

    def pow(self, items):
        return BinOp("**", items[0], items[1])

    def neg(self, items):
        return Neg(operand=items[0])

    def NUMBER(self, token):
        return _parse_number(str(token))

    def NAME(self, token):
        return str(token)


def parse_equation(text: str) -> Block:
    """Parse template text into a statement block."""
    try:
        tree = _PARSER.parse(text)
    except UnexpectedInput as exc:
        context = exc.get_context(text) if hasattr(exc, "get_context") else ""
        raise EquationParseError(
            f"Equation parse error at line {exc.line}, column {exc.column}: {exc}".strip(),
            line=exc.line,
            column=exc.column,
            context=context,
        ) from exc
    return _EquationTransformer().transform(tree)


def format_equation(expr: EqExpr) -> str:
    """Format an expression or block into template text that parses back to it."""
    return "\n".join(_format_lines(expr, 0))


def _format_lines(expr: EqExpr, depth: int) -> List[str]:
    pad = "    " * depth
    if isinstance(expr, Block):
        lines: List[str] = []
        for statement in expr.statements:
            lines.extend(_format_lines(statement, depth))
        return lines
    if isinstance(expr, Let):
        return [f"{pad}let {{", *_format_lines(expr.body, depth + 1), f"{pad}}}"]
    return [pad + _format_expr(expr)]


def _format_expr(expr: EqExpr) -> str:
    if isinstance(expr, Assign):
        return f"{_format_expr(expr.target)} = {_format_expr(expr.value)}"
    if isinstance(expr, Number):
        return _format_number(expr.value)
    if isinstance(expr, Name):
        return expr.name
    if isinstance(expr, Index):
        return f"{expr.array}[{_format_list(expr.indices)}]"
    if isinstance(expr, Call):
        return f"{expr.func}({_format_list(expr.args)})"
    if isinstance(expr, BinOp):
        return f"{_format_operand(expr.left)} {expr.op} {_format_operand(expr.right)}"
    if isinstance(expr, Neg):
        return f"-{_format_operand(expr.operand)}"
    if isinstance(expr, (Block, Let)):
        raise TypeError("Blocks can only appear as statements.")
    raise TypeError(f"Unsupported expression: {expr}")


def _format_operand(expr: EqExpr) -> str:
    if isinstance(expr, (BinOp, Neg)):
        return f"({_format_expr(expr)})"
    return _format_expr(expr)


def _format_list(items) -> str:
    return ", ".join(_format_expr(item) for item in items)


def _format_number(value: Union[int, float]) -> str:
    if not math.isfinite(value):
        raise ValueError(f"Cannot format non-finite number {value!r}.")
    text = repr(value)
    if value < 0:
        return f"({text})"
    return text


def _parse_number(token: str) -> Union[int, float]:
    if any(ch in token for ch in ".eE"):
        return float(token)
    return int(token)
