"""Nonlinear equation templates: parsing, splicing and evaluation."""

from ctopo.equations.assemble import offset_indexes, splice_templates
from ctopo.equations.evaluate import evaluate
from ctopo.equations.parser import format_equation, parse_equation

__all__ = ["evaluate", "format_equation", "offset_indexes", "parse_equation", "splice_templates"]
