"""ctopo package initialization."""

from ctopo.circuits import Circuit, Element, Pin
from ctopo.config import CoreSettings, load_settings
from ctopo.equations import evaluate, format_equation, parse_equation
from ctopo.errors import (
    CircuitValidationError,
    ElementNotFoundError,
    EquationEvaluationError,
    EquationParseError,
    EquationTemplateError,
    TopologyError,
)
from ctopo.linalg import incidence_graph, topomat, topomat_inplace

__all__ = [
    "Circuit",
    "Element",
    "Pin",
    "CoreSettings",
    "load_settings",
    "evaluate",
    "format_equation",
    "parse_equation",
    "CircuitValidationError",
    "ElementNotFoundError",
    "EquationEvaluationError",
    "EquationParseError",
    "EquationTemplateError",
    "TopologyError",
    "incidence_graph",
    "topomat",
    "topomat_inplace",
]
