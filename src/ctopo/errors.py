"""Custom exceptions for circuit assembly, equation splicing and topology."""


class CircuitValidationError(ValueError):
    """Raised when an element, pin or connection is invalid."""


class ElementNotFoundError(LookupError):
    """Raised when an element is looked up in a circuit that does not contain it."""


class EquationTemplateError(ValueError):
    """Raised when an element's nonlinear equation template is malformed."""


class EquationParseError(ValueError):
    """Raised when equation template text fails to parse, with location context."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None, context: str | None = None):
        super().__init__(message)
        self.line = line
        self.column = column
        self.context = context


class EquationEvaluationError(RuntimeError):
    """Raised when an assembled equation program cannot be evaluated."""


class TopologyError(AssertionError):
    """Raised when an incidence matrix does not describe a valid two-terminal graph."""
