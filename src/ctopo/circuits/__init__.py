"""Circuit elements, connectivity and assembly."""

from ctopo.circuits.circuit import Circuit
from ctopo.circuits.element import MATRIX_ROLES, Element, Pin
from ctopo.circuits.nets import NetArena

__all__ = ["Circuit", "Element", "MATRIX_ROLES", "NetArena", "Pin"]
