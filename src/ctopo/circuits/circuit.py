"""Circuit assembly: elements, nets, incidence and aggregated element data."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Union

import numpy as np
import scipy.sparse as sp

from ctopo.circuits.element import MATRIX_ROLES, Element, Pin
from ctopo.circuits.nets import BranchPolarity, NetArena, NetId
from ctopo.equations.assemble import splice_templates
from ctopo.equations.ast import Block
from ctopo.errors import CircuitValidationError, ElementNotFoundError
from ctopo.linalg import rational
from ctopo.linalg.rational import RationalMatrix


logger = logging.getLogger(__name__)

PinOrName = Union[Pin, str]


class Circuit:
    """
    Ordered collection of elements plus the nets connecting their branches.

    Insertion order fixes global branch numbering: an element's branches
    start at the sum of the branch counts of the elements added before it.
    """

    def __init__(self) -> None:
        self._elements: List[Element] = []
        self._offsets: Dict[int, int] = {}
        self._nb = 0
        self._nets = NetArena()

    @property
    def elements(self) -> List[Element]:
        return list(self._elements)

    @property
    def nets(self) -> List[List[BranchPolarity]]:
        """Net contents in incidence row order."""
        return [self._nets.contents(net) for net in self._nets.ids]

    @property
    def net_names(self) -> Dict[str, NetId]:
        return self._nets.names

    def net_row(self, net: NetId) -> int:
        """Incidence row of a net id returned by :meth:`netfor`."""
        return self._nets.ids.index(net)

    @property
    def nb(self) -> int:
        return self._nb

    @property
    def nx(self) -> int:
        return sum(elem.nx for elem in self._elements)

    @property
    def nq(self) -> int:
        return sum(elem.nq for elem in self._elements)

    @property
    def nu(self) -> int:
        return sum(elem.nu for elem in self._elements)

    @property
    def nl(self) -> int:
        return sum(elem.nl for elem in self._elements)

    @property
    def ny(self) -> int:
        return sum(elem.ny for elem in self._elements)

    @property
    def nn(self) -> int:
        return sum(elem.nn for elem in self._elements)

    def __contains__(self, element: object) -> bool:
        return id(element) in self._offsets

    def add(self, *elements: Element) -> None:
        """Add elements in order; elements already present are skipped."""
        for elem in elements:
            if elem in self:
                continue
            offset = self._nb
            self._elements.append(elem)
            self._offsets[id(elem)] = offset
            self._nb += elem.nb
            for pairs in elem.pins.values():
                self._nets.create((offset + branch, polarity) for branch, polarity in pairs)
            logger.debug("Added %r at branch offset %d.", elem, offset)

    def branch_offset(self, element: Element) -> int:
        try:
            return self._offsets[id(element)]
        except KeyError:
            raise ElementNotFoundError("Element not found in circuit.") from None

    def netfor(self, pin: PinOrName) -> NetId:
        """Net id for a pin (adding its element if needed) or for a net name."""
        if isinstance(pin, str):
            return self._nets.named(pin)
        self.add(pin.element)
        offset = self.branch_offset(pin.element)
        net = self._nets.find([(offset + branch, polarity) for branch, polarity in pin.pairs])
        if net is None:
            raise CircuitValidationError("Pin does not belong to any net of the circuit.")
        return net

    def connect(self, *pins: PinOrName) -> None:
        """Merge the nets of all given pins and net names into one."""
        if not pins:
            return
        self._nets.merge([self.netfor(pin) for pin in pins])

    def incidence(self) -> sp.csc_matrix:
        """Signed net x branch incidence; shorted branches cancel out."""
        rows: List[int] = []
        cols: List[int] = []
        vals: List[int] = []
        for row, net in enumerate(self._nets.ids):
            for branch, polarity in self._nets.contents(net):
                rows.append(row)
                cols.append(branch)
                vals.append(polarity)
        matrix = sp.coo_matrix(
            (np.asarray(vals, dtype=np.int64), (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
            shape=(len(self._nets), self._nb),
        ).tocsc()
        matrix.sum_duplicates()
        matrix.eliminate_zeros()
        return matrix

    def matrix(self, role: str) -> RationalMatrix:
        """Block-diagonal aggregate of the elements' ``role`` matrices."""
        if role not in MATRIX_ROLES:
            raise ValueError(f"Unknown matrix role: {role}")
        return rational.block_diag(elem.matrix(role) for elem in self._elements)

    def mv(self) -> RationalMatrix:
        return self.matrix("mv")

    def mi(self) -> RationalMatrix:
        return self.matrix("mi")

    def mx(self) -> RationalMatrix:
        return self.matrix("mx")

    def mxd(self) -> RationalMatrix:
        return self.matrix("mxd")

    def mq(self) -> RationalMatrix:
        return self.matrix("mq")

    def mu(self) -> RationalMatrix:
        return self.matrix("mu")

    def pv(self) -> RationalMatrix:
        return self.matrix("pv")

    def pi(self) -> RationalMatrix:
        return self.matrix("pi")

    def px(self) -> RationalMatrix:
        return self.matrix("px")

    def pxd(self) -> RationalMatrix:
        return self.matrix("pxd")

    def pq(self) -> RationalMatrix:
        return self.matrix("pq")

    def u0(self) -> RationalMatrix:
        return rational.vcat(elem.u0 for elem in self._elements)

    def nonlinear_eq(self, indices: Optional[Iterable[int]] = None) -> Block:
        """
        Combined nonlinear equation program of the selected elements.

        ``indices`` are element positions in insertion order (all elements by
        default). Offsets into ``q``, ``J`` and ``res`` are relative to the
        selection.
        """
        if indices is None:
            selected = list(self._elements)
        else:
            selected = [self._elements[idx] for idx in indices]
        return splice_templates((elem.nonlinear_eq, elem.nn, elem.nq) for elem in selected)
