"""Reference two-terminal elements implementing the element contract."""

from __future__ import annotations

import math
from typing import Optional

from ctopo.circuits.element import Element
from ctopo.errors import CircuitValidationError


TWO_TERMINAL = [("+", "-")]


def _require_positive(value: float, what: str) -> None:
    if not math.isfinite(value) or value <= 0:
        raise CircuitValidationError(f"{what} must be positive and finite.")


def resistor(resistance: float, name: Optional[str] = None) -> Element:
    """v - R i = 0."""
    _require_positive(resistance, "Resistance")
    return Element(mv=1, mi=-resistance, ports=TWO_TERMINAL, name=name)


def capacitor(capacitance: float, name: Optional[str] = None) -> Element:
    """State is the charge: C v - x = 0 and i - dx/dt = 0."""
    _require_positive(capacitance, "Capacitance")
    return Element(
        mv=[capacitance, 0],
        mi=[0, 1],
        mx=[-1, 0],
        mxd=[0, -1],
        ports=TWO_TERMINAL,
        name=name,
    )


def inductor(inductance: float, name: Optional[str] = None) -> Element:
    """State is the flux: v - dx/dt = 0 and L i - x = 0."""
    _require_positive(inductance, "Inductance")
    return Element(
        mv=[1, 0],
        mi=[0, inductance],
        mx=[0, -1],
        mxd=[-1, 0],
        ports=TWO_TERMINAL,
        name=name,
    )


def voltagesource(voltage: Optional[float] = None, name: Optional[str] = None) -> Element:
    """Fixed voltage, or an input when ``voltage`` is None; outputs its current."""
    if voltage is None:
        return Element(mv=1, mu=1, pi=1, ports=TWO_TERMINAL, name=name)
    return Element(mv=1, u0=voltage, pi=1, ports=TWO_TERMINAL, name=name)


def currentsource(current: Optional[float] = None, name: Optional[str] = None) -> Element:
    """Fixed current, or an input when ``current`` is None; outputs its voltage."""
    if current is None:
        return Element(mi=1, mu=1, pv=1, ports=TWO_TERMINAL, name=name)
    return Element(mi=1, u0=current, pv=1, ports=TWO_TERMINAL, name=name)


def diode(is_: float = 1e-12, eta: float = 1.0, vt: float = 25e-3, name: Optional[str] = None) -> Element:
    """Shockley diode; q = (v, i) with residual Is (exp(v / (eta vt)) - 1) - i."""
    _require_positive(is_, "Saturation current")
    _require_positive(eta * vt, "Emission coefficient times thermal voltage")
    template = f"""
        v_t = {eta * vt!r}
        ex = exp(q[0] / v_t)
        res[0] = {is_!r} * (ex - 1) - q[1]
        J[0, 0] = {is_!r} / v_t * ex
        J[0, 1] = -1
    """
    return Element(
        mv=[1, 0],
        mi=[0, 1],
        mq=[[-1, 0], [0, -1]],
        ports=TWO_TERMINAL,
        nonlinear_eq=template,
        name=name,
    )
