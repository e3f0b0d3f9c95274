import numpy as np
from hypothesis import given, settings
from hypothesis import strategies as st

from ctopo.circuits import Circuit, Element
from ctopo.circuits.library import resistor, voltagesource


def test_two_single_pin_elements_connected():
    a = Element(mv=1, pins={"p": [(0, 1)]})
    b = Element(mv=1, pins={"p": [(0, -1)]})
    circuit = Circuit()
    circuit.add(a)
    circuit.add(b)
    assert circuit.nb == 2
    assert circuit.nets == [[(0, 1)], [(1, -1)]]

    circuit.connect(a.pin("p"), b.pin("p"))

    assert circuit.nb == 2
    incidence = circuit.incidence()
    assert incidence.shape == (1, 2)
    np.testing.assert_array_equal(incidence.toarray(), [[1, -1]])
    assert incidence.toarray().sum() == 0


def test_self_short_cancels_branch_column():
    r = resistor(50.0)
    circuit = Circuit()
    circuit.add(r)
    circuit.connect(r.pin("+"), r.pin("-"))

    incidence = circuit.incidence()
    assert incidence.shape == (1, 1)
    assert incidence.nnz == 0
    assert incidence.getcol(0).nnz == 0


def test_voltage_divider_incidence():
    source = voltagesource(5.0)
    r1 = resistor(1e3)
    r2 = resistor(2e3)
    circuit = Circuit()
    circuit.add(source, r1, r2)
    circuit.connect(source.pin("+"), r1.pin("+"))
    circuit.connect(r1.pin("-"), r2.pin("+"))
    circuit.connect(r2.pin("-"), source.pin("-"), "gnd")

    expected = np.array(
        [
            [1, 1, 0],
            [0, -1, 1],
            [-1, 0, -1],
        ]
    )
    np.testing.assert_array_equal(circuit.incidence().toarray(), expected)
    assert circuit.incidence().dtype == np.int64


def test_unconnected_named_net_gives_zero_row():
    circuit = Circuit()
    circuit.add(resistor(1.0))
    circuit.netfor("floating")

    incidence = circuit.incidence()
    assert incidence.shape == (3, 1)
    assert incidence.getrow(2).nnz == 0


def test_empty_circuit_incidence():
    incidence = Circuit().incidence()
    assert incidence.shape == (0, 0)


@st.composite
def _random_circuit(draw):
    count = draw(st.integers(min_value=1, max_value=6))
    elements = [resistor(float(idx + 1)) for idx in range(count)]
    pins = [(idx, name) for idx in range(count) for name in ("+", "-")]
    links = draw(
        st.lists(
            st.tuples(st.sampled_from(pins), st.sampled_from(pins)),
            max_size=8,
        )
    )
    circuit = Circuit()
    circuit.add(*elements)
    for (idx_a, name_a), (idx_b, name_b) in links:
        circuit.connect(elements[idx_a].pin(name_a), elements[idx_b].pin(name_b))
    return circuit


@settings(max_examples=50, deadline=None)
@given(_random_circuit())
def test_incidence_shape_and_column_sums(circuit):
    incidence = circuit.incidence()
    dense = incidence.toarray()

    assert incidence.shape == (len(circuit.nets), circuit.nb)
    assert set(np.unique(dense)).issubset({-1, 0, 1})
    for col in range(dense.shape[1]):
        column = dense[:, col]
        assert not column.any() or column.sum() == 0
    assert not np.any(incidence.data == 0)
