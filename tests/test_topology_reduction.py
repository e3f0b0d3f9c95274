import networkx as nx
import numpy as np
import pytest
import scipy.sparse as sp
from hypothesis import given, settings
from hypothesis import strategies as st

from ctopo.circuits import Circuit
from ctopo.circuits.library import resistor, voltagesource
from ctopo.config import CoreSettings
from ctopo.errors import TopologyError
from ctopo.linalg import check_incidence, incidence_graph, topomat, topomat_inplace


def _divider() -> Circuit:
    source = voltagesource(5.0)
    r1 = resistor(1e3)
    r2 = resistor(2e3)
    circuit = Circuit()
    circuit.add(source, r1, r2)
    circuit.connect(source.pin("+"), r1.pin("+"))
    circuit.connect(r1.pin("-"), r2.pin("+"))
    circuit.connect(r2.pin("-"), source.pin("-"), "gnd")
    return circuit


def _graph_incidence(n_nodes: int, edges) -> sp.csc_matrix:
    rows, cols, vals = [], [], []
    for branch, (pos, neg) in enumerate(edges):
        rows += [pos, neg]
        cols += [branch, branch]
        vals += [1, -1]
    matrix = sp.coo_matrix((vals, (rows, cols)), shape=(n_nodes, len(edges)), dtype=np.int64).tocsc()
    matrix.eliminate_zeros()
    return matrix


def _pivots(ti: sp.spmatrix) -> list:
    csr = sp.csr_matrix(ti)
    return [int(csr.indices[csr.indptr[r]:csr.indptr[r + 1]].min()) for r in range(csr.shape[0])]


def test_divider_loop_and_cutset_matrices():
    tv, ti = topomat(_divider())

    np.testing.assert_array_equal(ti.toarray(), [[1, 0, 1], [0, 1, -1]])
    np.testing.assert_array_equal(tv.toarray(), [[-1, 1, 1]])
    assert tv.dtype == np.int64
    assert ti.dtype == np.int64


def test_loop_matrix_is_orthogonal_to_cutset_matrix():
    tv, ti = topomat(_divider())
    assert not (tv @ ti.T).toarray().any()


def test_topomat_does_not_mutate_input():
    incidence = _divider().incidence()
    snapshot = incidence.toarray().copy()

    topomat(incidence)

    np.testing.assert_array_equal(incidence.toarray(), snapshot)


def test_topomat_inplace_mutates_lil_input():
    incidence = sp.lil_matrix(_divider().incidence())
    snapshot = incidence.toarray().copy()

    tv, ti = topomat_inplace(incidence)

    assert not np.array_equal(incidence.toarray(), snapshot)
    np.testing.assert_array_equal(incidence.toarray()[: ti.shape[0]], ti.toarray())
    np.testing.assert_array_equal(incidence.toarray()[ti.shape[0]:], 0)


def test_topomat_inplace_requires_lil_input():
    incidence = _divider().incidence()
    with pytest.raises(TypeError):
        topomat_inplace(incidence)
    with pytest.raises(TypeError):
        topomat_inplace(incidence.toarray())


def test_stored_zero_is_not_an_entry():
    stored_zero = sp.csc_matrix(
        (np.array([1, -1, 0], dtype=np.int64), (np.array([0, 1, 2]), np.array([0, 0, 1]))),
        shape=(3, 2),
    )
    assert stored_zero.nnz == 3

    tv, ti = topomat(stored_zero)
    tv_dense, ti_dense = topomat(stored_zero.toarray())

    assert ti.shape == ti_dense.shape == (1, 2)
    np.testing.assert_array_equal(ti.toarray(), [[1, 0]])
    np.testing.assert_array_equal(tv.toarray(), [[0, 1]])
    np.testing.assert_array_equal(tv.toarray(), tv_dense.toarray())


def test_stored_zero_in_lil_input_is_ignored():
    incidence = sp.lil_matrix((3, 2), dtype=np.int64)
    incidence[0, 0] = 1
    incidence[1, 0] = -1
    incidence.rows[2] = [1]
    incidence.data[2] = [0]

    tv, ti = topomat_inplace(incidence)

    np.testing.assert_array_equal(ti.toarray(), [[1, 0]])
    np.testing.assert_array_equal(tv.toarray(), [[0, 1]])


def test_topomat_accepts_dense_input():
    tv, ti = topomat(np.array([[1, 1], [-1, -1]]))
    np.testing.assert_array_equal(ti.toarray(), [[1, 1]])
    np.testing.assert_array_equal(tv.toarray(), [[-1, 1]])


def test_shorted_branch_is_a_cotree_self_loop():
    r = resistor(1.0)
    other = resistor(2.0)
    circuit = Circuit()
    circuit.add(r, other)
    circuit.connect(r.pin("+"), r.pin("-"))

    tv, ti = topomat(circuit)

    assert ti.shape == (1, 2)
    np.testing.assert_array_equal(ti.toarray(), [[0, 1]])
    np.testing.assert_array_equal(tv.toarray(), [[1, 0]])


def test_empty_and_floating_nets_are_dropped():
    circuit = Circuit()
    circuit.add(resistor(1.0))
    circuit.netfor("floating")

    tv, ti = topomat(circuit)

    assert ti.shape == (1, 1)
    assert tv.shape == (0, 1)


def test_empty_circuit():
    tv, ti = topomat(Circuit())
    assert tv.shape == (0, 0)
    assert ti.shape == (0, 0)


def test_rejects_non_unit_entries():
    with pytest.raises(TopologyError):
        topomat(sp.csc_matrix(np.array([[2], [-2]])))


def test_rejects_nonzero_column_sum():
    with pytest.raises(TopologyError):
        topomat(sp.csc_matrix(np.array([[1, 1], [0, -1]])))


def test_rejects_multi_terminal_branch():
    incidence = sp.csc_matrix(np.array([[1], [1], [-1], [-1]]))
    check_incidence(incidence)
    with pytest.raises(TopologyError):
        topomat(incidence)


def test_rejects_same_sign_pair_when_checks_disabled():
    incidence = sp.csc_matrix(np.array([[1], [1]]))
    with pytest.raises(TopologyError):
        topomat(incidence, settings=CoreSettings(check_incidence=False))


def test_topology_error_is_an_assertion_error():
    with pytest.raises(AssertionError):
        topomat(np.array([[1], [0]]))


def test_incidence_graph_edges_follow_branches():
    graph = incidence_graph(_divider().incidence())
    assert graph.number_of_nodes() == 3
    assert sorted(data["branch"] for _, _, data in graph.edges(data=True)) == [0, 1, 2]
    assert nx.number_connected_components(graph) == 1


@st.composite
def _random_graph(draw):
    n_nodes = draw(st.integers(min_value=1, max_value=7))
    nodes = st.integers(min_value=0, max_value=n_nodes - 1)
    edges = draw(st.lists(st.tuples(nodes, nodes), max_size=12))
    return n_nodes, edges


@settings(max_examples=75, deadline=None)
@given(_random_graph())
def test_random_graph_reduction_properties(case):
    n_nodes, edges = case
    incidence = _graph_incidence(n_nodes, edges)

    tv, ti = topomat(incidence)

    graph = incidence_graph(incidence)
    assert ti.shape == (n_nodes - nx.number_connected_components(graph), len(edges))
    assert tv.shape == (len(edges) - ti.shape[0], len(edges))

    pivots = _pivots(ti)
    assert pivots == sorted(pivots)
    np.testing.assert_array_equal(ti[:, pivots].toarray(), np.eye(len(pivots), dtype=np.int64))

    cotree = [col for col in range(len(edges)) if col not in pivots]
    np.testing.assert_array_equal(tv[:, pivots].toarray(), -ti[:, cotree].toarray().T)
    np.testing.assert_array_equal(tv[:, cotree].toarray(), np.eye(len(cotree), dtype=np.int64))
    assert not (tv @ ti.T).toarray().any()
