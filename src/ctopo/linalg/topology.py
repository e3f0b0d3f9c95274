"""Topological reduction of incidence matrices into loop and cut-set matrices."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import networkx as nx
import numpy as np
import scipy.sparse as sp

from ctopo.config import CoreSettings
from ctopo.errors import TopologyError


logger = logging.getLogger(__name__)

TopologyMatrices = Tuple[sp.csc_matrix, sp.csc_matrix]


def check_incidence(incidence: sp.spmatrix) -> None:
    """Assert that every nonzero is +/-1 and every column sums to zero."""
    coo = sp.coo_matrix(incidence)
    data = coo.data[coo.data != 0]
    if data.size and not np.all(np.abs(data) == 1):
        raise TopologyError("Incidence entries must be 0, +1 or -1.")
    col_sums = np.asarray(coo.sum(axis=0)).ravel()
    bad = np.flatnonzero(col_sums != 0)
    if bad.size:
        raise TopologyError(f"Incidence columns must sum to zero; offending branches: {bad.tolist()}")


def _row_values(matrix: sp.lil_matrix, row: int) -> Dict[int, int]:
    return {col: int(value) for col, value in zip(matrix.rows[row], matrix.data[row])}


def _store_row(matrix: sp.lil_matrix, row: int, values: Dict[int, int]) -> None:
    cols = sorted(col for col, value in values.items() if value != 0)
    matrix.rows[row] = cols
    matrix.data[row] = [values[col] for col in cols]


def _swap_rows(matrix: sp.lil_matrix, row_a: int, row_b: int) -> None:
    matrix.rows[row_a], matrix.rows[row_b] = matrix.rows[row_b], matrix.rows[row_a]
    matrix.data[row_a], matrix.data[row_b] = matrix.data[row_b], matrix.data[row_a]


def _add_scaled_row(matrix: sp.lil_matrix, target: int, source: int, factor: int) -> None:
    values = _row_values(matrix, target)
    for col, value in _row_values(matrix, source).items():
        values[col] = values.get(col, 0) + factor * value
    _store_row(matrix, target, values)


def _entry(matrix: sp.lil_matrix, row: int, col: int) -> int:
    return _row_values(matrix, row).get(col, 0)


def topomat_inplace(
    incidence: sp.spmatrix,
    settings: Optional[CoreSettings] = None,
) -> TopologyMatrices:
    """
    Reduce an incidence matrix and build the fundamental loop matrix.

    Columns are swept left to right. A column with a nonzero at or below the
    current row becomes a tree branch: its row is swapped into place, the
    optional second row is cleared against it, its sign is normalized to +1
    and all rows above are cleared as well. Rows below the final cursor are
    linear combinations of the retained ones and are dropped.

    ``incidence`` must be a ``lil_matrix``; it is modified in place. Use
    :func:`topomat` for other formats or to keep the input intact.

    Returns ``(tv, ti)``: the loop matrix with one row per cotree branch and
    the reduced incidence matrix with one row per tree branch.
    """
    if not (sp.issparse(incidence) and incidence.format == "lil"):
        raise TypeError(f"topomat_inplace needs a lil matrix, got {type(incidence).__name__}.")
    settings = settings or CoreSettings()
    if settings.check_incidence:
        check_incidence(incidence)
    matrix = incidence
    n_rows, n_cols = matrix.shape
    # stored zeros would otherwise count as incident
    for r in range(n_rows):
        _store_row(matrix, r, _row_values(matrix, r))
    tree = np.zeros(n_cols, dtype=bool)

    row = 0
    for col in range(n_cols):
        rows = [r for r in range(row, n_rows) if col in matrix.rows[r]]
        if len(rows) > 2:
            raise TopologyError(f"Branch {col} is incident to more than two nets: rows {rows}.")
        if not rows:
            continue
        tree[col] = True

        if rows[0] != row:
            _swap_rows(matrix, rows[0], row)
        if len(rows) == 2:
            if _entry(matrix, row, col) + _entry(matrix, rows[1], col) != 0:
                raise TopologyError(f"Branch {col} terminals do not have opposite polarity.")
            _add_scaled_row(matrix, rows[1], row, 1)
        if _entry(matrix, row, col) < 0:
            _store_row(matrix, row, {c: -v for c, v in _row_values(matrix, row).items()})
        for upper in range(row):
            value = _entry(matrix, upper, col)
            if value:
                _add_scaled_row(matrix, upper, row, -value)
        row += 1

    ti = sp.csc_matrix(matrix[:row, :], dtype=np.int64)
    tree_cols = np.flatnonzero(tree)
    cotree_cols = np.flatnonzero(~tree)

    dl = sp.coo_matrix(ti[:, cotree_cols])
    n_cotree = cotree_cols.size
    tv_rows: List[int] = list(dl.col) + list(range(n_cotree))
    tv_cols: List[int] = list(tree_cols[dl.row]) + list(cotree_cols)
    tv_vals: List[int] = [-int(value) for value in dl.data] + [1] * n_cotree
    tv = sp.csc_matrix(
        (np.asarray(tv_vals, dtype=np.int64), (np.asarray(tv_rows, dtype=np.int64), np.asarray(tv_cols, dtype=np.int64))),
        shape=(n_cotree, n_cols),
    )
    logger.debug(
        "Reduced %dx%d incidence to %d tree and %d cotree branches.",
        n_rows,
        n_cols,
        tree_cols.size,
        n_cotree,
    )
    return tv, ti


def topomat(source: object, settings: Optional[CoreSettings] = None) -> TopologyMatrices:
    """Non-mutating topological reduction of a circuit or incidence matrix."""
    from ctopo.circuits.circuit import Circuit

    if isinstance(source, Circuit):
        return topomat_inplace(sp.lil_matrix(source.incidence(), dtype=np.int64), settings=settings)
    if not sp.issparse(source):
        source = sp.csc_matrix(np.asarray(source, dtype=np.int64))
    return topomat_inplace(sp.lil_matrix(source, dtype=np.int64, copy=True), settings=settings)


def incidence_graph(incidence: sp.spmatrix) -> nx.MultiGraph:
    """Graph with one node per net row and one edge per branch (from its +1 row to its -1 row)."""
    csc = sp.csc_matrix(incidence)
    graph = nx.MultiGraph()
    graph.add_nodes_from(range(csc.shape[0]))
    for col in range(csc.shape[1]):
        start, stop = csc.indptr[col], csc.indptr[col + 1]
        rows = csc.indices[start:stop]
        values = csc.data[start:stop]
        pos = [int(r) for r, v in zip(rows, values) if v > 0]
        neg = [int(r) for r, v in zip(rows, values) if v < 0]
        if len(pos) == 1 and len(neg) == 1:
            graph.add_edge(pos[0], neg[0], key=col, branch=col)
    return graph
