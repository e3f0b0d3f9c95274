"""Exact sparse linear algebra for circuit topology."""

from ctopo.linalg.topology import check_incidence, incidence_graph, topomat, topomat_inplace

__all__ = ["check_incidence", "incidence_graph", "topomat", "topomat_inplace"]
