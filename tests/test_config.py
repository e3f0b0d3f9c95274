import numpy as np
import pytest
import sympy

from ctopo.circuits import Circuit, Element
from ctopo.config import CoreSettings, load_settings
from ctopo.errors import TopologyError
from ctopo.linalg import topomat


def test_defaults():
    settings = CoreSettings()
    assert settings.check_incidence is True
    assert settings.max_denominator is None


def test_load_settings_from_yaml(tmp_path):
    path = tmp_path / "ctopo.yaml"
    path.write_text("check_incidence: false\nmax_denominator: 100\n", encoding="utf-8")

    settings = load_settings(path)
    assert settings == CoreSettings(check_incidence=False, max_denominator=100)


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_settings(path) == CoreSettings()


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("check_incidence: true\ntolerance: 1e-9\n", encoding="utf-8")
    with pytest.raises(ValueError, match="tolerance"):
        load_settings(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_invalid_max_denominator():
    with pytest.raises(ValueError):
        CoreSettings(max_denominator=0)


def test_max_denominator_applies_to_elements():
    element = Element(mv=1 / 3, settings=CoreSettings(max_denominator=10))
    circuit = Circuit()
    circuit.add(element)
    assert circuit.mv()[0, 0] == sympy.Rational(1, 3)


def test_incidence_check_can_be_disabled():
    bad = np.array([[2, 0], [-2, 0]])
    with pytest.raises(TopologyError):
        topomat(bad)
    tv, ti = topomat(bad, settings=CoreSettings(check_incidence=False))
    assert ti.shape[1] == 2
    assert tv.shape[1] == 2
