"""Tests for system trust store injection utilities."""

from __future__ import annotations

import importlib
import sys
import types
from typing import List

import pytest


def _make_dummy_truststore(inject_side_effect=None):
    mod = types.ModuleType("truststore")
    called: List[bool] = []

    def inject_into_requests():  # type: ignore
        if inject_side_effect:
            raise inject_side_effect
        called.append(True)

    mod.inject_into_requests = inject_into_requests  # type: ignore[attr-defined]
    mod._called = called  # type: ignore[attr-defined]
    return mod


def test_injection_success(monkeypatch):
    dummy = _make_dummy_truststore()
    monkeypatch.setitem(sys.modules, "truststore", dummy)
    from cblcli import ssl_trust

    importlib.reload(ssl_trust)
    ssl_trust.inject_os_trust()
    assert dummy._called
    assert ssl_trust.OS_TRUST_REASON == "injected:requests"


def test_injection_disabled(monkeypatch):
    dummy = _make_dummy_truststore()
    monkeypatch.setitem(sys.modules, "truststore", dummy)
    monkeypatch.setenv("CBLCLI_DISABLE_OS_TRUST", "1")
    from cblcli import ssl_trust

    importlib.reload(ssl_trust)
    ssl_trust.inject_os_trust()
    assert not dummy._called
    assert ssl_trust.OS_TRUST_REASON == "disabled-env"


def test_injection_failure_falls_back(monkeypatch, capsys):
    dummy = _make_dummy_truststore(inject_side_effect=RuntimeError("boom"))
    monkeypatch.setitem(sys.modules, "truststore", dummy)
    from cblcli import ssl_trust

    importlib.reload(ssl_trust)
    ssl_trust.inject_os_trust()
    assert ssl_trust.OS_TRUST_INJECTED is False
    assert ssl_trust.OS_TRUST_REASON == "error:RuntimeError"
    assert "injection skipped" in capsys.readouterr().err


def test_injection_force_failure(monkeypatch):
    dummy = _make_dummy_truststore(inject_side_effect=RuntimeError("boom"))
    monkeypatch.setitem(sys.modules, "truststore", dummy)
    monkeypatch.setenv("CBLCLI_FORCE_OS_TRUST", "1")
    from cblcli import ssl_trust

    importlib.reload(ssl_trust)
    with pytest.raises(RuntimeError):
        ssl_trust.inject_os_trust()
