"""
Tests for tools/k8s_connector.py - snapshot collection without a live cluster.
"""

import json
import subprocess

from kubeledger.tools import k8s_connector
from kubeledger.tools.k8s_connector import _kubectl_fallback, save_snapshot, snapshot_cluster


def test_kubectl_fallback_parses_items(monkeypatch):
    """kubectl JSON output is unwrapped to its items."""
    def fake_run(cmd, **kwargs):
        assert cmd[:3] == ["kubectl", "get", "pods"]
        assert "--all-namespaces" in cmd
        return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps({"items": [{"a": 1}]}))

    monkeypatch.setattr(subprocess, "run", fake_run)
    assert _kubectl_fallback("pods") == [{"a": 1}]


def test_kubectl_fallback_missing_binary(monkeypatch):
    """A missing kubectl yields an empty list."""
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError("kubectl")

    monkeypatch.setattr(subprocess, "run", fake_run)
    assert _kubectl_fallback("nodes") == []


def test_bad_kubeconfig_falls_back_to_kubectl(monkeypatch, tmp_path):
    """An unreadable kubeconfig switches to kubectl calls."""
    calls = []

    def fake_fallback(resource, namespace=None):
        calls.append((resource, namespace))
        return [{"kind": resource}]

    monkeypatch.setattr(k8s_connector, "_kubectl_fallback", fake_fallback)
    snap = snapshot_cluster(str(tmp_path / "missing-kubeconfig"), namespaces=["web", "api"])

    assert snap["cluster_name"].startswith("unknown")
    assert snap["pods"] == [{"kind": "pods"}, {"kind": "pods"}]
    assert ("pods", "web") in calls and ("pods", "api") in calls
    assert snap["nodes"] == [{"kind": "nodes"}]


def test_save_snapshot(tmp_path):
    """Snapshots land in <dir>/latest.json."""
    path = save_snapshot({"pods": [], "nodes": []}, directory=str(tmp_path / "snaps"))
    assert path.name == "latest.json"
    assert json.loads(path.read_text(encoding="utf-8")) == {"pods": [], "nodes": []}
