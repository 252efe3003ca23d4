"""Connector — snapshots namespaces, pods and nodes via the official API.

Usage (standalone test)::

    python -m kubeledger.tools.k8s_connector --kubeconfig ~/.kube/config

Produces ``snapshots/latest.json`` with keys:
    cluster_name, timestamp, namespaces, pods, nodes.
"""

from __future__ import annotations

import argparse
import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Optional

from kubeledger import config
from kubeledger.tools.utils import utcnow_iso, write_json

logger = logging.getLogger("kubeledger.connector")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _serialise(api_client: Any, obj: Any) -> Any:
    """Convert a K8s API object to a plain dict via the client's serialiser."""
    return api_client.sanitize_for_serialization(obj)


def _kubectl_fallback(resource: str, namespace: str | None = None) -> list[dict]:
    """Shell-out fallback when the Python client cannot reach the API."""
    cmd = ["kubectl", "get", resource, "-o", "json"]
    if namespace:
        cmd += ["-n", namespace]
    elif resource != "nodes":
        cmd += ["--all-namespaces"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=30, check=True)
        return json.loads(result.stdout).get("items", [])
    except (OSError, subprocess.SubprocessError, json.JSONDecodeError) as exc:
        logger.warning("kubectl fallback for %s failed: %s", resource, exc)
        return []


def _safe_list(fn: Any, label: str) -> dict:
    """Call *fn* and return the result dict, or an empty ``{"items": []}``."""
    try:
        return fn()
    except Exception as exc:
        logger.warning("Could not list %s: %s", label, exc)
        return {"items": []}


def _collect_namespaced(
    fn: Any,
    ns_names: list[str],
    label: str,
) -> list[dict]:
    """Call *fn(ns)* for each namespace and merge all items."""
    items: list[dict] = []
    for ns in ns_names:
        try:
            items.extend(fn(ns).get("items", []))
        except Exception as exc:
            logger.warning("Could not list %s in namespace %s: %s", label, ns, exc)
    return items


def _detect_cluster_name(kubeconfig_path: str) -> str:
    """Best-effort extraction of cluster name from kubeconfig context."""
    try:
        from kubernetes import config as k8s_config
        _, active_context = k8s_config.list_kube_config_contexts(config_file=kubeconfig_path)
        return active_context.get("context", {}).get("cluster", active_context.get("name", "unknown"))
    except Exception as exc:
        logger.debug("Cluster name detection failed: %s", exc)
        return "unknown"


# ---------------------------------------------------------------------------
# Main snapshot function
# ---------------------------------------------------------------------------

def snapshot_cluster(
    kubeconfig_path: str,
    namespaces: Optional[list[str]] = None,
) -> dict[str, Any]:
    """Connect to a cluster and return a snapshot of namespaces, pods and nodes.

    Parameters
    ----------
    kubeconfig_path:
        Path to a kubeconfig file.
    namespaces:
        If provided, restrict pod collection to these namespaces.
        ``None`` means all namespaces.
    """
    try:
        from kubernetes import client, config as k8s_config

        k8s_config.load_kube_config(config_file=kubeconfig_path)
        api_client = client.ApiClient()
        v1 = client.CoreV1Api(api_client)
    except Exception as exc:
        logger.error("Failed to load kubeconfig at %s: %s", kubeconfig_path, exc)
        logger.info("Falling back to kubectl subprocess calls.")
        return _snapshot_via_kubectl(namespaces)

    snap: dict[str, Any] = {
        "cluster_name": _detect_cluster_name(kubeconfig_path),
        "timestamp": utcnow_iso(),
    }

    snap["namespaces"] = _safe_list(
        lambda: _serialise(api_client, v1.list_namespace()),
        "namespaces",
    ).get("items", [])

    ns_names: list[str] = namespaces or [
        ns["metadata"]["name"] for ns in snap["namespaces"]
    ]

    snap["pods"] = _collect_namespaced(
        lambda ns: _serialise(api_client, v1.list_namespaced_pod(ns)),
        ns_names, "pods",
    )

    snap["nodes"] = _safe_list(
        lambda: _serialise(api_client, v1.list_node()),
        "nodes",
    ).get("items", [])

    logger.info(
        "Snapshot: %d namespace(s), %d pod(s), %d node(s)",
        len(snap["namespaces"]), len(snap["pods"]), len(snap["nodes"]),
    )
    return snap


def _snapshot_via_kubectl(namespaces: Optional[list[str]] = None) -> dict[str, Any]:
    """Build a snapshot entirely from kubectl subprocess calls."""
    logger.info("Building snapshot via kubectl fallback…")
    if namespaces:
        pods = [p for ns in namespaces for p in _kubectl_fallback("pods", ns)]
    else:
        pods = _kubectl_fallback("pods")
    return {
        "cluster_name": "unknown (kubectl fallback)",
        "timestamp": utcnow_iso(),
        "namespaces": _kubectl_fallback("namespaces"),
        "pods": pods,
        "nodes": _kubectl_fallback("nodes"),
    }


def save_snapshot(snapshot: dict[str, Any], directory: str = config.SNAPSHOT_DIR) -> Path:
    """Write snapshot to ``<directory>/latest.json`` and return the path."""
    return write_json(snapshot, Path(directory) / "latest.json")


# ---------------------------------------------------------------------------
# CLI entrypoint for standalone testing
# ---------------------------------------------------------------------------

def _cli() -> None:
    parser = argparse.ArgumentParser(description="Snapshot a Kubernetes cluster.")
    parser.add_argument("--kubeconfig", default=config.DEFAULT_KUBECONFIG)
    parser.add_argument("--namespace", action="append", default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    snap = snapshot_cluster(args.kubeconfig, args.namespace)
    path = save_snapshot(snap)
    print(f"Snapshot written to {path}  ({len(snap.get('pods', []))} pods)")


if __name__ == "__main__":
    _cli()
