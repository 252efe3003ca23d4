"""Fact builder — turns a raw cluster snapshot into engine facts.

Works on plain dicts as produced by the Kubernetes client serialiser (or
``kubectl get -o json``), so it can run against a live snapshot or a saved
``snapshots/latest.json``.

Usage (standalone)::

    python -m kubeledger.tools.facts --snapshot snapshots/latest.json
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from kubeledger import config
from kubeledger.models import ClusterCapacityFact, NamespaceUsageFact, SecurityRiskCounts
from kubeledger.tools.utils import read_json

logger = logging.getLogger("kubeledger.facts")

_BYTES_PER_GB = 1024 ** 3

_MEMORY_SUFFIXES: dict[str, float] = {
    "Ki": 1024,
    "Mi": 1024 ** 2,
    "Gi": 1024 ** 3,
    "Ti": 1024 ** 4,
    "K": 1e3,
    "k": 1e3,
    "M": 1e6,
    "G": 1e9,
    "T": 1e12,
}


# ---------------------------------------------------------------------------
# Quantity parsing
# ---------------------------------------------------------------------------

def parse_cpu(value: str | int | float | None) -> float:
    """Convert a K8s CPU quantity (e.g. ``'500m'``, ``'2'``) to cores."""
    if value is None:
        return 0.0
    s = str(value).strip()
    if not s:
        return 0.0
    try:
        if s.endswith("m"):
            return float(s[:-1]) / 1000.0
        return float(s)
    except ValueError:
        logger.warning("Unparseable CPU quantity %r, counting as 0", value)
        return 0.0


def parse_memory_gb(value: str | int | float | None) -> float:
    """Convert a K8s memory quantity to GiB."""
    if value is None:
        return 0.0
    s = str(value).strip()
    if not s:
        return 0.0
    for suffix, mult in sorted(_MEMORY_SUFFIXES.items(), key=lambda x: -len(x[0])):
        if s.endswith(suffix):
            return float(s[: -len(suffix)]) * mult / _BYTES_PER_GB
    # Plain bytes
    try:
        return float(s) / _BYTES_PER_GB
    except ValueError:
        logger.warning("Unparseable memory quantity %r, counting as 0", value)
        return 0.0


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError, AttributeError):
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Pod accessors
# ---------------------------------------------------------------------------

def _namespace(pod: dict[str, Any]) -> str:
    return pod.get("metadata", {}).get("namespace", "default")


def _spec(pod: dict[str, Any]) -> dict[str, Any]:
    return pod.get("spec", {}) or {}


def _containers(pod: dict[str, Any]) -> list[dict]:
    return _spec(pod).get("containers", []) or []


def _is_system(namespace: str) -> bool:
    return namespace in config.SYSTEM_NAMESPACES


def pod_requests(pod: dict[str, Any]) -> tuple[float, float]:
    """Return summed (CPU cores, memory GiB) requests across containers."""
    cpu = 0.0
    mem = 0.0
    for ctr in _containers(pod):
        reqs = (ctr.get("resources", {}) or {}).get("requests", {}) or {}
        cpu += parse_cpu(reqs.get("cpu"))
        mem += parse_memory_gb(reqs.get("memory"))
    return cpu, mem


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def is_pod_idle(pod: dict[str, Any], now: Optional[datetime] = None) -> bool:
    """A pod is idle if it is at least ``IDLE_DAYS`` old, has never
    restarted, and is not in a system namespace."""
    created = _parse_timestamp(pod.get("metadata", {}).get("creationTimestamp", ""))
    if created is None:
        return False
    now = now or datetime.now(timezone.utc)
    if now - created < timedelta(days=config.IDLE_DAYS):
        return False
    if _is_system(_namespace(pod)):
        return False
    for cs in pod.get("status", {}).get("containerStatuses", []) or []:
        if cs.get("restartCount", 0) > 0:
            return False
    return True


def is_spot_eligible(pod: dict[str, Any]) -> bool:
    """A pod can run on spot capacity unless it is in a production
    namespace, mounts a PVC, or belongs to a StatefulSet."""
    if _namespace(pod) in config.PRODUCTION_NAMESPACES:
        return False
    for vol in _spec(pod).get("volumes", []) or []:
        if vol.get("persistentVolumeClaim"):
            return False
    for owner in pod.get("metadata", {}).get("ownerReferences", []) or []:
        if owner.get("kind") == "StatefulSet":
            return False
    return True


# ---------------------------------------------------------------------------
# Facts
# ---------------------------------------------------------------------------

def cluster_capacity(nodes: list[dict[str, Any]]) -> ClusterCapacityFact:
    """Sum allocatable CPU and memory across *nodes*."""
    cpu = 0.0
    mem = 0.0
    for node in nodes:
        alloc = node.get("status", {}).get("allocatable", {}) or {}
        cpu += parse_cpu(alloc.get("cpu"))
        mem += parse_memory_gb(alloc.get("memory"))
    return ClusterCapacityFact(total_cpu_cores=cpu, total_memory_gb=mem)


def namespace_usage_facts(
    pods: list[dict[str, Any]],
    now: Optional[datetime] = None,
) -> list[NamespaceUsageFact]:
    """Aggregate per-namespace requests and idle / spot pod counts."""
    totals: dict[str, dict[str, float]] = {}
    for pod in pods:
        ns = _namespace(pod)
        entry = totals.setdefault(ns, {"cpu": 0.0, "mem": 0.0, "pods": 0, "idle": 0, "spot": 0})
        cpu, mem = pod_requests(pod)
        entry["cpu"] += cpu
        entry["mem"] += mem
        entry["pods"] += 1
        if is_pod_idle(pod, now):
            entry["idle"] += 1
        if is_spot_eligible(pod):
            entry["spot"] += 1

    return [
        NamespaceUsageFact(
            name=ns,
            cpu_cores_requested=entry["cpu"],
            memory_gb_requested=entry["mem"],
            pod_count=int(entry["pods"]),
            idle_pods=int(entry["idle"]),
            spot_eligible_pods=int(entry["spot"]),
        )
        for ns, entry in totals.items()
    ]


def _pod_violations(pod: dict[str, Any]) -> list[str]:
    """Return the risk category ids violated by one pod and its containers."""
    found: list[str] = []
    spec = _spec(pod)
    system = _is_system(_namespace(pod))
    pod_sc = spec.get("securityContext", {}) or {}

    for vol in spec.get("volumes", []) or []:
        if vol.get("hostPath"):
            found.append("host_path_volumes")

    if spec.get("serviceAccountName", "") in ("", "default") and not system:
        found.append("default_service_account")

    if spec.get("hostNetwork"):
        found.append("host_network")
    if spec.get("hostPID"):
        found.append("host_pid")
    if spec.get("hostIPC"):
        found.append("host_ipc")

    for ctr in _containers(pod):
        sc = ctr.get("securityContext", {}) or {}

        run_as_non_root = sc.get("runAsNonRoot", pod_sc.get("runAsNonRoot"))
        if not run_as_non_root and not system:
            found.append("running_as_root")

        if sc.get("privileged"):
            found.append("privileged_containers")

        if (sc.get("capabilities", {}) or {}).get("add"):
            found.append("added_capabilities")

        limits = (ctr.get("resources", {}) or {}).get("limits", {}) or {}
        if parse_cpu(limits.get("cpu")) == 0 and parse_memory_gb(limits.get("memory")) == 0:
            found.append("missing_resource_limits")

        if sc.get("allowPrivilegeEscalation", True) and not system:
            found.append("privilege_escalation")

    return found


def security_risk_counts(pods: list[dict[str, Any]]) -> SecurityRiskCounts:
    """Count security violations per category across *pods*."""
    counts: dict[str, int] = {}
    for pod in pods:
        for category in _pod_violations(pod):
            counts[category] = counts.get(category, 0) + 1
    return SecurityRiskCounts(**counts)


# ---------------------------------------------------------------------------
# CLI entrypoint for standalone testing
# ---------------------------------------------------------------------------

def _cli() -> None:
    parser = argparse.ArgumentParser(description="Build engine facts from a snapshot.")
    parser.add_argument("--snapshot", required=True, help="Path to snapshot JSON.")
    args = parser.parse_args()

    snap = read_json(args.snapshot)
    pods = snap.get("pods", [])
    out = {
        "capacity": cluster_capacity(snap.get("nodes", [])).model_dump(),
        "namespaces": [f.model_dump() for f in namespace_usage_facts(pods)],
        "security": security_risk_counts(pods).model_dump(),
    }
    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    _cli()
