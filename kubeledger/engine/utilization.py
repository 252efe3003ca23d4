"""Resource Utilization Analyzer — namespace shares, waste scores and flags.

Pure functions over immutable facts::

    from kubeledger.engine.utilization import analyze_utilization
    namespaces = analyze_utilization(facts, capacity)
"""

from __future__ import annotations

import logging

from kubeledger import config
from kubeledger.errors import DivisionByZero, InvalidInput
from kubeledger.models import (
    ClusterCapacityFact,
    ClusterResourceAnalysis,
    NamespaceUsageFact,
    NamespaceUtilization,
    Optimization,
)
from kubeledger.tools.utils import clamp

logger = logging.getLogger("kubeledger.utilization")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_capacity(capacity: ClusterCapacityFact) -> None:
    for label, value in (
        ("CPU", capacity.total_cpu_cores),
        ("memory", capacity.total_memory_gb),
    ):
        if value == 0:
            raise DivisionByZero(f"cluster {label} capacity is zero")
        if value < 0:
            raise InvalidInput(f"cluster {label} capacity must be positive, got {value}")


def _pod_ratio(count: int, pod_count: int) -> float:
    if count == 0:
        return 0.0
    if pod_count == 0:
        raise DivisionByZero("pod ratio requested for a namespace with no pods")
    return count / pod_count


def waste_score(fact: NamespaceUsageFact) -> float:
    """Return the 0-100 waste heuristic for one namespace.

    Up to 40 points for idle pods, 30 points for likely over-provisioning
    (fewer than 5 pods averaging more than 2 cores each) and up to 30 points
    for spot-eligible pods not yet on spot capacity.
    """
    score = _pod_ratio(fact.idle_pods, fact.pod_count) * config.WASTE_IDLE_POINTS

    if 0 < fact.pod_count < config.OVERPROV_MAX_PODS:
        if fact.cpu_cores_requested / fact.pod_count > config.OVERPROV_CPU_PER_POD:
            score += config.WASTE_OVERPROV_POINTS

    score += _pod_ratio(fact.spot_eligible_pods, fact.pod_count) * config.WASTE_SPOT_POINTS

    return clamp(score, config.WASTE_SCORE_MIN, config.WASTE_SCORE_MAX)


def namespace_flags(fact: NamespaceUsageFact) -> list[str]:
    """Return descriptive tags: ``IDLE-<n>d``, ``SPOT-OK``, ``OVER-PROV``."""
    flags: list[str] = []
    if fact.idle_pods > 0:
        flags.append(f"IDLE-{fact.idle_pods * config.IDLE_DAYS}d")
    if _pod_ratio(fact.spot_eligible_pods, fact.pod_count) > config.SPOT_OK_RATIO:
        flags.append("SPOT-OK")
    if fact.pod_count > 0 and fact.cpu_cores_requested / fact.pod_count > config.OVERPROV_CPU_PER_POD:
        flags.append("OVER-PROV")
    return flags


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze_utilization(
    facts: list[NamespaceUsageFact],
    capacity: ClusterCapacityFact,
) -> list[NamespaceUtilization]:
    """Derive per-namespace utilization, sorted by weighted share (descending).

    Percentages are relative to allocatable capacity.  Requests are not capped,
    so an over-committed cluster yields percentages above 100 and shares
    summing to more than 1.

    Raises
    ------
    DivisionByZero
        If either capacity axis is zero.
    InvalidInput
        If either capacity axis is negative, or a namespace name repeats.
    """
    _check_capacity(capacity)

    seen: set[str] = set()
    namespaces: list[NamespaceUtilization] = []
    for fact in facts:
        if fact.name in seen:
            raise InvalidInput(f"duplicate namespace fact: {fact.name}")
        seen.add(fact.name)
        namespaces.append(NamespaceUtilization(
            name=fact.name,
            cpu_cores_requested=fact.cpu_cores_requested,
            memory_gb_requested=fact.memory_gb_requested,
            pod_count=fact.pod_count,
            idle_pods=fact.idle_pods,
            spot_eligible_pods=fact.spot_eligible_pods,
            cpu_percent=fact.cpu_cores_requested / capacity.total_cpu_cores * 100,
            memory_percent=fact.memory_gb_requested / capacity.total_memory_gb * 100,
            waste_score=waste_score(fact),
            flags=namespace_flags(fact),
        ))

    namespaces.sort(key=lambda ns: ns.weighted_share, reverse=True)
    logger.debug("Analyzed %d namespace(s)", len(namespaces))
    return namespaces


def optimization_hints(namespaces: list[NamespaceUtilization]) -> list[Optimization]:
    """Per-namespace idle / spot / right-sizing hints."""
    hints: list[Optimization] = []
    for ns in namespaces:
        if ns.idle_pods > 0 and ns.waste_score > config.IDLE_HINT_WASTE:
            hints.append(Optimization(
                priority="high",
                type="idle_namespace",
                namespace=ns.name,
                description=(
                    f"{ns.name} idle for {ns.idle_pods * config.IDLE_DAYS}+ days "
                    f"({ns.cpu_cores_requested:.1f} CPU, {ns.memory_gb_requested:.1f} GB)"
                ),
                action=f"kubectl delete namespace {ns.name}",
                impact=(
                    f"Frees {ns.cpu_cores_requested:.1f} CPU, {ns.memory_gb_requested:.1f} GB "
                    f"({ns.cpu_percent:.1f}% of cluster)"
                ),
            ))

        if ns.spot_eligible_pods > config.SPOT_HINT_MIN_PODS:
            spot_cpu = ns.cpu_cores_requested * ns.spot_ratio
            hints.append(Optimization(
                priority="medium",
                type="spot_migration",
                namespace=ns.name,
                description=f"{ns.name} has {ns.spot_eligible_pods} pods eligible for spot",
                action="Add spot node toleration and nodeSelector",
                impact=f"Save ~70% on {spot_cpu:.1f} CPU cores",
            ))

        if 0 < ns.pod_count < config.OVERPROV_MAX_PODS and ns.avg_cpu_per_pod > config.OVERPROV_CPU_PER_POD:
            hints.append(Optimization(
                priority="medium",
                type="rightsizing",
                namespace=ns.name,
                description=(
                    f"{ns.name} appears over-provisioned "
                    f"(avg {ns.avg_cpu_per_pod:.1f} CPU/pod)"
                ),
                action="Review actual usage and adjust resource requests",
                impact="Potentially free up 50-70% of requested resources",
            ))
    return hints


def analyze_cluster_resources(
    facts: list[NamespaceUsageFact],
    capacity: ClusterCapacityFact,
) -> ClusterResourceAnalysis:
    """Full resource analysis: totals, sorted namespaces and hints."""
    namespaces = analyze_utilization(facts, capacity)

    total_cpu = sum(ns.cpu_cores_requested for ns in namespaces)
    total_mem = sum(ns.memory_gb_requested for ns in namespaces)

    return ClusterResourceAnalysis(
        total_cpu_cores=capacity.total_cpu_cores,
        total_memory_gb=capacity.total_memory_gb,
        total_cpu_requested=total_cpu,
        total_memory_requested=total_mem,
        cpu_utilization=total_cpu / capacity.total_cpu_cores * 100,
        memory_utilization=total_mem / capacity.total_memory_gb * 100,
        namespaces=namespaces,
        optimizations=optimization_hints(namespaces),
    )
