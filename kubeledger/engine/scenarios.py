"""Optimization Scenario Generator — threshold-gated savings opportunities.

Four independent scenarios are evaluated against a size-scaled minimum so
that small clusters are not flooded with changes worth less than the effort:

  1. spot       : move spot-eligible pods to spot / preemptible nodes
  2. idle       : delete namespaces that look abandoned
  3. rightsize  : shrink requests of a few very large pods
  4. hpa        : add Horizontal Pod Autoscalers to mid-sized workloads
"""

from __future__ import annotations

import logging
from typing import Optional

from kubeledger import config
from kubeledger.engine.cost_range import require_positive_cost
from kubeledger.models import CostRange, Level, NamespaceUtilization, OptimizationScenario

logger = logging.getLogger("kubeledger.scenarios")


# ===================================================================
# Helpers
# ===================================================================

def min_threshold(total_cost: float, rule: str) -> float:
    """Return the monthly dollar minimum a scenario must clear.

    Clusters costing at least ``LARGE_CLUSTER_COST`` use a fixed floor;
    smaller ones use a percentage of *total_cost* bounded below by an
    absolute floor.
    """
    params = config.SCENARIO_RULES[rule]
    if total_cost >= config.LARGE_CLUSTER_COST:
        return params["large_floor"]
    return max(total_cost * params["pct"], params["small_floor"])


def _ranges(candidate_cost: float, rule: str) -> tuple[CostRange, CostRange, CostRange]:
    """Return (current, after, savings) for *candidate_cost* under *rule*."""
    current = CostRange.scaled(candidate_cost, config.CURRENT_COST_BAND)
    after_fraction = config.SCENARIO_RULES[rule]["after"]
    after = CostRange.scaled(candidate_cost, (after_fraction,) * 3)
    return current, after, current - after


def _namespace_cost(ns: NamespaceUtilization, total_cost: float) -> float:
    return total_cost * ns.weighted_share


def format_list(items: list[str]) -> str:
    """Join up to three items; longer lists show the first two and a count."""
    if len(items) <= 3:
        return ", ".join(items)
    return f"{items[0]}, {items[1]}, and {len(items) - 2} more"


def _passes(cost: float, total_cost: float, rule: str) -> bool:
    threshold = min_threshold(total_cost, rule)
    if cost < threshold:
        logger.debug(
            "Scenario %s skipped: $%.2f below $%.2f minimum", rule, cost, threshold,
        )
        return False
    return True


# ===================================================================
# Scenario 1: spot migration
# ===================================================================

def spot_scenario(
    namespaces: list[NamespaceUtilization],
    total_cost: float,
) -> Optional[OptimizationScenario]:
    """Savings from moving spot-eligible pods to spot capacity (60-80%)."""
    spot_cost = 0.0
    spot_cpu = 0.0
    spot_mem = 0.0
    affected: list[str] = []

    for ns in namespaces:
        ratio = ns.spot_ratio
        if ratio > config.SPOT_MIN_RATIO and ns.spot_eligible_pods >= config.SPOT_MIN_PODS:
            spot_cost += _namespace_cost(ns, total_cost) * ratio
            spot_cpu += ns.cpu_cores_requested * ratio
            spot_mem += ns.memory_gb_requested * ratio
            affected.append(f"{ns.name} ({ns.spot_eligible_pods}/{ns.pod_count} pods)")

    if not affected or not _passes(spot_cost, total_cost, "spot"):
        return None

    current, after, savings = _ranges(spot_cost, "spot")
    return OptimizationScenario(
        name="Migrate to Spot Instances",
        description=(
            f"Move {len(affected)} namespaces to spot node pools "
            f"({spot_cpu:.1f} CPU cores, {spot_mem:.1f} GB memory)"
        ),
        current_cost=current,
        after_cost=after,
        savings=savings,
        impact=(
            f"{spot_cpu:.1f} CPU cores, {spot_mem:.1f} GB memory eligible for spot "
            f"({savings.best / current.best * 100:.0f}% cost reduction)"
        ),
        effort=Level.medium,
        risk=Level.low,
        timeline="1-2 weeks",
        actions=[
            "Create a spot / preemptible node pool with an appropriate VM size",
            f"Add tolerations to deployments in: {', '.join(affected)}",
            "Add a nodeSelector targeting the spot node pool label",
            "Test application tolerance for evictions (spot instances can be reclaimed)",
            "Set appropriate PodDisruptionBudgets to handle evictions gracefully",
        ],
    )


# ===================================================================
# Scenario 2: idle namespace deletion
# ===================================================================

def idle_scenario(
    namespaces: list[NamespaceUtilization],
    total_cost: float,
) -> Optional[OptimizationScenario]:
    """Savings from deleting namespaces with a waste score above 70."""
    idle_cost = 0.0
    idle_cpu = 0.0
    idle_mem = 0.0
    idle_cpu_percent = 0.0
    idle_names: list[str] = []

    for ns in namespaces:
        if ns.waste_score <= config.IDLE_MIN_WASTE:
            continue
        ns_cost = _namespace_cost(ns, total_cost)
        if ns_cost <= config.IDLE_MIN_COST:
            continue
        idle_cost += ns_cost
        idle_cpu += ns.cpu_cores_requested
        idle_mem += ns.memory_gb_requested
        idle_cpu_percent += ns.cpu_percent
        reason = f"{ns.idle_pods} idle pods" if ns.idle_pods > 0 else "high waste score"
        idle_names.append(f"{ns.name} ({reason})")

    if not idle_names or not _passes(idle_cost, total_cost, "idle"):
        return None

    current, after, savings = _ranges(idle_cost, "idle")
    return OptimizationScenario(
        name="Delete Idle Namespaces",
        description=(
            f"Remove {len(idle_names)} idle namespaces "
            f"({idle_cpu:.1f} CPU, {idle_mem:.1f} GB memory)"
        ),
        current_cost=current,
        after_cost=after,
        savings=savings,
        impact=(
            f"Free {idle_cpu:.1f} CPU cores, {idle_mem:.1f} GB memory "
            f"({idle_cpu_percent:.0f}% of cluster)"
        ),
        effort=Level.low,
        risk=Level.low,
        timeline="1 day",
        actions=[
            f"Verify these namespaces are truly unused: {', '.join(idle_names)}",
            "Check for any important data or configs that need backup",
            "Delete idle namespaces: kubectl delete namespace <name>",
            "Monitor for any application dependencies",
        ],
    )


# ===================================================================
# Scenario 3: right-sizing
# ===================================================================

def rightsize_scenario(
    namespaces: list[NamespaceUtilization],
    total_cost: float,
) -> Optional[OptimizationScenario]:
    """Savings from shrinking requests of over-provisioned pods (40-60%)."""
    oversized_cost = 0.0
    oversized_cpu = 0.0
    oversized: list[str] = []

    for ns in namespaces:
        if not config.RIGHTSIZE_MIN_PODS <= ns.pod_count < config.RIGHTSIZE_MAX_PODS:
            continue
        if ns.avg_cpu_per_pod > config.OVERPROV_CPU_PER_POD:
            oversized_cost += _namespace_cost(ns, total_cost)
            oversized_cpu += ns.cpu_cores_requested
            oversized.append(ns.name)

    if not oversized or not _passes(oversized_cost, total_cost, "rightsize"):
        return None

    current, after, savings = _ranges(oversized_cost, "rightsize")
    return OptimizationScenario(
        name="Right-size Over-provisioned Workloads",
        description=f"Reduce resource requests for {len(oversized)} over-provisioned namespaces",
        current_cost=current,
        after_cost=after,
        savings=savings,
        impact=f"Free {oversized_cpu * 0.5:.1f} CPU cores through right-sizing",
        effort=Level.medium,
        risk=Level.medium,
        timeline="2-3 weeks",
        actions=[
            "Install metrics-server to track actual usage",
            "Monitor actual CPU/memory usage for 1-2 weeks",
            f"Adjust resource requests in: {format_list(oversized)}",
            "Test performance after changes",
        ],
    )


# ===================================================================
# Scenario 4: Horizontal Pod Autoscalers
# ===================================================================

def hpa_scenario(
    namespaces: list[NamespaceUtilization],
    total_cost: float,
) -> Optional[OptimizationScenario]:
    """Off-peak savings from autoscaling mid-sized workloads (15-35%)."""
    hpa_cost = 0.0
    hpa_cpu = 0.0
    candidates: list[str] = []

    for ns in namespaces:
        if ns.name in config.SYSTEM_NAMESPACES:
            continue
        if not config.HPA_MIN_PODS <= ns.pod_count <= config.HPA_MAX_PODS:
            continue
        ns_cost = _namespace_cost(ns, total_cost)
        if ns_cost > config.HPA_MIN_COST:
            hpa_cost += ns_cost
            hpa_cpu += ns.cpu_cores_requested
            candidates.append(f"{ns.name} ({ns.pod_count} pods)")

    if not candidates or not _passes(hpa_cost, total_cost, "hpa"):
        return None

    current, after, savings = _ranges(hpa_cost, "hpa")
    return OptimizationScenario(
        name="Add Horizontal Pod Autoscalers",
        description=f"Configure HPA for {len(candidates)} namespaces to scale based on load",
        current_cost=current,
        after_cost=after,
        savings=savings,
        impact=f"Dynamic scaling for {hpa_cpu:.1f} CPU cores (save ~25% during off-peak)",
        effort=Level.medium,
        risk=Level.low,
        timeline="1-2 weeks",
        actions=[
            "Install metrics-server if not already present: kubectl apply -f "
            "https://github.com/kubernetes-sigs/metrics-server/releases/latest/download/components.yaml",
            f"Configure HPA for deployments in: {', '.join(candidates)}",
            "Example: kubectl autoscale deployment <name> --cpu-percent=70 --min=2 --max=10",
            "Monitor scaling behavior and adjust thresholds as needed",
            "Set appropriate PodDisruptionBudgets to maintain availability during scale-down",
        ],
    )


# ===================================================================
# Orchestrator
# ===================================================================

_ALL_SCENARIOS = [
    spot_scenario,
    idle_scenario,
    rightsize_scenario,
    hpa_scenario,
]


def generate_scenarios(
    namespaces: list[NamespaceUtilization],
    total_cost: float,
) -> list[OptimizationScenario]:
    """Evaluate every scenario and return the ones that clear their minimum."""
    require_positive_cost(total_cost)
    scenarios: list[OptimizationScenario] = []
    for scenario_fn in _ALL_SCENARIOS:
        scenario = scenario_fn(namespaces, total_cost)
        if scenario is not None:
            scenarios.append(scenario)
    logger.info("%d optimization scenario(s) emitted", len(scenarios))
    return scenarios


def total_savings(scenarios: list[OptimizationScenario]) -> CostRange:
    """Componentwise sum of every scenario's savings."""
    total = CostRange()
    for scenario in scenarios:
        total = total + scenario.savings
    return total
