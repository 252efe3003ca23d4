"""Cost Range Estimator — proportional allocation with confidence bands.

Allocates a user-supplied monthly cluster cost across namespaces by their
weighted CPU + memory share, then widens each allocation into a low / best /
high range.  Uses no cloud billing API.
"""

from __future__ import annotations

import logging

from kubeledger import config
from kubeledger.errors import InvalidInput
from kubeledger.models import CostRange, Level, NamespaceCostEstimate, NamespaceUtilization
from kubeledger.tools.utils import clamp

logger = logging.getLogger("kubeledger.cost")


def require_positive_cost(total_cost: float) -> None:
    """Raise :class:`InvalidInput` unless *total_cost* is a positive number."""
    if not total_cost > 0:
        raise InvalidInput(f"total cluster cost must be greater than 0, got {total_cost}")


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------

def namespace_confidence(ns: NamespaceUtilization) -> float:
    """Return a 0.3-0.9 confidence score for a namespace's allocation.

    Large, busy namespaces are more predictable; tiny or wasteful ones less so.
    """
    confidence = config.CONFIDENCE_BASE
    share = ns.weighted_share

    for threshold, adjustment in config.CONFIDENCE_SHARE_ABOVE:
        if share > threshold:
            confidence += adjustment
            break
    else:
        tiny_threshold, tiny_adjustment = config.CONFIDENCE_SHARE_TINY
        if share < tiny_threshold:
            confidence += tiny_adjustment

    for threshold, adjustment in config.CONFIDENCE_WASTE_ABOVE:
        if ns.waste_score > threshold:
            confidence += adjustment
            break

    many_pods, many_adjustment = config.CONFIDENCE_PODS_ABOVE
    few_pods, few_adjustment = config.CONFIDENCE_PODS_BELOW
    if ns.pod_count > many_pods:
        confidence += many_adjustment
    elif ns.pod_count < few_pods:
        confidence += few_adjustment

    return clamp(confidence, config.CONFIDENCE_MIN, config.CONFIDENCE_MAX)


def confidence_label(weighted_share: float) -> Level:
    """Coarse label: Medium above 10% share, Low below 2%, Medium otherwise."""
    if weighted_share > config.LABEL_MEDIUM_SHARE:
        return Level.medium
    if weighted_share < config.LABEL_LOW_SHARE:
        return Level.low
    return Level.medium


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

def _waste_factor(waste_score: float) -> float:
    for threshold, factor in config.WASTE_FACTORS:
        if waste_score > threshold:
            return factor
    return 0.0


def cost_range(base_cost: float, ns: NamespaceUtilization) -> CostRange:
    """Widen *base_cost* into a range.

    The low end assumes spot discounts on eligible pods; the high end adds
    waste.  Both shrink as confidence grows.
    """
    uncertainty = 1.0 - namespace_confidence(ns)
    spot_potential = ns.spot_ratio * config.SPOT_DISCOUNT

    low = base_cost * (1 - spot_potential) * (1 - uncertainty * config.UNCERTAINTY_SPREAD)
    high = base_cost * (1 + _waste_factor(ns.waste_score)) * (1 + uncertainty * config.UNCERTAINTY_SPREAD)

    return CostRange(low=low, best=base_cost, high=high)


def estimate_namespace_costs(
    namespaces: list[NamespaceUtilization],
    total_cost: float,
) -> list[NamespaceCostEstimate]:
    """Allocate *total_cost* across *namespaces* proportionally.

    Raises
    ------
    InvalidInput
        If *total_cost* is not positive.
    """
    require_positive_cost(total_cost)

    estimates: list[NamespaceCostEstimate] = []
    for ns in namespaces:
        share = ns.weighted_share
        estimates.append(NamespaceCostEstimate(
            namespace=ns.name,
            estimated_cost=cost_range(total_cost * share, ns),
            cpu_share=ns.cpu_percent / 100.0,
            memory_share=ns.memory_percent / 100.0,
            weighted_share=share,
            confidence=namespace_confidence(ns),
            confidence_label=confidence_label(share),
        ))

    logger.debug("Allocated $%.2f across %d namespace(s)", total_cost, len(estimates))
    return estimates
