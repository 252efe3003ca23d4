"""Risk Exposure Mapper — security violation counts to dollar ranges.

Exposure for a category is ``count * unit_breach_cost * probability``,
widened into a band that depends on severity.  Probabilities and bands come
from :data:`kubeledger.config.RISK_MODELS` and
:data:`kubeledger.config.EXPOSURE_BANDS`.
"""

from __future__ import annotations

import logging

from kubeledger import config
from kubeledger.models import (
    CostRange,
    ExposureContext,
    IndustryProfile,
    RiskCategory,
    RiskCategoryId,
    SecurityRiskCounts,
    Severity,
)

logger = logging.getLogger("kubeledger.risk")

# Pairs of categories whose combined presence compounds the risk, and the
# profile attribute holding the multiplier.
_COMPOUND_PAIRS: list[tuple[RiskCategoryId, RiskCategoryId, str]] = [
    (RiskCategoryId.privileged_containers, RiskCategoryId.host_path_volumes, "privileged_and_hostpath"),
    (RiskCategoryId.running_as_root, RiskCategoryId.host_network, "root_and_hostnetwork"),
]


def category_exposure(
    count: int,
    unit_cost: float,
    probability: float,
    severity: Severity | str,
) -> CostRange:
    """Expected annual loss range for *count* occurrences of one category."""
    expected = count * unit_cost * probability
    return CostRange.scaled(expected, config.EXPOSURE_BANDS[Severity(severity).value])


def exposure_multiplier(profile: IndustryProfile, exposure: ExposureContext | str) -> float:
    """Unit-cost multiplier for how reachable the cluster is."""
    exposure = ExposureContext(exposure)
    if exposure is ExposureContext.public_facing:
        return profile.public_facing_multiplier
    if exposure is ExposureContext.internet_exposed:
        return profile.internet_exposed_multiplier
    return 1.0


def _compound_factors(counts: SecurityRiskCounts, profile: IndustryProfile) -> dict[RiskCategoryId, float]:
    factors: dict[RiskCategoryId, float] = {}
    for first, second, attr in _COMPOUND_PAIRS:
        if counts.get(first) > 0 and counts.get(second) > 0:
            multiplier = getattr(profile, attr)
            factors[first] = factors.get(first, 1.0) * multiplier
            factors[second] = factors.get(second, 1.0) * multiplier
    return factors


def map_risk_exposure(
    counts: SecurityRiskCounts,
    profile: IndustryProfile,
    exposure: ExposureContext | str = ExposureContext.internal,
    compound: bool = False,
) -> list[RiskCategory]:
    """Build a :class:`RiskCategory` for every modeled category with count > 0.

    Parameters
    ----------
    counts:
        Violation counts from the security inspector.
    profile:
        Resolved industry profile supplying unit breach costs.
    exposure:
        Reachability of the cluster; scales unit costs by the profile's
        public-facing or internet-exposed multiplier.
    compound:
        When true, categories that amplify each other (privileged + hostPath,
        root + hostNetwork) are scaled by the profile's compound multipliers.
    """
    multiplier = exposure_multiplier(profile, exposure)
    compound_factors = _compound_factors(counts, profile) if compound else {}

    categories: list[RiskCategory] = []
    for category_key, model in config.RISK_MODELS.items():
        category = RiskCategoryId(category_key)
        count = counts.get(category)
        if count <= 0:
            continue

        unit_cost = profile.unit_cost(category) * multiplier * compound_factors.get(category, 1.0)
        risk_exposure = category_exposure(count, unit_cost, model["probability"], model["severity"])
        unit_cost_k = profile.unit_cost(category) / 1000

        categories.append(RiskCategory(
            id=category,
            name=model["name"],
            severity=Severity(model["severity"]),
            count=count,
            description=model["description"],
            probability=model["probability"],
            risk_exposure=risk_exposure,
            typical_incidents=list(model["typical_incidents"]),
            industry_examples=[
                example.format(unit_cost_k=unit_cost_k)
                for example in model["industry_examples"]
            ],
        ))

    unmodeled = [
        c.value for c in RiskCategoryId
        if c.value not in config.RISK_MODELS and counts.get(c) > 0
    ]
    if unmodeled:
        logger.debug("No exposure model for: %s", ", ".join(unmodeled))

    logger.info("%d risk categor(ies) with financial exposure", len(categories))
    return categories


def total_exposure(categories: list[RiskCategory]) -> CostRange:
    """Componentwise sum of every category's exposure."""
    total = CostRange()
    for category in categories:
        total = total + category.risk_exposure
    return total
