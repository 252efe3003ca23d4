"""Engine entry points — one per pipeline.

Both are pure: they read an immutable fact snapshot and return a fresh
result.  Any engine error propagates; no partial result is returned.

Usage::

    from kubeledger.engine.pipeline import run_cost_analysis, run_risk_analysis
    estimate = run_cost_analysis(facts, capacity, total_cost=5000)
    risk = run_risk_analysis(counts, industry="fintech")
"""

from __future__ import annotations

import logging
from typing import Optional

from kubeledger import config
from kubeledger.engine.cost_range import estimate_namespace_costs, require_positive_cost
from kubeledger.engine.profiles import get_industry_profile
from kubeledger.engine.recommendations import priority_recommendations
from kubeledger.engine.remediation import plan_remediation
from kubeledger.engine.risk_exposure import map_risk_exposure, total_exposure
from kubeledger.engine.scenarios import generate_scenarios, total_savings
from kubeledger.engine.utilization import analyze_utilization
from kubeledger.models import (
    ClusterCapacityFact,
    CostEstimate,
    ExposureContext,
    Level,
    NamespaceUsageFact,
    RiskCostAnalysis,
    SecurityRiskCounts,
)

logger = logging.getLogger("kubeledger.pipeline")


def run_cost_analysis(
    facts: list[NamespaceUsageFact],
    capacity: ClusterCapacityFact,
    total_cost: float,
) -> CostEstimate:
    """Utilization → cost ranges → optimization scenarios."""
    require_positive_cost(total_cost)

    namespaces = analyze_utilization(facts, capacity)
    scenarios = generate_scenarios(namespaces, total_cost)

    estimate = CostEstimate(
        total_cluster_cost=total_cost,
        method=config.COST_METHOD,
        confidence=Level(config.COST_CONFIDENCE_LABEL),
        namespace_costs=estimate_namespace_costs(namespaces, total_cost),
        optimization_scenarios=scenarios,
        total_savings_potential=total_savings(scenarios),
        assumptions=list(config.COST_ASSUMPTIONS),
        disclaimers=list(config.COST_DISCLAIMERS),
    )
    logger.info(
        "Cost analysis: %d namespace(s), %d scenario(s), savings best $%.2f",
        len(estimate.namespace_costs),
        len(scenarios),
        estimate.total_savings_potential.best,
    )
    return estimate


def run_risk_analysis(
    counts: SecurityRiskCounts,
    industry: Optional[str] = None,
    security_score: Optional[int] = None,
    exposure: ExposureContext | str = ExposureContext.internal,
    compound: bool = False,
) -> RiskCostAnalysis:
    """Risk exposure → remediation plan → priority recommendations."""
    profile = get_industry_profile(industry)
    categories = map_risk_exposure(counts, profile, exposure=exposure, compound=compound)

    return RiskCostAnalysis(
        security_score=security_score,
        industry=profile.name,
        total_risk_exposure=total_exposure(categories),
        risk_categories=categories,
        remediation_plan=plan_remediation(categories, profile),
        priority_recommendations=priority_recommendations(categories),
    )
