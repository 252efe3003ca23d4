"""Remediation Planner — engineer-hours, cost, ROI and a three-phase rollout.

Usage::

    from kubeledger.engine.remediation import plan_remediation
    plan = plan_remediation(categories, profile)
"""

from __future__ import annotations

import logging

from kubeledger import config
from kubeledger.errors import UndefinedPayback, UndefinedROI
from kubeledger.models import (
    IndustryProfile,
    RemediationPhase,
    RemediationPlan,
    RiskCategory,
    Severity,
)

logger = logging.getLogger("kubeledger.remediation")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def hours_for(severity: Severity | str) -> float:
    """Engineer-hours needed to fix one issue of *severity*."""
    return config.HOURS_PER_ISSUE[Severity(severity).value]


def estimate_timeline(hours: float) -> str:
    """Convert engineer-hours to a calendar label."""
    for max_hours, label in config.TIMELINE_BUCKETS:
        if hours <= max_hours:
            return label
    return f"{hours / config.HOURS_PER_WEEK:.0f} weeks"


def compute_roi(risk_reduction: float, estimated_cost: float) -> float:
    """Annual risk reduction per dollar of remediation cost."""
    if estimated_cost == 0:
        raise UndefinedROI("ROI is undefined when the remediation cost is zero")
    return risk_reduction / estimated_cost


def compute_payback_months(estimated_cost: float, risk_reduction: float) -> float:
    """Months of monthly-equivalent risk reduction needed to recoup the cost."""
    if risk_reduction == 0:
        raise UndefinedPayback("payback is undefined when the risk reduction is zero")
    return estimated_cost / (risk_reduction / config.MONTHS_PER_YEAR)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def plan_remediation(
    categories: list[RiskCategory],
    profile: IndustryProfile,
) -> RemediationPlan:
    """Estimate the cost of fixing every category and its return.

    Raises
    ------
    UndefinedROI
        If the plan needs zero engineer-hours (nothing to fix).
    UndefinedPayback
        If the fixed categories carry no risk reduction.
    """
    hours_by_severity: dict[str, float] = {s.value: 0.0 for s in Severity}
    for category in categories:
        hours_by_severity[category.severity.value] += category.count * hours_for(category.severity)

    total_hours = sum(hours_by_severity.values())
    rate = profile.engineer_hourly_rate
    estimated_cost = total_hours * rate
    risk_reduction = sum(c.risk_exposure.best for c in categories)

    roi = compute_roi(risk_reduction, estimated_cost)
    payback = compute_payback_months(estimated_cost, risk_reduction)

    phases = [
        RemediationPhase(
            name=name,
            duration=estimate_timeline(hours_by_severity[severity]),
            hours=hours_by_severity[severity],
            cost=hours_by_severity[severity] * rate,
            priority=priority,
        )
        for severity, name, priority in config.REMEDIATION_PHASES
    ]

    logger.info(
        "Remediation: %.1f h, $%.0f, ROI %.1fx, payback %.1f months",
        total_hours, estimated_cost, roi, payback,
    )

    return RemediationPlan(
        total_hours=total_hours,
        critical_hours=hours_by_severity["critical"],
        high_hours=hours_by_severity["high"],
        medium_hours=hours_by_severity["medium"],
        estimated_cost=estimated_cost,
        risk_reduction=risk_reduction,
        roi=roi,
        payback_months=payback,
        timeline=estimate_timeline(total_hours),
        phases=phases,
    )
