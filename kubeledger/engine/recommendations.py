"""Priority Recommendation Synthesizer."""

from __future__ import annotations

from kubeledger import config
from kubeledger.models import RiskCategory, Severity


def priority_recommendations(categories: list[RiskCategory]) -> list[str]:
    """Return a short, ordered list of human-actionable recommendations.

    A headline is emitted only when critical categories carry more than
    $1000 of best-case exposure; generic hardening advice always follows.
    """
    recommendations: list[str] = []

    critical = [
        c for c in categories
        if c.severity is Severity.critical and c.risk_exposure.best > config.HEADLINE_MIN_EXPOSURE
    ]
    if critical:
        exposure = sum(c.risk_exposure.best for c in critical)
        recommendations.append(
            f"IMMEDIATE: Fix {len(critical)} critical security issues "
            f"(exposure: ${exposure / 1000:.0f}K)"
        )

    recommendations.extend(config.HARDENING_RECOMMENDATIONS)
    return recommendations
