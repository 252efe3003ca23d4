"""Report generator — produces ``report.md`` and ``report.json``.

Either half of the report may be omitted: pass only a cost estimate, only a
risk analysis, or both.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from kubeledger import config
from kubeledger.models import CostEstimate, CostRange, RiskCostAnalysis
from kubeledger.tools.utils import utcnow_iso, write_json

logger = logging.getLogger("kubeledger.report")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def fmt_range(r: CostRange) -> str:
    """``$low - $high (best $best)`` with thousands separators."""
    return f"${r.low:,.0f} - ${r.high:,.0f} (best ${r.best:,.0f})"


def probability_label(exposure: CostRange) -> str:
    """Coarse likelihood label for a risk category's best-case exposure."""
    if exposure.best > config.PROBABILITY_HIGH_EXPOSURE:
        return "High"
    if exposure.best < config.PROBABILITY_LOW_EXPOSURE:
        return "Low"
    return "Medium"


def _cell(text: str, limit: int = 120) -> str:
    # Escape pipes in table cells
    return text.replace("|", "\\|")[:limit]


# ---------------------------------------------------------------------------
# Markdown sections
# ---------------------------------------------------------------------------

def _header(cost: Optional[CostEstimate], risk: Optional[RiskCostAnalysis]) -> str:
    lines = [
        "# KubeLedger Cost & Risk Report\n",
        "| Field | Value |",
        "|-------|-------|",
        f"| **Generated** | {utcnow_iso()} |",
    ]
    if cost is not None:
        lines.append(f"| **Monthly Cluster Cost** | ${cost.total_cluster_cost:,.2f} |")
        lines.append(f"| **Savings Potential** | {fmt_range(cost.total_savings_potential)} |")
    if risk is not None:
        lines.append(f"| **Industry** | {risk.industry} |")
        if risk.security_score is not None:
            lines.append(f"| **Security Score** | {risk.security_score}/100 |")
        lines.append(f"| **Annual Risk Exposure** | {fmt_range(risk.total_risk_exposure)} |")
    return "\n".join(lines) + "\n"


def _namespace_costs_section(cost: CostEstimate) -> str:
    lines = [
        "\n## Namespace Costs\n",
        f"Method: `{cost.method}`  Confidence: {cost.confidence.value}\n",
    ]
    if not cost.namespace_costs:
        lines.append("No namespaces with resource requests.")
        return "\n".join(lines) + "\n"

    lines.append("| Namespace | Share | CPU % | Mem % | Monthly Cost | Confidence |")
    lines.append("|-----------|-------|-------|-------|--------------|------------|")
    for ns in cost.namespace_costs:
        lines.append(
            f"| {ns.namespace} | {ns.weighted_share * 100:.1f}% | "
            f"{ns.cpu_share * 100:.1f} | {ns.memory_share * 100:.1f} | "
            f"{fmt_range(ns.estimated_cost)} | "
            f"{ns.confidence_label.value} ({ns.confidence:.2f}) |"
        )
    return "\n".join(lines) + "\n"


def _scenarios_section(cost: CostEstimate) -> str:
    if not cost.optimization_scenarios:
        return "\n## Optimization Scenarios\n\nNo optimization opportunities above threshold.\n"

    lines = ["\n## Optimization Scenarios\n"]
    for sc in cost.optimization_scenarios:
        lines.append(f"### {sc.name}\n")
        lines.append(f"{sc.description}\n")
        lines.append(
            f"- **Savings:** {fmt_range(sc.savings)}\n"
            f"- **Effort / Risk:** {sc.effort.value} / {sc.risk.value}\n"
            f"- **Timeline:** {sc.timeline}\n"
            f"- **Impact:** {sc.impact}\n"
        )
        if sc.actions:
            lines.append("```bash")
            lines.extend(sc.actions)
            lines.append("```\n")
    return "\n".join(lines) + "\n"


def _notes_section(cost: CostEstimate) -> str:
    lines = ["\n## Assumptions\n"]
    lines.extend(f"- {a}" for a in cost.assumptions)
    lines.append("\n## Disclaimers\n")
    lines.extend(f"- {d}" for d in cost.disclaimers)
    return "\n".join(lines) + "\n"


def _risk_section(risk: RiskCostAnalysis) -> str:
    if not risk.risk_categories:
        return "\n## Security Risk Exposure\n\nNo modeled security risks detected.\n"

    lines = [
        "\n## Security Risk Exposure\n",
        "| Category | Severity | Count | Probability | Annual Exposure |",
        "|----------|----------|-------|-------------|-----------------|",
    ]
    for c in risk.risk_categories:
        lines.append(
            f"| {_cell(c.name)} | **{c.severity.value}** | {c.count} | "
            f"{probability_label(c.risk_exposure)} ({c.probability:.0%}) | "
            f"{fmt_range(c.risk_exposure)} |"
        )
    return "\n".join(lines) + "\n"


def _remediation_section(risk: RiskCostAnalysis) -> str:
    plan = risk.remediation_plan
    lines = [
        "\n## Remediation Plan\n",
        f"**Effort:** {plan.total_hours:.1f} h ({plan.timeline})  ",
        f"**Cost:** ${plan.estimated_cost:,.0f}  ",
        f"**ROI:** {plan.roi:.1f}x  ",
        f"**Payback:** {plan.payback_months:.1f} months\n",
        "| Phase | Priority | Hours | Cost | Duration |",
        "|-------|----------|-------|------|----------|",
    ]
    for p in plan.phases:
        lines.append(
            f"| {p.name} | {p.priority} | {p.hours:.1f} | ${p.cost:,.0f} | {p.duration} |"
        )
    if risk.priority_recommendations:
        lines.append("\n### Recommendations\n")
        lines.extend(f"{i}. {rec}" for i, rec in enumerate(risk.priority_recommendations, 1))
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def report_data(
    cost: Optional[CostEstimate] = None,
    risk: Optional[RiskCostAnalysis] = None,
) -> dict[str, Any]:
    """JSON-ready dict of the report; ranges serialize as ``{low, best, high}``."""
    data: dict[str, Any] = {}
    if cost is not None:
        data["cost"] = cost.model_dump(mode="json")
    if risk is not None:
        data["risk"] = risk.model_dump(mode="json")
    return data


def generate_report(
    cost: Optional[CostEstimate] = None,
    risk: Optional[RiskCostAnalysis] = None,
    out_path: str = config.DEFAULT_OUTPUT,
) -> Path:
    """Generate the report as Markdown plus a JSON sibling.

    Parameters
    ----------
    cost:
        Result of :func:`kubeledger.engine.pipeline.run_cost_analysis`.
    risk:
        Result of :func:`kubeledger.engine.pipeline.run_risk_analysis`.
    out_path:
        Destination file (Markdown).  The JSON file is written next to it.

    Returns
    -------
    Path
        The written report path.
    """
    if cost is None and risk is None:
        raise ValueError("generate_report needs a cost estimate, a risk analysis, or both")

    sections = [_header(cost, risk)]
    if cost is not None:
        sections += [
            _namespace_costs_section(cost),
            _scenarios_section(cost),
            _notes_section(cost),
        ]
    if risk is not None:
        sections += [
            _risk_section(risk),
            _remediation_section(risk),
        ]

    md = "\n".join(sections)

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(md, encoding="utf-8")
    logger.info("Report written to %s", out)

    json_path = out.with_suffix(".json")
    write_json(report_data(cost, risk), json_path)
    logger.info("JSON report written to %s", json_path)

    return out
