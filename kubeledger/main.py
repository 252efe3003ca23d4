"""KubeLedger CLI — cost ranges and security-risk exposure for a cluster.

Pipelines:
    snapshot → facts → utilization → cost ranges → scenarios
    snapshot → facts → risk exposure → remediation → recommendations

Usage::

    python -m kubeledger.main costs --monthly-cost 5000 --snapshot snapshots/latest.json
    python -m kubeledger.main risk --industry fintech --kubeconfig ~/.kube/config
    python -m kubeledger.main report --monthly-cost 5000 --output report.md
    python -m kubeledger.main snapshot --kubeconfig ~/.kube/config
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, NoReturn, Optional

import typer
from rich.table import Table

from kubeledger import config
from kubeledger.errors import EstimationError, UndefinedROI
from kubeledger.models import CostEstimate, ExposureContext, RiskCostAnalysis
from kubeledger.tools.utils import console, rprint

logger = logging.getLogger("kubeledger")

# ---------------------------------------------------------------------------
# Typer application
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="kubeledger",
    help="KubeLedger — Kubernetes cost and security-risk estimation",
    add_completion=False,
)


class OutputFormat(str, Enum):
    table = "table"
    json = "json"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _fail(exc: Exception) -> NoReturn:
    logger.debug("Estimation failed", exc_info=exc)
    rprint(f"[bold red]✘ {type(exc).__name__}: {exc}[/bold red]")
    raise typer.Exit(code=1)


def _load_snapshot(snapshot_path: Optional[str], kubeconfig: str) -> dict[str, Any]:
    """Read a saved snapshot, or take a fresh one from the cluster."""
    if snapshot_path:
        from kubeledger.tools.utils import read_json
        return read_json(snapshot_path)

    from kubeledger.tools.k8s_connector import snapshot_cluster
    rprint("[bold cyan]▶ Snapshotting cluster…[/bold cyan]")
    return snapshot_cluster(kubeconfig)


def _require_monthly_cost(monthly_cost: Optional[float]) -> float:
    if monthly_cost is None:
        try:
            monthly_cost = config.default_monthly_cost()
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--monthly-cost") from None
    if monthly_cost is None:
        raise typer.BadParameter(
            "pass --monthly-cost or set KUBELEDGER_MONTHLY_COST",
            param_hint="--monthly-cost",
        )
    return monthly_cost


def _build_cost(snap: dict[str, Any], monthly_cost: float) -> CostEstimate:
    from kubeledger.engine.pipeline import run_cost_analysis
    from kubeledger.tools.facts import cluster_capacity, namespace_usage_facts

    facts = namespace_usage_facts(snap.get("pods", []))
    capacity = cluster_capacity(snap.get("nodes", []))
    return run_cost_analysis(facts, capacity, monthly_cost)


def _build_risk(
    snap: dict[str, Any],
    industry: Optional[str],
    security_score: Optional[int],
    exposure: ExposureContext,
    compound: bool,
) -> RiskCostAnalysis:
    from kubeledger.engine.pipeline import run_risk_analysis
    from kubeledger.tools.facts import security_risk_counts

    counts = security_risk_counts(snap.get("pods", []))
    return run_risk_analysis(
        counts,
        industry=industry,
        security_score=security_score,
        exposure=exposure,
        compound=compound,
    )


def _money(value: float) -> str:
    return f"${value:,.0f}"


# ---------------------------------------------------------------------------
# Rich tables
# ---------------------------------------------------------------------------

def _print_cost_tables(estimate: CostEstimate) -> None:
    table = Table(title=f"Namespace costs (cluster ${estimate.total_cluster_cost:,.2f}/month)")
    table.add_column("Namespace")
    table.add_column("Share", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Best", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Confidence")
    for ns in estimate.namespace_costs:
        r = ns.estimated_cost
        table.add_row(
            ns.namespace,
            f"{ns.weighted_share * 100:.1f}%",
            _money(r.low), _money(r.best), _money(r.high),
            ns.confidence_label.value,
        )
    console.print(table)

    if not estimate.optimization_scenarios:
        rprint("  No optimization opportunities above threshold")
        return

    scenarios = Table(title="Optimization scenarios")
    scenarios.add_column("Scenario")
    scenarios.add_column("Savings (best)", justify="right")
    scenarios.add_column("Range", justify="right")
    scenarios.add_column("Effort")
    scenarios.add_column("Risk")
    scenarios.add_column("Timeline")
    for sc in estimate.optimization_scenarios:
        scenarios.add_row(
            sc.name,
            _money(sc.savings.best),
            f"{_money(sc.savings.low)} - {_money(sc.savings.high)}",
            sc.effort.value, sc.risk.value, sc.timeline,
        )
    console.print(scenarios)

    total = estimate.total_savings_potential
    rprint(
        f"  Savings potential: [bold green]{_money(total.best)}[/bold green]/month "
        f"({_money(total.low)} - {_money(total.high)})"
    )


def _print_risk_tables(analysis: RiskCostAnalysis) -> None:
    table = Table(title=f"Security risk exposure ({analysis.industry})")
    table.add_column("Category")
    table.add_column("Severity")
    table.add_column("Count", justify="right")
    table.add_column("Low", justify="right")
    table.add_column("Best", justify="right")
    table.add_column("High", justify="right")
    for c in analysis.risk_categories:
        r = c.risk_exposure
        table.add_row(
            c.name, c.severity.value, str(c.count),
            _money(r.low), _money(r.best), _money(r.high),
        )
    console.print(table)

    plan = analysis.remediation_plan
    rprint(
        f"  Annual exposure: [bold red]{_money(analysis.total_risk_exposure.best)}[/bold red]  "
        f"Fix cost: {_money(plan.estimated_cost)} ({plan.total_hours:.1f} h, {plan.timeline})  "
        f"ROI: {plan.roi:.1f}x  Payback: {plan.payback_months:.1f} months"
    )
    for rec in analysis.priority_recommendations:
        rprint(f"  • {rec}")


# ---------------------------------------------------------------------------
# costs
# ---------------------------------------------------------------------------

@app.command()
def costs(
    monthly_cost: Optional[float] = typer.Option(
        None,
        "--monthly-cost", "-c",
        help="Total monthly cluster cost in USD (or KUBELEDGER_MONTHLY_COST).",
    ),
    snapshot_path: Optional[str] = typer.Option(
        None,
        "--snapshot", "-s",
        help="Use a saved snapshot JSON instead of querying the cluster.",
    ),
    kubeconfig: str = typer.Option(
        config.DEFAULT_KUBECONFIG,
        "--kubeconfig", "-k",
        help="Path to kubeconfig file.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.table,
        "--format", "-f",
        help="Output format: table or json.",
    ),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging."),
) -> None:
    """Estimate per-namespace cost ranges and optimization savings."""
    _setup_logging(debug)
    total = _require_monthly_cost(monthly_cost)
    snap = _load_snapshot(snapshot_path, kubeconfig)

    try:
        estimate = _build_cost(snap, total)
    except EstimationError as exc:
        _fail(exc)

    if output_format is OutputFormat.json:
        typer.echo(estimate.model_dump_json(indent=2))
    else:
        _print_cost_tables(estimate)


# ---------------------------------------------------------------------------
# risk
# ---------------------------------------------------------------------------

@app.command()
def risk(
    industry: Optional[str] = typer.Option(
        None,
        "--industry", "-i",
        help="Industry profile: generic, pharma, fintech, startup (or an alias).",
    ),
    exposure: ExposureContext = typer.Option(
        ExposureContext.internal,
        "--exposure", "-e",
        help="How reachable the cluster is from outside.",
    ),
    compound: bool = typer.Option(
        False,
        "--compound",
        help="Apply compound multipliers for co-occurring risks.",
    ),
    security_score: Optional[int] = typer.Option(
        None,
        "--security-score",
        min=0, max=100,
        help="Externally computed security score to include in the output.",
    ),
    snapshot_path: Optional[str] = typer.Option(None, "--snapshot", "-s"),
    kubeconfig: str = typer.Option(config.DEFAULT_KUBECONFIG, "--kubeconfig", "-k"),
    output_format: OutputFormat = typer.Option(OutputFormat.table, "--format", "-f"),
    debug: bool = typer.Option(False, "--debug"),
) -> None:
    """Translate security misconfigurations into annual dollar exposure."""
    _setup_logging(debug)
    snap = _load_snapshot(snapshot_path, kubeconfig)

    try:
        analysis = _build_risk(snap, industry, security_score, exposure, compound)
    except EstimationError as exc:
        _fail(exc)

    if output_format is OutputFormat.json:
        typer.echo(analysis.model_dump_json(indent=2))
    else:
        _print_risk_tables(analysis)


# ---------------------------------------------------------------------------
# report
# ---------------------------------------------------------------------------

@app.command()
def report(
    monthly_cost: Optional[float] = typer.Option(
        None, "--monthly-cost", "-c",
    ),
    industry: Optional[str] = typer.Option(None, "--industry", "-i"),
    exposure: ExposureContext = typer.Option(ExposureContext.internal, "--exposure", "-e"),
    compound: bool = typer.Option(False, "--compound"),
    security_score: Optional[int] = typer.Option(None, "--security-score", min=0, max=100),
    output: str = typer.Option(
        config.DEFAULT_OUTPUT,
        "--output", "-o",
        help="Path for the Markdown report.",
    ),
    snapshot_path: Optional[str] = typer.Option(None, "--snapshot", "-s"),
    kubeconfig: str = typer.Option(config.DEFAULT_KUBECONFIG, "--kubeconfig", "-k"),
    debug: bool = typer.Option(False, "--debug"),
) -> None:
    """Write a Markdown + JSON report covering cost and security risk."""
    _setup_logging(debug)
    from kubeledger.reporting.report import generate_report

    total = _require_monthly_cost(monthly_cost)
    snap = _load_snapshot(snapshot_path, kubeconfig)

    try:
        rprint("[bold cyan]▶ Estimating cost…[/bold cyan]")
        estimate = _build_cost(snap, total)

        rprint("[bold cyan]▶ Mapping security risk…[/bold cyan]")
        try:
            analysis: Optional[RiskCostAnalysis] = _build_risk(
                snap, industry, security_score, exposure, compound,
            )
        except UndefinedROI:
            rprint("  No modeled security risks; risk section omitted")
            analysis = None
    except EstimationError as exc:
        _fail(exc)

    path = generate_report(cost=estimate, risk=analysis, out_path=output)
    rprint(f"[bold green]✔ Report written to {path}[/bold green]")


# ---------------------------------------------------------------------------
# snapshot
# ---------------------------------------------------------------------------

@app.command()
def snapshot(
    kubeconfig: str = typer.Option(config.DEFAULT_KUBECONFIG, "--kubeconfig", "-k"),
    namespace: Optional[list[str]] = typer.Option(None, "--namespace", "-n"),
) -> None:
    """Take a cluster snapshot and save to snapshots/latest.json."""
    _setup_logging(debug=False)
    from kubeledger.tools.k8s_connector import save_snapshot, snapshot_cluster

    snap = snapshot_cluster(kubeconfig, namespace)
    path = save_snapshot(snap)
    rprint(f"[bold green]✔ Snapshot saved to {path}[/bold green]")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
