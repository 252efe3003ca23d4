"""
Tests for engine/pipeline.py - both end-to-end engine entry points.
"""

import pytest

from kubeledger.engine.pipeline import run_cost_analysis, run_risk_analysis
from kubeledger.errors import InvalidInput, UndefinedROI
from kubeledger.models import (
    ClusterCapacityFact,
    Level,
    NamespaceUsageFact,
    SecurityRiskCounts,
)


CAPACITY = ClusterCapacityFact(total_cpu_cores=16.0, total_memory_gb=64.0)

FACTS = [
    NamespaceUsageFact(name="production", cpu_cores_requested=1.5, memory_gb_requested=24.0,
                       pod_count=12),
    NamespaceUsageFact(name="staging", cpu_cores_requested=9.0, memory_gb_requested=16.0,
                       pod_count=4, idle_pods=4, spot_eligible_pods=4),
    NamespaceUsageFact(name="ml", cpu_cores_requested=5.0, memory_gb_requested=20.0,
                       pod_count=2, spot_eligible_pods=2),
    NamespaceUsageFact(name="tools", cpu_cores_requested=0.5, memory_gb_requested=4.0,
                       pod_count=3, spot_eligible_pods=1),
]

COUNTS = SecurityRiskCounts(
    privileged_containers=2,
    host_path_volumes=1,
    running_as_root=8,
    missing_resource_limits=10,
    default_service_account=6,
    privilege_escalation=4,
)


def _all_ranges(estimate):
    for ns in estimate.namespace_costs:
        yield ns.estimated_cost
    for sc in estimate.optimization_scenarios:
        yield sc.current_cost
        yield sc.after_cost
        yield sc.savings
    yield estimate.total_savings_potential


def test_cost_analysis_metadata():
    """Method, confidence label and notes are always present."""
    estimate = run_cost_analysis(FACTS, CAPACITY, 8000)

    assert estimate.total_cluster_cost == 8000
    assert estimate.method == "request_proportional"
    assert estimate.confidence is Level.medium
    assert len(estimate.assumptions) == 5
    assert len(estimate.disclaimers) == 4
    assert [ns.namespace for ns in estimate.namespace_costs][0] == "staging"


def test_cost_analysis_ranges_are_monotonic():
    """Every range in the estimate satisfies 0 <= low <= best <= high."""
    estimate = run_cost_analysis(FACTS, CAPACITY, 8000)
    for r in _all_ranges(estimate):
        assert 0 <= r.low <= r.best <= r.high


def test_cost_analysis_shares_sum_to_one():
    """Fully requested capacity allocates the whole bill."""
    estimate = run_cost_analysis(FACTS, CAPACITY, 8000)

    assert sum(ns.weighted_share for ns in estimate.namespace_costs) == pytest.approx(1.0, abs=1e-6)
    assert sum(ns.estimated_cost.best for ns in estimate.namespace_costs) == pytest.approx(8000)


def test_cost_analysis_is_idempotent():
    """Same facts in, byte-identical JSON out."""
    first = run_cost_analysis(FACTS, CAPACITY, 8000).model_dump_json()
    second = run_cost_analysis(FACTS, CAPACITY, 8000).model_dump_json()
    assert first == second


def test_cost_analysis_emits_scenarios():
    """Staging is idle and spot-friendly, ml is over-provisioned, production is busy."""
    estimate = run_cost_analysis(FACTS, CAPACITY, 8000)
    names = {sc.name for sc in estimate.optimization_scenarios}

    assert "Delete Idle Namespaces" in names
    assert "Migrate to Spot Instances" in names
    assert "Right-size Over-provisioned Workloads" in names
    assert "Add Horizontal Pod Autoscalers" in names
    assert estimate.total_savings_potential.best > 0


def test_cost_analysis_rejects_zero_cost():
    """A zero bill is invalid input, not an empty estimate."""
    with pytest.raises(InvalidInput):
        run_cost_analysis(FACTS, CAPACITY, 0)


def test_risk_analysis_end_to_end():
    """Counts flow through exposure, remediation and recommendations."""
    analysis = run_risk_analysis(COUNTS, industry="fintech", security_score=62)

    assert analysis.industry == "fintech"
    assert analysis.security_score == 62
    assert len(analysis.risk_categories) == 5
    assert analysis.total_risk_exposure.best == pytest.approx(
        sum(c.risk_exposure.best for c in analysis.risk_categories)
    )
    plan = analysis.remediation_plan
    # 3 critical * 2h + 8 high * 1h + 16 medium * 0.5h
    assert plan.total_hours == pytest.approx(22.0)
    assert plan.estimated_cost == pytest.approx(22.0 * 250)
    assert len(plan.phases) == 3
    assert analysis.priority_recommendations[0].startswith("IMMEDIATE")


def test_risk_analysis_is_idempotent():
    """Same counts in, byte-identical JSON out."""
    first = run_risk_analysis(COUNTS, industry="pharma", compound=True).model_dump_json()
    second = run_risk_analysis(COUNTS, industry="pharma", compound=True).model_dump_json()
    assert first == second


def test_risk_analysis_ranges_are_monotonic():
    """Category and total exposures are ordered low <= best <= high."""
    analysis = run_risk_analysis(COUNTS, exposure="public_facing")
    for c in analysis.risk_categories:
        assert 0 <= c.risk_exposure.low <= c.risk_exposure.best <= c.risk_exposure.high


def test_risk_analysis_clean_cluster():
    """Nothing to fix leaves ROI undefined."""
    with pytest.raises(UndefinedROI):
        run_risk_analysis(SecurityRiskCounts(host_ipc=1))
