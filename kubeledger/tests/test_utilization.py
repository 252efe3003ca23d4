"""
Tests for engine/utilization.py - namespace shares, waste scores and flags.

Facts are built in-memory, no cluster required.
"""

import pytest

from kubeledger.engine.utilization import (
    analyze_cluster_resources,
    analyze_utilization,
    namespace_flags,
    waste_score,
)
from kubeledger.errors import DivisionByZero, InvalidInput
from kubeledger.models import ClusterCapacityFact, NamespaceUsageFact


CAPACITY = ClusterCapacityFact(total_cpu_cores=10.0, total_memory_gb=40.0)


def _fact(name, cpu=1.0, mem=4.0, pods=4, idle=0, spot=0):
    return NamespaceUsageFact(
        name=name,
        cpu_cores_requested=cpu,
        memory_gb_requested=mem,
        pod_count=pods,
        idle_pods=idle,
        spot_eligible_pods=spot,
    )


def test_percentages_and_weighted_share():
    """CPU% and memory% are relative to capacity; share is their average / 200."""
    [ns] = analyze_utilization([_fact("web", cpu=2.5, mem=20.0)], CAPACITY)

    assert ns.cpu_percent == pytest.approx(25.0)
    assert ns.memory_percent == pytest.approx(50.0)
    assert ns.weighted_share == pytest.approx(0.375)


def test_sorted_by_weighted_share_descending():
    """Largest consumer comes first."""
    facts = [
        _fact("small", cpu=1.0, mem=4.0),
        _fact("large", cpu=5.0, mem=20.0),
        _fact("medium", cpu=3.0, mem=8.0),
    ]
    names = [ns.name for ns in analyze_utilization(facts, CAPACITY)]
    assert names == ["large", "medium", "small"]


def test_weighted_shares_sum_to_one_when_fully_requested():
    """Shares add up to 1.0 when namespaces request the whole cluster."""
    facts = [
        _fact("a", cpu=6.0, mem=10.0),
        _fact("b", cpu=3.0, mem=25.0),
        _fact("c", cpu=1.0, mem=5.0),
    ]
    namespaces = analyze_utilization(facts, CAPACITY)
    assert sum(ns.weighted_share for ns in namespaces) == pytest.approx(1.0, abs=1e-6)


def test_zero_capacity_raises_division_by_zero():
    """Zero CPU or memory capacity cannot produce percentages."""
    with pytest.raises(DivisionByZero):
        analyze_utilization([_fact("web")], ClusterCapacityFact(total_cpu_cores=0, total_memory_gb=40))
    with pytest.raises(ZeroDivisionError):
        analyze_utilization([_fact("web")], ClusterCapacityFact(total_cpu_cores=10, total_memory_gb=0))


def test_negative_capacity_raises_invalid_input():
    """Negative capacity is rejected as bad input."""
    with pytest.raises(InvalidInput):
        analyze_utilization([_fact("web")], ClusterCapacityFact(total_cpu_cores=-1, total_memory_gb=40))


def test_duplicate_namespace_names_rejected():
    """Each namespace may appear only once."""
    with pytest.raises(InvalidInput):
        analyze_utilization([_fact("web"), _fact("web", cpu=2.0)], CAPACITY)


def test_overcommitted_requests_exceed_full_share():
    """Requests beyond capacity are reported as-is, not capped."""
    [ns] = analyze_utilization([_fact("greedy", cpu=20.0, mem=40.0)], CAPACITY)
    assert ns.cpu_percent == pytest.approx(200.0)
    assert ns.weighted_share == pytest.approx(1.5)


def test_empty_namespace_list():
    """No facts gives no namespaces."""
    assert analyze_utilization([], CAPACITY) == []


def test_waste_score_components():
    """Idle ratio (40) + over-provisioning (30) + spot ratio (30)."""
    # 2/4 idle -> 20 points
    assert waste_score(_fact("a", cpu=1.0, pods=4, idle=2)) == pytest.approx(20.0)
    # 3 cores per pod across 2 pods -> over-provisioned
    assert waste_score(_fact("b", cpu=6.0, pods=2)) == pytest.approx(30.0)
    # 1/4 spot-eligible -> 7.5 points
    assert waste_score(_fact("c", cpu=1.0, pods=4, spot=1)) == pytest.approx(7.5)


def test_waste_score_is_clamped_to_100():
    """All components maxed out stays within 0-100."""
    fact = _fact("all", cpu=12.0, pods=4, idle=4, spot=4)
    assert waste_score(fact) == pytest.approx(100.0)


def test_waste_score_empty_namespace_is_zero():
    """A namespace with no pods scores zero without dividing by zero."""
    assert waste_score(_fact("empty", cpu=0.0, mem=0.0, pods=0)) == 0.0


def test_overprovisioning_requires_fewer_than_five_pods():
    """Five or more pods never earn over-provisioning points."""
    assert waste_score(_fact("big", cpu=15.0, pods=5)) == 0.0


def test_namespace_flags():
    """Idle, spot and over-provisioned tags."""
    flags = namespace_flags(_fact("dev", cpu=12.0, pods=4, idle=2, spot=3))
    assert flags == ["IDLE-14d", "SPOT-OK", "OVER-PROV"]


def test_spot_ok_requires_more_than_half():
    """Exactly half the pods being spot-eligible is not enough."""
    assert "SPOT-OK" not in namespace_flags(_fact("half", pods=4, spot=2))


def test_idle_pods_cannot_exceed_pod_count():
    """Facts with inconsistent pod counts are rejected at construction."""
    with pytest.raises(ValueError):
        _fact("bad", pods=1, idle=2)


def test_cluster_analysis_hints():
    """Idle namespaces with high waste get a deletion hint."""
    facts = [
        _fact("abandoned", cpu=2.0, mem=8.0, pods=4, idle=4, spot=4),
        _fact("busy", cpu=4.0, mem=16.0, pods=10),
    ]
    analysis = analyze_cluster_resources(facts, CAPACITY)

    assert analysis.total_cpu_requested == pytest.approx(6.0)
    assert analysis.cpu_utilization == pytest.approx(60.0)
    kinds = {(h.type, h.namespace) for h in analysis.optimizations}
    assert ("idle_namespace", "abandoned") in kinds
    assert ("spot_migration", "abandoned") in kinds
    assert not any(h.namespace == "busy" for h in analysis.optimizations)
