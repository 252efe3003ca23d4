"""
Tests for engine/cost_range.py - proportional allocation and confidence bands.
"""

import pytest

from kubeledger.engine.cost_range import (
    confidence_label,
    cost_range,
    estimate_namespace_costs,
    namespace_confidence,
    require_positive_cost,
)
from kubeledger.errors import InvalidInput
from kubeledger.models import Level, NamespaceUtilization


def _ns(name="web", share_pct=50.0, pods=4, spot=0, idle=0, waste=0.0):
    return NamespaceUtilization(
        name=name,
        pod_count=pods,
        spot_eligible_pods=spot,
        idle_pods=idle,
        cpu_percent=share_pct,
        memory_percent=share_pct,
        waste_score=waste,
    )


def test_even_split_best_estimate():
    """Two namespaces at 50% share of $10000 each get best = $5000."""
    estimates = estimate_namespace_costs([_ns("a"), _ns("b")], 10000)

    assert [e.estimated_cost.best for e in estimates] == [
        pytest.approx(5000.0),
        pytest.approx(5000.0),
    ]
    assert all(e.weighted_share == pytest.approx(0.5) for e in estimates)
    assert all(e.cpu_share == pytest.approx(0.5) for e in estimates)


@pytest.mark.parametrize("total", [0, -100, float("nan")])
def test_non_positive_total_cost_rejected(total):
    """Total cost must be a positive number."""
    with pytest.raises(InvalidInput):
        require_positive_cost(total)
    with pytest.raises(ValueError):
        estimate_namespace_costs([_ns()], total)


def test_confidence_adjustments():
    """Large share raises confidence, few pods lowers it."""
    # 0.5 base + 0.2 (share > 15%) - 0.1 (pods < 3)
    assert namespace_confidence(_ns(pods=2)) == pytest.approx(0.6)
    # 0.5 base + 0.2 (share > 15%) + 0.1 (pods > 10)
    assert namespace_confidence(_ns(pods=12)) == pytest.approx(0.8)
    # 0.5 base + 0.1 (share > 5%) - 0.1 (waste > 30)
    assert namespace_confidence(_ns(share_pct=10.0, waste=40.0)) == pytest.approx(0.5)


def test_confidence_is_clamped():
    """Confidence stays within 0.3 - 0.9."""
    # 0.5 - 0.1 (tiny) - 0.2 (waste > 50) - 0.1 (pods < 3) = 0.1
    worst = _ns(share_pct=1.0, pods=1, waste=60.0)
    assert namespace_confidence(worst) == pytest.approx(0.3)

    best = _ns(share_pct=80.0, pods=50)
    assert 0.3 <= namespace_confidence(best) <= 0.9


def test_confidence_label_never_high():
    """Label is Medium above 10%, Low below 2%, Medium in between."""
    assert confidence_label(0.5) is Level.medium
    assert confidence_label(0.05) is Level.medium
    assert confidence_label(0.01) is Level.low
    assert all(confidence_label(s / 100) is not Level.high for s in range(0, 101))


def test_cost_range_spot_and_waste():
    """Spot potential lowers the low end; waste raises the high end."""
    # confidence: 0.5 + 0.2 (share) - 0.2 (waste > 50) = 0.5 -> uncertainty 0.5
    ns = _ns(pods=4, spot=4, waste=60.0)
    r = cost_range(1000.0, ns)

    assert r.low == pytest.approx(1000 * (1 - 0.7) * (1 - 0.25))
    assert r.best == pytest.approx(1000.0)
    assert r.high == pytest.approx(1000 * 1.3 * 1.25)


def test_cost_range_is_monotonic():
    """low <= best <= high for a spread of namespaces."""
    namespaces = [
        _ns("a", share_pct=1.0, pods=0),
        _ns("b", share_pct=30.0, pods=3, spot=3, waste=90.0),
        _ns("c", share_pct=12.0, pods=20, idle=5, spot=10, waste=35.0),
    ]
    for est in estimate_namespace_costs(namespaces, 7500):
        r = est.estimated_cost
        assert 0 <= r.low <= r.best <= r.high
        assert 0.3 <= est.confidence <= 0.9


def test_zero_share_namespace_costs_nothing():
    """A namespace requesting nothing gets a zero range."""
    [est] = estimate_namespace_costs([_ns(share_pct=0.0, pods=0)], 1000)
    assert est.estimated_cost.low == est.estimated_cost.best == est.estimated_cost.high == 0
