"""
Tests for engine/risk_exposure.py - violation counts to dollar ranges.
"""

import pytest

from kubeledger.engine.profiles import get_industry_profile
from kubeledger.engine.risk_exposure import (
    category_exposure,
    map_risk_exposure,
    total_exposure,
)
from kubeledger.models import RiskCategoryId, SecurityRiskCounts, Severity


def _by_id(categories):
    return {c.id: c for c in categories}


def test_pharma_privileged_exposure():
    """3 privileged containers at $50K and 15% -> best $22,500."""
    counts = SecurityRiskCounts(privileged_containers=3)
    [category] = map_risk_exposure(counts, get_industry_profile("pharma"))

    assert category.id is RiskCategoryId.privileged_containers
    assert category.severity is Severity.critical
    assert category.probability == pytest.approx(0.15)
    assert category.risk_exposure.best == pytest.approx(22500.0)
    assert category.risk_exposure.low == pytest.approx(11250.0)
    assert category.risk_exposure.high == pytest.approx(45000.0)


def test_medium_severity_band():
    """Medium categories widen to 0.5x - 1.5x."""
    r = category_exposure(2, 5000.0, 0.25, "medium")
    assert (r.low, r.best, r.high) == (
        pytest.approx(1250.0),
        pytest.approx(2500.0),
        pytest.approx(3750.0),
    )


def test_zero_counts_are_skipped():
    """Only categories with count > 0 are reported."""
    assert map_risk_exposure(SecurityRiskCounts(), get_industry_profile("generic")) == []


def test_unmodeled_categories_produce_no_exposure():
    """hostIPC, added capabilities and privilege escalation carry no dollar model."""
    counts = SecurityRiskCounts(host_ipc=2, added_capabilities=5, privilege_escalation=9)
    assert map_risk_exposure(counts, get_industry_profile("generic")) == []


def test_categories_follow_model_order():
    """Critical categories are listed before medium ones."""
    counts = SecurityRiskCounts(
        default_service_account=1,
        missing_resource_limits=1,
        privileged_containers=1,
        running_as_root=1,
    )
    ids = [c.id.value for c in map_risk_exposure(counts, get_industry_profile())]
    assert ids == [
        "privileged_containers",
        "running_as_root",
        "missing_resource_limits",
        "default_service_account",
    ]


def test_industry_examples_are_formatted():
    """Example text has the unit cost filled in."""
    counts = SecurityRiskCounts(privileged_containers=1, host_path_volumes=1)
    for category in map_risk_exposure(counts, get_industry_profile("fintech")):
        assert category.typical_incidents
        for example in category.industry_examples:
            assert "{" not in example


def test_internet_exposed_multiplier():
    """Internet exposure scales unit costs by the profile multiplier."""
    profile = get_industry_profile("generic")
    counts = SecurityRiskCounts(privileged_containers=1)

    internal = _by_id(map_risk_exposure(counts, profile))
    exposed = _by_id(map_risk_exposure(counts, profile, exposure="internet_exposed"))

    key = RiskCategoryId.privileged_containers
    assert internal[key].risk_exposure.best == pytest.approx(25000 * 0.15)
    assert exposed[key].risk_exposure.best == pytest.approx(25000 * 0.15 * 2.0)


def test_compound_multiplier_applies_to_both_categories():
    """Privileged + hostPath together amplify each other when enabled."""
    profile = get_industry_profile("generic")
    counts = SecurityRiskCounts(privileged_containers=1, host_path_volumes=1)

    plain = _by_id(map_risk_exposure(counts, profile))
    compounded = _by_id(map_risk_exposure(counts, profile, compound=True))

    for key in (RiskCategoryId.privileged_containers, RiskCategoryId.host_path_volumes):
        assert compounded[key].risk_exposure.best == pytest.approx(
            plain[key].risk_exposure.best * 1.8
        )


def test_compound_needs_both_members():
    """A lone privileged container is not compounded."""
    profile = get_industry_profile("generic")
    counts = SecurityRiskCounts(privileged_containers=1)
    [plain] = map_risk_exposure(counts, profile)
    [compounded] = map_risk_exposure(counts, profile, compound=True)
    assert plain.risk_exposure == compounded.risk_exposure


def test_total_exposure_is_componentwise_sum():
    """Total adds low, best and high separately."""
    counts = SecurityRiskCounts(privileged_containers=2, missing_resource_limits=4)
    categories = map_risk_exposure(counts, get_industry_profile("startup"))
    total = total_exposure(categories)

    assert total.low == pytest.approx(sum(c.risk_exposure.low for c in categories))
    assert total.best == pytest.approx(sum(c.risk_exposure.best for c in categories))
    assert total.high == pytest.approx(sum(c.risk_exposure.high for c in categories))
    assert total.low <= total.best <= total.high
