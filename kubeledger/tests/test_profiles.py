"""
Tests for engine/profiles.py - industry profile factory.
"""

import pytest
from pydantic import ValidationError

from kubeledger import config
from kubeledger.engine.profiles import get_industry_profile, resolve_industry
from kubeledger.models import RiskCategoryId


@pytest.mark.parametrize(
    "name, expected",
    [
        ("pharma", "pharma"),
        ("Healthcare", "pharma"),
        ("  medical ", "pharma"),
        ("banking", "fintech"),
        ("PAYMENT", "fintech"),
        ("early-stage", "startup"),
        ("generic", "generic"),
        ("retail", "generic"),
        ("", "generic"),
        (None, "generic"),
    ],
)
def test_resolve_industry(name, expected):
    """Aliases are case-insensitive; unknown names fall back to generic."""
    assert resolve_industry(name) == expected


def test_pharma_breach_costs():
    """Pharma unit costs match the preset table."""
    profile = get_industry_profile("pharma")
    assert profile.name == "pharma"
    assert profile.engineer_hourly_rate == 200
    assert profile.unit_cost(RiskCategoryId.privileged_containers) == 50000
    assert profile.unit_cost("host_path_volumes") == 70000


def test_unmodeled_category_costs_nothing():
    """Categories without a breach cost return 0."""
    assert get_industry_profile().unit_cost("host_ipc") == 0.0


def test_profile_is_immutable():
    """Profiles are frozen values."""
    profile = get_industry_profile("fintech")
    with pytest.raises(ValidationError):
        profile.engineer_hourly_rate = 1.0


def test_each_call_returns_a_fresh_profile():
    """Breach costs cannot be edited in place, and each call builds a new profile."""
    first = get_industry_profile("startup")
    with pytest.raises(TypeError):
        first.breach_costs[0] = (RiskCategoryId.privileged_containers, 1.0)

    second = get_industry_profile("startup")
    assert second.unit_cost(RiskCategoryId.privileged_containers) == 15000
    assert first is not second


def test_default_industry_from_config(monkeypatch):
    """No name means the configured default industry."""
    monkeypatch.setattr(config, "DEFAULT_INDUSTRY", "fintech")
    assert get_industry_profile().name == "fintech"
