"""Industry profile factory.

Each call builds a fresh, frozen :class:`IndustryProfile` from the presets in
:mod:`kubeledger.config`; nothing is cached or mutated between calls.
"""

from __future__ import annotations

import logging

from kubeledger import config
from kubeledger.models import IndustryProfile

logger = logging.getLogger("kubeledger.profiles")


def resolve_industry(name: str | None) -> str:
    """Map a user-supplied industry name or alias to a preset key.

    Matching is case-insensitive; unknown names fall back to ``generic``.
    """
    key = (name or "").strip().lower()
    resolved = config.INDUSTRY_ALIASES.get(key)
    if resolved is None:
        logger.info("Unknown industry %r, using generic profile", name)
        return "generic"
    return resolved


def get_industry_profile(name: str | None = None) -> IndustryProfile:
    """Return the immutable cost profile for *name* (default: generic)."""
    key = resolve_industry(name if name is not None else config.DEFAULT_INDUSTRY)
    preset = config.INDUSTRY_PRESETS[key]
    return IndustryProfile(
        name=key,
        engineer_hourly_rate=preset["engineer_hourly_rate"],
        breach_costs=dict(preset["breach_costs"]),
        public_facing_multiplier=preset["public_facing_multiplier"],
        internet_exposed_multiplier=preset["internet_exposed_multiplier"],
        privileged_and_hostpath=preset["privileged_and_hostpath"],
        root_and_hostnetwork=preset["root_and_hostnetwork"],
    )
