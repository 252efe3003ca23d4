"""Shared Pydantic models for KubeLedger.

Every engine module and collaborator imports from here to keep facts,
ranges and report shapes DRY.  Facts and profiles are frozen: the engine
only reads them and recomputes every derived value on each call.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Severity(str, Enum):
    """Risk severity levels (descending priority)."""
    critical = "critical"
    high = "high"
    medium = "medium"
    low = "low"


class Level(str, Enum):
    """Effort / risk / confidence buckets shown to humans."""
    low = "Low"
    medium = "Medium"
    high = "High"


class ExposureContext(str, Enum):
    """How reachable the cluster is from outside."""
    internal = "internal"
    public_facing = "public_facing"
    internet_exposed = "internet_exposed"


class RiskCategoryId(str, Enum):
    """Closed set of security-violation categories reported by the inspector."""
    privileged_containers = "privileged_containers"
    host_path_volumes = "host_path_volumes"
    host_pid = "host_pid"
    host_ipc = "host_ipc"
    host_network = "host_network"
    running_as_root = "running_as_root"
    missing_resource_limits = "missing_resource_limits"
    default_service_account = "default_service_account"
    added_capabilities = "added_capabilities"
    privilege_escalation = "privilege_escalation"


# ---------------------------------------------------------------------------
# Facts (produced by the inspector, consumed read-only)
# ---------------------------------------------------------------------------

class NamespaceUsageFact(BaseModel):
    """Requested resources and pod classification for one namespace."""
    model_config = ConfigDict(frozen=True)

    name: str
    cpu_cores_requested: float = Field(default=0.0, ge=0)
    memory_gb_requested: float = Field(default=0.0, ge=0)
    pod_count: int = Field(default=0, ge=0)
    idle_pods: int = Field(default=0, ge=0)
    spot_eligible_pods: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _pods_within_count(self) -> "NamespaceUsageFact":
        if self.idle_pods > self.pod_count or self.spot_eligible_pods > self.pod_count:
            raise ValueError(
                f"namespace {self.name}: idle/spot pod counts exceed pod_count"
            )
        return self


class ClusterCapacityFact(BaseModel):
    """Total allocatable resources across all nodes."""
    model_config = ConfigDict(frozen=True)

    total_cpu_cores: float
    total_memory_gb: float


class SecurityRiskCounts(BaseModel):
    """Violation counts per :class:`RiskCategoryId`."""
    model_config = ConfigDict(frozen=True)

    privileged_containers: int = Field(default=0, ge=0)
    host_path_volumes: int = Field(default=0, ge=0)
    host_pid: int = Field(default=0, ge=0)
    host_ipc: int = Field(default=0, ge=0)
    host_network: int = Field(default=0, ge=0)
    running_as_root: int = Field(default=0, ge=0)
    missing_resource_limits: int = Field(default=0, ge=0)
    default_service_account: int = Field(default=0, ge=0)
    added_capabilities: int = Field(default=0, ge=0)
    privilege_escalation: int = Field(default=0, ge=0)

    def get(self, category: RiskCategoryId | str) -> int:
        return getattr(self, RiskCategoryId(category).value)

    def total(self) -> int:
        return sum(self.get(c) for c in RiskCategoryId)


class IndustryProfile(BaseModel):
    """Resolved industry cost parameters.  Build via ``get_industry_profile``."""
    model_config = ConfigDict(frozen=True)

    name: str
    engineer_hourly_rate: float
    # (category, unit cost) pairs; a mapping is accepted on input.
    breach_costs: tuple[tuple[RiskCategoryId, float], ...]
    public_facing_multiplier: float = 1.0
    internet_exposed_multiplier: float = 1.0
    privileged_and_hostpath: float = 1.0
    root_and_hostnetwork: float = 1.0

    @field_validator("breach_costs", mode="before")
    @classmethod
    def _pairs_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple(value.items())
        return value

    def unit_cost(self, category: RiskCategoryId | str) -> float:
        return dict(self.breach_costs).get(RiskCategoryId(category), 0.0)


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------

class CostRange(BaseModel):
    """A low / best / high dollar estimate.  Always ``0 <= low <= best <= high``."""
    low: float = 0.0
    best: float = 0.0
    high: float = 0.0

    @model_validator(mode="after")
    def _monotonic(self) -> "CostRange":
        if not (0 <= self.low <= self.best <= self.high):
            raise ValueError(
                f"cost range must satisfy 0 <= low <= best <= high, "
                f"got ({self.low}, {self.best}, {self.high})"
            )
        return self

    @classmethod
    def scaled(cls, amount: float, band: tuple[float, float, float]) -> "CostRange":
        """Return ``amount`` multiplied by each factor of *band*."""
        low, best, high = band
        return cls(low=amount * low, best=amount * best, high=amount * high)

    def __add__(self, other: "CostRange") -> "CostRange":
        return CostRange(
            low=self.low + other.low,
            best=self.best + other.best,
            high=self.high + other.high,
        )

    def __sub__(self, other: "CostRange") -> "CostRange":
        return CostRange(
            low=self.low - other.low,
            best=self.best - other.best,
            high=self.high - other.high,
        )


# ---------------------------------------------------------------------------
# Resource utilization
# ---------------------------------------------------------------------------

class NamespaceUtilization(BaseModel):
    """A namespace's share of cluster capacity plus waste indicators."""
    name: str
    cpu_cores_requested: float = 0.0
    memory_gb_requested: float = 0.0
    pod_count: int = 0
    idle_pods: int = 0
    spot_eligible_pods: int = 0
    cpu_percent: float = Field(default=0.0, ge=0)
    memory_percent: float = Field(default=0.0, ge=0)
    waste_score: float = Field(default=0.0, ge=0, le=100)
    flags: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def weighted_share(self) -> float:
        """Average of CPU% and memory% as a fraction of 1.0."""
        return (self.cpu_percent + self.memory_percent) / 200.0

    @property
    def spot_ratio(self) -> float:
        return self.spot_eligible_pods / self.pod_count if self.pod_count else 0.0

    @property
    def idle_ratio(self) -> float:
        return self.idle_pods / self.pod_count if self.pod_count else 0.0

    @property
    def avg_cpu_per_pod(self) -> float:
        return self.cpu_cores_requested / self.pod_count if self.pod_count else 0.0


class Optimization(BaseModel):
    """A per-namespace optimization hint."""
    priority: str                     # high | medium | low
    type: str                         # idle_namespace | spot_migration | rightsizing
    namespace: str
    description: str
    action: str
    impact: str


class ClusterResourceAnalysis(BaseModel):
    """Cluster totals, sorted namespace utilization and optimization hints."""
    total_cpu_cores: float
    total_memory_gb: float
    total_cpu_requested: float = 0.0
    total_memory_requested: float = 0.0
    cpu_utilization: float = 0.0     # percent
    memory_utilization: float = 0.0  # percent
    namespaces: list[NamespaceUtilization] = Field(default_factory=list)
    optimizations: list[Optimization] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Cost estimation
# ---------------------------------------------------------------------------

class NamespaceCostEstimate(BaseModel):
    """Proportional cost allocation for one namespace."""
    namespace: str
    estimated_cost: CostRange
    cpu_share: float
    memory_share: float
    weighted_share: float
    confidence: float = Field(..., ge=0.3, le=0.9)
    confidence_label: Level


class OptimizationScenario(BaseModel):
    """An actionable cost optimization with its own cost/savings ranges."""
    name: str
    description: str
    current_cost: CostRange
    after_cost: CostRange
    savings: CostRange
    impact: str
    effort: Level
    risk: Level
    timeline: str
    actions: list[str] = Field(default_factory=list)


class CostEstimate(BaseModel):
    """Cluster-wide cost estimate."""
    total_cluster_cost: float
    method: str
    confidence: Level
    namespace_costs: list[NamespaceCostEstimate] = Field(default_factory=list)
    optimization_scenarios: list[OptimizationScenario] = Field(default_factory=list)
    total_savings_potential: CostRange = Field(default_factory=CostRange)
    assumptions: list[str] = Field(default_factory=list)
    disclaimers: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Security risk cost
# ---------------------------------------------------------------------------

class RiskCategory(BaseModel):
    """Financial exposure attributed to one category of misconfiguration."""
    id: RiskCategoryId
    name: str
    severity: Severity
    count: int
    description: str = ""
    probability: float
    risk_exposure: CostRange
    typical_incidents: list[str] = Field(default_factory=list)
    industry_examples: list[str] = Field(default_factory=list)


class RemediationPhase(BaseModel):
    """One step of the three-phase rollout."""
    name: str
    duration: str
    hours: float
    cost: float
    priority: str


class RemediationPlan(BaseModel):
    """Cost, effort and return of fixing every reported category."""
    total_hours: float
    critical_hours: float
    high_hours: float
    medium_hours: float
    estimated_cost: float
    risk_reduction: float
    roi: float
    payback_months: float
    timeline: str
    phases: list[RemediationPhase] = Field(default_factory=list)


class RiskCostAnalysis(BaseModel):
    """Security findings mapped to money."""
    security_score: Optional[int] = None
    industry: str
    total_risk_exposure: CostRange
    risk_categories: list[RiskCategory] = Field(default_factory=list)
    remediation_plan: RemediationPlan
    priority_recommendations: list[str] = Field(default_factory=list)
