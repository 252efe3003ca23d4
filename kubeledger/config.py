"""KubeLedger configuration — constants, heuristics tables, industry presets.

All tunables live here so the engine stays free of magic numbers.
The heuristics below are hand-chosen and unvalidated against empirical data;
their exact values are part of the observable output, so change them only
with new data.  Runtime defaults can be overridden via environment variables.
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Runtime defaults
# ---------------------------------------------------------------------------

DEFAULT_INDUSTRY: str = os.getenv("KUBELEDGER_INDUSTRY", "generic")
MONTHLY_COST_ENV: str = "KUBELEDGER_MONTHLY_COST"


def default_monthly_cost() -> float | None:
    """Read ``KUBELEDGER_MONTHLY_COST`` at call time; ``None`` when unset.

    Raises ``ValueError`` when the variable is set but not a number.
    """
    raw = os.getenv(MONTHLY_COST_ENV, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{MONTHLY_COST_ENV} must be a number, got {raw!r}") from None


SNAPSHOT_DIR: str = "snapshots"
DEFAULT_KUBECONFIG: str = os.path.expanduser("~/.kube/config")
DEFAULT_OUTPUT: str = "report.md"

# Namespaces exempt from idle detection, HPA suggestions and some security checks.
SYSTEM_NAMESPACES: tuple[str, ...] = ("kube-system", "istio-system")
# Pods in these namespaces are never spot-eligible.
PRODUCTION_NAMESPACES: tuple[str, ...] = ("production", "prod")

# A pod unchanged for this many days (and never restarted) counts as idle.
IDLE_DAYS: int = 7

# ---------------------------------------------------------------------------
# Resource utilization / waste score
# ---------------------------------------------------------------------------

WASTE_IDLE_POINTS: float = 40.0
WASTE_OVERPROV_POINTS: float = 30.0
WASTE_SPOT_POINTS: float = 30.0
WASTE_SCORE_MIN: float = 0.0
WASTE_SCORE_MAX: float = 100.0

OVERPROV_CPU_PER_POD: float = 2.0   # cores
OVERPROV_MAX_PODS: int = 5          # exclusive
SPOT_OK_RATIO: float = 0.5          # exclusive

# Optimization hints emitted by the analyzer
IDLE_HINT_WASTE: float = 50.0
SPOT_HINT_MIN_PODS: int = 2         # exclusive

# ---------------------------------------------------------------------------
# Cost range estimation
# ---------------------------------------------------------------------------

COST_METHOD: str = "request_proportional"
COST_CONFIDENCE_LABEL: str = "Medium"

CONFIDENCE_BASE: float = 0.5
CONFIDENCE_MIN: float = 0.3
CONFIDENCE_MAX: float = 0.9

# (threshold, adjustment): first match wins, evaluated top to bottom.
CONFIDENCE_SHARE_ABOVE: list[tuple[float, float]] = [(0.15, 0.2), (0.05, 0.1)]
CONFIDENCE_SHARE_TINY: tuple[float, float] = (0.02, -0.1)
CONFIDENCE_WASTE_ABOVE: list[tuple[float, float]] = [(50.0, -0.2), (30.0, -0.1)]
CONFIDENCE_PODS_ABOVE: tuple[int, float] = (10, 0.1)
CONFIDENCE_PODS_BELOW: tuple[int, float] = (3, -0.1)

# Weighted-share cut-offs for the coarse confidence label
LABEL_MEDIUM_SHARE: float = 0.10
LABEL_LOW_SHARE: float = 0.02

SPOT_DISCOUNT: float = 0.7
UNCERTAINTY_SPREAD: float = 0.5
# (waste score threshold, high-estimate inflation): first match wins
WASTE_FACTORS: list[tuple[float, float]] = [(50.0, 0.30), (30.0, 0.15)]

COST_ASSUMPTIONS: list[str] = [
    "Cost allocation based on CPU + Memory resource requests (not actual usage)",
    "Does NOT include: storage costs, networking egress, load balancers, public IPs",
    "Spot instance savings assume 70% discount vs on-demand",
    "Assumes proportional sharing of node costs across pods",
    "Cluster cost provided by user - not validated against actual cloud billing",
]

COST_DISCLAIMERS: list[str] = [
    "These are ESTIMATES with ranges - not exact costs",
    "Actual costs depend on: VM sizes, reserved instances, spot pricing, node utilization",
    "Use your cloud provider's cost management tooling for actual billing data",
    "Optimization savings are potential - results may vary",
]

# ---------------------------------------------------------------------------
# Optimization scenarios
# ---------------------------------------------------------------------------

# Clusters at or above this monthly cost use the absolute floors.
LARGE_CLUSTER_COST: float = 2000.0

# Range applied to a candidate cost to express estimate uncertainty.
CURRENT_COST_BAND: tuple[float, float, float] = (0.9, 1.0, 1.1)

# large_floor: threshold for large clusters; pct / small_floor: scaled
# threshold for small clusters; after: post-change cost as a fraction of the
# candidate cost (savings = current - after).
SCENARIO_RULES: dict[str, dict[str, float]] = {
    "spot": {"large_floor": 50.0, "pct": 0.05, "small_floor": 20.0, "after": 0.30},
    "idle": {"large_floor": 30.0, "pct": 0.03, "small_floor": 15.0, "after": 0.0},
    "rightsize": {"large_floor": 50.0, "pct": 0.05, "small_floor": 20.0, "after": 0.50},
    "hpa": {"large_floor": 100.0, "pct": 0.10, "small_floor": 30.0, "after": 0.75},
}

SPOT_MIN_RATIO: float = 0.5         # exclusive
SPOT_MIN_PODS: int = 2              # inclusive
IDLE_MIN_WASTE: float = 70.0        # exclusive
IDLE_MIN_COST: float = 20.0         # exclusive
RIGHTSIZE_MIN_PODS: int = 1         # inclusive
RIGHTSIZE_MAX_PODS: int = 5         # exclusive
HPA_MIN_PODS: int = 3               # inclusive
HPA_MAX_PODS: int = 20              # inclusive
HPA_MIN_COST: float = 100.0         # exclusive

# ---------------------------------------------------------------------------
# Security risk exposure
# ---------------------------------------------------------------------------

# Exposure multipliers (low, best, high) applied to count * unit_cost * probability
EXPOSURE_BANDS: dict[str, tuple[float, float, float]] = {
    "critical": (0.5, 1.0, 2.0),
    "high": (0.5, 1.0, 2.0),
    "medium": (0.5, 1.0, 1.5),
    "low": (0.5, 1.0, 1.5),
}

# Modeled categories, in report order.  ``probability`` is the annual
# incident probability per affected workload.  Example strings may use
# ``{unit_cost_k}`` (unit breach cost in thousands of dollars).
RISK_MODELS: dict[str, dict] = {
    "privileged_containers": {
        "name": "Privileged Containers",
        "severity": "critical",
        "probability": 0.15,
        "description": "Containers with privileged mode can escape to host and compromise entire cluster",
        "typical_incidents": [
            "Container escape leading to node compromise",
            "Lateral movement across cluster",
            "Data exfiltration from host filesystem",
        ],
        "industry_examples": [
            "Tesla 2018: Cryptomining via privileged container ($50K+ in compute costs)",
            "Average container escape incident cost: $25K (Ponemon 2023)",
        ],
    },
    "host_path_volumes": {
        "name": "Host Path Volumes",
        "severity": "critical",
        "probability": 0.20,
        "description": "Direct host filesystem access enables data exfiltration and credential theft",
        "typical_incidents": [
            "Access to /etc/shadow for credential theft",
            "Docker socket exploitation",
            "Reading application secrets from host",
        ],
        "industry_examples": [
            "Docker socket abuse: Average incident cost $35K",
            "Credential theft via hostPath: 23% of K8s breaches (Aqua Security 2023)",
        ],
    },
    "host_pid": {
        "name": "Host PID Namespace",
        "severity": "critical",
        "probability": 0.12,
        "description": "Access to host processes enables process injection and privilege escalation",
        "typical_incidents": [
            "Process injection into privileged processes",
            "Information disclosure via /proc",
            "Signal-based denial of service",
        ],
        "industry_examples": [
            "Host PID exploitation: ${unit_cost_k:.0f}K average incident cost",
        ],
    },
    "running_as_root": {
        "name": "Containers Running as Root",
        "severity": "high",
        "probability": 0.10,
        "description": "Root user in containers amplifies damage from application vulnerabilities",
        "typical_incidents": [
            "CVE exploitation with root privileges",
            "Container filesystem modification",
            "Capability abuse for lateral movement",
        ],
        "industry_examples": [
            "Log4Shell + root user: 3x more damage than non-root",
            "Root containers: 67% of critical K8s CVEs (StackRox 2022)",
        ],
    },
    "host_network": {
        "name": "Host Network Usage",
        "severity": "high",
        "probability": 0.08,
        "description": "Bypasses network policies enabling lateral movement and service impersonation",
        "typical_incidents": [
            "Bypass of network segmentation",
            "Service impersonation attacks",
            "Cluster-wide port scanning",
        ],
        "industry_examples": [
            "Network policy bypass: ${unit_cost_k:.0f}K average incident",
        ],
    },
    "missing_resource_limits": {
        "name": "Missing Resource Limits",
        "severity": "medium",
        "probability": 0.25,
        "description": "Enables resource exhaustion attacks causing cluster-wide outages",
        "typical_incidents": [
            "Memory leak causing node eviction",
            "CPU spike affecting cluster performance",
            "OOMKilled cascading failures",
        ],
        "industry_examples": [
            "Average cost of 1-hour production outage: ${unit_cost_k:.0f}K",
            "Resource exhaustion: 18% of K8s incidents (CNCF 2023)",
        ],
    },
    "default_service_account": {
        "name": "Default Service Account Usage",
        "severity": "medium",
        "probability": 0.06,
        "description": "Default service accounts often have excessive permissions enabling privilege escalation",
        "typical_incidents": [
            "Over-privileged API access from compromised pod",
            "Secret enumeration via service account token",
            "Namespace-wide resource manipulation",
        ],
        "industry_examples": [
            "Service account abuse: $6K average incident",
        ],
    },
}

# ---------------------------------------------------------------------------
# Remediation planning
# ---------------------------------------------------------------------------

HOURS_PER_ISSUE: dict[str, float] = {
    "critical": 2.0,
    "high": 1.0,
    "medium": 0.5,
    "low": 0.0,
}

# (max hours inclusive, label): first match wins; beyond the last bucket the
# timeline is expressed in 40-hour weeks.
TIMELINE_BUCKETS: list[tuple[float, str]] = [
    (8, "1 day"),
    (16, "2 days"),
    (40, "1 week"),
    (80, "2 weeks"),
    (160, "1 month"),
]
HOURS_PER_WEEK: float = 40.0
MONTHS_PER_YEAR: float = 12.0

# (severity, phase name, priority label)
REMEDIATION_PHASES: list[tuple[str, str, str]] = [
    ("critical", "Phase 1: Critical Issues", "IMMEDIATE"),
    ("high", "Phase 2: High Priority", "THIS WEEK"),
    ("medium", "Phase 3: Medium Priority", "THIS MONTH"),
]

HEADLINE_MIN_EXPOSURE: float = 1000.0

# Report likelihood label thresholds (best-case annual exposure, USD)
PROBABILITY_HIGH_EXPOSURE: float = 20000.0
PROBABILITY_LOW_EXPOSURE: float = 5000.0

HARDENING_RECOMMENDATIONS: list[str] = [
    "Implement Kubernetes Pod Security Standards (PSS) at namespace level",
    "Configure network policies to segment workloads and limit lateral movement",
    "Enable audit logging to detect exploitation attempts",
    "Add security scanning in CI/CD pipeline to prevent future issues",
]

# ---------------------------------------------------------------------------
# Industry presets (USD)
# ---------------------------------------------------------------------------

INDUSTRY_PRESETS: dict[str, dict] = {
    "generic": {
        "engineer_hourly_rate": 200.0,
        "breach_costs": {
            "privileged_containers": 25000.0,
            "host_path_volumes": 35000.0,
            "host_pid": 20000.0,
            "running_as_root": 8000.0,
            "host_network": 12000.0,
            "missing_resource_limits": 5000.0,
            "default_service_account": 6000.0,
        },
        "public_facing_multiplier": 1.5,
        "internet_exposed_multiplier": 2.0,
        "privileged_and_hostpath": 1.8,
        "root_and_hostnetwork": 1.4,
    },
    # HIPAA / PHI exposure
    "pharma": {
        "engineer_hourly_rate": 200.0,
        "breach_costs": {
            "privileged_containers": 50000.0,
            "host_path_volumes": 70000.0,
            "host_pid": 40000.0,
            "running_as_root": 15000.0,
            "host_network": 20000.0,
            "missing_resource_limits": 8000.0,
            "default_service_account": 10000.0,
        },
        "public_facing_multiplier": 2.0,
        "internet_exposed_multiplier": 3.0,
        "privileged_and_hostpath": 2.2,
        "root_and_hostnetwork": 1.6,
    },
    # PCI-DSS / payment data, uptime SLAs
    "fintech": {
        "engineer_hourly_rate": 250.0,
        "breach_costs": {
            "privileged_containers": 40000.0,
            "host_path_volumes": 60000.0,
            "host_pid": 35000.0,
            "running_as_root": 12000.0,
            "host_network": 18000.0,
            "missing_resource_limits": 10000.0,
            "default_service_account": 9000.0,
        },
        "public_facing_multiplier": 1.8,
        "internet_exposed_multiplier": 2.5,
        "privileged_and_hostpath": 2.0,
        "root_and_hostnetwork": 1.5,
    },
    "startup": {
        "engineer_hourly_rate": 150.0,
        "breach_costs": {
            "privileged_containers": 15000.0,
            "host_path_volumes": 20000.0,
            "host_pid": 12000.0,
            "running_as_root": 5000.0,
            "host_network": 8000.0,
            "missing_resource_limits": 3000.0,
            "default_service_account": 4000.0,
        },
        "public_facing_multiplier": 1.3,
        "internet_exposed_multiplier": 1.5,
        "privileged_and_hostpath": 1.5,
        "root_and_hostnetwork": 1.3,
    },
}

INDUSTRY_ALIASES: dict[str, str] = {
    "pharma": "pharma",
    "pharmaceutical": "pharma",
    "healthcare": "pharma",
    "medical": "pharma",
    "fintech": "fintech",
    "finance": "fintech",
    "banking": "fintech",
    "payment": "fintech",
    "startup": "startup",
    "early-stage": "startup",
    "generic": "generic",
}
