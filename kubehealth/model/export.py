"""Export-related models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ExportFormat(str, Enum):
    """Supported export formats."""

    JSON = "json"
    CSV = "csv"
    PROMETHEUS = "prometheus"


class ClusterMetrics(BaseModel):
    """Cluster-wide usage against capacity."""

    total_cpu_usage: str
    total_memory_usage: str
    total_cpu_capacity: str
    total_memory_capacity: str
    cpu_usage_percent: float = 0.0
    memory_usage_percent: float = 0.0
    nodes_count: int = 0
    pods_count: int = 0
    namespaces_count: int = 0


class NodeMetrics(BaseModel):
    """Live usage of a node."""

    name: str
    status: str
    cpu_usage: str
    cpu_usage_percent: float = 0.0
    memory_usage: str
    memory_usage_percent: float = 0.0
    cpu_capacity: str
    memory_capacity: str


class PodMetrics(BaseModel):
    """Live usage, requests and limits of a pod."""

    name: str
    namespace: str
    node: str = ""
    cpu_usage: str
    memory_usage: str
    cpu_requests: str = "0m"
    memory_requests: str = "0 B"
    cpu_limits: str = "0m"
    memory_limits: str = "0 B"
    restart_count: int = 0


class NodeCost(BaseModel):
    name: str
    type: str
    monthly_cost: float
    cpu_capacity: str
    memory_capacity: str
    cpu_utilization: float = 0.0
    memory_utilization: float = 0.0
    efficiency: str = ""


class NamespaceCost(BaseModel):
    name: str
    monthly_cost: float
    cpu_requests: str = ""
    memory_requests: str = ""
    pods_count: int = 0
    cost_per_pod: float = 0.0


class UnderutilizedResource(BaseModel):
    """Workload whose requests far exceed its usage."""

    type: str
    name: str
    namespace: str = ""
    cpu_waste: str = "0m"
    memory_waste: str = "0 B"
    estimated_savings: float = 0.0
    recommendation: str = ""


class CostOptimization(BaseModel):
    type: str
    description: str
    potential_savings: float = 0.0
    priority: str
    action: str


class CostAnalysis(BaseModel):
    """Estimated monthly spend by node and namespace."""

    total_monthly_cost: float = 0.0
    node_costs: List[NodeCost] = Field(default_factory=list)
    namespace_costs: List[NamespaceCost] = Field(default_factory=list)
    underutilized_resources: List[UnderutilizedResource] = Field(default_factory=list)
    cost_optimizations: List[CostOptimization] = Field(default_factory=list)


class ResourceUtilization(BaseModel):
    type: str
    name: str
    namespace: str = ""
    cpu_utilization: float = 0.0
    memory_utilization: float = 0.0
    recommendation: str = ""


class ClusterEvent(BaseModel):
    """A Kubernetes event with derived severity and component."""

    type: str
    reason: str
    message: str
    object: str
    namespace: str = ""
    first_time: Optional[datetime] = None
    last_time: Optional[datetime] = None
    count: int = 0
    severity: str = "Info"
    component: str = "Unknown"


class ErrorPattern(BaseModel):
    """Recurring warning or critical event reason."""

    pattern: str
    count: int
    last_seen: Optional[datetime] = None
    severity: str
    description: str
    recommendation: str


class LogAnalysis(BaseModel):
    critical_events: List[ClusterEvent] = Field(default_factory=list)
    warning_events: List[ClusterEvent] = Field(default_factory=list)
    error_patterns: List[ErrorPattern] = Field(default_factory=list)


class ExportBundle(BaseModel):
    """Snapshot eligible for export; every field is optional."""

    timestamp: Optional[datetime] = None
    cluster_metrics: Optional[ClusterMetrics] = None
    node_metrics: Optional[List[NodeMetrics]] = None
    pod_metrics: Optional[List[PodMetrics]] = None
    cost_analysis: Optional[CostAnalysis] = None
    log_analysis: Optional[LogAnalysis] = None
    utilizations: Optional[List[ResourceUtilization]] = None
    events: Optional[List[ClusterEvent]] = None
