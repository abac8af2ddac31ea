"""Cluster fact models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NodeStatus(str, Enum):
    """Node readiness."""

    READY = "Ready"
    NOT_READY = "NotReady"


class ComponentSource(str, Enum):
    """Discovery mechanism that reported a component."""

    DEPLOYMENT = "Deployment"
    STATEFULSET = "StatefulSet"
    DAEMONSET = "DaemonSet"
    HELM = "Helm"


class NodeFact(BaseModel):
    """Snapshot of a single node."""

    name: str
    status: NodeStatus
    roles: List[str] = Field(default_factory=lambda: ["worker"])
    age: str
    version: str = ""
    internal_ip: str = "N/A"
    cpu_capacity: str = ""
    memory_capacity: str = ""

    @property
    def roles_display(self) -> str:
        """Roles joined for display."""
        return ",".join(self.roles)


class PodFact(BaseModel):
    """Snapshot of a single pod."""

    name: str
    namespace: str
    phase: str
    restarts: int = 0
    age: str = ""
    node: str = ""


class ClusterSummaryFact(BaseModel):
    """Aggregate node and pod counts."""

    total_nodes: int
    total_pods: int
    total_cpu_capacity: str
    total_memory_capacity: str


class ComponentFact(BaseModel):
    """An installed component discovered in the cluster."""

    name: str
    namespace: str
    status: str = "Unknown"
    version: str = "Unknown"
    ready: str = ""
    source: ComponentSource

    @property
    def key(self) -> str:
        """Deduplication key."""
        return f"{self.namespace}/{self.name}"


class VersionFact(BaseModel):
    """Kubernetes server version."""

    major: int = 0
    minor: int = 0
    git_version: str = ""
    platform: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"
