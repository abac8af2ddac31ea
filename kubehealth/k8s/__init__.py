"""Kubernetes interaction module."""

from .client import K8sClient, K8sClientError
from .gatherer import ClusterFactGatherer, GatherError
from .metrics import MetricsCollector
from .events import EventCollector
from .costs import CostCollector

__all__ = [
    "K8sClient",
    "K8sClientError",
    "ClusterFactGatherer",
    "GatherError",
    "MetricsCollector",
    "EventCollector",
    "CostCollector",
]
