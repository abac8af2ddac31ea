"""Data models for kube-health."""

from .facts import (
    ClusterSummaryFact,
    ComponentFact,
    ComponentSource,
    NodeFact,
    NodeStatus,
    PodFact,
    VersionFact,
)
from .export import ExportBundle, ExportFormat
from .recommendation import AnalysisResult, Recommendation, RuleGroupResult, Severity

__all__ = [
    "ClusterSummaryFact",
    "ComponentFact",
    "ComponentSource",
    "NodeFact",
    "NodeStatus",
    "PodFact",
    "VersionFact",
    "ExportBundle",
    "ExportFormat",
    "AnalysisResult",
    "Recommendation",
    "RuleGroupResult",
    "Severity",
]
