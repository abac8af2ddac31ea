"""Recommendation analyzer."""

from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from ..model.facts import ClusterSummaryFact, ComponentFact, NodeFact, NodeStatus, PodFact, VersionFact
from ..model.recommendation import AnalysisResult, Recommendation, RuleGroupResult, Severity
from ..utils.logger import get_logger

logger = get_logger(__name__)

MIN_NODE_COUNT = 3
MAX_PODS_PER_NODE = 50
MAX_NODE_AGE_DAYS = 365
MAX_POD_RESTARTS = 10
MAX_TERMINATING_PODS = 5
OUTDATED_MINOR_VERSION = 25
CURRENT_MINOR_VERSION = 27

CATEGORY_PRIORITY = [
    "Security",
    "Availability",
    "Resource",
    "Node",
    "Workload",
    "Component",
    "Monitoring",
    "Stability",
    "Resource Management",
    "Maintenance",
]


def analyze_topology(summary: ClusterSummaryFact) -> List[Recommendation]:
    """Node count and pod density."""
    recommendations = []

    if summary.total_nodes < MIN_NODE_COUNT:
        recommendations.append(
            Recommendation(
                type="Availability",
                severity=Severity.MEDIUM,
                title="Low Node Count",
                description=(
                    f"Cluster has only {summary.total_nodes} nodes, "
                    "which may impact high availability."
                ),
                action="Consider adding more nodes for better fault tolerance.",
            )
        )

    if summary.total_pods > summary.total_nodes * MAX_PODS_PER_NODE:
        if summary.total_nodes:
            density = f"avg {summary.total_pods / summary.total_nodes:.1f} pods/node"
        else:
            density = "no schedulable nodes"
        recommendations.append(
            Recommendation(
                type="Resource",
                severity=Severity.MEDIUM,
                title="High Pod Density",
                description=(
                    f"Cluster has {summary.total_pods} pods across "
                    f"{summary.total_nodes} nodes ({density})."
                ),
                action="Consider adding more nodes to reduce pod density and improve performance.",
            )
        )

    return recommendations


def _age_in_days(age: str) -> Optional[int]:
    if not age.endswith("d"):
        return None
    try:
        return int(age[:-1])
    except ValueError:
        return None


def analyze_nodes(nodes: List[NodeFact]) -> List[Recommendation]:
    """Readiness and age of nodes."""
    recommendations = []

    not_ready = sum(1 for node in nodes if node.status != NodeStatus.READY)
    old = 0
    for node in nodes:
        days = _age_in_days(node.age)
        if days is not None and days > MAX_NODE_AGE_DAYS:
            old += 1

    if not_ready > 0:
        recommendations.append(
            Recommendation(
                type="Availability",
                severity=Severity.HIGH,
                title="Nodes Not Ready",
                description=f"{not_ready} nodes are not in Ready state.",
                action="Investigate and fix the nodes that are not ready.",
            )
        )

    if old > 0:
        recommendations.append(
            Recommendation(
                type="Maintenance",
                severity=Severity.LOW,
                title="Old Nodes Detected",
                description=f"{old} nodes are over 1 year old.",
                action="Consider refreshing old nodes for better performance and security.",
            )
        )

    return recommendations


def analyze_pods(pods: List[PodFact]) -> List[Recommendation]:
    """Failed, crash-looping and stuck-terminating pods."""
    recommendations = []

    failed = 0
    high_restarts = 0
    terminating = 0

    for pod in pods:
        phase = pod.phase.lower()
        if "failed" in phase or "error" in phase:
            failed += 1
        if "terminating" in phase:
            terminating += 1
        if pod.restarts > MAX_POD_RESTARTS:
            high_restarts += 1

    if failed > 0:
        recommendations.append(
            Recommendation(
                type="Workload",
                severity=Severity.MEDIUM,
                title="Failed Pods Detected",
                description=f"{failed} pods are in failed state.",
                action="Investigate and fix failed pods, check logs for root cause.",
            )
        )

    if high_restarts > 0:
        recommendations.append(
            Recommendation(
                type="Stability",
                severity=Severity.MEDIUM,
                title="High Restart Count Pods",
                description=f"{high_restarts} pods have more than {MAX_POD_RESTARTS} restarts.",
                action="Investigate pods with high restart counts for stability issues.",
            )
        )

    if terminating > MAX_TERMINATING_PODS:
        recommendations.append(
            Recommendation(
                type="Workload",
                severity=Severity.LOW,
                title="Many Terminating Pods",
                description=f"{terminating} pods are stuck in terminating state.",
                action="Check for stuck terminating pods and force delete if necessary.",
            )
        )

    return recommendations


def analyze_components(components: List[ComponentFact]) -> List[Recommendation]:
    """Presence of metrics-server and component readiness."""
    recommendations = []

    has_metrics_server = any("metrics-server" in c.name.lower() for c in components)
    not_ready = sum(1 for c in components if "not ready" in c.status.lower())

    if not has_metrics_server:
        recommendations.append(
            Recommendation(
                type="Monitoring",
                severity=Severity.MEDIUM,
                title="Metrics Server Not Found",
                description="Metrics server is not detected in the cluster.",
                action="Install metrics-server for resource monitoring capabilities.",
                link="https://github.com/kubernetes-sigs/metrics-server",
            )
        )

    if not_ready > 0:
        recommendations.append(
            Recommendation(
                type="Component",
                severity=Severity.MEDIUM,
                title="Components Not Ready",
                description=f"{not_ready} components are not in ready state.",
                action="Check and fix components that are not ready.",
            )
        )

    return recommendations


def analyze_version(version: VersionFact) -> List[Recommendation]:
    """Kubernetes version support window."""
    if version.major != 1:
        return []

    if version.minor < OUTDATED_MINOR_VERSION:
        return [
            Recommendation(
                type="Security",
                severity=Severity.HIGH,
                title="Outdated Kubernetes Version",
                description=(
                    f"Kubernetes version {version} is outdated "
                    "and may have security vulnerabilities."
                ),
                action=f"Plan to upgrade to a supported Kubernetes version (1.{OUTDATED_MINOR_VERSION}+).",
                link="https://kubernetes.io/releases/",
            )
        ]

    if version.minor < CURRENT_MINOR_VERSION:
        return [
            Recommendation(
                type="Maintenance",
                severity=Severity.LOW,
                title="Consider Version Upgrade",
                description=f"Kubernetes version {version} could be updated to get latest features.",
                action="Consider upgrading to a newer version for better features and support.",
            )
        ]

    return []


class RecommendationAnalyzer:
    """Runs every rule group against freshly gathered facts.

    The gatherer must provide ``get_cluster_summary``, ``get_nodes``,
    ``get_pods``, ``get_components`` and ``get_version``. A rule group whose
    facts cannot be gathered, or whose evaluation raises, is recorded as failed
    and contributes no recommendations; the remaining groups still run.
    """

    def __init__(self, gatherer):
        self.gatherer = gatherer

    def rule_groups(self) -> Dict[str, Callable[[], List[Recommendation]]]:
        """Rule groups in evaluation order."""
        return OrderedDict(
            [
                ("topology", lambda: analyze_topology(self.gatherer.get_cluster_summary())),
                ("nodes", lambda: analyze_nodes(self.gatherer.get_nodes())),
                ("pods", lambda: analyze_pods(self.gatherer.get_pods())),
                ("components", lambda: analyze_components(self.gatherer.get_components())),
                ("version", lambda: analyze_version(self.gatherer.get_version())),
            ]
        )

    def analyze(self) -> AnalysisResult:
        """Analyze the cluster and collect recommendations from every group."""
        logger.info("Analyzing cluster for recommendations")
        result = AnalysisResult()

        for name, evaluate in self.rule_groups().items():
            try:
                recommendations = evaluate()
            except Exception as e:
                logger.warning(f"Rule group '{name}' skipped: {e}")
                result.groups.append(RuleGroupResult(group=name, error=str(e)))
                continue

            logger.debug(f"Rule group '{name}' produced {len(recommendations)} recommendations")
            result.groups.append(RuleGroupResult(group=name, recommendations=recommendations))

        logger.info(f"Analysis complete. Found {len(result.recommendations)} recommendations")
        return result


def filter_recommendations(
    recommendations: List[Recommendation],
    severity: Optional[str] = None,
    rec_type: Optional[str] = None,
) -> List[Recommendation]:
    """Keep recommendations matching a severity and/or type, case-insensitively."""
    filtered = []
    for rec in recommendations:
        if severity and rec.severity.value.lower() != severity.lower():
            continue
        if rec_type and rec.type.lower() != rec_type.lower():
            continue
        filtered.append(rec)
    return filtered


def group_by_category(recommendations: List[Recommendation]) -> Dict[str, List[Recommendation]]:
    """Group recommendations by type, known categories first."""
    categories: Dict[str, List[Recommendation]] = OrderedDict()
    for rec in recommendations:
        categories.setdefault(rec.type, []).append(rec)

    ordered: Dict[str, List[Recommendation]] = OrderedDict()
    for category in CATEGORY_PRIORITY:
        if category in categories:
            ordered[category] = categories.pop(category)
    ordered.update(categories)
    return ordered
