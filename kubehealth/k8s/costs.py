"""Estimated cluster cost and rightsizing opportunities."""

from collections import defaultdict
from typing import Any, Dict, List, Optional

from ..model.export import (
    CostAnalysis,
    CostOptimization,
    NamespaceCost,
    NodeCost,
    NodeMetrics,
    ResourceUtilization,
    UnderutilizedResource,
)
from ..utils.formatting import format_bytes, format_cpu, parse_cpu_millis, parse_memory_bytes
from ..utils.logger import get_logger
from .client import K8sClient, K8sClientError
from .gatherer import GatherError
from .metrics import UNDERUTILIZED_PERCENT, MetricsCollector, pod_requests

logger = get_logger(__name__)

HOURS_PER_MONTH = 24 * 30

# Simplified on-demand hourly prices by instance type
NODE_HOURLY_COSTS: Dict[str, float] = {
    "t3.micro": 0.0104,
    "t3.small": 0.0208,
    "t3.medium": 0.0416,
    "t3.large": 0.0832,
    "t3.xlarge": 0.1664,
    "m5.large": 0.096,
    "m5.xlarge": 0.192,
    "c5.large": 0.085,
    "c5.xlarge": 0.17,
    "default": 0.10,
}

INSTANCE_TYPE_LABELS = ["node.kubernetes.io/instance-type", "beta.kubernetes.io/instance-type"]

SYSTEM_NAMESPACES = {"kube-system", "kube-public", "kube-node-lease"}

CPU_COST_PER_CORE = 20.0
MEMORY_COST_PER_GIB = 5.0

# Nodes below this CPU and memory usage are consolidation candidates
IDLE_NODE_PERCENT = 30
HIGH_COST_NAMESPACE = 100.0
RIGHTSIZING_SAVINGS_THRESHOLD = 50.0


def node_type(node: Dict[str, Any]) -> str:
    labels = node.get("metadata", {}).get("labels") or {}
    for label in INSTANCE_TYPE_LABELS:
        if label in labels:
            return labels[label]
    return "default"


def node_monthly_cost(instance_type: str) -> float:
    """Monthly price of an instance type; unknown types use the default price."""
    hourly = NODE_HOURLY_COSTS.get(instance_type, NODE_HOURLY_COSTS["default"])
    return hourly * HOURS_PER_MONTH


def efficiency(cpu_percent: float, memory_percent: float) -> str:
    average = (cpu_percent + memory_percent) / 2
    if average > 70:
        return "Excellent"
    if average > 50:
        return "Good"
    if average > 30:
        return "Fair"
    return "Poor"


def estimate_cost(cpu_millis: int, memory_bytes: int) -> float:
    """Monthly cost of an amount of requested CPU and memory."""
    return cpu_millis / 1000 * CPU_COST_PER_CORE + memory_bytes / 1024 ** 3 * MEMORY_COST_PER_GIB


def rightsizing_recommendation(cpu_percent: float, memory_percent: float) -> str:
    if cpu_percent < 10 and memory_percent < 10:
        return "Consider reducing requests by 50-70%"
    if cpu_percent < 20 and memory_percent < 20:
        return "Consider reducing requests by 30-50%"
    return "Consider reducing requests by 10-30%"


class CostCollector:
    """Prices nodes and namespaces and finds over-provisioned pods.

    Node prices come from a fixed table keyed by the instance-type label, so
    the figures are estimates rather than billing data.
    """

    def __init__(self, client: K8sClient, metrics: Optional[MetricsCollector] = None):
        self.client = client
        self.metrics = metrics or MetricsCollector(client)

    def _list(self, operation: str, resource_type: str, **kwargs) -> List[Dict[str, Any]]:
        try:
            return self.client.list_resources(resource_type, **kwargs)
        except K8sClientError as e:
            raise GatherError(operation, e) from e

    def get_cost_analysis(self) -> CostAnalysis:
        """Build the full cost analysis; utilization data is required."""
        nodes = self._list("nodes", "nodes")

        try:
            node_metrics = self.metrics.get_node_metrics()
        except GatherError as e:
            logger.info(f"Node costs computed without usage: {e}")
            node_metrics = []

        pods = self._list("pods", "pods", all_namespaces=True)
        namespaces = self._list("namespaces", "namespaces")

        node_costs = self.node_costs(nodes, node_metrics)
        namespace_costs = self.namespace_costs(namespaces, pods)
        underutilized = self.underutilized_resources(self.metrics.get_resource_utilization(), pods)

        return CostAnalysis(
            total_monthly_cost=sum(cost.monthly_cost for cost in node_costs),
            node_costs=node_costs,
            namespace_costs=namespace_costs,
            underutilized_resources=underutilized,
            cost_optimizations=self.optimizations(node_costs, namespace_costs, underutilized),
        )

    @staticmethod
    def node_costs(nodes: List[Dict[str, Any]], node_metrics: List[NodeMetrics]) -> List[NodeCost]:
        usage = {m.name: m for m in node_metrics}

        costs = []
        for node in nodes:
            name = node.get("metadata", {}).get("name", "")
            capacity = node.get("status", {}).get("capacity", {})
            instance_type = node_type(node)

            metric = usage.get(name)
            cpu_percent = metric.cpu_usage_percent if metric else 0.0
            mem_percent = metric.memory_usage_percent if metric else 0.0

            costs.append(
                NodeCost(
                    name=name,
                    type=instance_type,
                    monthly_cost=node_monthly_cost(instance_type),
                    cpu_capacity=format_cpu(parse_cpu_millis(capacity.get("cpu"))),
                    memory_capacity=format_bytes(parse_memory_bytes(capacity.get("memory"))),
                    cpu_utilization=cpu_percent,
                    memory_utilization=mem_percent,
                    efficiency=efficiency(cpu_percent, mem_percent) if metric else "No metrics",
                )
            )

        return costs

    @staticmethod
    def namespace_costs(
        namespaces: List[Dict[str, Any]], pods: List[Dict[str, Any]]
    ) -> List[NamespaceCost]:
        """Cost of requested resources per user namespace, most expensive first."""
        by_namespace = defaultdict(list)
        for pod in pods:
            by_namespace[pod.get("metadata", {}).get("namespace", "")].append(pod)

        costs = []
        for namespace in namespaces:
            name = namespace.get("metadata", {}).get("name", "")
            if name in SYSTEM_NAMESPACES:
                continue

            ns_pods = by_namespace.get(name, [])
            cpu_requests = 0
            mem_requests = 0
            for pod in ns_pods:
                cpu, memory = pod_requests(pod)
                cpu_requests += cpu
                mem_requests += memory

            monthly_cost = estimate_cost(cpu_requests, mem_requests)
            costs.append(
                NamespaceCost(
                    name=name,
                    monthly_cost=monthly_cost,
                    cpu_requests=format_cpu(cpu_requests),
                    memory_requests=format_bytes(mem_requests),
                    pods_count=len(ns_pods),
                    cost_per_pod=monthly_cost / len(ns_pods) if ns_pods else 0.0,
                )
            )

        costs.sort(key=lambda c: c.monthly_cost, reverse=True)
        return costs

    @staticmethod
    def underutilized_resources(
        utilizations: List[ResourceUtilization], pods: List[Dict[str, Any]]
    ) -> List[UnderutilizedResource]:
        """Pods using under a fifth of their CPU or memory requests, biggest savings first."""
        pods_by_key = {}
        for pod in pods:
            metadata = pod.get("metadata", {})
            pods_by_key[(metadata.get("namespace"), metadata.get("name"))] = pod

        resources = []
        for util in utilizations:
            if (
                util.cpu_utilization >= UNDERUTILIZED_PERCENT
                and util.memory_utilization >= UNDERUTILIZED_PERCENT
            ):
                continue

            pod = pods_by_key.get((util.namespace, util.name))
            if pod is None:
                continue

            cpu_requests, mem_requests = pod_requests(pod)
            cpu_waste = int(cpu_requests * (100 - util.cpu_utilization) / 100)
            mem_waste = int(mem_requests * (100 - util.memory_utilization) / 100)

            resources.append(
                UnderutilizedResource(
                    type="Pod",
                    name=util.name,
                    namespace=util.namespace,
                    cpu_waste=format_cpu(cpu_waste),
                    memory_waste=format_bytes(mem_waste),
                    estimated_savings=estimate_cost(cpu_waste, mem_waste),
                    recommendation=rightsizing_recommendation(
                        util.cpu_utilization, util.memory_utilization
                    ),
                )
            )

        resources.sort(key=lambda r: r.estimated_savings, reverse=True)
        return resources

    @staticmethod
    def optimizations(
        node_costs: List[NodeCost],
        namespace_costs: List[NamespaceCost],
        underutilized: List[UnderutilizedResource],
    ) -> List[CostOptimization]:
        optimizations = []

        wasted = sum(r.estimated_savings for r in underutilized)
        if wasted > RIGHTSIZING_SAVINGS_THRESHOLD:
            optimizations.append(
                CostOptimization(
                    type="Resource Rightsizing",
                    description=f"Reduce resource requests for {len(underutilized)} underutilized workloads",
                    potential_savings=wasted,
                    priority="High",
                    action="Review and adjust CPU/Memory requests for underutilized pods",
                )
            )

        idle_nodes = [
            n
            for n in node_costs
            if n.cpu_utilization < IDLE_NODE_PERCENT and n.memory_utilization < IDLE_NODE_PERCENT
        ]
        if idle_nodes and len(node_costs) > 1:
            optimizations.append(
                CostOptimization(
                    type="Node Consolidation",
                    description=f"Consolidate workloads from {len(idle_nodes)} underutilized nodes",
                    potential_savings=sum(n.monthly_cost * 0.7 for n in idle_nodes),
                    priority="Medium",
                    action="Consider using node affinity to consolidate workloads",
                )
            )

        expensive = sum(1 for ns in namespace_costs if ns.monthly_cost > HIGH_COST_NAMESPACE)
        if expensive:
            optimizations.append(
                CostOptimization(
                    type="Namespace Optimization",
                    description=f"Review resource allocation in {expensive} high-cost namespaces",
                    priority="Medium",
                    action="Implement resource quotas and limits in expensive namespaces",
                )
            )

        optimizations.append(
            CostOptimization(
                type="Monitoring",
                description="Set up cost monitoring and alerting",
                priority="Low",
                action="Implement resource usage monitoring and cost alerts",
            )
        )
        return optimizations
