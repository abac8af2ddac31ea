"""Resource usage from the metrics.k8s.io API."""

from typing import Any, Dict, List, Optional

from ..model.export import ClusterMetrics, NodeMetrics, PodMetrics, ResourceUtilization
from ..utils.formatting import format_bytes, format_cpu, parse_cpu_millis, parse_memory_bytes
from ..utils.logger import get_logger
from .client import K8sClient, K8sClientError
from .gatherer import GatherError, node_status, total_restarts

logger = get_logger(__name__)

METRICS_API = "/apis/metrics.k8s.io/v1beta1"

# Usage against requests, in percent
UNDERUTILIZED_PERCENT = 20
OVERUTILIZED_PERCENT = 90


def _percent(used: int, capacity: int) -> float:
    if capacity <= 0:
        return 0.0
    return used * 100 / capacity


def container_totals(containers: List[Dict[str, Any]], field: str) -> tuple:
    """Sum CPU millis and memory bytes of one resource field across containers."""
    cpu = 0
    memory = 0
    for container in containers:
        values = container.get("resources", {}).get(field) or {}
        cpu += parse_cpu_millis(values.get("cpu"))
        memory += parse_memory_bytes(values.get("memory"))
    return cpu, memory


def pod_requests(pod: Dict[str, Any]) -> tuple:
    """CPU millis and memory bytes requested by a pod."""
    return container_totals(pod.get("spec", {}).get("containers", []), "requests")


def pod_usage(item: Dict[str, Any]) -> tuple:
    """CPU millis and memory bytes used by a pod metrics item."""
    cpu = 0
    memory = 0
    for container in item.get("containers", []):
        usage = container.get("usage", {})
        cpu += parse_cpu_millis(usage.get("cpu"))
        memory += parse_memory_bytes(usage.get("memory"))
    return cpu, memory


def usage_recommendation(cpu_percent: float, memory_percent: float) -> str:
    if cpu_percent < UNDERUTILIZED_PERCENT and memory_percent < UNDERUTILIZED_PERCENT:
        return "Consider reducing resource requests - underutilized"
    if cpu_percent > OVERUTILIZED_PERCENT or memory_percent > OVERUTILIZED_PERCENT:
        return "Consider increasing resource requests - overutilized"
    return "Resource allocation looks good"


class MetricsCollector:
    """Combines live usage with node capacity and pod specs."""

    def __init__(self, client: K8sClient):
        self.client = client

    def _raw_items(self, operation: str, path: str) -> List[Dict[str, Any]]:
        try:
            return self.client.get_raw(path).get("items", [])
        except K8sClientError as e:
            raise GatherError(operation, e) from e

    def _list(self, operation: str, resource_type: str, **kwargs) -> List[Dict[str, Any]]:
        try:
            return self.client.list_resources(resource_type, **kwargs)
        except K8sClientError as e:
            raise GatherError(operation, e) from e

    def get_node_metrics(self) -> List[NodeMetrics]:
        """Usage and capacity per node that reports metrics."""
        usage_items = self._raw_items("node metrics", f"{METRICS_API}/nodes")
        nodes = {n.get("metadata", {}).get("name"): n for n in self._list("nodes", "nodes")}

        metrics = []
        for item in usage_items:
            name = item.get("metadata", {}).get("name")
            node = nodes.get(name)
            if node is None:
                continue

            usage = item.get("usage", {})
            capacity = node.get("status", {}).get("capacity", {})

            cpu_used = parse_cpu_millis(usage.get("cpu"))
            mem_used = parse_memory_bytes(usage.get("memory"))
            cpu_capacity = parse_cpu_millis(capacity.get("cpu"))
            mem_capacity = parse_memory_bytes(capacity.get("memory"))

            metrics.append(
                NodeMetrics(
                    name=name,
                    status=node_status(node).value,
                    cpu_usage=format_cpu(cpu_used),
                    cpu_usage_percent=_percent(cpu_used, cpu_capacity),
                    memory_usage=format_bytes(mem_used),
                    memory_usage_percent=_percent(mem_used, mem_capacity),
                    cpu_capacity=format_cpu(cpu_capacity),
                    memory_capacity=format_bytes(mem_capacity),
                )
            )

        return metrics

    def get_pod_metrics(self, namespace: Optional[str] = None) -> List[PodMetrics]:
        """Usage, requests and limits per pod that reports metrics."""
        if namespace:
            path = f"{METRICS_API}/namespaces/{namespace}/pods"
        else:
            path = f"{METRICS_API}/pods"
        usage_items = self._raw_items("pod metrics", path)

        pods = {}
        for pod in self._list("pods", "pods", namespace=namespace, all_namespaces=not namespace):
            metadata = pod.get("metadata", {})
            pods[(metadata.get("namespace"), metadata.get("name"))] = pod

        metrics = []
        for item in usage_items:
            metadata = item.get("metadata", {})
            pod = pods.get((metadata.get("namespace"), metadata.get("name")))
            if pod is None:
                continue

            cpu_used, mem_used = pod_usage(item)

            spec_containers = pod.get("spec", {}).get("containers", [])
            cpu_requests, mem_requests = container_totals(spec_containers, "requests")
            cpu_limits, mem_limits = container_totals(spec_containers, "limits")

            metrics.append(
                PodMetrics(
                    name=metadata.get("name", ""),
                    namespace=metadata.get("namespace", ""),
                    node=pod.get("spec", {}).get("nodeName", ""),
                    cpu_usage=format_cpu(cpu_used),
                    memory_usage=format_bytes(mem_used),
                    cpu_requests=format_cpu(cpu_requests),
                    memory_requests=format_bytes(mem_requests),
                    cpu_limits=format_cpu(cpu_limits),
                    memory_limits=format_bytes(mem_limits),
                    restart_count=total_restarts(pod),
                )
            )

        return metrics

    def get_cluster_metrics(self) -> ClusterMetrics:
        """Cluster-wide usage against total node capacity."""
        usage_items = self._raw_items("node metrics", f"{METRICS_API}/nodes")
        nodes = self._list("nodes", "nodes")
        pods = self._list("pods", "pods", all_namespaces=True)
        namespaces = self._list("namespaces", "namespaces")

        cpu_used = sum(parse_cpu_millis(i.get("usage", {}).get("cpu")) for i in usage_items)
        mem_used = sum(parse_memory_bytes(i.get("usage", {}).get("memory")) for i in usage_items)

        cpu_capacity = 0
        mem_capacity = 0
        for node in nodes:
            capacity = node.get("status", {}).get("capacity", {})
            cpu_capacity += parse_cpu_millis(capacity.get("cpu"))
            mem_capacity += parse_memory_bytes(capacity.get("memory"))

        return ClusterMetrics(
            total_cpu_usage=format_cpu(cpu_used),
            total_memory_usage=format_bytes(mem_used),
            total_cpu_capacity=format_cpu(cpu_capacity),
            total_memory_capacity=format_bytes(mem_capacity),
            cpu_usage_percent=_percent(cpu_used, cpu_capacity),
            memory_usage_percent=_percent(mem_used, mem_capacity),
            nodes_count=len(nodes),
            pods_count=len(pods),
            namespaces_count=len(namespaces),
        )

    def get_resource_utilization(self) -> List[ResourceUtilization]:
        """Pod usage as a share of requested resources, across all namespaces."""
        usage_items = self._raw_items("pod metrics", f"{METRICS_API}/pods")

        pods = {}
        for pod in self._list("pods", "pods", all_namespaces=True):
            metadata = pod.get("metadata", {})
            pods[(metadata.get("namespace"), metadata.get("name"))] = pod

        utilizations = []
        for item in usage_items:
            metadata = item.get("metadata", {})
            pod = pods.get((metadata.get("namespace"), metadata.get("name")))
            if pod is None:
                continue

            cpu_used, mem_used = pod_usage(item)
            cpu_requests, mem_requests = pod_requests(pod)
            cpu_percent = _percent(cpu_used, cpu_requests)
            mem_percent = _percent(mem_used, mem_requests)

            utilizations.append(
                ResourceUtilization(
                    type="Pod",
                    name=metadata.get("name", ""),
                    namespace=metadata.get("namespace", ""),
                    cpu_utilization=cpu_percent,
                    memory_utilization=mem_percent,
                    recommendation=usage_recommendation(cpu_percent, mem_percent),
                )
            )

        return utilizations
