"""Cluster fact gathering."""

from typing import Any, Dict, List, Optional

from ..core.components import resolve_components
from ..model.facts import (
    ClusterSummaryFact,
    ComponentFact,
    ComponentSource,
    NodeFact,
    NodeStatus,
    PodFact,
    VersionFact,
)
from ..utils.formatting import (
    age_since,
    extract_roles,
    extract_version_from_image,
    format_bytes,
    format_cores,
    parse_cpu_millis,
    parse_int,
    parse_memory_bytes,
    parse_timestamp,
)
from ..utils.logger import get_logger
from .client import K8sClient, K8sClientError
from .helm import HelmReleaseInspector

logger = get_logger(__name__)


class GatherError(RuntimeError):
    """A cluster query failed; names the resource kind that was being fetched."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"failed to get {operation}: {cause}")


def node_status(node: Dict[str, Any]) -> NodeStatus:
    """Ready unless the Ready condition reports anything but True."""
    for condition in node.get("status", {}).get("conditions", []):
        if condition.get("type") == "Ready" and condition.get("status") != "True":
            return NodeStatus.NOT_READY
    return NodeStatus.READY


def total_restarts(pod: Dict[str, Any]) -> int:
    """Sum of restart counts across container statuses."""
    statuses = pod.get("status", {}).get("containerStatuses") or []
    return sum(int(status.get("restartCount", 0)) for status in statuses)


def main_container_image(workload: Dict[str, Any]) -> str:
    containers = workload.get("spec", {}).get("template", {}).get("spec", {}).get("containers") or []
    if containers:
        return containers[0].get("image", "")
    return ""


class ClusterFactGatherer:
    """Queries the cluster for nodes, pods, components and version facts."""

    # Namespaces that never host interesting components
    SKIP_NAMESPACES = {"kube-node-lease", "kube-public"}

    # Workload name fragments that identify well-known components
    COMMON_COMPONENTS = [
        "metrics-server", "argocd", "argo", "kuma", "istio", "traefik",
        "nginx", "cert-manager", "prometheus", "grafana", "jaeger",
        "kiali", "fluentd", "elasticsearch", "kibana", "vault",
        "consul", "etcd", "redis", "postgres", "mysql", "mongodb",
        "kafka", "zookeeper", "rabbitmq", "jenkins", "sonarqube",
        "nexus", "harbor", "docker-registry", "ingress", "gateway",
    ]

    # kind -> (source, ready field, desired field)
    WORKLOAD_KINDS = {
        "deployments": (ComponentSource.DEPLOYMENT, "readyReplicas", "replicas"),
        "statefulsets": (ComponentSource.STATEFULSET, "readyReplicas", "replicas"),
        "daemonsets": (ComponentSource.DAEMONSET, "numberReady", "desiredNumberScheduled"),
    }

    def __init__(self, client: K8sClient):
        self.client = client
        self.helm = HelmReleaseInspector(client)

    def _list(self, operation: str, resource_type: str, **kwargs) -> List[Dict[str, Any]]:
        try:
            return self.client.list_resources(resource_type, **kwargs)
        except K8sClientError as e:
            raise GatherError(operation, e) from e

    def get_nodes(self) -> List[NodeFact]:
        """Get a fact per node."""
        nodes = self._list("nodes", "nodes")

        facts = []
        for node in nodes:
            metadata = node.get("metadata", {})
            status = node.get("status", {})
            capacity = status.get("capacity", {})

            facts.append(
                NodeFact(
                    name=metadata.get("name", ""),
                    status=node_status(node),
                    roles=extract_roles(metadata.get("labels")),
                    age=age_since(parse_timestamp(metadata.get("creationTimestamp"))),
                    version=status.get("nodeInfo", {}).get("kubeletVersion", ""),
                    internal_ip=self._internal_ip(status),
                    cpu_capacity=str(capacity.get("cpu", "")),
                    memory_capacity=format_bytes(parse_memory_bytes(capacity.get("memory"))),
                )
            )

        logger.debug(f"Gathered {len(facts)} nodes")
        return facts

    @staticmethod
    def _internal_ip(status: Dict[str, Any]) -> str:
        for address in status.get("addresses", []):
            if address.get("type") == "InternalIP":
                return address.get("address", "N/A")
        return "N/A"

    def get_pods(self, namespace: Optional[str] = None) -> List[PodFact]:
        """Get a fact per pod, in one namespace or across all of them."""
        pods = self._list("pods", "pods", namespace=namespace, all_namespaces=not namespace)

        facts = []
        for pod in pods:
            metadata = pod.get("metadata", {})
            phase = pod.get("status", {}).get("phase", "Unknown")
            if metadata.get("deletionTimestamp"):
                phase = "Terminating"

            facts.append(
                PodFact(
                    name=metadata.get("name", ""),
                    namespace=metadata.get("namespace", ""),
                    phase=phase,
                    restarts=total_restarts(pod),
                    age=age_since(parse_timestamp(metadata.get("creationTimestamp"))),
                    node=pod.get("spec", {}).get("nodeName", ""),
                )
            )

        logger.debug(f"Gathered {len(facts)} pods")
        return facts

    def get_cluster_summary(self) -> ClusterSummaryFact:
        """Count nodes and pods and total the node capacity."""
        nodes = self._list("nodes", "nodes")
        pods = self._list("pods", "pods", all_namespaces=True)

        total_cpu = 0
        total_memory = 0
        for node in nodes:
            capacity = node.get("status", {}).get("capacity", {})
            total_cpu += parse_cpu_millis(capacity.get("cpu"))
            total_memory += parse_memory_bytes(capacity.get("memory"))

        return ClusterSummaryFact(
            total_nodes=len(nodes),
            total_pods=len(pods),
            total_cpu_capacity=format_cores(total_cpu),
            total_memory_capacity=format_bytes(total_memory),
        )

    def get_version(self) -> VersionFact:
        """Get the server version."""
        try:
            data = self.client.get_version()
        except K8sClientError as e:
            raise GatherError("server version", e) from e

        server = data.get("serverVersion")
        if not server:
            raise GatherError("server version", K8sClientError("no server version reported"))

        return VersionFact(
            major=parse_int(server.get("major")),
            minor=parse_int(server.get("minor")),
            git_version=server.get("gitVersion", ""),
            platform=server.get("platform"),
        )

    def get_components(self) -> List[ComponentFact]:
        """Get installed components from Helm releases and workloads."""
        components: List[ComponentFact] = []
        errors: List[Exception] = []

        try:
            components.extend(self.helm.get_components())
        except K8sClientError as e:
            logger.warning(f"Skipping Helm release discovery: {e}")
            errors.append(e)

        try:
            components.extend(self._get_workload_components())
        except GatherError as e:
            logger.warning(f"Skipping workload component discovery: {e}")
            errors.append(e)

        if len(errors) == 2:
            raise GatherError("components", errors[-1]) from errors[-1]

        return resolve_components(components)

    def _get_workload_components(self) -> List[ComponentFact]:
        namespaces = self._list("namespaces", "namespaces")

        components = []
        for namespace in namespaces:
            ns_name = namespace.get("metadata", {}).get("name", "")
            if ns_name in self.SKIP_NAMESPACES:
                continue

            for kind, (source, ready_field, desired_field) in self.WORKLOAD_KINDS.items():
                try:
                    workloads = self.client.list_resources(kind, namespace=ns_name)
                except K8sClientError as e:
                    logger.debug(f"Could not list {kind} in {ns_name}: {e}")
                    continue

                for workload in workloads:
                    component = self._workload_component(
                        workload, source, ready_field, desired_field
                    )
                    if component:
                        components.append(component)

        return components

    def _workload_component(
        self, workload: Dict[str, Any], source: ComponentSource, ready_field: str, desired_field: str
    ) -> Optional[ComponentFact]:
        metadata = workload.get("metadata", {})
        name = metadata.get("name", "")
        if not self.is_interesting_component(name):
            return None

        status = workload.get("status", {})
        ready = int(status.get(ready_field, 0) or 0)
        desired = int(status.get(desired_field, 0) or 0)

        image = main_container_image(workload)

        return ComponentFact(
            name=name,
            namespace=metadata.get("namespace", ""),
            status="Running" if ready > 0 else "Not Ready",
            version=extract_version_from_image(image) if image else "Unknown",
            ready=f"{ready}/{desired}",
            source=source,
        )

    def is_interesting_component(self, name: str) -> bool:
        name = name.lower()
        return any(component in name for component in self.COMMON_COMPONENTS)
