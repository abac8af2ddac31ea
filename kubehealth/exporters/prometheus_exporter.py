"""Prometheus exposition-format exporter."""

import time
from pathlib import Path
from typing import List, Optional

from ..model.export import ExportBundle
from .base import Exporter


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


class PrometheusExporter(Exporter):
    """Export bundle metrics as gauges in the Prometheus text format."""

    extension = ".txt"
    dataset = "prometheus-metrics"

    @staticmethod
    def _preamble(lines: List[str], name: str, help_text: str):
        lines.append(f"# HELP {name} {help_text}")
        lines.append(f"# TYPE {name} gauge")

    def render(self, bundle: ExportBundle, timestamp: Optional[int] = None) -> str:
        """Render every populated metric category with one shared timestamp."""
        ts = int(time.time()) if timestamp is None else timestamp
        lines: List[str] = []

        cluster = bundle.cluster_metrics
        if cluster is not None:
            self._preamble(lines, "k8s_cluster_cpu_usage_percent", "Cluster CPU usage percentage")
            lines.append(f"k8s_cluster_cpu_usage_percent {cluster.cpu_usage_percent:.2f} {ts}")
            self._preamble(
                lines, "k8s_cluster_memory_usage_percent", "Cluster memory usage percentage"
            )
            lines.append(f"k8s_cluster_memory_usage_percent {cluster.memory_usage_percent:.2f} {ts}")
            self._preamble(lines, "k8s_cluster_nodes_total", "Total number of nodes")
            lines.append(f"k8s_cluster_nodes_total {cluster.nodes_count} {ts}")
            self._preamble(lines, "k8s_cluster_pods_total", "Total number of pods")
            lines.append(f"k8s_cluster_pods_total {cluster.pods_count} {ts}")

        if bundle.node_metrics:
            self._preamble(lines, "k8s_node_cpu_usage_percent", "Node CPU usage percentage")
            for node in bundle.node_metrics:
                lines.append(
                    f'k8s_node_cpu_usage_percent{{node="{_escape_label(node.name)}"}} '
                    f"{node.cpu_usage_percent:.2f} {ts}"
                )
            self._preamble(lines, "k8s_node_memory_usage_percent", "Node memory usage percentage")
            for node in bundle.node_metrics:
                lines.append(
                    f'k8s_node_memory_usage_percent{{node="{_escape_label(node.name)}"}} '
                    f"{node.memory_usage_percent:.2f} {ts}"
                )

        if bundle.pod_metrics:
            self._preamble(lines, "k8s_pod_restart_count", "Total container restarts of a pod")
            for pod in bundle.pod_metrics:
                lines.append(
                    f'k8s_pod_restart_count{{namespace="{_escape_label(pod.namespace)}",'
                    f'pod="{_escape_label(pod.name)}"}} {pod.restart_count} {ts}'
                )

        if bundle.cost_analysis is not None:
            self._preamble(lines, "k8s_cluster_monthly_cost_usd", "Estimated monthly cost in USD")
            lines.append(
                f"k8s_cluster_monthly_cost_usd {bundle.cost_analysis.total_monthly_cost:.2f} {ts}"
            )

        return "".join(f"{line}\n" for line in lines)

    def export(
        self, bundle: ExportBundle, filename: Optional[str] = None, timestamp: Optional[int] = None
    ) -> Path:
        """Write the metrics file and return its path."""
        path = self.target_path(self.dataset, filename)
        with self.open_file(path) as f:
            f.write(self.render(bundle, timestamp))
        return path
