"""CSV exporter."""

import csv
from pathlib import Path
from typing import Iterable, List, Optional

from ..model.export import ClusterEvent, CostAnalysis, NodeMetrics, PodMetrics, ResourceUtilization
from ..utils.formatting import format_rfc3339
from .base import Exporter

NODE_METRICS_HEADERS = [
    "Node", "Status", "CPU_Usage", "CPU_Usage_Percent", "Memory_Usage",
    "Memory_Usage_Percent", "CPU_Capacity", "Memory_Capacity",
]

POD_METRICS_HEADERS = [
    "Pod", "Namespace", "Node", "CPU_Usage", "Memory_Usage",
    "CPU_Requests", "Memory_Requests", "CPU_Limits", "Memory_Limits", "Restart_Count",
]

NODE_COST_HEADERS = [
    "Node", "Type", "Monthly_Cost", "CPU_Capacity", "Memory_Capacity",
    "CPU_Utilization", "Memory_Utilization", "Efficiency",
]

NAMESPACE_COST_HEADERS = [
    "Namespace", "Monthly_Cost", "Pods_Count", "Cost_Per_Pod",
    "CPU_Requests", "Memory_Requests",
]

UTILIZATION_HEADERS = [
    "Type", "Name", "Namespace", "CPU_Utilization", "Memory_Utilization", "Recommendation",
]

EVENT_HEADERS = [
    "Timestamp", "Type", "Severity", "Reason", "Object", "Namespace",
    "Message", "Count", "Component",
]


def _decimal(value: float) -> str:
    return f"{value:.2f}"


class CsvExporter(Exporter):
    """Export one dataset per CSV file."""

    extension = ".csv"

    def _write(self, dataset: str, filename: Optional[str], rows: Iterable[List[str]]) -> Path:
        path = self.target_path(dataset, filename)
        with self.open_file(path) as f:
            writer = csv.writer(f, lineterminator="\n")
            for row in rows:
                writer.writerow(row)
        return path

    def export_node_metrics(self, metrics: List[NodeMetrics], filename: Optional[str] = None) -> Path:
        rows = [NODE_METRICS_HEADERS]
        for m in metrics:
            rows.append(
                [
                    m.name,
                    m.status,
                    m.cpu_usage,
                    _decimal(m.cpu_usage_percent),
                    m.memory_usage,
                    _decimal(m.memory_usage_percent),
                    m.cpu_capacity,
                    m.memory_capacity,
                ]
            )
        return self._write("node-metrics", filename, rows)

    def export_pod_metrics(self, metrics: List[PodMetrics], filename: Optional[str] = None) -> Path:
        rows = [POD_METRICS_HEADERS]
        for m in metrics:
            rows.append(
                [
                    m.name,
                    m.namespace,
                    m.node,
                    m.cpu_usage,
                    m.memory_usage,
                    m.cpu_requests,
                    m.memory_requests,
                    m.cpu_limits,
                    m.memory_limits,
                    str(m.restart_count),
                ]
            )
        return self._write("pod-metrics", filename, rows)

    def export_cost_analysis(self, analysis: CostAnalysis, filename: Optional[str] = None) -> Path:
        """Node costs and namespace costs as two titled tables."""
        rows = [["=== NODE COSTS ==="], NODE_COST_HEADERS]
        for node in analysis.node_costs:
            rows.append(
                [
                    node.name,
                    node.type,
                    _decimal(node.monthly_cost),
                    node.cpu_capacity,
                    node.memory_capacity,
                    _decimal(node.cpu_utilization),
                    _decimal(node.memory_utilization),
                    node.efficiency,
                ]
            )

        # An empty row is written as a bare blank line
        rows.extend([[], ["=== NAMESPACE COSTS ==="], NAMESPACE_COST_HEADERS])
        for ns in analysis.namespace_costs:
            rows.append(
                [
                    ns.name,
                    _decimal(ns.monthly_cost),
                    str(ns.pods_count),
                    _decimal(ns.cost_per_pod),
                    ns.cpu_requests,
                    ns.memory_requests,
                ]
            )
        return self._write("cost-analysis", filename, rows)

    def export_utilization(
        self, utilizations: List[ResourceUtilization], filename: Optional[str] = None
    ) -> Path:
        rows = [UTILIZATION_HEADERS]
        for u in utilizations:
            rows.append(
                [
                    u.type,
                    u.name,
                    u.namespace,
                    _decimal(u.cpu_utilization),
                    _decimal(u.memory_utilization),
                    u.recommendation,
                ]
            )
        return self._write("resource-utilization", filename, rows)

    def export_events(self, events: List[ClusterEvent], filename: Optional[str] = None) -> Path:
        rows = [EVENT_HEADERS]
        for event in events:
            rows.append(
                [
                    format_rfc3339(event.last_time),
                    event.type,
                    event.severity,
                    event.reason,
                    event.object,
                    event.namespace,
                    event.message,
                    str(event.count),
                    event.component,
                ]
            )
        return self._write("cluster-events", filename, rows)
