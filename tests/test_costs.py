"""Test cost estimation and rightsizing analysis."""

import pytest

from conftest import make_node, make_pod
from kubehealth.k8s.client import K8sClientError
from kubehealth.k8s.costs import (
    CostCollector,
    efficiency,
    estimate_cost,
    node_monthly_cost,
    node_type,
    rightsizing_recommendation,
)
from kubehealth.k8s.gatherer import GatherError
from kubehealth.model.export import NamespaceCost, NodeCost, UnderutilizedResource


class TestCostHelpers:
    def test_node_type_from_labels(self):
        assert node_type(make_node("a", labels={"node.kubernetes.io/instance-type": "m5.large"})) == "m5.large"
        assert node_type(make_node("b", labels={"beta.kubernetes.io/instance-type": "t3.small"})) == "t3.small"
        assert node_type(make_node("c")) == "default"

    def test_node_monthly_cost(self):
        assert node_monthly_cost("m5.large") == pytest.approx(69.12)
        assert node_monthly_cost("z9.huge") == pytest.approx(72.0)

    @pytest.mark.parametrize(
        "cpu, memory, expected",
        [
            (80, 70, "Excellent"),
            (60, 50, "Good"),
            (40, 30, "Fair"),
            (30, 30, "Poor"),
        ],
    )
    def test_efficiency(self, cpu, memory, expected):
        assert efficiency(cpu, memory) == expected

    def test_estimate_cost(self):
        assert estimate_cost(1000, 1024 ** 3) == pytest.approx(25.0)
        assert estimate_cost(0, 0) == 0.0

    def test_rightsizing_recommendation(self):
        assert rightsizing_recommendation(5, 8) == "Consider reducing requests by 50-70%"
        assert rightsizing_recommendation(5, 15) == "Consider reducing requests by 30-50%"
        assert rightsizing_recommendation(5, 60) == "Consider reducing requests by 10-30%"


class TestOptimizations:
    def node_cost(self, name, cpu, memory):
        return NodeCost(name=name, type="default", monthly_cost=72.0, cpu_capacity="2.00",
                        memory_capacity="4.0 GiB", cpu_utilization=cpu, memory_utilization=memory)

    def test_monitoring_always_last(self):
        optimizations = CostCollector.optimizations([], [], [])
        assert [o.type for o in optimizations] == ["Monitoring"]
        assert optimizations[0].priority == "Low"

    def test_all_opportunities(self):
        nodes = [self.node_cost("node-1", 10, 20), self.node_cost("node-2", 80, 80)]
        namespaces = [NamespaceCost(name="shop", monthly_cost=150.0)]
        underutilized = [UnderutilizedResource(type="Pod", name="web-1", estimated_savings=60.0)]

        optimizations = CostCollector.optimizations(nodes, namespaces, underutilized)

        assert [o.type for o in optimizations] == [
            "Resource Rightsizing",
            "Node Consolidation",
            "Namespace Optimization",
            "Monitoring",
        ]
        assert optimizations[0].potential_savings == pytest.approx(60.0)
        assert optimizations[0].priority == "High"
        assert optimizations[1].potential_savings == pytest.approx(72.0 * 0.7)
        assert "1 high-cost namespaces" in optimizations[2].description

    def test_single_node_is_not_consolidated(self):
        optimizations = CostCollector.optimizations([self.node_cost("node-1", 5, 5)], [], [])
        assert [o.type for o in optimizations] == ["Monitoring"]


class TestCostCollector:
    def setup_method(self):
        self.nodes = [
            make_node("node-1", labels={"node.kubernetes.io/instance-type": "m5.large"}),
            make_node("node-2"),
        ]
        self.pods = [
            make_pod("web-1", namespace="shop"),
            make_pod("web-2", namespace="shop", node="node-2"),
            make_pod("coredns", namespace="kube-system"),
        ]
        self.namespaces = [
            {"metadata": {"name": "default"}},
            {"metadata": {"name": "kube-system"}},
            {"metadata": {"name": "shop"}},
        ]
        self.node_usage = {
            "items": [
                {"metadata": {"name": "node-1"}, "usage": {"cpu": "200m", "memory": "1Gi"}},
                {"metadata": {"name": "node-2"}, "usage": {"cpu": "1600m", "memory": "3Gi"}},
            ]
        }
        self.pod_usage = {
            "items": [
                {
                    "metadata": {"name": "web-1", "namespace": "shop"},
                    "containers": [{"usage": {"cpu": "5m", "memory": "16Mi"}}],
                },
                {
                    "metadata": {"name": "web-2", "namespace": "shop"},
                    "containers": [{"usage": {"cpu": "80m", "memory": "100Mi"}}],
                },
            ]
        }

    def list_resources(self, resource_type, namespace=None, all_namespaces=False, label_selector=None):
        return {"nodes": self.nodes, "pods": self.pods, "namespaces": self.namespaces}[resource_type]

    def get_raw(self, path):
        return self.pod_usage if path.endswith("/pods") else self.node_usage

    def test_cost_analysis(self, mock_client):
        mock_client.list_resources.side_effect = self.list_resources
        mock_client.get_raw.side_effect = self.get_raw

        analysis = CostCollector(mock_client).get_cost_analysis()

        assert [(n.name, n.type) for n in analysis.node_costs] == [
            ("node-1", "m5.large"),
            ("node-2", "default"),
        ]
        assert analysis.total_monthly_cost == pytest.approx(69.12 + 72.0)
        assert analysis.node_costs[0].efficiency == "Poor"
        assert analysis.node_costs[1].efficiency == "Excellent"
        assert analysis.node_costs[0].cpu_capacity == "2.00"
        assert analysis.node_costs[0].memory_capacity == "4.0 GiB"

        assert [a.type for a in analysis.cost_optimizations] == ["Node Consolidation", "Monitoring"]

    def test_namespace_costs(self, mock_client):
        mock_client.list_resources.side_effect = self.list_resources
        mock_client.get_raw.side_effect = self.get_raw

        costs = CostCollector(mock_client).get_cost_analysis().namespace_costs

        assert [c.name for c in costs] == ["shop", "default"]
        shop = costs[0]
        assert shop.monthly_cost == pytest.approx(0.2 * 20 + 0.25 * 5)
        assert (shop.cpu_requests, shop.memory_requests) == ("200m", "256.0 MiB")
        assert shop.pods_count == 2
        assert shop.cost_per_pod == pytest.approx(shop.monthly_cost / 2)
        assert (costs[1].pods_count, costs[1].cost_per_pod) == (0, 0.0)

    def test_underutilized_resources(self, mock_client):
        mock_client.list_resources.side_effect = self.list_resources
        mock_client.get_raw.side_effect = self.get_raw

        resources = CostCollector(mock_client).get_cost_analysis().underutilized_resources

        assert [(r.name, r.namespace) for r in resources] == [("web-1", "shop")]
        web = resources[0]
        assert (web.cpu_waste, web.memory_waste) == ("95m", "112.0 MiB")
        assert web.estimated_savings == pytest.approx(0.095 * 20 + 112 / 1024 * 5)
        assert web.recommendation == "Consider reducing requests by 30-50%"

    def test_node_metrics_unavailable(self, mock_client):
        def get_raw(path):
            if path.endswith("/nodes"):
                raise K8sClientError("the server could not find the requested resource")
            return self.pod_usage

        mock_client.list_resources.side_effect = self.list_resources
        mock_client.get_raw.side_effect = get_raw

        analysis = CostCollector(mock_client).get_cost_analysis()

        assert {n.efficiency for n in analysis.node_costs} == {"No metrics"}
        assert analysis.node_costs[0].cpu_utilization == 0.0
        assert analysis.total_monthly_cost == pytest.approx(69.12 + 72.0)

    def test_pod_metrics_unavailable(self, mock_client):
        def get_raw(path):
            if path.endswith("/pods"):
                raise K8sClientError("metrics API not available")
            return self.node_usage

        mock_client.list_resources.side_effect = self.list_resources
        mock_client.get_raw.side_effect = get_raw

        with pytest.raises(GatherError, match="failed to get pod metrics"):
            CostCollector(mock_client).get_cost_analysis()

    def test_node_listing_failure(self, mock_client):
        mock_client.list_resources.side_effect = K8sClientError("forbidden")

        with pytest.raises(GatherError, match="failed to get nodes: forbidden"):
            CostCollector(mock_client).get_cost_analysis()
