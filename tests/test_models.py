"""Test data models."""

import pytest
from pydantic import ValidationError

from kubehealth.model.facts import ComponentFact, ComponentSource, NodeFact, NodeStatus, VersionFact
from kubehealth.model.export import ExportBundle, ExportFormat
from kubehealth.model.recommendation import AnalysisResult, Recommendation, RuleGroupResult, Severity


class TestFacts:
    def test_node_fact_defaults(self):
        """Test node facts default to the worker role."""
        node = NodeFact(name="node1", status=NodeStatus.READY, age="5d")

        assert node.roles == ["worker"]
        assert node.internal_ip == "N/A"
        assert node.roles_display == "worker"

    def test_roles_display(self):
        node = NodeFact(name="cp", status="Ready", age="1d", roles=["control-plane", "master"])
        assert node.roles_display == "control-plane,master"
        assert node.status == NodeStatus.READY

    def test_component_key(self):
        component = ComponentFact(name="argocd-server", namespace="argocd", source=ComponentSource.HELM)

        assert component.key == "argocd/argocd-server"
        assert component.status == "Unknown"
        assert component.version == "Unknown"

    def test_invalid_source_rejected(self):
        with pytest.raises(ValidationError):
            ComponentFact(name="x", namespace="y", source="Operator")

    def test_version_string(self):
        assert str(VersionFact(major=1, minor=27)) == "1.27"


class TestRecommendations:
    def test_serialized_keys(self):
        """Test the recommendation record keeps its wire names."""
        rec = Recommendation(
            type="Monitoring",
            severity=Severity.MEDIUM,
            title="Metrics Server Not Found",
            description="Metrics server is not detected in the cluster.",
            action="Install metrics-server for resource monitoring capabilities.",
        )

        data = rec.model_dump(mode="json", exclude_none=True)
        assert data == {
            "type": "Monitoring",
            "severity": "Medium",
            "title": "Metrics Server Not Found",
            "description": "Metrics server is not detected in the cluster.",
            "action": "Install metrics-server for resource monitoring capabilities.",
        }

    def test_analysis_result(self):
        rec = Recommendation(type="Node", severity=Severity.LOW, title="t", description="d", action="a")
        result = AnalysisResult(
            groups=[
                RuleGroupResult(group="topology", recommendations=[rec]),
                RuleGroupResult(group="nodes", error="failed to get nodes: timeout"),
                RuleGroupResult(group="pods", recommendations=[rec, rec]),
            ]
        )

        assert len(result.recommendations) == 3
        assert [g.group for g in result.failed_groups] == ["nodes"]
        assert not result.groups[0].failed


class TestExportModels:
    def test_export_formats(self):
        assert [f.value for f in ExportFormat] == ["json", "csv", "prometheus"]

    def test_bundle_fields_default_to_absent(self):
        bundle = ExportBundle()
        assert bundle.model_dump(exclude_none=True) == {}
