"""Test CLI commands."""

import json
from unittest.mock import Mock, patch

from typer.testing import CliRunner

from kubehealth.cli.main import app, collect_bundle
from kubehealth.k8s.client import K8sClientError
from kubehealth.model.facts import ClusterSummaryFact, VersionFact

runner = CliRunner()


class TestCollectBundle:
    def test_unavailable_metrics_are_skipped(self, mock_client):
        mock_client.get_raw.side_effect = K8sClientError("metrics API not available")

        bundle = collect_bundle(mock_client, hours=12)

        assert bundle.timestamp is not None
        assert bundle.cluster_metrics is None
        assert bundle.node_metrics is None
        assert bundle.utilizations is None
        assert bundle.cost_analysis is None
        assert bundle.events == []
        assert bundle.log_analysis is not None

    def test_collectors_can_be_disabled(self, mock_client):
        bundle = collect_bundle(
            mock_client, include_metrics=False, include_events=False, include_costs=False
        )

        mock_client.get_raw.assert_not_called()
        mock_client.list_resources.assert_not_called()
        assert bundle.model_dump(exclude_none=True).keys() == {"timestamp"}

    def test_events_are_fetched_once(self, mock_client):
        bundle = collect_bundle(mock_client, include_metrics=False, include_costs=False)

        mock_client.list_resources.assert_called_once_with("events", namespace=None, all_namespaces=True)
        assert bundle.events == []
        assert bundle.log_analysis is not None

    def test_cost_analysis_is_collected(self, mock_client):
        bundle = collect_bundle(mock_client, include_metrics=False, include_events=False)

        assert bundle.cost_analysis is not None
        assert bundle.cost_analysis.total_monthly_cost == 0.0
        assert [o.type for o in bundle.cost_analysis.cost_optimizations] == ["Monitoring"]


class TestCommands:
    @patch("kubehealth.cli.main.K8sClient")
    def test_export_json(self, mock_client_cls, mock_client, tmp_path):
        mock_client_cls.return_value = mock_client

        result = runner.invoke(
            app, ["export", "--output", str(tmp_path), "--filename", "snapshot", "--no-metrics"]
        )

        assert result.exit_code == 0
        data = json.loads((tmp_path / "snapshot.json").read_text(encoding="utf-8"))
        assert set(data) == {"timestamp", "log_analysis", "cost_analysis"}

    @patch("kubehealth.cli.main.K8sClient")
    def test_export_json_without_costs(self, mock_client_cls, mock_client, tmp_path):
        mock_client_cls.return_value = mock_client

        result = runner.invoke(
            app,
            ["export", "--output", str(tmp_path), "--filename", "snapshot", "--no-metrics", "--no-costs"],
        )

        assert result.exit_code == 0
        data = json.loads((tmp_path / "snapshot.json").read_text(encoding="utf-8"))
        assert set(data) == {"timestamp", "log_analysis"}

    @patch("kubehealth.cli.main.ClusterFactGatherer")
    @patch("kubehealth.cli.main.K8sClient")
    def test_recommend_reports_failed_groups(self, mock_client_cls, mock_gatherer_cls):
        gatherer = Mock()
        gatherer.get_cluster_summary.return_value = ClusterSummaryFact(
            total_nodes=1, total_pods=2, total_cpu_capacity="2.0", total_memory_capacity="4.0 GiB"
        )
        gatherer.get_nodes.side_effect = RuntimeError("nodes unavailable")
        gatherer.get_pods.return_value = []
        gatherer.get_components.return_value = []
        gatherer.get_version.return_value = VersionFact(major=1, minor=28)
        mock_gatherer_cls.return_value = gatherer

        result = runner.invoke(app, ["recommend", "--severity", "Medium"])

        assert result.exit_code == 0
        assert "Skipped nodes checks" in result.output
        assert "Low Node Count" in result.output
        assert "Metrics Server Not Found" in result.output

    @patch("kubehealth.cli.main.K8sClient")
    def test_kubectl_missing(self, mock_client_cls):
        mock_client_cls.side_effect = RuntimeError("kubectl command not found. Please install kubectl.")

        result = runner.invoke(app, ["nodes"])

        assert result.exit_code == 1
        assert "kubectl command not found" in result.output
