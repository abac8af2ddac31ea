"""Main CLI interface using Typer."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from ..core import RecommendationAnalyzer, SimpleTable, filter_recommendations, group_by_category
from ..exporters import CsvExporter, ExportError, JsonExporter, PrometheusExporter
from ..exporters.base import DEFAULT_OUTPUT_DIR
from ..k8s import (
    ClusterFactGatherer,
    CostCollector,
    EventCollector,
    GatherError,
    K8sClient,
    MetricsCollector,
)
from ..model.export import ExportBundle, ExportFormat
from ..model.recommendation import Severity
from ..utils.logger import get_logger, set_log_level

# Create CLI app
app = typer.Typer(
    name="kube-health",
    help="Inspect a Kubernetes cluster and report on its health",
    add_completion=True,
)

console = Console()
logger = get_logger(__name__)

SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
}

ContextOption = typer.Option(None, "--context", "-c", help="Kubernetes context to use")


def _fail(error: Exception):
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def _print_table(headers: List[str], rows: List[List[str]]):
    table = SimpleTable(headers)
    for row in rows:
        table.add_row(row)
    typer.echo(table.render())


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Snapshot analysis of a Kubernetes cluster."""
    if verbose:
        set_log_level(logging.DEBUG)


@app.command()
def recommend(
    context: Optional[str] = ContextOption,
    severity: Optional[Severity] = typer.Option(
        None, "--severity", help="Only show recommendations of this severity"
    ),
    rec_type: Optional[str] = typer.Option(
        None, "--type", help="Only show recommendations of this type (Resource, Workload, ...)"
    ),
):
    """Analyze the cluster and recommend improvements."""
    try:
        with console.status("[bold green]Analyzing cluster for recommendations..."):
            client = K8sClient(context=context)
            result = RecommendationAnalyzer(ClusterFactGatherer(client)).analyze()
    except RuntimeError as e:
        _fail(e)

    for group in result.failed_groups:
        console.print(f"[yellow]Skipped {group.group} checks:[/yellow] {group.error}")

    recommendations = filter_recommendations(
        result.recommendations, severity.value if severity else None, rec_type
    )
    if not recommendations:
        console.print("[green]✓[/green] No recommendations found. The cluster looks well configured!")
        return

    console.print(f"Found [bold]{len(recommendations)}[/bold] recommendations:\n")
    for category, recs in group_by_category(recommendations).items():
        console.print(f"[bold]{category} Recommendations:[/bold]")
        _print_table(
            ["Severity", "Title", "Description", "Recommended Action"],
            [[r.severity.value, r.title, r.description, r.action] for r in recs],
        )
        for rec in recs:
            if rec.link:
                color = SEVERITY_COLORS[rec.severity]
                console.print(f"  [{color}]{rec.title}[/{color}]: {rec.link}")
        console.print()


@app.command()
def nodes(context: Optional[str] = ContextOption):
    """List cluster nodes."""
    try:
        gatherer = ClusterFactGatherer(K8sClient(context=context))
        summary = gatherer.get_cluster_summary()
        facts = gatherer.get_nodes()
    except RuntimeError as e:
        _fail(e)

    _print_table(
        ["Name", "Status", "Roles", "Age", "Version", "Internal-IP", "CPU", "Memory"],
        [
            [n.name, n.status.value, n.roles_display, n.age, n.version, n.internal_ip,
             n.cpu_capacity, n.memory_capacity]
            for n in facts
        ],
    )
    console.print(
        f"Nodes: [cyan]{summary.total_nodes}[/cyan]  Pods: [cyan]{summary.total_pods}[/cyan]  "
        f"CPU: [cyan]{summary.total_cpu_capacity}[/cyan] cores  "
        f"Memory: [cyan]{summary.total_memory_capacity}[/cyan]"
    )


@app.command()
def pods(
    namespace: Optional[str] = typer.Option(
        None, "--namespace", "-n", help="Namespace to list (default: all namespaces)"
    ),
    context: Optional[str] = ContextOption,
):
    """List pods with their phase and restarts."""
    try:
        facts = ClusterFactGatherer(K8sClient(context=context)).get_pods(namespace)
    except RuntimeError as e:
        _fail(e)

    _print_table(
        ["Name", "Namespace", "Status", "Restarts", "Age", "Node"],
        [[p.name, p.namespace, p.phase, str(p.restarts), p.age, p.node] for p in facts],
    )


@app.command()
def components(context: Optional[str] = ContextOption):
    """List installed components found in workloads and Helm releases."""
    try:
        facts = ClusterFactGatherer(K8sClient(context=context)).get_components()
    except RuntimeError as e:
        _fail(e)

    facts = sorted(facts, key=lambda c: (c.namespace, c.name))
    _print_table(
        ["Name", "Namespace", "Status", "Version", "Ready", "Source"],
        [[c.name, c.namespace, c.status, c.version, c.ready, c.source.value] for c in facts],
    )


@app.command("cluster-version")
def cluster_version(context: Optional[str] = ContextOption):
    """Show the Kubernetes server version."""
    try:
        fact = ClusterFactGatherer(K8sClient(context=context)).get_version()
    except RuntimeError as e:
        _fail(e)

    console.print(f"Server Version: [cyan]{fact.git_version or fact}[/cyan]")
    console.print(f"Platform: {fact.platform or 'Unknown'}")


def collect_bundle(
    client: K8sClient,
    namespace: Optional[str] = None,
    hours: int = 24,
    include_metrics: bool = True,
    include_events: bool = True,
    include_costs: bool = True,
) -> ExportBundle:
    """Gather every exportable dataset; unavailable ones are left out."""
    bundle = ExportBundle(timestamp=datetime.now(timezone.utc))
    metrics = MetricsCollector(client)

    if include_metrics:
        for field, collect in (
            ("cluster_metrics", metrics.get_cluster_metrics),
            ("node_metrics", metrics.get_node_metrics),
            ("pod_metrics", lambda: metrics.get_pod_metrics(namespace)),
            ("utilizations", metrics.get_resource_utilization),
        ):
            try:
                setattr(bundle, field, collect())
            except GatherError as e:
                logger.warning(f"Skipping {field}: {e}")

    if include_costs:
        try:
            bundle.cost_analysis = CostCollector(client, metrics).get_cost_analysis()
        except GatherError as e:
            logger.warning(f"Skipping cost analysis: {e}")

    if include_events:
        events = EventCollector(client)
        try:
            bundle.events = events.get_cluster_events(namespace, hours)
            bundle.log_analysis = events.get_log_analysis(events=bundle.events)
        except GatherError as e:
            logger.warning(f"Skipping events: {e}")

    return bundle


def export_csv(exporter: CsvExporter, bundle: ExportBundle, base: Optional[str]) -> List[Path]:
    """Write one CSV per populated dataset."""
    stamp = base or f"k8s-export-{datetime.now().strftime('%Y-%m-%d-%H-%M-%S')}"
    paths = []

    if bundle.node_metrics:
        paths.append(exporter.export_node_metrics(bundle.node_metrics, f"{stamp}-node-metrics"))
    if bundle.pod_metrics:
        paths.append(exporter.export_pod_metrics(bundle.pod_metrics, f"{stamp}-pod-metrics"))
    if bundle.cost_analysis is not None:
        paths.append(exporter.export_cost_analysis(bundle.cost_analysis, f"{stamp}-cost-analysis"))
    if bundle.utilizations:
        paths.append(exporter.export_utilization(bundle.utilizations, f"{stamp}-utilization"))
    if bundle.events:
        paths.append(exporter.export_events(bundle.events, f"{stamp}-events"))

    return paths


@app.command()
def export(
    format: ExportFormat = typer.Option(ExportFormat.JSON, "--format", "-f", help="Export format"),
    output: Path = typer.Option(DEFAULT_OUTPUT_DIR, "--output", "-o", help="Output directory"),
    filename: Optional[str] = typer.Option(
        None, "--filename", help="Custom filename (extension optional)"
    ),
    namespace: Optional[str] = typer.Option(
        None, "--namespace", "-n", help="Namespace to export (default: all namespaces)"
    ),
    hours: int = typer.Option(24, "--hours", help="Hours of events to include"),
    include_metrics: bool = typer.Option(True, "--metrics/--no-metrics", help="Include metrics"),
    include_events: bool = typer.Option(True, "--events/--no-events", help="Include events"),
    include_costs: bool = typer.Option(True, "--costs/--no-costs", help="Include cost analysis"),
    context: Optional[str] = ContextOption,
):
    """Export cluster data as JSON, CSV or Prometheus metrics."""
    try:
        with console.status(f"[bold green]Exporting cluster data as {format.value.upper()}..."):
            client = K8sClient(context=context)
            bundle = collect_bundle(
                client, namespace, hours, include_metrics, include_events, include_costs
            )

            if format == ExportFormat.JSON:
                paths = [JsonExporter(output).export(bundle, filename)]
            elif format == ExportFormat.CSV:
                paths = export_csv(CsvExporter(output), bundle, filename)
            else:
                paths = [PrometheusExporter(output).export(bundle, filename)]
    except (ExportError, RuntimeError) as e:
        _fail(e)

    if not paths:
        console.print("[yellow]No data available to export[/yellow]")
        raise typer.Exit(1)

    console.print("[green]✓[/green] Export completed:")
    for path in paths:
        console.print(f"  - [cyan]{path}[/cyan]")


@app.command()
def version():
    """Show version information."""
    console.print("[bold]kube-health[/bold] version 0.1.0")
    console.print("A one-shot Kubernetes cluster health analyzer")


if __name__ == "__main__":
    app()
