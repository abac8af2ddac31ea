"""Cluster events and event-based log analysis."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from ..model.export import ClusterEvent, ErrorPattern, LogAnalysis
from ..utils.formatting import parse_timestamp
from ..utils.logger import get_logger
from .client import K8sClient, K8sClientError
from .gatherer import GatherError

logger = get_logger(__name__)

CRITICAL_REASONS = [
    "Failed", "FailedScheduling", "FailedMount", "FailedAttachVolume",
    "FailedCreatePodSandBox", "FailedPodSandBoxStatus", "NetworkNotReady",
    "FailedKillPod", "FailedCreatePodContainer", "InspectFailed",
]

WARNING_REASONS = [
    "Unhealthy", "ProbeWarning", "BackOff", "ImagePullBackOff",
    "ErrImagePull", "NodeNotReady", "SystemOOM", "FreeDiskSpaceFailed",
    "DeadlineExceeded", "EvictionThresholdMet",
]

PATTERN_DESCRIPTIONS = {
    "FailedScheduling": (
        "Pods cannot be scheduled onto any node",
        "Check resource requests, node selectors, taints and available capacity",
    ),
    "FailedMount": (
        "Volumes fail to mount",
        "Verify PersistentVolumeClaims, storage classes and volume permissions",
    ),
    "BackOff": (
        "Containers are restarting in a back-off loop",
        "Inspect container logs and fix the crash cause",
    ),
    "ImagePullBackOff": (
        "Container images cannot be pulled",
        "Verify image names, tags and registry credentials",
    ),
    "ErrImagePull": (
        "Container images cannot be pulled",
        "Verify image names, tags and registry credentials",
    ),
    "Unhealthy": (
        "Liveness or readiness probes are failing",
        "Review probe configuration and application health endpoints",
    ),
    "SystemOOM": (
        "Processes are killed for running out of memory",
        "Raise memory limits or reduce memory usage",
    ),
    "NodeNotReady": (
        "Nodes are reporting NotReady",
        "Check kubelet health and node resource pressure",
    ),
}


def categorize_severity(reason: str, event_type: str) -> str:
    """Critical, Warning or Info from the event reason and type."""
    if any(critical in reason for critical in CRITICAL_REASONS):
        return "Critical"
    if any(warning in reason for warning in WARNING_REASONS):
        return "Warning"
    if event_type == "Warning":
        return "Warning"
    return "Info"


def extract_component(event: Dict[str, Any]) -> str:
    source = event.get("source") or {}
    return (
        source.get("component")
        or source.get("host")
        or event.get("reportingComponent")
        or "Unknown"
    )


def find_error_patterns(events: List[ClusterEvent]) -> List[ErrorPattern]:
    """Aggregate warning and critical events by reason and type."""
    patterns: Dict[str, ErrorPattern] = {}

    for event in events:
        if event.severity not in ("Critical", "Warning"):
            continue

        key = f"{event.reason}:{event.type}"
        pattern = patterns.get(key)
        if pattern is None:
            description, recommendation = PATTERN_DESCRIPTIONS.get(
                event.reason,
                (f"Recurring {event.reason} events", "Investigate the affected resources"),
            )
            patterns[key] = ErrorPattern(
                pattern=event.reason,
                count=event.count,
                last_seen=event.last_time,
                severity=event.severity,
                description=description,
                recommendation=recommendation,
            )
            continue

        pattern.count += event.count
        if event.last_time and (pattern.last_seen is None or event.last_time > pattern.last_seen):
            pattern.last_seen = event.last_time

    return sorted(patterns.values(), key=lambda p: p.count, reverse=True)


class EventCollector:
    """Reads recent cluster events."""

    def __init__(self, client: K8sClient):
        self.client = client

    def get_cluster_events(self, namespace: Optional[str] = None, hours: int = 24) -> List[ClusterEvent]:
        """Events seen within the last ``hours``, newest first."""
        try:
            items = self.client.list_resources(
                "events", namespace=namespace, all_namespaces=not namespace
            )
        except K8sClientError as e:
            raise GatherError("events", e) from e

        since = datetime.now(timezone.utc) - timedelta(hours=hours)

        events = []
        for item in items:
            event = self._to_event(item)
            if event.last_time is not None and event.last_time < since:
                continue
            events.append(event)

        events.sort(
            key=lambda e: e.last_time or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )
        logger.debug(f"Collected {len(events)} events from the last {hours}h")
        return events

    def get_log_analysis(
        self,
        namespace: Optional[str] = None,
        hours: int = 24,
        events: Optional[List[ClusterEvent]] = None,
    ) -> LogAnalysis:
        """Split events by severity and find recurring error patterns.

        Already collected ``events`` are analysed as given; otherwise they are fetched.
        """
        if events is None:
            events = self.get_cluster_events(namespace, hours)

        analysis = LogAnalysis()
        for event in events:
            if event.severity == "Critical":
                analysis.critical_events.append(event)
            elif event.severity == "Warning":
                analysis.warning_events.append(event)

        analysis.error_patterns = find_error_patterns(events)
        return analysis

    @staticmethod
    def _to_event(item: Dict[str, Any]) -> ClusterEvent:
        metadata = item.get("metadata", {})
        involved = item.get("involvedObject", {})
        reason = item.get("reason", "")
        event_type = item.get("type", "")

        first_time = parse_timestamp(item.get("firstTimestamp")) or parse_timestamp(
            item.get("eventTime")
        )
        last_time = (
            parse_timestamp(item.get("lastTimestamp"))
            or first_time
            or parse_timestamp(metadata.get("creationTimestamp"))
        )

        return ClusterEvent(
            type=event_type,
            reason=reason,
            message=item.get("message", ""),
            object=f"{involved.get('kind', '')}/{involved.get('name', '')}",
            namespace=metadata.get("namespace", ""),
            first_time=first_time,
            last_time=last_time,
            count=int(item.get("count") or 1),
            severity=categorize_severity(reason, event_type),
            component=extract_component(item),
        )
