"""Test configuration and fixtures."""

import pytest
from unittest.mock import Mock
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, List, Optional

from kubehealth.k8s.client import K8sClient


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def make_node(
    name: str,
    ready: Optional[bool] = True,
    labels: Optional[Dict[str, str]] = None,
    cpu: str = "2",
    memory: str = "4Gi",
    age_days: int = 10,
) -> Dict[str, Any]:
    """Raw node object as returned by kubectl."""
    conditions = [{"type": "MemoryPressure", "status": "False"}]
    if ready is not None:
        conditions.append({"type": "Ready", "status": "True" if ready else "False"})

    return {
        "metadata": {
            "name": name,
            "labels": labels or {},
            "creationTimestamp": iso(datetime.now(timezone.utc) - timedelta(days=age_days)),
        },
        "status": {
            "conditions": conditions,
            "capacity": {"cpu": cpu, "memory": memory},
            "nodeInfo": {"kubeletVersion": "v1.27.3"},
            "addresses": [
                {"type": "Hostname", "address": name},
                {"type": "InternalIP", "address": "10.0.0.1"},
            ],
        },
    }


def make_pod(
    name: str,
    namespace: str = "default",
    phase: str = "Running",
    restarts: List[int] = None,
    terminating: bool = False,
    node: str = "node-1",
) -> Dict[str, Any]:
    """Raw pod object as returned by kubectl."""
    metadata = {
        "name": name,
        "namespace": namespace,
        "creationTimestamp": iso(datetime.now(timezone.utc) - timedelta(hours=3)),
    }
    if terminating:
        metadata["deletionTimestamp"] = iso(datetime.now(timezone.utc))

    return {
        "metadata": metadata,
        "spec": {
            "nodeName": node,
            "containers": [
                {
                    "name": "app",
                    "image": "nginx:1.25",
                    "resources": {
                        "requests": {"cpu": "100m", "memory": "128Mi"},
                        "limits": {"cpu": "500m", "memory": "256Mi"},
                    },
                }
            ],
        },
        "status": {
            "phase": phase,
            "containerStatuses": [{"restartCount": r} for r in (restarts or [0])],
        },
    }


def make_deployment(
    name: str, namespace: str, ready: int = 1, replicas: int = 1, image: str = "repo/app:v1.0.0"
) -> Dict[str, Any]:
    return {
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"template": {"spec": {"containers": [{"name": "main", "image": image}]}}},
        "status": {"readyReplicas": ready, "replicas": replicas},
    }


def make_helm_secret(
    name: str, namespace: str, status: str = "deployed", version: Optional[str] = "3"
) -> Dict[str, Any]:
    labels = {"owner": "helm", "name": name, "status": status}
    if version:
        labels["version"] = version
    return {"metadata": {"name": f"sh.helm.release.v1.{name}.v1", "namespace": namespace, "labels": labels}}


@pytest.fixture
def mock_client():
    """Mock kubectl client for gatherer and collector tests."""
    client = Mock(spec=K8sClient)
    client.list_resources = Mock(return_value=[])
    client.get_raw = Mock(return_value={"items": []})
    client.get_version = Mock(return_value={})
    return client


@pytest.fixture
def sample_nodes():
    """Three raw nodes, one of them a control plane node."""
    return [
        make_node("control-1", labels={"node-role.kubernetes.io/control-plane": ""}),
        make_node("worker-1"),
        make_node("worker-2", cpu="2", memory="8Gi"),
    ]


@pytest.fixture
def sample_pods():
    return [
        make_pod("web-1", restarts=[1, 2]),
        make_pod("web-2", namespace="shop", phase="Pending"),
        make_pod("old-1", terminating=True),
    ]
