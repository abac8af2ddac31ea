"""Helm release discovery."""

from typing import List

from .client import K8sClient
from ..model.facts import ComponentFact, ComponentSource
from ..utils.logger import get_logger

logger = get_logger(__name__)


class HelmReleaseInspector:
    """Reads Helm release metadata from the secrets Helm stores per release."""

    RELEASE_SELECTOR = "owner=helm"

    def __init__(self, client: K8sClient):
        self.client = client

    def get_components(self) -> List[ComponentFact]:
        """Get one component per Helm release secret."""
        secrets = self.client.list_resources(
            "secrets", all_namespaces=True, label_selector=self.RELEASE_SELECTOR
        )

        components = []
        for secret in secrets:
            metadata = secret.get("metadata", {})
            labels = metadata.get("labels") or {}

            name = labels.get("name")
            if not name:
                continue

            version = labels.get("app.kubernetes.io/version") or labels.get("version") or "Unknown"

            components.append(
                ComponentFact(
                    name=name,
                    namespace=metadata.get("namespace", "default"),
                    status=self._format_status(labels.get("status")),
                    version=version,
                    ready="Helm",
                    source=ComponentSource.HELM,
                )
            )

        logger.debug(f"Found {len(components)} Helm releases")
        return components

    @staticmethod
    def _format_status(status) -> str:
        if status is None:
            return "Unknown"
        if not status:
            return status
        return status[0].upper() + status[1:].lower()
