"""Kubernetes client wrapper."""

import subprocess
import json
from typing import List, Tuple, Optional, Dict, Any

from ..utils.logger import get_logger

logger = get_logger(__name__)


class K8sClientError(RuntimeError):
    """kubectl failed or produced output that could not be parsed."""


class K8sClient:
    """Wrapper for kubectl commands."""

    def __init__(self, context: Optional[str] = None, namespace: Optional[str] = None):
        self.context = context
        self.namespace = namespace
        self._verify_kubectl()

    def _verify_kubectl(self):
        """Verify kubectl is available and configured."""
        try:
            subprocess.run(
                ["kubectl", "version", "--client", "-o", "json"],
                capture_output=True,
                text=True,
                check=True,
            )
            logger.debug("kubectl verified successfully")
        except FileNotFoundError:
            raise RuntimeError("kubectl command not found. Please install kubectl.")
        except subprocess.CalledProcessError:
            # kubectl exists but cannot reach a cluster yet; queries will report it
            logger.warning("kubectl verification failed")

    def _build_command(self, args: List[str]) -> List[str]:
        """Build kubectl command with context and namespace."""
        cmd = ["kubectl"]

        if self.context:
            cmd.extend(["--context", self.context])

        cmd.extend(args)

        if self.namespace and "--all-namespaces" not in args and "-n" not in args:
            cmd.extend(["-n", self.namespace])

        return cmd

    def execute(self, args: List[str]) -> Tuple[bool, str]:
        """Execute kubectl command and return success status and output."""
        cmd = self._build_command(args)
        logger.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=True)
            return True, result.stdout
        except subprocess.CalledProcessError as e:
            logger.error(f"Command failed: {e.stderr}")
            return False, e.stderr

    def _execute_json(self, args: List[str]) -> Any:
        success, output = self.execute(args)
        if not success:
            raise K8sClientError((output or "kubectl exited with an error").strip())
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise K8sClientError(f"invalid JSON from kubectl: {e}") from e

    def list_resources(
        self,
        resource_type: str,
        namespace: Optional[str] = None,
        all_namespaces: bool = False,
        label_selector: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """List resources of one kind and return their raw items."""
        args = ["get", resource_type]

        if namespace:
            args.extend(["-n", namespace])
        elif all_namespaces:
            args.append("--all-namespaces")

        if label_selector:
            args.extend(["-l", label_selector])

        args.extend(["-o", "json"])

        data = self._execute_json(args)
        return data.get("items", []) if isinstance(data, dict) else []

    def get_raw(self, path: str) -> Dict[str, Any]:
        """Fetch a raw API path, e.g. an aggregated metrics endpoint."""
        return self._execute_json(["get", "--raw", path])

    def get_version(self) -> Dict[str, Any]:
        """Get client and server version information."""
        return self._execute_json(["version", "-o", "json"])
