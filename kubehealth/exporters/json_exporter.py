"""JSON exporter."""

import json
from pathlib import Path
from typing import Optional

from ..model.export import ExportBundle
from .base import Exporter


class JsonExporter(Exporter):
    """Export the whole bundle as a single JSON document."""

    extension = ".json"
    dataset = "k8s-cluster-data"

    @staticmethod
    def render(bundle: ExportBundle) -> str:
        """Two-space indented JSON with absent or empty fields left out."""
        data = {
            key: value
            for key, value in bundle.model_dump(mode="json", exclude_none=True).items()
            if value != []
        }
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    def export(self, bundle: ExportBundle, filename: Optional[str] = None) -> Path:
        """Write the bundle and return the file path."""
        path = self.target_path(self.dataset, filename)
        with self.open_file(path) as f:
            f.write(self.render(bundle))
        return path
