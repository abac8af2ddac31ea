"""Base exporter class."""

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_OUTPUT_DIR = "./exports"
TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


class ExportError(OSError):
    """Creating or writing an export file failed."""

    def __init__(self, action: str, path: Union[str, Path], cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"failed to {action} {self.path}: {cause}")


class Exporter:
    """Base class for exporters writing into one output directory."""

    extension = ""

    def __init__(self, output_dir: Union[str, Path, None] = None):
        self.output_dir = Path(output_dir or DEFAULT_OUTPUT_DIR)

    def ensure_output_dir(self):
        """Create the output directory and any missing parents."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError("create directory", self.output_dir, e) from e

    def resolve_filename(self, dataset: str, filename: Optional[str] = None) -> str:
        """Default to ``<dataset>-<timestamp>`` and ensure the extension."""
        if not filename:
            filename = f"{dataset}-{datetime.now().strftime(TIMESTAMP_FORMAT)}"
        if not filename.endswith(self.extension):
            filename += self.extension
        return filename

    def target_path(self, dataset: str, filename: Optional[str] = None) -> Path:
        """Prepare the output directory and return the file to write."""
        self.ensure_output_dir()
        return self.output_dir / self.resolve_filename(dataset, filename)

    @contextmanager
    def open_file(self, path: Path) -> Iterator[TextIO]:
        """Open ``path`` for writing; I/O failures surface as ExportError."""
        try:
            f = open(path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise ExportError("create file", path, e) from e

        with f:
            try:
                yield f
            except ExportError:
                raise
            except OSError as e:
                raise ExportError("write file", path, e) from e

        logger.info(f"Exported {path}")
