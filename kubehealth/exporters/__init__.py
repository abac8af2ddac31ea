"""Export renderers."""

from .base import Exporter, ExportError
from .json_exporter import JsonExporter
from .csv_exporter import CsvExporter
from .prometheus_exporter import PrometheusExporter

__all__ = ["Exporter", "ExportError", "JsonExporter", "CsvExporter", "PrometheusExporter"]
