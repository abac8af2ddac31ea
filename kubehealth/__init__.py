"""One-shot Kubernetes cluster health analysis."""

__version__ = "0.1.0"
