"""Keyboard-driven terminal explorer for Kubernetes clusters, with a small API client."""

__version__ = "0.1.0"