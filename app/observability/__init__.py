"""Observability layer: in-process metrics. No external SaaS."""

from app.observability.metrics import MetricsCollector

__all__ = ["MetricsCollector"]
