"""Observability layer: metrics and failure classification. No external SaaS."""

from arcflow.observability.failure_classifier import FailureCategory, FailureClassifier
from arcflow.observability.metrics import MetricsCollector

__all__ = [
    "FailureCategory",
    "FailureClassifier",
    "MetricsCollector",
]
