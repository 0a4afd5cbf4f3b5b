"""Swap services: quote orchestration and engine error classification."""

from swapquote.web.services.error_classifier import ErrorClassifier
from swapquote.web.services.orchestrator import QuoteOrchestrator

__all__ = [
    "ErrorClassifier",
    "QuoteOrchestrator",
]
