"""Orchestrator - Concurrent processing of the selected repositories."""

from gitfleet.orchestrator.orchestrator import FleetOrchestrator, clone_limiter

__all__ = ["FleetOrchestrator", "clone_limiter"]
