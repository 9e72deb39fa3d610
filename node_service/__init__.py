"""Workflow node service: registers with the orchestrator and executes node requests."""

__version__ = "1.0.0"
