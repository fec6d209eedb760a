"""Orchestrator package - coordinates deploy runs."""
from .core import DeployOrchestrator
from .file_collector import FileCollector

__all__ = ["DeployOrchestrator", "FileCollector"]
