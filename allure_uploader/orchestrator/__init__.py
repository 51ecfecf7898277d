"""Orchestrator package - runs the upload workflow."""
from .core import ResultsOrchestrator, predict_report_link, STEPS
from .file_collector import FileCollector

__all__ = ["ResultsOrchestrator", "FileCollector", "predict_report_link", "STEPS"]
