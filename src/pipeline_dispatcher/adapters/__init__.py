"""
Adapters Package - Infrastructure Implementations.

Lightweight implementations of the audit logger and metrics collector
protocols, suitable for development and tests.

Components:
    - ConsoleAuditLogger: Prints audit events to stdout
    - InMemoryMetricsCollector: Keeps metrics in memory
"""

from pipeline_dispatcher.adapters.console_logger import ConsoleAuditLogger
from pipeline_dispatcher.adapters.metrics_collector import InMemoryMetricsCollector

__all__ = ["ConsoleAuditLogger", "InMemoryMetricsCollector"]
