"""
Interfaces Layer - Abstract Protocols for Dependencies.

This package defines the abstract interfaces (using typing.Protocol) for all
pluggable collaborators. High-level modules depend on these abstractions,
not on concrete implementations.

Protocols:
    - ComputationUnit: Executor referenced by a step's ``uses``
    - AuditLogger: Logging abstraction for the audit trail
    - MetricsCollector: Performance metrics abstraction
"""

from pipeline_dispatcher.interfaces.audit_logger import AuditLogger
from pipeline_dispatcher.interfaces.computation_unit import ComputationUnit
from pipeline_dispatcher.interfaces.metrics_collector import MetricsCollector

__all__ = ["AuditLogger", "ComputationUnit", "MetricsCollector"]
