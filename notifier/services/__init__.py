# notifier/services/__init__.py
"""
Business logic services.
"""

from notifier.services.resilience import CircuitBreaker, CircuitOpenError, CircuitState
from notifier.services.text_repair import LocalRepairer, RepairCache, TextRepairService

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "LocalRepairer",
    "RepairCache",
    "TextRepairService",
]
