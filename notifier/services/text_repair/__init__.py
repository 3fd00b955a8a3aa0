# notifier/services/text_repair/__init__.py
"""
Repair engine for mojibake and missing accents in Portuguese text.

Components (leaf to root):
- rules: ordered correction table
- context: window-based resolution of the generic corruption marker
- engine: LocalRepairer, applies the table to one string
- cache: RepairCache, process-wide memo
- walker: selects repairable strings in structured payloads
- remote: optional LanguageTool enrichment with local fallback
- interceptor: TextRepairService, ResponseInterceptor, TextRepairRoute
"""

from notifier.services.text_repair.cache import RepairCache
from notifier.services.text_repair.context import resolve_marker, resolve_markers
from notifier.services.text_repair.engine import LocalRepairer, repair_text
from notifier.services.text_repair.errors import CacheError, InputTypeError, RemoteUnavailable, TextRepairError
from notifier.services.text_repair.interceptor import (
    ResponseInterceptor,
    TextRepairRoute,
    TextRepairService,
    get_text_repair_service,
)
from notifier.services.text_repair.remote import LanguageToolRepairer, RemoteSuggestion, apply_suggestions
from notifier.services.text_repair.rules import RULE_TABLE, RULE_TABLE_VERSION, CorrectionRule
from notifier.services.text_repair.walker import iter_repairable, walk

__all__ = [
    "RULE_TABLE",
    "RULE_TABLE_VERSION",
    "CacheError",
    "CorrectionRule",
    "InputTypeError",
    "LanguageToolRepairer",
    "LocalRepairer",
    "RemoteSuggestion",
    "RemoteUnavailable",
    "RepairCache",
    "ResponseInterceptor",
    "TextRepairError",
    "TextRepairRoute",
    "TextRepairService",
    "apply_suggestions",
    "get_text_repair_service",
    "iter_repairable",
    "repair_text",
    "resolve_marker",
    "resolve_markers",
    "walk",
]
