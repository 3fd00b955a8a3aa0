# notifier/services/text_repair/factory.py
"""
Build the text-repair service from settings.

The application calls this once at startup and keeps the result on
app.state; tests build their own instances.
"""

import logging

from notifier.config import Settings
from notifier.services.resilience import CircuitBreaker
from notifier.services.text_repair.cache import RepairCache
from notifier.services.text_repair.engine import LocalRepairer
from notifier.services.text_repair.interceptor import TextRepairService
from notifier.services.text_repair.remote import LanguageToolRepairer

logger = logging.getLogger(__name__)


def build_text_repair_service(settings: Settings) -> TextRepairService:
    """
    Create the cache and strategies described by settings.

    Environment:
        TEXT_REPAIR_ENABLED: turn repair off entirely
        TEXT_REPAIR_CACHE_SIZE: LRU bound (0 = unbounded)
        LANGUAGETOOL_URL: enable remote enrichment (unset = local only)
    """
    local = LocalRepairer()
    remote = None

    if settings.LANGUAGETOOL_URL:
        remote = LanguageToolRepairer(
            url=settings.LANGUAGETOOL_URL,
            local=local,
            language=settings.LANGUAGETOOL_LANGUAGE,
            timeout=settings.LANGUAGETOOL_TIMEOUT,
            breaker=CircuitBreaker(
                name="languagetool",
                failure_threshold=settings.LANGUAGETOOL_FAILURE_THRESHOLD,
                reset_timeout_seconds=settings.LANGUAGETOOL_RESET_SECONDS,
            ),
        )

    service = TextRepairService(
        cache=RepairCache(maxsize=settings.TEXT_REPAIR_CACHE_SIZE),
        local=local,
        remote=remote,
        enabled=settings.TEXT_REPAIR_ENABLED,
    )
    logger.info(
        f"Text repair initialized: strategy={service.strategy}, enabled={service.enabled}, "
        f"rule_table_version={local.version}"
    )
    return service
