# notifier/services/text_repair/engine.py
"""
Local repair engine.

Applies the rule table to a single string. Pure and total for str input:
the same text always produces the same result for a given table version,
and a rule that blows up is logged and skipped rather than failing the
whole repair.
"""

import logging

from notifier.services.text_repair.errors import InputTypeError
from notifier.services.text_repair.rules import RULE_TABLE, RULE_TABLE_VERSION, CorrectionRule

logger = logging.getLogger(__name__)

# The table is rerun until the text stops changing, so repair(repair(s)) == repair(s)
MAX_PASSES = 4


class LocalRepairer:
    """
    Rule-table repair strategy.

    Usage:
        repairer = LocalRepairer()
        repairer.repair("Ã§Ã£o")  # -> "ção"
    """

    name = "local"

    def __init__(
        self,
        rules: tuple[CorrectionRule, ...] = RULE_TABLE,
        version: int = RULE_TABLE_VERSION,
    ):
        self.rules = rules
        self.version = version

    def repair(self, text: str) -> str:
        """Run the rule table over the whole string until it settles."""
        if not isinstance(text, str):
            raise InputTypeError(f"Text repair expects str, got {type(text).__name__}")
        if not text:
            return text

        working = text
        for _ in range(MAX_PASSES):
            repaired = self._apply_rules(working)
            if repaired == working:
                break
            working = repaired
        return working

    def _apply_rules(self, text: str) -> str:
        """Run every rule, in order, over the whole string once."""
        for rule in self.rules:
            try:
                text = rule.apply(text)
            except Exception:
                logger.exception(f"Correction rule '{rule.name}' failed; skipping it")
        return text


_default_repairer = LocalRepairer()


def repair_text(text: str) -> str:
    """Repair text with the default rule table."""
    return _default_repairer.repair(text)
