# notifier/services/text_repair/rules.py
"""
Ordered correction rules for damaged Portuguese text.

The table is a pipeline: every rule rewrites the whole string before the
next one runs, so order is part of the contract.

Family 1 (corrupted sequences):
    1. UTF-8 bytes decoded as Latin-1/cp1252 ("Ã§" -> "ç")
    2. Stray placeholders between letters ("reuni%o") -> U+FFFD, except
       inside URL-like tokens ("pagina?id=3")
    3. Known damaged words ("reuni?o", "vocç")
    4. Marker endings ("��o" -> "ção")
    5. Context resolver for any marker still left
    6. Wrong-letter cleanups ("configuraãão", "concluçda")

Family 2 (missing accents):
    Whole-word, case-insensitive restorations ("voce" -> "você").

Bump RULE_TABLE_VERSION whenever the table changes and clear any repair
cache built with the old table.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from notifier.services.text_repair.context import MARKER, MARKER_PATTERN, resolve_match

RULE_TABLE_VERSION = 4

Replacement = str | Callable[[re.Match], str]


class RuleFamily(str, Enum):
    """Which half of the table a rule belongs to."""

    CORRUPTION = "corruption"
    ACCENT = "accent"


@dataclass(frozen=True)
class CorrectionRule:
    """A compiled pattern and what to put in its place."""

    name: str
    pattern: re.Pattern
    replacement: Replacement
    family: RuleFamily = RuleFamily.CORRUPTION

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


def match_case(replacement: str, original: str) -> str:
    """Give replacement the capitalisation of the text it replaces."""
    if len(original) > 1 and original.isupper():
        return replacement.upper()
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _cased(replacement: str) -> Callable[[re.Match], str]:
    def _replace(match: re.Match) -> str:
        return match_case(replacement, match.group(0))

    return _replace


# Characters that mark a token as a URL, path, query string or address
URL_TOKEN_CHARS = frozenset("/=&@#:")


def in_url_token(match: re.Match) -> bool:
    """True when the whitespace-delimited token around the match looks like a URL."""
    text = match.string
    left = match.start()
    while left > 0 and not text[left - 1].isspace():
        left -= 1
    right = match.end()
    while right < len(text) and not text[right].isspace():
        right += 1
    return not URL_TOKEN_CHARS.isdisjoint(text[left:right])


def _outside_urls(replace: Callable[[re.Match], str]) -> Callable[[re.Match], str]:
    def _replace(match: re.Match) -> str:
        if in_url_token(match):
            return match.group(0)
        return replace(match)

    return _replace


def _rule(
    name: str,
    pattern: str,
    replacement: str,
    family: RuleFamily = RuleFamily.CORRUPTION,
) -> CorrectionRule:
    return CorrectionRule(name, re.compile(pattern, re.IGNORECASE), _cased(replacement), family)


# -----------------------------------------------------------------------------
# 1. Double-encoded UTF-8
# -----------------------------------------------------------------------------

PORTUGUESE_LETTERS = "áàâãçéêíóôõúüÁÀÂÃÇÉÊÍÓÔÕÚÜ"

# Multi-letter endings that are fixed in one step.
MOJIBAKE_ENDINGS = {
    "Ã§Ã£o": "ção",
    "Ã§ao": "ção",
    "Ã£o": "ão",
}


def build_mojibake_map(letters: str = PORTUGUESE_LETTERS) -> dict[str, str]:
    """
    Map each garbled form of a letter back to the letter.

    A garbled form is the letter's UTF-8 bytes decoded as Latin-1 or
    cp1252. Byte sequences cp1252 cannot decode only get the Latin-1 form.
    """
    result = dict(MOJIBAKE_ENDINGS)
    for letter in letters:
        raw = letter.encode("utf-8")
        for codec in ("latin-1", "cp1252"):
            try:
                garbled = raw.decode(codec)
            except UnicodeDecodeError:
                continue
            if garbled != letter:
                result[garbled] = letter
    return result


MOJIBAKE_MAP = build_mojibake_map()


def _mojibake_rule() -> CorrectionRule:
    # Longest first so "Ã§Ã£o" wins over "Ã§"
    alternatives = sorted(MOJIBAKE_MAP, key=len, reverse=True)
    pattern = re.compile("|".join(re.escape(garbled) for garbled in alternatives))
    return CorrectionRule("double_encoded_utf8", pattern, lambda match: MOJIBAKE_MAP[match.group(0)])


# -----------------------------------------------------------------------------
# 2. Placeholders
# -----------------------------------------------------------------------------

# A letter of any case, or a marker, on both sides
_LETTER_OR_MARKER = rf"(?:[^\W\d_]|{MARKER})"

PLACEHOLDER_RULE = CorrectionRule(
    "placeholder_to_marker",
    re.compile(rf"(?<={_LETTER_OR_MARKER})[%?](?={_LETTER_OR_MARKER})"),
    _outside_urls(lambda match: MARKER),
)


# -----------------------------------------------------------------------------
# 3. Damaged words
# -----------------------------------------------------------------------------

# "?" stands for the damaged letter: either the marker or a stray "ç" left
# behind by an earlier, wrong repair.
DAMAGED_WORDS: tuple[tuple[str, str], ...] = (
    ("reuni?o", "reunião"),
    ("amanh?", "amanhã"),
    ("calend?rio", "calendário"),
    ("presen?a", "presença"),
    ("voc?", "você"),
    ("poss?vel", "possível"),
    ("m?dulo", "módulo"),
    ("necess?ria", "necessária"),
    ("necess?rias", "necessárias"),
    ("vers?o", "versão"),
    ("revis?o", "revisão"),
    ("dispon?veis", "disponíveis"),
    ("indispon?veis", "indisponíveis"),
    ("pr?xima", "próxima"),
    ("pr?ximo", "próximo"),
    ("ol?", "olá"),
    ("per?odo", "período"),
    ("conclu?da", "concluída"),
    ("haver?", "haverá"),
    ("poder?o", "poderão"),
    ("autom?tica", "automática"),
)


def _damaged_word_rule(damaged: str, correct: str) -> CorrectionRule:
    body = re.escape(damaged).replace(r"\?", f"[{MARKER}ç]")
    return _rule(f"word:{correct}", rf"(?<!\w){body}(?!\w)", correct)


# -----------------------------------------------------------------------------
# 4. Marker endings
# -----------------------------------------------------------------------------

MARKER_ENDINGS: tuple[tuple[str, str, str], ...] = (
    ("marker_pair_cao", f"{MARKER}{MARKER}o", "ção"),
    ("marker_pair_ao", f"{MARKER}{MARKER}", "ão"),
    ("tilde_marker_o", f"ã{MARKER}o", "ção"),
    ("crase_before_time", rf"(?<!\w)[{MARKER}ç]s(?=\s+\d)", "às"),
)


# -----------------------------------------------------------------------------
# 6. Wrong-letter cleanups (run after the resolver, never contain a marker)
# -----------------------------------------------------------------------------

LETTER_CLEANUPS: tuple[tuple[str, str, str], ...] = (
    ("double_cedilla", "çço", "ção"),
    ("tilde_before_ao", "ã(?=ão)", "ç"),
    ("missing_cedilla_acao", r"(?<=\w)aão", "ação"),
    ("tilde_before_oes", "ãoes", "ções"),
    ("tilde_o_da", "õda", "ída"),
    ("tilde_o_xito", "õxito", "êxito"),
    ("tilde_o_veis", "õveis", "íveis"),
    ("cedilla_da", "çda", "ída"),
    ("cedilla_xito", "çxito", "êxito"),
    ("cedilla_xima", "çxima", "óxima"),
    ("cedilla_ximo", "çximo", "óximo"),
    ("cedilla_odo", "çodo", "íodo"),
    ("cedilla_tica", "çtica", "ática"),
    ("cedilla_veis", "çveis", "íveis"),
)


# -----------------------------------------------------------------------------
# Family 2: accents dropped in transit
# -----------------------------------------------------------------------------

ACCENT_RESTORATIONS: tuple[tuple[str, str], ...] = (
    ("voce", "você"),
    ("modulo", "módulo"),
    ("versao", "versão"),
    ("autenticacao", "autenticação"),
    ("correcao", "correção"),
    ("possivel", "possível"),
    ("proxima", "próxima"),
    ("atribuido", "atribuído"),
    ("implementacao", "implementação"),
    ("prototipo", "protótipo"),
    ("alteracoes", "alterações"),
    ("necessarias", "necessárias"),
    ("aprovacao", "aprovação"),
    ("pagina", "página"),
    ("notificacao", "notificação"),
    ("notificacoes", "notificações"),
    ("informacao", "informação"),
    ("configuracao", "configuração"),
    ("reuniao", "reunião"),
    ("disponivel", "disponível"),
)


def _accent_rule(bare: str, accented: str) -> CorrectionRule:
    return CorrectionRule(
        f"accent:{accented}",
        re.compile(rf"\b{bare}\b", re.IGNORECASE),
        _outside_urls(_cased(accented)),
        RuleFamily.ACCENT,
    )


def build_rule_table() -> tuple[CorrectionRule, ...]:
    """Assemble the ordered table. Family 1 first, specific before generic."""
    rules: list[CorrectionRule] = [_mojibake_rule(), PLACEHOLDER_RULE]
    rules.extend(_damaged_word_rule(damaged, correct) for damaged, correct in DAMAGED_WORDS)
    rules.extend(_rule(name, pattern, replacement) for name, pattern, replacement in MARKER_ENDINGS)
    rules.append(CorrectionRule("context_resolver", MARKER_PATTERN, resolve_match))
    rules.extend(_rule(name, pattern, replacement) for name, pattern, replacement in LETTER_CLEANUPS)
    rules.extend(_accent_rule(bare, accented) for bare, accented in ACCENT_RESTORATIONS)
    return tuple(rules)


RULE_TABLE: tuple[CorrectionRule, ...] = build_rule_table()
