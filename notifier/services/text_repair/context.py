# notifier/services/text_repair/context.py
"""
Context resolver for the generic corruption marker.

After the rule table has fixed every sequence it recognises, any U+FFFD
left in the text is resolved by looking at a small window of characters
on each side of it. The first matching ContextRule wins; when nothing
matches the marker becomes DEFAULT_REPLACEMENT, so the output never
contains a non-renderable character.
"""

import re
from dataclasses import dataclass

MARKER = "\ufffd"
MARKER_PATTERN = re.compile(MARKER)

# Most frequent character behind a lone marker in observed data.
DEFAULT_REPLACEMENT = "ç"

WINDOW = 4


@dataclass(frozen=True)
class ContextRule:
    """
    Window rule for a single marker.

    Matches when `before` occurs anywhere in the left window and the right
    window starts with `after`. An empty string matches any window.
    """

    before: str
    after: str
    replacement: str

    def matches(self, before: str, after: str) -> bool:
        return self.before in before and after.startswith(self.after)


# Suffix rules come first: they mirror the ç-suffix fixes in the rule table,
# so a resolved marker never produces text those fixes would change again.
CONTEXT_RULES: tuple[ContextRule, ...] = (
    ContextRule("", "xito", "ê"),
    ContextRule("", "xima", "ó"),
    ContextRule("", "ximo", "ó"),
    ContextRule("", "odo", "í"),
    ContextRule("", "tica", "á"),
    ContextRule("", "veis", "í"),
    ContextRule("", "da", "í"),
    ContextRule("con", "o", "ç"),
    ContextRule("a", "o", "ã"),
)


def resolve_marker(
    before: str,
    after: str,
    rules: tuple[ContextRule, ...] = CONTEXT_RULES,
) -> str:
    """Pick the replacement for one marker given its left and right windows."""
    left = before.lower()
    right = after.lower()

    replacement = DEFAULT_REPLACEMENT
    for rule in rules:
        if rule.matches(left, right):
            replacement = rule.replacement
            break

    # CONFIGURA?AO stays upper case
    if before[-1:].isupper() and (not after[:1].isalpha() or after[:1].isupper()):
        return replacement.upper()
    return replacement


def resolve_match(match: re.Match) -> str:
    """re.sub callback: resolve the marker at match.start() in match.string."""
    source = match.string
    start, end = match.span()
    return resolve_marker(source[max(0, start - WINDOW) : start], source[end : end + WINDOW])


def resolve_markers(text: str) -> str:
    """
    Replace every marker in text, left to right.

    Each marker is resolved independently from its own window of the
    unresolved text.
    """
    if MARKER not in text:
        return text
    return MARKER_PATTERN.sub(resolve_match, text)
