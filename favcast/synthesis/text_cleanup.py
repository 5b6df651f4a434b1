"""
Cleanup rules for generated narration.

Each rule is a (pattern, replacement) pair applied in order; the replacement
is a string or a callable, as accepted by ``re.sub``. Greeting and farewell
framing belongs to the fixed script boilerplate only, so it is stripped from
generated sections. Sentences that carry news are kept even when the model
opens them with a concluding word.
"""

import re
from typing import Callable, Union

CleanupRule = tuple[re.Pattern, Union[str, Callable[[re.Match], str]]]

_GREETING = r"(?:hello|hi|hey|good (?:morning|afternoon|evening|day)|welcome(?: back)?)"
_TRANSITION = r"(?i:in summary|to sum up|to summarize|to conclude|in conclusion|finally|all in all|last but not least)"
_SIGN_OFF = (
    r"(?i:that'?s (?:all|it) for (?:today|now|this (?:week|segment))"
    r"|thanks for listening|thank you for listening|see you next time|until next time"
    r"|today'?s topics were)"
)
_SENTENCE_START = r"(?:^|(?<=[.!?]))[ \t]*"


def _capitalize_after_transition(match: re.Match) -> str:
    return match.group(1) + match.group(2).upper()


NARRATION_CLEANUP_RULES: list[CleanupRule] = [
    # Opening greeting clause: "Hello everyone, ..." / "Good day! ..."
    (re.compile(rf"\A\s*{_GREETING}\b[^.!?,\n]*[.!?,]\s*", re.IGNORECASE), ""),
    # Trailing recap with nothing named in it: "In summary, a busy week."
    (re.compile(rf"{_SENTENCE_START}{_TRANSITION},?[ \t]+(?:[a-z']+[ \t]+){{0,7}}[a-z']+[.!]?\s*\Z", re.MULTILINE), ""),
    # Concluding word in front of a real sentence: "Finally, Zig 1.0 ..." -> "Zig 1.0 ..."
    (re.compile(rf"(^[ \t]*|(?<=[.!?])[ \t]+){_TRANSITION}\b[ \t]*,?[ \t]*(\w)", re.MULTILINE), _capitalize_after_transition),
    # Trailing sign-off sentence(s)
    (re.compile(rf"{_SENTENCE_START}{_SIGN_OFF}\b[^\n]*\s*\Z", re.MULTILINE), ""),
    # At most one blank line between paragraphs
    (re.compile(r"\n{3,}"), "\n\n"),
]


def apply_rules(text: str, rules: list[CleanupRule]) -> str:
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


def clean_narration(text: str) -> str:
    return apply_rules(text, NARRATION_CLEANUP_RULES).strip()
