"""
Intent Resolver
---------------
Deterministic keyword scoring of command entries against an intent.

No LLM logic. No I/O. Only substring matching.

Scoring per entry:
- +10 per intent keyword found in the function name
- +5  per intent keyword found in the description
- +3  per function-name word (split on '.', '_', '-') found in the input text

Entries scoring 0 are dropped. The rest are ordered by descending score;
equal scores keep registry order.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
import re

from .intents import resolve_keywords
from .registry import CommandEntry

NAME_MATCH_SCORE = 10
DESCRIPTION_MATCH_SCORE = 5
CONTEXT_MATCH_SCORE = 3

_NAME_SEPARATORS = re.compile(r"[._-]")


@dataclass(frozen=True)
class ScoredEntry:
    """An entry with its score and registry position."""
    entry: CommandEntry
    score: int
    position: int


def split_function_words(function: str) -> List[str]:
    """
    Lowercased words of a function name.

    Empty pieces (leading or doubled separators) are kept and match any
    input text.
    """
    return _NAME_SEPARATORS.split(function.lower())


def score_entry(
    entry: CommandEntry,
    keywords: Sequence[str],
    input_text: Optional[str] = None,
) -> int:
    """Score a single entry against a keyword set and optional context text."""
    score = 0
    lowered_keywords = [keyword.lower() for keyword in keywords]

    function_lower = entry.function.lower()
    for keyword in lowered_keywords:
        if keyword in function_lower:
            score += NAME_MATCH_SCORE

    if entry.description:
        description_lower = entry.description.lower()
        for keyword in lowered_keywords:
            if keyword in description_lower:
                score += DESCRIPTION_MATCH_SCORE

    if input_text:
        input_lower = input_text.lower()
        for word in split_function_words(entry.function):
            if word in input_lower:
                score += CONTEXT_MATCH_SCORE

    return score


def score_commands(
    commands: Iterable[CommandEntry],
    intent: str,
    input_text: Optional[str] = None,
) -> List[ScoredEntry]:
    """
    Score and rank every command, dropping zero scores.

    Equal scores keep registry order.
    """
    keywords = resolve_keywords(intent)

    candidates = []
    for position, entry in enumerate(commands):
        score = score_entry(entry, keywords, input_text)
        if score > 0:
            candidates.append(ScoredEntry(entry=entry, score=score, position=position))

    return sorted(candidates, key=lambda c: (-c.score, c.position))


def rank_commands(
    commands: Iterable[CommandEntry],
    intent: str,
    input_text: Optional[str] = None,
) -> List[CommandEntry]:
    """Matching entries for an intent, best first. Scores are not exposed."""
    return [c.entry for c in score_commands(commands, intent, input_text)]
