"""
Intent Vocabulary
-----------------
Fixed intent -> keyword synonyms table, plus the intent -> editor command
table used by the executor.

Both tables are read-only. Keyword order is preserved.
"""

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

INTENT_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "analyze": ("analyze", "analysis", "examine", "inspect", "check", "scan", "audit"),
    "status": ("status", "state", "health", "info", "report", "summary", "overview"),
    "reflect": ("reflect", "review", "summary", "recap", "daily", "report"),
    "synthesize": ("synthesize", "generate", "create", "build", "make", "produce"),
    "go": ("go", "execute", "run", "launch", "start", "perform", "do"),
    "help": ("help", "assist", "guide", "support", "documentation"),
    "context": ("context", "contexte", "background", "history"),
    "patterns": ("pattern", "motif", "recurring", "repeat"),
    "correlations": ("correlation", "relation", "link", "connection"),
    "adrs": ("adr", "decision", "architecture", "choice"),
    "task": ("task", "todo", "plan", "action", "work"),
    "commit": ("commit", "commits", "git", "push"),
    "file": ("file", "files", "document", "code"),
    "test": ("test", "testing", "spec", "verify"),
})

EDITOR_COMMANDS: Mapping[str, str] = MappingProxyType({
    "analyze": "reasoning.captureNow",
    "status": "reasoning.showOutput",
    "context": "reasoning.showOutput",
    "reflect": "reasoning.showOutput",
    "synthesize": "reasoning.showOutput",
    "go": "reasoning.showOutput",
    "help": "reasoning.showOutput",
})


def normalize_intent(intent: str) -> str:
    return intent.strip().lower()


def resolve_keywords(intent: str) -> Tuple[str, ...]:
    """
    Keywords for an intent label.

    Unknown labels fall back to the label itself as the only keyword.
    """
    keywords = INTENT_KEYWORDS.get(normalize_intent(intent))
    if keywords is None:
        return (intent,)
    return keywords


def editor_command_for(intent: str) -> Optional[str]:
    """Editor command bound to an intent, or None."""
    return EDITOR_COMMANDS.get(normalize_intent(intent))
