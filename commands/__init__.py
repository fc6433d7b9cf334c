# Commands module - Command registry, intent resolution and execution records
# Matching is deterministic keyword scoring. No LLM logic.

from .registry import CommandEntry, CommandRegistry, EntryType
from .intents import INTENT_KEYWORDS, EDITOR_COMMANDS, resolve_keywords
from .staleness import FRESHNESS_WINDOW, is_registry_stale
from .resolver import rank_commands, score_entry
from .scanner import CodeScanner
from .store import RegistryStore
from .router import IntentRouter
from .executor import CommandExecutor, ExecutionResult, ExecutionStatus

__all__ = [
    "CommandEntry", "CommandRegistry", "EntryType",
    "INTENT_KEYWORDS", "EDITOR_COMMANDS", "resolve_keywords",
    "FRESHNESS_WINDOW", "is_registry_stale",
    "rank_commands", "score_entry",
    "CodeScanner",
    "RegistryStore",
    "IntentRouter",
    "CommandExecutor", "ExecutionResult", "ExecutionStatus",
]
