# Validation module - Structural checks for RL4 project-state documents
# Missing keys are reported as data; nothing here raises on bad documents

from .frontmatter import ParsedDocument, parse_document, render_document
from .required_keys import (
    RL4File, RequiredKeysValidator, RequiredKeysResult, CombinedValidationResult,
)
from .documents import (
    load_rl4_documents, validate_documents, validate_rl4_texts, validate_rl4_directory,
)

__all__ = [
    "ParsedDocument", "parse_document", "render_document",
    "RL4File", "RequiredKeysValidator", "RequiredKeysResult", "CombinedValidationResult",
    "load_rl4_documents", "validate_documents", "validate_rl4_texts", "validate_rl4_directory",
]
