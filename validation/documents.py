"""
RL4 Documents
-------------
Loads Plan/Tasks/Context.RL4 from a workspace and validates them together.

A missing document is validated as an empty one, so every required key
shows up in its report.
"""

from pathlib import Path
from typing import Dict, Optional, Union
import logging

from .frontmatter import ParsedDocument, parse_document
from .required_keys import (
    CombinedValidationResult, RequiredKeysResult, RequiredKeysValidator, RL4File,
)

DEFAULT_RL4_DIR = ".reasoning_rl4"

MISSING_FRONTMATTER = "structure: missing frontmatter"
INVALID_FRONTMATTER = "structure: invalid frontmatter"

_logger = logging.getLogger("rl4.validation.documents")


def load_rl4_documents(
    rl4_dir: Union[str, Path],
    logger: Optional[logging.Logger] = None,
) -> Dict[RL4File, ParsedDocument]:
    """Read and parse the three RL4 documents from a directory."""
    logger = logger or _logger
    rl4_dir = Path(rl4_dir)
    documents: Dict[RL4File, ParsedDocument] = {}

    for kind in RL4File:
        path = rl4_dir / kind.value
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning(f"{kind.value} not found in {rl4_dir}", extra={"file": kind.value})
            text = ""
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {path}: {e}", extra={"file": kind.value})
            text = ""
        documents[kind] = parse_document(text)

    return documents


def validate_documents(
    documents: Dict[RL4File, ParsedDocument],
    strict: bool = False,
) -> CombinedValidationResult:
    """
    Validate parsed documents.

    In strict mode a document without a readable header block is invalid
    even when nothing else is missing.
    """
    def get(kind: RL4File) -> ParsedDocument:
        return documents.get(kind) or ParsedDocument()

    plan, tasks, context = get(RL4File.PLAN), get(RL4File.TASKS), get(RL4File.CONTEXT)

    combined = RequiredKeysValidator.validate_all(
        plan.frontmatter, plan.body,
        tasks.frontmatter, tasks.body,
        context.frontmatter, context.body,
    )

    if not strict:
        return combined

    results = [
        _apply_structure_check(result, get(result.file)) for result in combined.results
    ]
    return CombinedValidationResult(valid=all(r.valid for r in results), results=results)


def _apply_structure_check(result: RequiredKeysResult, document: ParsedDocument) -> RequiredKeysResult:
    if not document.has_frontmatter:
        problem = MISSING_FRONTMATTER
    elif document.error is not None:
        problem = INVALID_FRONTMATTER
    else:
        return result

    return RequiredKeysResult(valid=False, missing=[problem, *result.missing], file=result.file)


def validate_rl4_texts(
    plan: str,
    tasks: str,
    context: str,
    strict: bool = False,
) -> CombinedValidationResult:
    """Validate raw document texts."""
    return validate_documents(
        {
            RL4File.PLAN: parse_document(plan),
            RL4File.TASKS: parse_document(tasks),
            RL4File.CONTEXT: parse_document(context),
        },
        strict=strict,
    )


def validate_rl4_directory(
    rl4_dir: Union[str, Path],
    strict: bool = False,
    logger: Optional[logging.Logger] = None,
) -> CombinedValidationResult:
    """Load and validate the RL4 documents of a directory."""
    logger = logger or _logger
    combined = validate_documents(load_rl4_documents(rl4_dir, logger=logger), strict=strict)

    for result in combined.results:
        if not result.valid:
            logger.warning(
                f"{result.file.value}: missing {', '.join(result.missing)}",
                extra={"file": result.file.value, "missing": result.missing},
            )

    return combined
