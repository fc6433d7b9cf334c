"""
Required Keys Validator
-----------------------
Guarantees that Plan.RL4, Tasks.RL4 and Context.RL4 carry their minimal
header fields and section markers.

Missing keys are reported as data, not raised:
- "frontmatter.<key>"              header field absent
- "frontmatter.<key> (must be array)"  present but not a list
- "section: <marker>"              marker not found in the body
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class RL4File(str, Enum):
    """The three RL4 project-state documents."""
    PLAN = "Plan.RL4"
    TASKS = "Tasks.RL4"
    CONTEXT = "Context.RL4"


@dataclass(frozen=True)
class DocumentRules:
    """Required header fields and section markers for one document kind."""
    frontmatter: Tuple[str, ...]
    sections: Tuple[str, ...]
    array_fields: Tuple[str, ...] = ()


RULES: Dict[RL4File, DocumentRules] = {
    RL4File.PLAN: DocumentRules(
        frontmatter=("version", "updated"),
        sections=("## Phase", "## Goal", "## Timeline", "## Success Criteria"),
    ),
    RL4File.TASKS: DocumentRules(
        frontmatter=("version", "updated"),
        sections=("## Active",),
    ),
    RL4File.CONTEXT: DocumentRules(
        frontmatter=("version", "updated", "kpis_llm", "kpis_kernel"),
        sections=("## Active Files", "## Recent Activity"),
        array_fields=("kpis_llm", "kpis_kernel"),  # may be empty, must be lists
    ),
}


@dataclass
class RequiredKeysResult:
    """Outcome of validating one document."""
    valid: bool
    missing: List[str]
    file: RL4File

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "missing": list(self.missing), "file": self.file.value}


@dataclass
class CombinedValidationResult:
    """Outcome of validating all three documents."""
    valid: bool
    results: List[RequiredKeysResult] = field(default_factory=list)

    def result_for(self, file: RL4File) -> Optional[RequiredKeysResult]:
        for result in self.results:
            if result.file == file:
                return result
        return None

    @property
    def errors(self) -> List[str]:
        """One line per invalid document."""
        return [
            f"{r.file.value}: Missing required keys - {', '.join(r.missing)}"
            for r in self.results if not r.valid
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "results": [r.to_dict() for r in self.results]}


class RequiredKeysValidator:
    """
    Static checks for RL4 header fields and section markers.

    Values are not inspected except for the array fields of Context.RL4.
    Sections are literal substrings, found in any order.
    """

    @staticmethod
    def validate(file: RL4File, frontmatter: Any, markdown: str) -> RequiredKeysResult:
        rules = RULES[file]
        header: Mapping[str, Any] = frontmatter if isinstance(frontmatter, Mapping) else {}
        body = markdown or ""
        missing: List[str] = []

        for key in rules.frontmatter:
            if key not in header:
                missing.append(f"frontmatter.{key}")

        for key in rules.array_fields:
            if key in header and not isinstance(header[key], list):
                missing.append(f"frontmatter.{key} (must be array)")

        for section in rules.sections:
            if section not in body:
                missing.append(f"section: {section}")

        return RequiredKeysResult(valid=not missing, missing=missing, file=file)

    @classmethod
    def validate_plan(cls, frontmatter: Any, markdown: str) -> RequiredKeysResult:
        """Validate Plan.RL4 required keys."""
        return cls.validate(RL4File.PLAN, frontmatter, markdown)

    @classmethod
    def validate_tasks(cls, frontmatter: Any, markdown: str) -> RequiredKeysResult:
        """Validate Tasks.RL4 required keys."""
        return cls.validate(RL4File.TASKS, frontmatter, markdown)

    @classmethod
    def validate_context(cls, frontmatter: Any, markdown: str) -> RequiredKeysResult:
        """Validate Context.RL4 required keys."""
        return cls.validate(RL4File.CONTEXT, frontmatter, markdown)

    @classmethod
    def validate_all(
        cls,
        plan_frontmatter: Any,
        plan_markdown: str,
        tasks_frontmatter: Any,
        tasks_markdown: str,
        context_frontmatter: Any,
        context_markdown: str,
    ) -> CombinedValidationResult:
        """Validate all three documents. Every document is always checked."""
        results = [
            cls.validate_plan(plan_frontmatter, plan_markdown),
            cls.validate_tasks(tasks_frontmatter, tasks_markdown),
            cls.validate_context(context_frontmatter, context_markdown),
        ]
        return CombinedValidationResult(valid=all(r.valid for r in results), results=results)
