"""
Code Scanner
------------
Discovers exported TypeScript functions under a workspace source directory
and turns them into CommandEntry records.

Recognized declarations, in extraction order per file:
1. export [async] function name(...)
2. export const name = [async] (...) =>
3. public [async] method(...) inside an exported class -> "Class.method"

Descriptions come from the first text line of a /** ... */ block (or a
// comment) directly above the declaration.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union
import asyncio
import logging
import os
import re

from core.errors import ScanError
from .registry import CommandEntry, EntryType

DEFAULT_SOURCE_DIR = "extension"
DEFAULT_EXTENSIONS: Tuple[str, ...] = (".ts",)
SKIP_DIRS = frozenset({"node_modules", "dist", "out"})

_FUNCTION_PATTERN = re.compile(r"export\s+(async\s+)?function\s+(\w+)\s*\(")
_ARROW_PATTERN = re.compile(r"export\s+const\s+(\w+)\s*=\s*(async\s+)?\([^)]*\)\s*=>")
_CLASS_PATTERN = re.compile(r"export\s+class\s+(\w+)")
_METHOD_PATTERN = re.compile(r"public\s+(async\s+)?(\w+)\s*\(")

_BLOCK_COMMENT_START = "/**"
_BLOCK_COMMENT_END = "*/"


def extract_description(content: str, position: int) -> Optional[str]:
    """
    First text line of the comment directly above `position`.

    Only whitespace may separate the comment from the declaration.
    JSDoc tag lines (@param, @returns, ...) are ignored.
    """
    before = content[:position].rstrip()

    if before.endswith(_BLOCK_COMMENT_END):
        start = before.rfind(_BLOCK_COMMENT_START)
        if start == -1:
            return None
        block = before[start + len(_BLOCK_COMMENT_START):-len(_BLOCK_COMMENT_END)]
        for line in block.splitlines():
            text = line.strip().lstrip("*").strip()
            if text and not text.startswith("@"):
                return text
        return None

    last_line = before.rsplit("\n", 1)[-1].strip()
    if last_line.startswith("//"):
        text = last_line.lstrip("/").strip()
        return text or None

    return None


def extract_functions(content: str, file_path: str) -> List[CommandEntry]:
    """Extract exported functions, arrow functions and public class methods."""
    entries: List[CommandEntry] = []

    for match in _FUNCTION_PATTERN.finditer(content):
        entries.append(CommandEntry(
            function=match.group(2),
            file=file_path,
            type=EntryType.FUNCTION,
            is_async=bool(match.group(1)),
            description=extract_description(content, match.start()),
        ))

    for match in _ARROW_PATTERN.finditer(content):
        entries.append(CommandEntry(
            function=match.group(1),
            file=file_path,
            type=EntryType.ARROW,
            is_async=bool(match.group(2)),
            description=extract_description(content, match.start()),
        ))

    # A class body runs until the next exported class
    classes = list(_CLASS_PATTERN.finditer(content))
    for index, class_match in enumerate(classes):
        class_name = class_match.group(1)
        body_end = classes[index + 1].start() if index + 1 < len(classes) else len(content)

        for method in _METHOD_PATTERN.finditer(content, class_match.end(), body_end):
            entries.append(CommandEntry(
                function=f"{class_name}.{method.group(2)}",
                file=file_path,
                type=EntryType.METHOD,
                is_async=bool(method.group(1)),
                class_name=class_name,
                description=extract_description(content, method.start()),
            ))

    return entries


class CodeScanner:
    """
    Scans a workspace source tree for callable commands.

    Responsibilities:
    - Walk the source directory in a deterministic order
    - Extract exported declarations from each source file
    - Skip unreadable files, fail on an unreadable source root
    """

    def __init__(
        self,
        source_dir: str = DEFAULT_SOURCE_DIR,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        logger: Optional[logging.Logger] = None,
    ):
        self.source_dir = source_dir
        self.extensions = tuple(extensions)
        self._logger = logger or logging.getLogger("rl4.commands.scanner")

    async def scan(self, workspace_root: Union[str, Path]) -> List[CommandEntry]:
        """Scan the workspace without blocking the event loop."""
        return await asyncio.to_thread(self.scan_sync, workspace_root)

    def scan_sync(self, workspace_root: Union[str, Path]) -> List[CommandEntry]:
        """
        Scan the workspace and return entries in scan order.

        Raises:
            ScanError: If the source directory is missing or unreadable
        """
        root = Path(workspace_root) / self.source_dir

        if not root.is_dir():
            raise ScanError(f"Source directory not found: {root}", path=str(root))

        entries: List[CommandEntry] = []
        files = self.find_source_files(root)

        for file in files:
            relative = file.relative_to(root).as_posix()
            try:
                content = file.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self._logger.warning(f"Skipping unreadable file {relative}: {e}")
                continue
            entries.extend(extract_functions(content, relative))

        self._logger.info(
            f"Scanned {len(files)} files, found {len(entries)} commands",
            extra={"total_commands": len(entries)},
        )
        return entries

    def find_source_files(self, root: Path) -> List[Path]:
        """All matching source files under root, sorted for a stable scan order."""
        failures: List[OSError] = []
        result: List[Path] = []

        for dirpath, dirnames, filenames in os.walk(root, onerror=failures.append):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for name in sorted(filenames):
                if self._is_source_file(name):
                    result.append(Path(dirpath) / name)

        for failure in failures:
            if Path(failure.filename or "") == root:
                raise ScanError(f"Cannot read source directory {root}: {failure}", path=str(root))
            self._logger.warning(f"Skipping unreadable directory {failure.filename}: {failure}")

        return result

    def _is_source_file(self, name: str) -> bool:
        if name.endswith(".d.ts"):
            return False
        return name.endswith(self.extensions)
