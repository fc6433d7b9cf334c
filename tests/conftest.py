"""
RL4 Router Test Configuration
-----------------------------
Shared fixtures and test doubles.

Async operations are driven with asyncio.run() so no event loop plugin
is needed.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from commands.registry import CommandEntry, CommandRegistry  # noqa: E402
from core.errors import PersistenceError, ScanError  # noqa: E402


FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


ANALYZER_TS = '''import * as fs from 'fs';

/**
 * Run a full scan of the codebase
 */
export async function analyzeCodebase(root: string): Promise<void> {
}

// Summarize current workspace health
export function getStatusReport(): string {
    return '';
}

export const buildSnapshot = async (id: string) => {
    return id;
};
'''

MANAGER_TS = '''export class TaskManager {
    /**
     * Create a task from a plan item
     */
    public async createTask(name: string): Promise<void> {
    }

    public listTasks(): string[] {
        return [];
    }

    private hidden(): void {
    }
}
'''


class FakeScanner:
    """Scanner double returning fixed entries or raising."""

    def __init__(self, entries: Optional[List[CommandEntry]] = None, error: Optional[Exception] = None):
        self.entries = list(entries or [])
        self.error = error
        self.calls = 0

    async def scan(self, workspace_root) -> List[CommandEntry]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.entries)


class FakeStore:
    """In-memory store double."""

    def __init__(
        self,
        registry: Optional[CommandRegistry] = None,
        save_error: Optional[Exception] = None,
        now: datetime = FIXED_NOW,
    ):
        self.registry = registry
        self.save_error = save_error
        self.now = now
        self.loads = 0
        self.saves = 0

    def load(self, path) -> Optional[CommandRegistry]:
        self.loads += 1
        return self.registry

    async def save(self, entries, path) -> CommandRegistry:
        self.saves += 1
        if self.save_error is not None:
            raise self.save_error
        self.registry = CommandRegistry.create(entries, now=self.now)
        return self.registry


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def workspace(tmp_path):
    """A workspace with a small TypeScript source tree."""
    source = tmp_path / "extension"
    (source / "core").mkdir(parents=True)
    (source / "node_modules" / "lib").mkdir(parents=True)

    (source / "core" / "Analyzer.ts").write_text(ANALYZER_TS, encoding="utf-8")
    (source / "TaskManager.ts").write_text(MANAGER_TS, encoding="utf-8")
    (source / "types.d.ts").write_text("export function declared(): void;\n", encoding="utf-8")
    (source / "node_modules" / "lib" / "index.ts").write_text(
        "export function vendored() {}\n", encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def sample_entries():
    """Entries covering name, description and context matches."""
    return [
        CommandEntry(function="analyzeCodebase", description="Run a full scan", file="core/Analyzer.ts"),
        CommandEntry(function="getStatusReport", description="Summarize workspace health", file="core/Analyzer.ts"),
        CommandEntry(function="TaskManager.createTask", description="Create a task from a plan item",
                     file="TaskManager.ts"),
        CommandEntry(function="format_output", file="utils.ts"),
    ]


@pytest.fixture
def fake_scanner(sample_entries):
    return FakeScanner(sample_entries)


@pytest.fixture
def failing_scanner():
    return FakeScanner(error=ScanError("disk unreadable", path="/nowhere"))


@pytest.fixture
def failing_store():
    return FakeStore(save_error=PersistenceError("read-only filesystem", path="/nowhere"))
