#!/usr/bin/env python3
"""
RL4 Router - Intent to Workspace Command Resolution
====================================================

Command-line entry point. Every subcommand initializes the router (loading
or rebuilding the command registry) before resolving anything.

Usage:
    python main.py find analyze "scan the codebase"   # Ranked matches
    python main.py list                               # All registered commands
    python main.py rebuild                            # Force a registry rebuild
    python main.py validate --strict                  # Check Plan/Tasks/Context.RL4
    python main.py run status                         # Execute the best match

Exit codes:
    0  success
    1  no matches / invalid documents / execution failed
    2  the registry could not be initialized
    130 interrupted
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from commands import CommandEntry, CommandExecutor, IntentRouter
from core.errors import ErrorHandler, RouterError
from infra.config import RouterConfig, load_config
from infra.logging import (
    OperationContext, configure_logging, get_logger, shutdown_logging, with_operation_context,
)
from validation import CombinedValidationResult, validate_rl4_directory

EXIT_OK = 0
EXIT_NO_RESULT = 1
EXIT_INIT_FAILED = 2
EXIT_INTERRUPTED = 130

console = Console()


def setup_logging(config: RouterConfig, workspace: Path, level: Optional[str] = None) -> None:
    """Configure logging from config, with an optional level override."""
    level_name = (level or config.log_level).upper()
    log_dir = None
    if config.log_dir:
        log_dir = Path(config.log_dir)
        if not log_dir.is_absolute():
            log_dir = workspace / log_dir
    configure_logging(
        level=getattr(logging, level_name, logging.INFO),
        log_dir=str(log_dir) if log_dir else None,
        console=True,
        file=log_dir is not None,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="RL4 Router - resolve intents to workspace commands"
    )
    parser.add_argument(
        "--workspace", "-w",
        default=".",
        help="Workspace root (default: current directory)"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to configuration file (default: <workspace>/config.yaml)"
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides config)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    find = subparsers.add_parser("find", help="Find commands matching an intent")
    find.add_argument("intent", help="Intent label, e.g. analyze, status")
    find.add_argument("text", nargs="*", help="Optional free text for context")
    find.add_argument("--limit", "-n", type=int, default=10, help="Maximum results")
    find.add_argument("--json", action="store_true", help="Print JSON")

    list_cmd = subparsers.add_parser("list", help="List all registered commands")
    list_cmd.add_argument("--json", action="store_true", help="Print JSON")

    subparsers.add_parser("rebuild", help="Rescan the workspace and rewrite the registry")

    validate = subparsers.add_parser("validate", help="Validate Plan/Tasks/Context.RL4")
    validate.add_argument("--strict", action="store_true", help="Require a frontmatter block")
    validate.add_argument("--json", action="store_true", help="Print JSON")

    run = subparsers.add_parser("run", help="Execute the best command for an intent")
    run.add_argument("intent", help="Intent label")
    run.add_argument("text", nargs="*", help="Optional free text for context")

    return parser


def print_commands(entries: List[CommandEntry], title: str) -> None:
    """Render command entries as a table."""
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Function", style="bold cyan")
    table.add_column("File", style="dim")
    table.add_column("Description")

    for index, entry in enumerate(entries, start=1):
        table.add_row(str(index), entry.function, entry.file or "", entry.description or "")

    console.print(table)


def print_validation(result: CombinedValidationResult) -> None:
    """Render validation results, one line per document."""
    for item in result.results:
        if item.valid:
            console.print(f"[green]✓[/green] {item.file.value}")
        else:
            console.print(f"[red]✗[/red] {item.file.value}")
            for missing in item.missing:
                console.print(f"    [dim]missing:[/dim] {missing}")

    style = "green" if result.valid else "red"
    console.print(Panel(
        "All RL4 documents are valid" if result.valid else "Some RL4 documents are invalid",
        border_style=style,
    ))


async def initialize_router(router: IntentRouter, handler: ErrorHandler) -> bool:
    """Initialize the router; report failures distinctly from empty results."""
    try:
        await router.initialize()
    except RouterError as e:
        console.print(f"[bold red]Registry unavailable:[/bold red] {handler.handle_exception(e)}")
        return False
    return True


async def cmd_find(args, router: IntentRouter, handler: ErrorHandler) -> int:
    if not await initialize_router(router, handler):
        return EXIT_INIT_FAILED

    text = " ".join(args.text) or None
    matches = router.find_commands(args.intent, text)
    limited = matches[:max(args.limit, 0)]

    if args.json:
        console.print_json(data=[entry.to_dict() for entry in limited])
    elif matches:
        print_commands(limited, f"Commands for '{args.intent}' ({len(matches)} matches)")
    else:
        console.print(f"[yellow]No commands match '{args.intent}'[/yellow]")

    return EXIT_OK if matches else EXIT_NO_RESULT


async def cmd_list(args, router: IntentRouter, handler: ErrorHandler) -> int:
    if not await initialize_router(router, handler):
        return EXIT_INIT_FAILED

    entries = router.get_all_commands()
    if args.json:
        console.print_json(data=router.registry.to_dict())
    else:
        print_commands(entries, f"Registered commands ({len(entries)})")
    return EXIT_OK


async def cmd_rebuild(args, router: IntentRouter, handler: ErrorHandler) -> int:
    try:
        await router.refresh()
    except RouterError as e:
        console.print(f"[bold red]Rebuild failed:[/bold red] {handler.handle_exception(e)}")
        return EXIT_INIT_FAILED

    registry = router.registry
    console.print(
        f"[green]Registry rebuilt:[/green] {registry.total_commands} commands "
        f"[dim]({router.registry_path})[/dim]"
    )
    return EXIT_OK


async def cmd_run(args, router: IntentRouter, handler: ErrorHandler, config: RouterConfig) -> int:
    if not await initialize_router(router, handler):
        return EXIT_INIT_FAILED

    executor = CommandExecutor(
        router.workspace_root,
        source_dir=config.source_dir,
        logger=get_logger("commands.executor"),
    )

    matches = router.find_commands(args.intent, " ".join(args.text) or None)
    editor_command = executor.map_intent_to_editor_command(args.intent)

    if not matches:
        if editor_command:
            console.print(f"[yellow]No workspace command; editor command:[/yellow] {editor_command}")
            return EXIT_OK
        console.print(f"[yellow]No commands match '{args.intent}'[/yellow]")
        return EXIT_NO_RESULT

    result = executor.execute_command(matches[0])
    style = "green" if result.success else "red"
    console.print(f"[{style}]{executor.format_result(result)}[/{style}]")
    if result.note:
        console.print(f"[dim]{result.note}[/dim]")
    if editor_command:
        console.print(f"[dim]Editor command: {editor_command}[/dim]")

    return EXIT_OK if result.success else EXIT_NO_RESULT


@with_operation_context
def cmd_validate(args, workspace: Path, config: RouterConfig) -> int:
    rl4_dir = Path(config.rl4_dir)
    if not rl4_dir.is_absolute():
        rl4_dir = workspace / rl4_dir

    result = validate_rl4_directory(rl4_dir, strict=args.strict, logger=get_logger("validation"))

    if args.json:
        console.print_json(data=result.to_dict())
    else:
        print_validation(result)

    return EXIT_OK if result.valid else EXIT_NO_RESULT


async def dispatch(args, workspace: Path, config: RouterConfig) -> int:
    handler = ErrorHandler(logger=get_logger("errors"))

    if args.command == "validate":
        return cmd_validate(args, workspace, config)

    router = IntentRouter.from_config(workspace, config, logger=get_logger("commands.router"))

    if args.command == "find":
        return await cmd_find(args, router, handler)
    if args.command == "list":
        return await cmd_list(args, router, handler)
    if args.command == "rebuild":
        return await cmd_rebuild(args, router, handler)
    if args.command == "run":
        return await cmd_run(args, router, handler, config)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    workspace = Path(args.workspace).resolve()
    config_path = Path(args.config) if args.config else workspace / "config.yaml"

    try:
        config = load_config(config_path)
    except RouterError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        return EXIT_INIT_FAILED

    setup_logging(config, workspace, args.log_level)
    logger = get_logger("main")

    try:
        with OperationContext():
            return asyncio.run(dispatch(args, workspace, config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception("Fatal error")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1
    finally:
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
