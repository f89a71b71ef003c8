"""
Logging and Console Utilities.

All scripts log through loguru and render summaries with rich. This module
owns the loguru sink configuration so every script produces the same format.
"""

import sys
import time
from contextlib import contextmanager
from typing import Any

from loguru import logger
from rich.console import Console
from rich.table import Table

from rtdb_admin.domain.schemas import PathSummary, ReconciliationReport

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss,SSS} - {name} - {level} - {message}"

console = Console()


def configure_logging(level: str = "INFO", sink: Any = None) -> None:
    """
    Replace loguru's default handler with a single formatted sink.

    Args:
        level: Minimum level to emit.
        sink: Destination (defaults to sys.stdout, resolved at call time).
    """
    logger.remove()
    logger.add(sink or sys.stdout, format=LOG_FORMAT, level=level)


@contextmanager
def log_execution_time(logger_instance: Any, operation: str, **context):
    """
    Context manager to log execution time of an operation.

    Args:
        logger_instance: loguru logger (or anything with info/error)
        operation: Name of the operation being timed
        **context: Additional context to include in log messages
    """
    context_str = " | ".join(f"{k}={v}" for k, v in context.items()) if context else ""
    full_context = f" | {context_str}" if context_str else ""

    start_time = time.time()
    logger_instance.info(f"Starting: {operation}{full_context}")

    try:
        yield
    except Exception as e:
        elapsed = time.time() - start_time
        logger_instance.error(
            f"Failed: {operation} | duration={elapsed:.2f}s{full_context} | error={e}"
        )
        raise
    else:
        elapsed = time.time() - start_time
        logger_instance.info(
            f"Completed: {operation} | duration={elapsed:.2f}s{full_context}"
        )


def mask_secret(value: str, visible: int = 4) -> str:
    """Show only the last few characters of a secret."""
    if not value:
        return "(empty)"
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


def create_reconciliation_table(report: ReconciliationReport) -> Table:
    """Summary table for an orphan reconciliation run."""
    title = "Orphan Reconciliation" + (" (DRY RUN)" if report.dry_run else "")
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")

    table.add_row("Auth users scanned", str(report.scanned))
    table.add_row("Profiles already present", str(report.existing), style="dim")
    table.add_row("Orphans found", str(report.orphans), style="yellow")
    table.add_row("Profiles created", str(report.created), style="green")
    table.add_row("Failed", str(report.failed), style="red" if report.failed else None)
    return table


def create_failures_table(report: ReconciliationReport) -> Table:
    table = Table(title="Records Needing Attention")
    table.add_column("UID", style="cyan")
    table.add_column("Stage", style="yellow")
    table.add_column("Username")
    table.add_column("Error", style="red")
    for failure in report.failures:
        table.add_row(
            failure.uid, failure.stage.value, failure.username or "-", failure.error
        )
    return table


def create_path_table(summary: PathSummary) -> Table:
    """Sample keys found under a path about to be removed."""
    table = Table(title=f"{summary.path} ({summary.count} children)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="cyan")
    for i, key in enumerate(summary.sample_keys, start=1):
        table.add_row(str(i), key)
    return table
