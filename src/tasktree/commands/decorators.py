"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer

from tasktree.exceptions import TaskTreeError
from tasktree.utils.exit_codes import ERROR_GENERAL, exit_code_for, get_exit_code_name
from tasktree.utils.logger import get_logger
from tasktree.utils.ui.formatters import format_error


class AppError(Exception):
    """Command-level error carrying its own exit code."""

    def __init__(self, message: str, exit_code: int = ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def command_wrapper(func: Callable):
    """Run a sync or async command, log its timing and map errors to exit codes."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if inspect.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except typer.Exit:
            # Typer's own exits (--help, explicit Exit)
            raise

        except (AppError, TaskTreeError) as e:
            elapsed = time.monotonic() - start
            code = e.exit_code if isinstance(e, AppError) else exit_code_for(e)
            logger.error(
                "command failed: %s (%.3fs) [%s] - %s: %s",
                cmd,
                elapsed,
                get_exit_code_name(code),
                type(e).__name__,
                e,
            )
            format_error(str(e))
            raise typer.Exit(code=code) from e

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                e,
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {e}")
            raise typer.Exit(code=ERROR_GENERAL) from e

    return wrapper
