"""Decorators for command functions."""

import asyncio
import functools
import time
from collections.abc import Callable

import typer

from taskflow.models.exceptions import TaskFlowError
from taskflow.services.task_store import close_task_store
from taskflow.utils.exit_codes import ERROR_GENERAL
from taskflow.utils.logger import get_logger
from taskflow.utils.ui.formatters import format_error


async def _run_and_close(func: Callable, *args, **kwargs):
    try:
        return await func(*args, **kwargs)
    finally:
        # HTTP clients are bound to this event loop
        await close_task_store()


def command_wrapper(_func: Callable | None = None):
    """Wrap a command: timing logs, async execution and error to exit-code mapping."""

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger("commands")
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(_run_and_close(func, *args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                logger.info("command completed: %s (%.3fs)", cmd, time.monotonic() - start)
                return result

            except TaskFlowError as e:
                logger.error(
                    "command failed: %s (%.3fs) - %s", cmd, time.monotonic() - start, e
                )
                format_error(str(e))
                raise typer.Exit(code=e.exit_code) from e

            except typer.Exit:
                # Typer's own exits (--help, explicit Exit(0), aborted prompts)
                raise

            except Exception as e:
                logger.exception("command failed: %s (%.3fs)", cmd, time.monotonic() - start)
                format_error(f"An unexpected error occurred: {e}")
                raise typer.Exit(code=ERROR_GENERAL) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
