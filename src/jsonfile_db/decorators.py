"""Decorators for the engine and the CLI (command log, error handling)."""

from __future__ import annotations

import datetime as _dt
import functools
import sys
from typing import Any, Callable, TypeVar

from .errors import DBError

F = TypeVar("F", bound=Callable[..., Any])


def handle_db_errors(func: F) -> F:
    """Catches domain errors, prints a friendly message and returns exit code 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):  # type: ignore[no-untyped-def]
        try:
            return func(*args, **kwargs)
        except DBError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            print("\nInterrupted by user.", file=sys.stderr)
            return 130

    return wrapper  # type: ignore[return-value]


def log_command(func: F) -> F:
    """Appends one line per call to the command log of the instance.

    Expects an instance method: args[0] has a `log_path` attribute
    (a Path or None, None disables logging).
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):  # type: ignore[no-untyped-def]
        self = args[0]
        lp = getattr(self, "log_path", None)
        if lp is None:
            return func(*args, **kwargs)

        start = _dt.datetime.now()
        status = "ok"
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            status = f"error:{type(exc).__name__}"
            raise
        finally:
            elapsed = (_dt.datetime.now() - start).total_seconds() * 1000.0
            line = (
                f"{start.isoformat(timespec='seconds')}\t{func.__qualname__}\t"
                f"args={args[1:]}\tkwargs={kwargs}\t{status}\t{elapsed:.2f}ms\n"
            )
            try:
                lp.parent.mkdir(parents=True, exist_ok=True)
                with lp.open("a", encoding="utf-8") as f:
                    f.write(line)
            except OSError:
                # Logging must not break main flow.
                pass

    return wrapper  # type: ignore[return-value]
