from __future__ import annotations

from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, TypeVar

from rocketpool_paths.core.errors import InvalidInputError

T = TypeVar("T")


def status_tuple(
    fn: Callable[..., Coroutine[Any, Any, T]],
) -> Callable[..., Coroutine[Any, Any, tuple[bool, T | str]]]:
    """Wrap an async adapter method to return ``(True, result)`` or ``(False, error_str)``.

    Rejected inputs are logged as warnings, everything else (lookup and RPC
    failures) as errors, through ``self.logger``.
    """

    @wraps(fn)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> tuple[bool, T | str]:
        try:
            result = await fn(self, *args, **kwargs)
            return (True, result)
        except InvalidInputError as exc:
            self.logger.warning(f"Rejected input in {fn.__name__}: {exc}")
            return (False, str(exc))
        except Exception as exc:
            self.logger.error(f"Error in {fn.__name__} ({type(exc).__name__}): {exc}")
            return (False, str(exc))

    return wrapper  # type: ignore[return-value]
