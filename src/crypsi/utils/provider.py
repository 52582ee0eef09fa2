"""Async dispatch of blocking provider calls for crypsi."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


async def run_provider(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking provider call in a worker thread.

    Args:
        func: The provider callable.
        *args: Positional arguments for the callable.

    Returns:
        Whatever the callable returns. Exceptions propagate unchanged.
    """
    return await asyncio.to_thread(func, *args)
