"""Per-item execution loop for ONTAP workflow nodes.

A node receives a batch of input items and runs one ONTAP operation per
item. Items are processed one after another; with ``continue_on_fail``
a failing item yields ``{"error": message}`` instead of aborting the
batch.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from .exceptions import OntapError
from .logging_config import get_logger

logger = get_logger(__name__)

ItemOperation = Callable[[Any, int], Awaitable[Any]]


async def execute_items(
    items: Sequence[Any],
    operation: ItemOperation,
    continue_on_fail: bool = False,
) -> list[Any]:
    """Run ``operation(item, index)`` for every item, in order.

    List results are flattened into the output, so a "get many" call
    contributes one output entry per record.

    Args:
        items: Input items.
        operation: Coroutine function performing the ONTAP call.
        continue_on_fail: Record failures as ``{"error": message}`` and go on.

    Returns:
        Output entries in item order.

    Raises:
        OntapError: The first failure, unless ``continue_on_fail`` is set.
    """
    results: list[Any] = []
    for index, item in enumerate(items):
        try:
            result = await operation(item, index)
        except OntapError as e:
            if not continue_on_fail:
                raise
            logger.warning(f"Item {index} failed: {e.message}")
            results.append({"error": e.message})
            continue

        if isinstance(result, list):
            results.extend(result)
        else:
            results.append(result)
    return results
