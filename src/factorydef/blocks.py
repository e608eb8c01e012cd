"""Helpers for calling user-supplied blocks with a flexible number of arguments."""

import inspect
from typing import Any, Callable


def block_arity(block: Callable) -> int:
    """
    Count the positional arguments a block accepts.

    Returns -1 when the block takes ``*args``. Callables whose signature
    cannot be inspected (some builtins) are treated as taking no arguments.
    """
    try:
        signature = inspect.signature(block)
    except (TypeError, ValueError):
        return 0

    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            return -1
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def call_block(block: Callable, *args: Any) -> Any:
    """Call block with as many leading args as it accepts."""
    arity = block_arity(block)
    if arity < 0:
        return block(*args)
    return block(*args[:arity])
