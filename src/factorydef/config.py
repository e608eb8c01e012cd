"""
Process-wide configuration for factory definitions.

This module holds the callback-name registry shared by every factory
definition. It starts with the framework's lifecycle events and grows as
factories declare new ``before``/``after`` hooks:

1. ``DefinitionProxy.callback()`` registers the hook name here
2. ``Callback`` checks its name against this registry
3. Legacy bare calls (``before_create``) are recognised through it

Replace the registry with set_callback_registry() when an application needs
an isolated set of names (for example, in tests).
"""

import logging
from typing import FrozenSet, Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_CALLBACK_NAMES = ("after_build", "after_create", "after_stub", "before_create")


class CallbackRegistry:
    """Set of callback names that factories may attach hooks to."""

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._defaults = frozenset(DEFAULT_CALLBACK_NAMES if names is None else names)
        self._names = set(self._defaults)

    @property
    def callback_names(self) -> FrozenSet[str]:
        return frozenset(self._names)

    def register_callback(self, name: str) -> str:
        """
        Register a callback name.

        Args:
            name: Callback name such as ``after_build`` or ``before_publish``

        Returns:
            The registered name, as a string
        """
        name = str(name)
        if name not in self._names:
            logger.debug(f"Registered callback name '{name}'")
        self._names.add(name)
        return name

    def __contains__(self, name) -> bool:
        return str(name) in self._names

    def reset(self) -> None:
        """Forget every name registered since construction."""
        self._names = set(self._defaults)


# Global framework configuration
_callback_registry: CallbackRegistry = CallbackRegistry()


def set_callback_registry(registry: CallbackRegistry) -> None:
    """
    Set the callback registry used by proxies created without one.

    Args:
        registry: The registry to install

    Example:
        >>> from factorydef.config import CallbackRegistry, set_callback_registry
        >>> set_callback_registry(CallbackRegistry())
    """
    global _callback_registry
    _callback_registry = registry


def get_callback_registry() -> CallbackRegistry:
    """Get the process-wide callback registry."""
    return _callback_registry


def callback_names() -> FrozenSet[str]:
    """Names currently recognised by the process-wide callback registry."""
    return _callback_registry.callback_names


def register_callback(name: str) -> str:
    """Register a callback name with the process-wide callback registry."""
    return _callback_registry.register_callback(name)
