"""Lifecycle hooks attached to factory definitions."""

from typing import Any, Callable, Optional

from .blocks import call_block
from .config import CallbackRegistry, get_callback_registry
from .errors import InvalidCallbackNameError


class Callback:
    """
    A named hook run by the build strategy at a lifecycle point.

    The name must already be known to the callback registry; the definition
    proxy registers it before constructing the callback.
    """

    def __init__(self, name: str, block: Callable, registry: Optional[CallbackRegistry] = None):
        self.name = str(name)
        self.block = block
        registry = registry if registry is not None else get_callback_registry()
        if self.name not in registry:
            raise InvalidCallbackNameError(
                f"{self.name} is not a valid callback name. "
                f"Valid callback names are {sorted(registry.callback_names)}"
            )

    def run(self, instance: Any, context: Any = None) -> Any:
        """Call the block with the built instance and, if it takes one, the build context."""
        return call_block(self.block, instance, context)

    def __eq__(self, other):
        if not isinstance(other, Callback):
            return NotImplemented
        return self.name == other.name and self.block is other.block

    def __hash__(self):
        return hash((self.name, id(self.block)))

    def __repr__(self):
        return f"Callback({self.name!r})"
