"""Reusable bundles of declarations."""

import dataclasses
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class Trait:
    """
    Named block of declarative calls that can be mixed into a factory.

    The block is evaluated once, when the trait is defined, into the trait's
    own frozen definition. Applying the trait copies those declarations onto
    the host, so each host gets its own declaration instances while anything
    the block created (a local sequence, for example) is shared by every host
    and every build.

    Args:
        name: Trait name
        block: Callable receiving a DefinitionProxy
        callbacks: Callback-name registry used while evaluating the block;
            the process-wide one by default
    """

    def __init__(self, name: str, block: Callable, callbacks=None):
        from factorydef.definition import Definition
        from factorydef.definition_proxy import DefinitionProxy

        self.name = str(name)
        self.block = block
        self.definition = Definition(self.name)
        DefinitionProxy(self.definition, callbacks=callbacks).evaluate(block)
        self.definition.freeze()

    def apply_to(self, definition) -> None:
        """Append the trait's declarations, callbacks and overrides onto definition."""
        logger.debug(f"Applying trait '{self.name}' to '{definition.name}'")
        for declaration in self.definition.declarations:
            definition.declare_attribute(dataclasses.replace(declaration))
        for callback in self.definition.callbacks:
            definition.add_callback(callback)
        for trait in self.definition.defined_traits.values():
            definition.defined_traits.setdefault(trait.name, trait)
        if self.definition.constructor is not None:
            definition.define_constructor(self.definition.constructor)
        if self.definition.create_block is not None:
            definition.to_create(self.definition.create_block)

    def __repr__(self):
        return f"Trait({self.name!r})"
