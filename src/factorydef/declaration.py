"""
Attribute declarations recorded by factory definitions.

A declaration is the rule for one attribute: a literal value, a lazily
computed block, an implicit reference to a sequence or factory of the same
name, or an association built through another factory. Declarations are
immutable; the build strategy resolves them against a build context once per
instance.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple

from .blocks import call_block
from .errors import NoSuchAttributeError

logger = logging.getLogger(__name__)


class BuildContext(Protocol):
    """What a declaration needs from the build strategy while resolving."""

    @property
    def overrides(self) -> Mapping[str, Any]: ...

    def association(self, factory_name: str, /, *traits: str, **overrides: Any) -> Any: ...

    def find_sequence(self, name: str) -> Optional[Any]: ...

    def has_factory(self, name: str) -> bool: ...


class Declaration(ABC):
    """Base class for attribute declarations."""

    name: str
    ignore: bool

    @abstractmethod
    def resolve(self, context: BuildContext) -> Any:
        """Produce the attribute value for one instance build."""


@dataclass(frozen=True)
class Static(Declaration):
    """Attribute with a fixed value."""

    name: str
    value: Any = None
    ignore: bool = False

    def resolve(self, context: BuildContext) -> Any:
        return self.value


@dataclass(frozen=True)
class Dynamic(Declaration):
    """
    Attribute computed by a block at build time.

    A block taking no arguments is simply called; a block taking one argument
    receives the build context, which gives access to other attributes and
    to association building.
    """

    name: str
    block: Callable = field(compare=False)
    ignore: bool = False

    def resolve(self, context: BuildContext) -> Any:
        return call_block(self.block, context)


@dataclass(frozen=True)
class Implicit(Declaration):
    """
    Bare attribute reference resolved by name at build time.

    Resolution order:
    1. A sequence registered under the name yields its next value
    2. A factory registered under the name is built as an association
    3. Otherwise NoSuchAttributeError names the factory and attribute
    """

    name: str
    factory_name: Optional[str] = None
    ignore: bool = False

    def resolve(self, context: BuildContext) -> Any:
        sequence = context.find_sequence(self.name)
        if sequence is not None:
            logger.debug(f"Implicit '{self.name}' resolved to sequence")
            return sequence.next()
        if context.has_factory(self.name):
            logger.debug(f"Implicit '{self.name}' resolved to association")
            return context.association(self.name)
        raise NoSuchAttributeError(self.factory_name, self.name)


@dataclass(frozen=True)
class Association(Declaration):
    """
    Attribute built by another factory with the parent build's strategy.

    ``options['factory']`` names the factory, defaulting to the attribute
    name. It may also be a list whose first item is the factory and whose
    remaining items are traits. Every other option is passed to the
    associated build as an override.
    """

    name: str
    options: Mapping[str, Any] = field(default_factory=dict, compare=False)
    ignore: bool = False

    def __post_init__(self):
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @property
    def factory_name(self) -> str:
        return self._factory_and_traits()[0]

    @property
    def traits(self) -> Tuple[str, ...]:
        return self._factory_and_traits()[1]

    @property
    def overrides(self) -> Dict[str, Any]:
        return {key: value for key, value in self.options.items() if key != "factory"}

    def _factory_and_traits(self) -> Tuple[str, Tuple[str, ...]]:
        factory = self.options.get("factory", self.name)
        if isinstance(factory, (list, tuple)):
            return str(factory[0]), tuple(str(trait) for trait in factory[1:])
        return str(factory), ()

    def resolve(self, context: BuildContext) -> Any:
        return context.association(self.factory_name, *self.traits, **self.overrides)
