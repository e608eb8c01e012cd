"""
Build context that resolves a factory's declarations into plain values.

One Evaluator serves exactly one instance build. It compiles the factory
definition (parents and traits included), applies per-build overrides and
resolves each remaining declaration at most once, so blocks that read other
attributes see the same value the result does.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .definition import Definition
from .errors import CyclicAttributeError

logger = logging.getLogger(__name__)


class Evaluator:
    """
    The ``attributes_for`` build strategy.

    Lazy attribute blocks that take an argument receive the evaluator, so
    they can read other attributes by name (``u.name``) and build
    associations (``u.association("user")``) with the same strategy.
    Attributes sharing a name with an evaluator member (``definition``,
    ``overrides``, ``association``, ``resolve``, ``attributes``, ``strategy``
    and the like) are read with ``u.resolve("definition")`` instead.

    Args:
        registry: FactoryRegistry holding factories and sequences
        factory_name: Factory to resolve
        traits: Traits applied on top of the factory for this build
        overrides: Attribute values that replace declarations
    """

    strategy = "attributes_for"

    def __init__(self, registry, factory_name: str, traits: Iterable[str] = (),
                 overrides: Optional[Mapping[str, Any]] = None):
        self._registry = registry
        self._factory_name = str(factory_name)
        self._definition: Definition = registry.compile(factory_name, traits)
        self._declarations = {d.name: d for d in self._definition.resolved_declarations()}
        self._overrides = dict(overrides or {})
        self._cache: Dict[str, Any] = {}
        self._resolving: List[str] = []

    @property
    def definition(self) -> Definition:
        return self._definition

    @property
    def overrides(self) -> Mapping[str, Any]:
        return MappingProxyType(self._overrides)

    def association(self, factory_name: str, /, *traits: str, **overrides: Any) -> Any:
        """Build another factory with this evaluator's strategy."""
        logger.debug(f"{self._factory_name}: building association '{factory_name}' via {self.strategy}")
        return type(self)(self._registry, factory_name, traits, overrides).attributes()

    def find_sequence(self, name: str):
        return self._registry.find_sequence(name)

    def has_factory(self, name: str) -> bool:
        return self._registry.has_factory(name)

    def resolve(self, name: str) -> Any:
        """
        Value of one attribute for this build.

        Overrides win without touching the declaration. Otherwise the
        declaration is resolved once and cached.

        Raises:
            AttributeError: If the factory has no such attribute
            CyclicAttributeError: If the attribute depends on itself
        """
        if name in self._overrides:
            return self._overrides[name]
        if name in self._cache:
            return self._cache[name]
        if name not in self._declarations:
            raise AttributeError(f"Factory '{self._factory_name}' has no attribute '{name}'")
        if name in self._resolving:
            chain = " -> ".join(self._resolving[self._resolving.index(name):] + [name])
            raise CyclicAttributeError(f"Cyclic attribute dependency in '{self._factory_name}': {chain}")

        self._resolving.append(name)
        try:
            value = self._declarations[name].resolve(self)
        finally:
            self._resolving.pop()
        self._cache[name] = value
        return value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.resolve(name)

    def attributes(self) -> Dict[str, Any]:
        """
        Resolve every attribute of the build.

        Ignored attributes are computed when something reads them but never
        appear in the result. Overrides without a matching declaration are
        passed through.
        """
        result: Dict[str, Any] = {}
        for name, declaration in self._declarations.items():
            if declaration.ignore:
                continue
            result[name] = self.resolve(name)
        for name, value in self._overrides.items():
            if name not in self._declarations:
                result[name] = value
        return result

    def run_callbacks(self, name: str, instance: Any) -> None:
        """Run the callbacks registered under name, in declaration order."""
        for callback in self._definition.callbacks_for(name):
            callback.run(instance, self)
