"""
Registry of named factories and global sequences.

The registry evaluates factory blocks, defines the child factories buffered
by each block's proxy, and hands compiled definitions to a build context.

Typical usage:

    registry = FactoryRegistry()
    registry.sequence("email", block=lambda n: f"person{n}@example.com")

    @registry.factory("user")
    def user(f):
        f.name("Billy")
        f.email()

    registry.attributes_for("user")
    # {'name': 'Billy', 'email': 'person1@example.com'}
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .config import CallbackRegistry, get_callback_registry
from .definition import Definition
from .definition_proxy import DefinitionProxy
from .errors import DuplicateDefinitionError, FactoryDefinitionError, FactoryNotFoundError, SequenceNotFoundError
from .sequences import Sequence

logger = logging.getLogger(__name__)

# Options a nested factory may pass through to define()
_CHILD_OPTIONS = ("parent", "aliases", "traits", "class_name")


def _child_options(parent: str, child_name: str, options: dict) -> dict:
    """Map a nested factory's options onto define() keywords, defaulting its parent."""
    options = dict(options)
    if "class" in options:
        options["class_name"] = options.pop("class")
    unknown = sorted(set(options) - set(_CHILD_OPTIONS))
    if unknown:
        raise FactoryDefinitionError(
            f"Unknown options for factory '{child_name}' in '{parent}': {', '.join(unknown)}"
        )
    options.setdefault("parent", parent)
    return options


class Factory:
    """A registered factory: its own definition plus an optional parent."""

    def __init__(self, name: str, definition: Definition, parent: Optional[str] = None,
                 aliases: Iterable[str] = (), class_name: Optional[str] = None):
        self.name = name
        self.definition = definition
        self.parent = parent
        self.aliases: Tuple[str, ...] = tuple(str(alias) for alias in aliases)
        self.class_name = class_name

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name,) + self.aliases

    def __repr__(self):
        return f"Factory({self.name!r}, parent={self.parent!r})"


class FactoryRegistry:
    """
    Named factories and sequences for one application or test session.

    Args:
        callbacks: Callback-name registry passed to every proxy; the
            process-wide one by default
    """

    def __init__(self, callbacks: Optional[CallbackRegistry] = None):
        self._callbacks = callbacks
        self._factories: Dict[str, Factory] = {}
        self._sequences: Dict[str, Sequence] = {}
        self._compiled: Dict[Tuple[str, Tuple[str, ...]], Definition] = {}

    @property
    def callbacks(self) -> CallbackRegistry:
        return self._callbacks if self._callbacks is not None else get_callback_registry()

    # Factories

    def define(self, name: str, block: Optional[Callable] = None, *, parent: Optional[str] = None,
               aliases: Iterable[str] = (), traits: Iterable[str] = (),
               class_name: Optional[str] = None) -> Factory:
        """
        Evaluate a factory block and register the result.

        The definition is frozen once the block finishes. If the block raises,
        nothing declared in it is registered, including its child factories.
        Child factories are defined afterwards, each with this factory as its
        parent unless it names one itself.

        Args:
            name: Factory name
            block: Callable receiving a DefinitionProxy
            parent: Name of the factory whose declarations come first
            aliases: Extra names the factory is registered under
            traits: Traits applied to every build of this factory
            class_name: Name of the model class, for build strategies

        Raises:
            DuplicateDefinitionError: If the name or an alias is taken
            FactoryDefinitionError: If a nested factory passes an unknown option
        """
        name = str(name)
        for registered_name in (name,) + tuple(str(alias) for alias in aliases):
            if registered_name in self._factories:
                raise DuplicateDefinitionError(f"Factory already registered: {registered_name}")

        definition = Definition(name, base_traits=traits)
        proxy = DefinitionProxy(definition, callbacks=self.callbacks)
        proxy.evaluate(block)
        children = [
            (child_name, child_block, _child_options(name, child_name, options))
            for child_name, options, child_block in proxy.child_factories
        ]
        definition.freeze()

        factory = Factory(name, definition, parent=parent, aliases=aliases, class_name=class_name)
        for registered_name in factory.names:
            self._factories[registered_name] = factory
        logger.debug(f"Registered factory '{name}' with {len(definition.declarations)} declarations")

        for child_name, child_block, options in children:
            self.define(child_name, child_block, **options)
        return factory

    def factory(self, name: str, **options: Any) -> Callable[[Callable], Callable]:
        """Decorator form of define()."""
        def decorator(block: Callable) -> Callable:
            self.define(name, block, **options)
            return block
        return decorator

    def factory_by_name(self, name: str) -> Factory:
        try:
            return self._factories[str(name)]
        except KeyError:
            raise FactoryNotFoundError(name) from None

    def has_factory(self, name: str) -> bool:
        return str(name) in self._factories

    def compile(self, name: str, traits: Iterable[str] = ()) -> Definition:
        """
        Effective definition of a factory for one build.

        Parent declarations come first, so the factory's own declarations
        override them; requested traits override both. Compiled definitions
        are cached per factory and trait combination.
        """
        key = (str(name), tuple(str(trait) for trait in traits))
        if key in self._compiled:
            return self._compiled[key]

        lineage: List[Definition] = []
        factory: Optional[Factory] = self.factory_by_name(name)
        seen = set()
        while factory is not None:
            if factory.name in seen:
                raise FactoryDefinitionError(f"Factory '{name}' inherits from itself")
            seen.add(factory.name)
            lineage.insert(0, factory.definition)
            factory = self.factory_by_name(factory.parent) if factory.parent else None
        compiled = Definition.compile(lineage, key[1])
        self._compiled[key] = compiled
        return compiled

    # Sequences

    def sequence(self, name: str, *args: Any, block: Optional[Callable] = None, **options: Any) -> Sequence:
        """
        Register a global sequence under its name and aliases.

        Raises:
            DuplicateDefinitionError: If any of the names is taken
        """
        sequence = Sequence(name, *args, block=block, **options)
        for sequence_name in sequence.names:
            if sequence_name in self._sequences:
                raise DuplicateDefinitionError(f"Sequence already registered: {sequence_name}")
        for sequence_name in sequence.names:
            self._sequences[sequence_name] = sequence
        logger.debug(f"Registered sequence '{sequence.name}'")
        return sequence

    def sequence_by_name(self, name: str) -> Sequence:
        try:
            return self._sequences[str(name)]
        except KeyError:
            raise SequenceNotFoundError(name) from None

    def find_sequence(self, name: str) -> Optional[Sequence]:
        return self._sequences.get(str(name))

    def generate(self, name: str) -> Any:
        """Next value of a global sequence."""
        return self.sequence_by_name(name).next()

    def rewind_sequences(self) -> None:
        for sequence in set(self._sequences.values()):
            sequence.rewind()

    # Strategies

    def attributes_for(self, name: str, /, *traits: str, **overrides: Any) -> Dict[str, Any]:
        """Resolve a factory's attributes into a dict without building an instance."""
        from factorydef.evaluator import Evaluator

        return Evaluator(self, name, traits, overrides).attributes()

    def reset(self) -> None:
        """Forget every factory and sequence."""
        self._factories.clear()
        self._sequences.clear()
        self._compiled.clear()


# Default registry used by the module-level helpers
_default_registry: FactoryRegistry = FactoryRegistry()


def set_default_registry(registry: FactoryRegistry) -> None:
    global _default_registry
    _default_registry = registry


def get_default_registry() -> FactoryRegistry:
    return _default_registry


def define_factory(name: str, block: Optional[Callable] = None, **options: Any):
    """
    Define a factory on the default registry.

    Works as a call or as a decorator:

        @define_factory("user")
        def user(f):
            f.name("Billy")
    """
    if block is not None:
        return _default_registry.define(name, block, **options)
    return _default_registry.factory(name, **options)


def sequence(name: str, *args: Any, block: Optional[Callable] = None, **options: Any) -> Sequence:
    """Register a global sequence on the default registry."""
    return _default_registry.sequence(name, *args, block=block, **options)


def generate(name: str) -> Any:
    return _default_registry.generate(name)


def attributes_for(name: str, /, *traits: str, **overrides: Any) -> Dict[str, Any]:
    return _default_registry.attributes_for(name, *traits, **overrides)
