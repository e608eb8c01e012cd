"""
Factory definition accumulator.

A Definition collects everything a factory block declares: attribute
declarations in declaration order, lifecycle callbacks, traits, an optional
custom constructor and an optional custom create step. It is populated by a
DefinitionProxy while the block runs and frozen by the registry once the
block finishes.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .callback import Callback
from .declaration import Declaration
from .errors import DuplicateDefinitionError, FactoryDefinitionError, TraitNotFoundError
from .trait import Trait

logger = logging.getLogger(__name__)


def _skip_create(instance: Any) -> None:
    return None


class Definition:
    """Declarations, callbacks and traits of a single factory."""

    def __init__(self, name: Optional[str] = None, base_traits: Iterable[str] = ()):
        self.name = name
        self.declarations: List[Declaration] = []
        self.callbacks: List[Callback] = []
        self.defined_traits: Dict[str, Trait] = {}
        self.base_traits: List[str] = [str(trait) for trait in base_traits]
        self.constructor: Optional[Callable] = None
        self.create_block: Optional[Callable] = None
        self._frozen = False

    # Mutation, used by DefinitionProxy

    def declare_attribute(self, declaration: Declaration) -> Declaration:
        self._check_mutable()
        self.declarations.append(declaration)
        logger.debug(f"{self.name}: declared {type(declaration).__name__} '{declaration.name}'")
        return declaration

    def add_callback(self, callback: Callback) -> Callback:
        self._check_mutable()
        self.callbacks.append(callback)
        return callback

    def define_trait(self, trait: Trait) -> Trait:
        self._check_mutable()
        if trait.name in self.defined_traits:
            raise DuplicateDefinitionError(f"Trait already defined on '{self.name}': {trait.name}")
        self.defined_traits[trait.name] = trait
        return trait

    def define_constructor(self, block: Callable) -> None:
        self._check_mutable()
        self.constructor = block

    def to_create(self, block: Callable) -> None:
        self._check_mutable()
        self.create_block = block

    def skip_create(self) -> None:
        self._check_mutable()
        self.create_block = _skip_create

    def inherit_traits(self, names: Iterable[str]) -> None:
        self._check_mutable()
        self.base_traits.extend(str(name) for name in names)

    # Lifecycle

    def freeze(self) -> "Definition":
        """Reject further mutation."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise FactoryDefinitionError(f"Definition '{self.name}' is frozen and cannot be modified")

    # Queries

    @property
    def skips_create(self) -> bool:
        return self.create_block is _skip_create

    def trait_by_name(self, name: str) -> Trait:
        try:
            return self.defined_traits[str(name)]
        except KeyError:
            raise TraitNotFoundError(name) from None

    def resolved_declarations(self) -> List[Declaration]:
        """
        Declarations with later duplicates overriding earlier ones.

        An attribute keeps the position of its first declaration and the rule
        of its last one.
        """
        by_name: Dict[str, Declaration] = {}
        for declaration in self.declarations:
            by_name[declaration.name] = declaration
        return list(by_name.values())

    def callbacks_for(self, name: str) -> List[Callback]:
        """Callbacks registered under name, in declaration order."""
        return [callback for callback in self.callbacks if callback.name == name]

    # Composition

    def extend(self, other: "Definition") -> None:
        """
        Append other's contents onto this definition.

        Traits, constructor and create step defined on other replace the ones
        already present; declarations and callbacks are appended.
        """
        self._check_mutable()
        self.declarations.extend(other.declarations)
        self.callbacks.extend(other.callbacks)
        self.defined_traits.update(other.defined_traits)
        if other.constructor is not None:
            self.constructor = other.constructor
        if other.create_block is not None:
            self.create_block = other.create_block

    def apply_traits(self, names: Iterable[str]) -> None:
        """Apply the named traits onto this definition, in order."""
        for name in names:
            self.trait_by_name(name).apply_to(self)

    @classmethod
    def compile(cls, lineage: Iterable["Definition"], traits: Tuple[str, ...] = ()) -> "Definition":
        """
        Merge a chain of definitions into one frozen definition.

        Args:
            lineage: Definitions from the root parent down to the factory itself
            traits: Extra traits requested for a single build

        For each definition, its traits are merged in first, then its base
        traits are applied, then its own declarations appended. Requested
        traits are applied last, so they override everything else.
        """
        lineage = list(lineage)
        compiled = cls(lineage[-1].name if lineage else None)
        for definition in lineage:
            compiled.defined_traits.update(definition.defined_traits)
            compiled.apply_traits(definition.base_traits)
            compiled.extend(definition)
        compiled.apply_traits(traits)
        return compiled.freeze()

    def __repr__(self):
        return f"Definition({self.name!r}, declarations={len(self.declarations)})"
