"""
factorydef: Declarative test-object factory definitions.

This package provides the definition side of a test-data factory library:
a proxy that turns declarative calls into attribute declarations, sequences,
traits and callbacks, plus a registry and an ``attributes_for`` evaluator to
resolve them.
"""

__version__ = "0.1.0"

from .callback import Callback
from .config import (
    CallbackRegistry,
    callback_names,
    get_callback_registry,
    register_callback,
    set_callback_registry,
)
from .declaration import (
    Association,
    BuildContext,
    Declaration,
    Dynamic,
    Implicit,
    Static,
)
from .definition import Definition
from .definition_proxy import DefinitionProxy
from .errors import (
    AttributeDefinitionError,
    CyclicAttributeError,
    DuplicateDefinitionError,
    FactoryDefinitionError,
    FactoryNotFoundError,
    InvalidCallbackNameError,
    NoSuchAttributeError,
    SequenceNotFoundError,
    TraitNotFoundError,
)
from .evaluator import Evaluator
from .registry import (
    Factory,
    FactoryRegistry,
    attributes_for,
    define_factory,
    generate,
    get_default_registry,
    sequence,
    set_default_registry,
)
from .sequences import Sequence
from .trait import Trait

__all__ = [
    # Definition
    "Definition",
    "DefinitionProxy",
    "Trait",
    "Callback",
    # Declarations
    "Declaration",
    "Static",
    "Dynamic",
    "Implicit",
    "Association",
    "BuildContext",
    # Sequences
    "Sequence",
    # Registry
    "Factory",
    "FactoryRegistry",
    "Evaluator",
    "define_factory",
    "sequence",
    "generate",
    "attributes_for",
    "get_default_registry",
    "set_default_registry",
    # Configuration
    "CallbackRegistry",
    "callback_names",
    "register_callback",
    "get_callback_registry",
    "set_callback_registry",
    # Errors
    "FactoryDefinitionError",
    "AttributeDefinitionError",
    "DuplicateDefinitionError",
    "InvalidCallbackNameError",
    "NoSuchAttributeError",
    "CyclicAttributeError",
    "FactoryNotFoundError",
    "SequenceNotFoundError",
    "TraitNotFoundError",
]
