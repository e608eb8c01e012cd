"""
Declarative front end for factory definitions.

A factory block is a plain callable that receives a DefinitionProxy and makes
declarative calls on it:

    def user(f):
        f.name("Billy Idol")                    # static attribute
        f.add_attribute("admin", False)         # same, spelled out
        f.email(block=lambda u: f"{u.name}@example.com".lower())
        f.sequence("login", block=lambda n: f"user{n}")
        f.account()                             # implicit: sequence or factory
        f.author({"factory": "user"})           # association shorthand

        f.trait("admin", block=lambda t: t.admin(True))

Every name that is not one of the proxy's own operations is routed to
declare(), which decides what the call means from the shape of its arguments.
Blocks are always passed as the keyword-only ``block`` argument (or through
the decorator forms), so a positional callable is a literal value.
"""

import functools
import logging
import warnings
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Tuple

from .callback import Callback
from .config import CallbackRegistry, get_callback_registry
from .declaration import Association, Dynamic, Implicit, Static
from .definition import Definition
from .errors import AttributeDefinitionError
from .sequences import Sequence
from .trait import Trait

logger = logging.getLogger(__name__)

# Marks an attribute value that was not supplied, so None stays a valid value.
_MISSING = object()

ChildFactory = Tuple[str, dict, Optional[Callable]]


def _block_or_decorator(register: Callable[[Callable], Any], block: Optional[Callable]):
    """Register block now, or return a decorator that registers the function it wraps."""
    if block is not None:
        return register(block)

    def decorator(fn: Callable) -> Callable:
        register(fn)
        return fn
    return decorator


class DefinitionProxy:
    """
    Receives declarative calls for one factory block and records them.

    Args:
        definition: The definition being populated
        ignore: Mark every declaration made through this proxy as ignored
        callbacks: Callback-name registry; the process-wide one by default

    Attributes:
        child_factories: ``(name, options, block)`` for every nested factory
            declared in the block, in declaration order. The registry
            defines them once the block has finished.
    """

    __slots__ = ("_definition", "_ignore", "_callbacks", "child_factories")

    def __init__(self, definition: Definition, ignore: bool = False, callbacks: Optional[CallbackRegistry] = None):
        self._definition = definition
        self._ignore = ignore
        self._callbacks = callbacks if callbacks is not None else get_callback_registry()
        self.child_factories: List[ChildFactory] = []

    def evaluate(self, block: Optional[Callable]) -> "DefinitionProxy":
        """Run a factory block with this proxy as its argument."""
        if block is not None:
            block(self)
        return self

    # Attributes

    def add_attribute(self, name: str, value: Any = _MISSING, *, block: Optional[Callable] = None):
        """
        Add an attribute assigned on generated instances of this factory.

        Call with either a value or a block, not both. A block makes the
        attribute lazy: it runs whenever an instance is generated, unless the
        attribute is overridden for that instance. A block taking one argument
        receives the build context, which resolves other attributes and
        builds associations with the current strategy.

        Args:
            name: Attribute name
            value: Value used when no block is given (defaults to None)
            block: Callable computing the value at build time

        Raises:
            AttributeDefinitionError: If both value and block are given
        """
        if value is not _MISSING and block is not None:
            raise AttributeDefinitionError(f"Both value and block given for attribute '{name}'")

        if block is not None:
            declaration = Dynamic(str(name), block, self._ignore)
        else:
            declaration = Static(str(name), None if value is _MISSING else value, self._ignore)
        return self._definition.declare_attribute(declaration)

    def lazy(self, name: str) -> Callable[[Callable], Callable]:
        """Decorator form of ``add_attribute(name, block=fn)``."""
        return _block_or_decorator(lambda fn: self.add_attribute(name, block=fn), None)

    def ignore(self, block: Callable) -> "DefinitionProxy":
        """Evaluate block with a proxy whose declarations are all ignored."""
        proxy = DefinitionProxy(self._definition, True, self._callbacks)
        return proxy.evaluate(block)

    def declare(self, name: str, *args: Any, block: Optional[Callable] = None):
        """
        Classify a call the proxy has no operation for.

        Checked in this order:
        1. No arguments and no block: implicit attribute, resolved at build
           time to a sequence or factory of the same name
        2. A single mapping argument with a ``factory`` key: association
        3. A registered callback name such as ``before_create``: deprecated
           spelling of ``before("create")``
        4. Anything else: ``add_attribute(name, *args, block=block)``

        So that:

            f.name("Billy Idol")           == f.add_attribute("name", "Billy Idol")
            f.account()                    resolves like a sequence or association
            f.author({"factory": "user"})  == f.association("author", {"factory": "user"})
        """
        name = str(name)
        if not args and block is None:
            return self._definition.declare_attribute(Implicit(name, self._definition.name, self._ignore))
        if len(args) == 1 and isinstance(args[0], Mapping) and "factory" in args[0]:
            return self.association(name, args[0])
        if name in self._callbacks:
            if block is None and len(args) == 1 and callable(args[0]):
                block, args = args[0], ()
            if args or block is None:
                raise AttributeDefinitionError(f"Callback '{name}' takes a single block, got {args!r}")
            callback_when, _, callback_name = name.partition("_")
            warnings.warn(
                f"Calling {name} is deprecated; use the syntax {callback_when}('{callback_name}', block=...)",
                DeprecationWarning,
                stacklevel=2,
            )
            return self._definition.add_callback(Callback(name, block, self._callbacks))
        return self.add_attribute(name, *args, block=block)

    def __getattr__(self, name: str):
        # Only reached for names the proxy does not define itself.
        if name.startswith("_"):
            raise AttributeError(name)
        return functools.partial(self.declare, name)

    def sequence(self, name: str, *args: Any, block: Optional[Callable] = None, **options: Any):
        """
        Add an attribute filled from a sequence local to this factory.

        The result of:

            f.sequence("email", block=lambda n: f"person{n}@example.com")

        matches a global ``email`` sequence used through an implicit
        ``f.email()``, except that no global sequence is registered.
        """
        sequence = Sequence(name, *args, block=block, **options)
        return self.add_attribute(name, block=lambda: sequence.next())

    def association(self, name: str, options: Optional[Mapping] = None, /, **kwargs: Any):
        """
        Add an attribute built by another factory.

        The associated instance uses the same build strategy as the parent.

        Args:
            name: Attribute name
            options: Mapping of options; ``factory`` names the factory to
                build and defaults to the attribute name, everything else
                overrides attributes of the associated instance
            **kwargs: Merged into options
        """
        if options is None:
            options = {}
        if not isinstance(options, Mapping):
            raise TypeError(f"Association options for '{name}' must be a mapping, got {type(options).__name__}")
        return self._definition.declare_attribute(Association(str(name), {**options, **kwargs}, self._ignore))

    # Persistence

    def to_create(self, block: Optional[Callable] = None):
        return _block_or_decorator(self._definition.to_create, block)

    def skip_create(self) -> None:
        self._definition.skip_create()

    def initialize_with(self, block: Optional[Callable] = None):
        return _block_or_decorator(self._definition.define_constructor, block)

    # Structure

    def factory(self, name: str, options: Optional[Mapping] = None, /, block: Optional[Callable] = None, **kwargs: Any):
        """
        Buffer a nested factory; the registry defines it after this block.

        Without a block, the returned decorator supplies the child's body:

            @f.factory("admin")
            def admin(a):
                a.admin(True)
        """
        options = {**(options or {}), **kwargs}
        index = len(self.child_factories)
        self.child_factories.append((str(name), options, block))
        logger.debug(f"Buffered child factory '{name}' of '{self._definition.name}'")

        def decorator(fn: Callable) -> Callable:
            self.child_factories[index] = (str(name), options, fn)
            return fn
        return decorator

    def trait(self, name: str, block: Optional[Callable] = None):
        return _block_or_decorator(
            lambda fn: self._definition.define_trait(Trait(name, fn, self._callbacks)), block
        )

    # Callbacks

    def before(self, name: str, block: Optional[Callable] = None):
        return self.callback(f"before_{name}", block)

    def after(self, name: str, block: Optional[Callable] = None):
        return self.callback(f"after_{name}", block)

    def callback(self, name: str, block: Optional[Callable] = None):
        def register(fn):
            callback_name = self._callbacks.register_callback(name)
            return self._definition.add_callback(Callback(callback_name, fn, self._callbacks))
        return _block_or_decorator(register, block)

    def __repr__(self):
        return f"DefinitionProxy({self._definition.name!r}, ignore={self._ignore})"
