"""
Exception hierarchy for factory definitions.

Definition-time errors (bad declarations, duplicate names) are raised while a
factory block is being evaluated. Resolution-time errors are raised by the
build context when a declaration cannot produce a value.
"""


class FactoryDefinitionError(Exception):
    """Base class for every error raised by factorydef."""


class AttributeDefinitionError(FactoryDefinitionError):
    """Raised when an attribute is declared with both a value and a block."""


class DuplicateDefinitionError(FactoryDefinitionError):
    """Raised when a factory, sequence or trait name is registered twice."""


class InvalidCallbackNameError(FactoryDefinitionError):
    """Raised when a callback is attached under a name nobody registered."""


class NoSuchAttributeError(FactoryDefinitionError):
    """Raised when an implicit attribute matches neither a sequence nor a factory."""

    def __init__(self, factory_name, attribute_name):
        self.factory_name = factory_name
        self.attribute_name = attribute_name
        super().__init__(
            f"No such attribute '{attribute_name}' for factory '{factory_name}': "
            f"no sequence or factory named '{attribute_name}' is registered"
        )


class CyclicAttributeError(FactoryDefinitionError):
    """Raised when lazily computed attributes depend on each other."""


class FactoryNotFoundError(FactoryDefinitionError, KeyError):
    """Raised when a factory name is not registered."""

    def __str__(self):
        return f"Factory not registered: {self.args[0]}"


class SequenceNotFoundError(FactoryDefinitionError, KeyError):
    """Raised when a sequence name is not registered."""

    def __str__(self):
        return f"Sequence not registered: {self.args[0]}"


class TraitNotFoundError(FactoryDefinitionError, KeyError):
    """Raised when a trait name is not defined on a factory."""

    def __str__(self):
        return f"Trait not registered: {self.args[0]}"
