"""Pytest configuration and shared fixtures."""
import pytest

from factorydef import CallbackRegistry, Definition, DefinitionProxy, FactoryRegistry, Sequence


class FakeBuildContext:
    """Build context recording association requests."""

    def __init__(self, sequences=None, factories=(), overrides=None):
        self.sequences = dict(sequences or {})
        self.factories = set(factories)
        self._overrides = dict(overrides or {})
        self.built = []

    @property
    def overrides(self):
        return self._overrides

    def association(self, factory_name, *traits, **overrides):
        self.built.append((factory_name, traits, overrides))
        return {"factory": factory_name, "traits": traits, **overrides}

    def find_sequence(self, name):
        return self.sequences.get(name)

    def has_factory(self, name):
        return name in self.factories


@pytest.fixture(autouse=True)
def reset_global_registries():
    """Give every test a fresh callback registry and default factory registry."""
    import factorydef.config as config_module
    import factorydef.registry as registry_module

    original_callbacks = config_module._callback_registry
    original_registry = registry_module._default_registry

    config_module._callback_registry = CallbackRegistry()
    registry_module._default_registry = FactoryRegistry()

    yield

    config_module._callback_registry = original_callbacks
    registry_module._default_registry = original_registry


@pytest.fixture
def definition():
    """Provide an empty definition for a 'user' factory."""
    return Definition("user")


@pytest.fixture
def proxy(definition):
    """Provide a proxy populating the 'user' definition."""
    return DefinitionProxy(definition)


@pytest.fixture
def registry():
    """Provide an empty factory registry."""
    return FactoryRegistry()


@pytest.fixture
def build_context():
    """Provide a build context with an 'email' sequence and a 'user' factory."""
    return FakeBuildContext(
        sequences={"email": Sequence("email", block=lambda n: f"person{n}@example.com")},
        factories={"user"},
    )
