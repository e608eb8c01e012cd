"""Tests for definition proxy module."""
import pytest

from factorydef import (
    Association,
    Definition,
    DefinitionProxy,
    AttributeDefinitionError,
    FactoryDefinitionError,
    Dynamic,
    Implicit,
    Static,
    callback_names,
    register_callback,
)
from tests.conftest import FakeBuildContext


def test_add_attribute_with_value(proxy, definition):
    """Test that a value produces a static declaration."""
    proxy.add_attribute("name", "Billy Idol")

    assert definition.declarations == [Static("name", "Billy Idol")]


def test_add_attribute_without_value_or_block(proxy, definition):
    """Test that an attribute with no default is a static None, not implicit."""
    proxy.add_attribute("nickname")

    declaration = definition.declarations[0]
    assert isinstance(declaration, Static)
    assert declaration.value is None


def test_add_attribute_with_block(proxy, definition):
    """Test that a block produces a lazy declaration that is not called eagerly."""
    calls = []
    proxy.add_attribute("name", block=lambda: calls.append(1) or "lazy")

    declaration = definition.declarations[0]
    assert isinstance(declaration, Dynamic)
    assert calls == []
    assert declaration.resolve(FakeBuildContext()) == "lazy"
    assert calls == [1]


def test_add_attribute_with_value_and_block(proxy, definition):
    """Test that value and block together fail and leave the definition untouched."""
    with pytest.raises(AttributeDefinitionError, match="Both value and block"):
        proxy.add_attribute("name", "Billy", block=lambda: "Idol")

    assert definition.declarations == []


def test_falsy_value_and_block_still_fails(proxy, definition):
    """Test that False and None count as supplied values."""
    with pytest.raises(AttributeDefinitionError):
        proxy.add_attribute("admin", False, block=lambda: True)
    with pytest.raises(AttributeDefinitionError):
        proxy.admin(None, block=lambda: True)

    assert definition.declarations == []


def test_bare_call_is_implicit(proxy, definition):
    """Test that a call without arguments records an implicit declaration."""
    proxy.email()

    assert definition.declarations == [Implicit("email", "user")]


def test_implicit_resolves_to_sequence_values(proxy, definition, build_context):
    """Test that an implicit declaration pulls successive sequence values."""
    proxy.email()
    declaration = definition.declarations[0]

    assert declaration.resolve(build_context) == "person1@example.com"
    assert declaration.resolve(build_context) == "person2@example.com"


def test_mapping_with_factory_is_association(proxy, definition):
    """Test that the association shorthand matches an explicit association."""
    proxy.author({"factory": "user", "name": "Joey"})
    proxy.association("editor", {"factory": "user", "name": "Joey"})

    shorthand, explicit = definition.declarations
    assert isinstance(shorthand, Association)
    assert shorthand.name == "author"
    assert dict(shorthand.options) == dict(explicit.options)


def test_mapping_without_factory_is_static(proxy, definition):
    """Test that a plain mapping value is just a value."""
    proxy.settings({"theme": "dark"})

    assert definition.declarations == [Static("settings", {"theme": "dark"})]


def test_association_resolution_delegates_to_context(proxy, definition):
    """Test that an association builds the referenced factory."""
    proxy.association("author", factory="user")
    context = FakeBuildContext()

    definition.declarations[0].resolve(context)

    assert context.built == [("user", (), {})]


def test_association_requires_mapping(proxy):
    """Test that non-mapping association options are rejected."""
    with pytest.raises(TypeError, match="must be a mapping"):
        proxy.association("author", ["user"])


def test_positional_callable_is_a_value(proxy, definition):
    """Test that a callable passed positionally is stored as a value."""
    def formatter(value):
        return value

    proxy.formatter(formatter)

    assert definition.declarations[0].value is formatter


def test_lazy_decorator(proxy, definition):
    """Test the decorator form of a lazy attribute."""
    @proxy.lazy("full_name")
    def full_name():
        return "Billy Idol"

    assert isinstance(definition.declarations[0], Dynamic)
    assert full_name() == "Billy Idol"


def test_later_declaration_overrides_earlier(proxy, definition):
    """Test that duplicate names are kept in order and the last one wins."""
    proxy.add_attribute("name", "Billy")
    proxy.age(30)
    proxy.name()

    assert [d.name for d in definition.declarations] == ["name", "age", "name"]
    resolved = definition.resolved_declarations()
    assert [d.name for d in resolved] == ["name", "age"]
    assert isinstance(resolved[0], Implicit)


def test_ignore_block_marks_declarations(proxy, definition):
    """Test that declarations inside ignore() are ignored."""
    proxy.name("Billy")
    proxy.ignore(lambda i: (i.upcased(True), i.sequence("counter"), i.account()))

    flags = {d.name: d.ignore for d in definition.declarations}
    assert flags == {"name": False, "upcased": True, "counter": True, "account": True}


def test_sequence_declaration(proxy, definition):
    """Test that a local sequence is a lazy attribute pulling the next value."""
    proxy.sequence("email", block=lambda n: f"person{n}@example.com")
    declaration = definition.declarations[0]
    context = FakeBuildContext()

    assert isinstance(declaration, Dynamic)
    assert declaration.resolve(context) == "person1@example.com"
    assert declaration.resolve(context) == "person2@example.com"


def test_sequence_declaration_with_start(proxy, definition):
    """Test that a local sequence honours its start value."""
    proxy.sequence("position", 10)
    declaration = definition.declarations[0]

    assert declaration.resolve(FakeBuildContext()) == 10
    assert declaration.resolve(FakeBuildContext()) == 11


def test_child_factories_are_buffered(proxy, definition):
    """Test that nested factories do not touch the definition."""
    proxy.factory("admin", {"aliases": ["root"]}, block=lambda a: a.admin(True))

    @proxy.factory("guest")
    def guest(g):
        g.admin(False)

    assert definition.declarations == []
    assert [(name, options) for name, options, _ in proxy.child_factories] == [
        ("admin", {"aliases": ["root"]}),
        ("guest", {}),
    ]
    assert proxy.child_factories[1][2] is guest


def test_child_factory_without_block(proxy):
    """Test that a child factory needs no body."""
    proxy.factory("admin_user", traits=["admin"])

    assert proxy.child_factories == [("admin_user", {"traits": ["admin"]}, None)]


def test_trait_is_defined_not_applied(proxy, definition):
    """Test that trait declarations stay out of the host until applied."""
    proxy.trait("admin", block=lambda t: t.admin(True))

    assert definition.declarations == []
    assert definition.trait_by_name("admin").name == "admin"


def test_initialize_with_and_create(proxy, definition):
    """Test constructor and create overrides are forwarded."""
    def constructor():
        return object()

    proxy.initialize_with(constructor)
    proxy.to_create(lambda instance: instance.save())

    assert definition.constructor is constructor
    assert definition.create_block is not None
    assert not definition.skips_create

    proxy.skip_create()
    assert definition.skips_create


def test_before_and_after(proxy, definition):
    """Test that before/after register prefixed callbacks."""
    proxy.before("create", lambda user: None)
    proxy.after("publish", lambda user: None)

    assert [c.name for c in definition.callbacks] == ["before_create", "after_publish"]
    assert "after_publish" in callback_names()


def test_callback_decorator(proxy, definition):
    """Test the decorator form of callbacks."""
    @proxy.after("build")
    def mark_built(user):
        user["built"] = True

    user = {}
    definition.callbacks_for("after_build")[0].run(user)
    assert user == {"built": True}


def test_legacy_callback_name(proxy, definition):
    """Test that a bare known callback name warns and registers a callback."""
    def hook(user):
        return None

    with pytest.deprecated_call(match=r"use the syntax before\('create'"):
        proxy.before_create(block=hook)

    callback = definition.callbacks[0]
    assert callback.name == "before_create"
    assert callback.block is hook
    assert definition.declarations == []


def test_legacy_callback_matches_sugar(definition):
    """Test that the legacy spelling records the same callback as before()."""
    def hook(user):
        return None

    with pytest.deprecated_call():
        DefinitionProxy(definition).before_create(block=hook)
    sugar = Definition("user")
    DefinitionProxy(sugar).before("create", hook)

    assert definition.callbacks == sugar.callbacks


def test_registered_custom_callback_is_recognised(proxy, definition):
    """Test that newly registered callback names are recognised by bare calls."""
    register_callback("after_publish")

    with pytest.deprecated_call():
        proxy.after_publish(block=lambda post: None)

    assert definition.callbacks[0].name == "after_publish"


def test_bare_callback_name_without_block_is_implicit(proxy, definition):
    """Test that rule order checks arity before callback names."""
    proxy.before_create()

    assert isinstance(definition.declarations[0], Implicit)
    assert definition.callbacks == []


def test_legacy_callback_with_value_is_rejected(proxy, definition):
    """Test that a bare callback name given a non-callable value fails at definition time."""
    with pytest.raises(AttributeDefinitionError, match="after_build"):
        proxy.after_build("x")

    assert definition.callbacks == []
    assert definition.declarations == []


def test_legacy_callback_with_block_and_value_is_rejected(proxy, definition):
    """Test that a bare callback name takes a block and nothing else."""
    with pytest.raises(AttributeDefinitionError):
        proxy.before_create("x", block=lambda user: None)

    assert definition.callbacks == []


def test_legacy_callback_positional_block(proxy, definition):
    """Test that a single positional callable is taken as the callback block."""
    def hook(user):
        return None

    with pytest.deprecated_call():
        proxy.after_build(hook)

    assert definition.callbacks[0].block is hook


def test_unknown_callback_name_is_attribute(proxy, definition):
    """Test that an unregistered before_ name is an ordinary attribute."""
    proxy.before_lunch("snack")

    assert definition.declarations == [Static("before_lunch", "snack")]


def test_private_names_are_not_captured(proxy):
    """Test that underscore names raise AttributeError instead of declaring."""
    with pytest.raises(AttributeError):
        proxy._secret

    assert not hasattr(proxy, "__length_hint__")


def test_declare_directly(proxy, definition):
    """Test declare() for names that clash with proxy operations."""
    proxy.declare("factory", "Acme")
    proxy.declare("sequence")

    assert definition.declarations == [Static("factory", "Acme"), Implicit("sequence", "user")]


def test_declarations_in_frozen_definition_fail(proxy, definition):
    """Test that the proxy cannot mutate a frozen definition."""
    definition.freeze()
    with pytest.raises(FactoryDefinitionError, match="frozen"):
        proxy.name("Billy")
