import pytest

from mcdoc_typegen.errors import ShapeError, UnsupportedDispatcherError
from mcdoc_typegen.expressions import compile_type
from mcdoc_typegen.mcdoc_types import (BooleanType, DispatcherType, DynamicIndex, IndexedType, KeywordAccessor,
                                       ReferenceType, StaticIndex, StringType, TemplateType)

from helpers import compile_node, import_paths, make_state, render

THING = {'minecraft:thing': {'a': BooleanType(), 'b': StringType()}}


def dynamic(property='type', registry='minecraft:thing'):
    return DispatcherType(registry, (DynamicIndex((property,)),))


def static(value, registry='minecraft:thing'):
    return DispatcherType(registry, (StaticIndex(value),))


@pytest.fixture
def state():
    return make_state(dispatchers=THING)


def test_unsupported_index_patterns():
    with pytest.raises(UnsupportedDispatcherError) as error:
        compile_type(DispatcherType('minecraft:thing', (StaticIndex('a'), StaticIndex('b'))))
    assert error.value.registry == 'minecraft:thing'

    with pytest.raises(UnsupportedDispatcherError):
        compile_type(DispatcherType('minecraft:thing', (DynamicIndex((KeywordAccessor('parent'),)),)))


def test_unknown_dispatcher(state):
    with pytest.raises(UnsupportedDispatcherError):
        compile_node(static('a', 'minecraft:nothing'), state)


def test_dynamic_index_at_root_uses_the_fallback(state):
    result = compile_node(dynamic(), state, is_root=True)

    assert result.type.render() == "SymbolThing<'%fallback'>"
    assert result.child_dispatcher is None
    assert import_paths(result) == ['::java::dispatcher::SymbolThing']


def test_nested_dynamic_index_requests_the_parent_property(state):
    result = compile_node(dynamic(), state)

    assert result.type.render() == "(S extends keyof SymbolThing ? SymbolThing[S] : Record<string, unknown>)"
    assert result.child_dispatcher == [(0, 'type')]


def test_dispatcher_with_none_member():
    state = make_state(dispatchers={'minecraft:thing': {'a': BooleanType(), '%none': StringType()}})

    assert render(dynamic(), state) == (
        "(S extends undefined ? SymbolThing<'%none'> : "
        "(S extends keyof SymbolThing ? SymbolThing[S] : Record<string, unknown>))"
    )


def test_static_indices(state):
    assert render(static('a'), state) == "SymbolThing['a']"
    assert render(static('%fallback'), state) == "SymbolThing<'%fallback'>"


def test_map_key_index(state):
    key = DispatcherType('minecraft:thing', (DynamicIndex((KeywordAccessor('key'),)),))

    assert render(key, state) == "(Key extends keyof SymbolThing ? SymbolThing[Key] : Record<string, unknown>)"


def test_missing_generics_are_unknown():
    template = TemplateType(ReferenceType('::java::a::T'), ('::java::a::T',))
    state = make_state(dispatchers={'minecraft:thing': {'a': template}})

    assert render(dynamic(), state, is_root=True) == "SymbolThing<unknown, '%fallback'>"


def test_references_are_counted_per_module(state):
    compile_node(static('a'), state)
    assert 'minecraft:thing' not in state.reference_counters

    compile_node(static('a'), state, module_path='::java::one')
    compile_node(static('b'), state, module_path='::java::one')
    compile_node(static('b'), state, module_path='::java::two')

    counter = state.reference_counters['minecraft:thing']
    assert counter.ranked() == [('::java::one', 2), ('::java::two', 1)]


def test_indexed_access_into_a_case(state):
    indexed = IndexedType(static('a'), (StaticIndex('value'),))

    assert render(indexed, state) == (
        "('value' extends keyof SymbolThing['a'] ? SymbolThing['a']['value'] : Record<string, unknown>)"
    )


def test_indexed_requires_a_dispatcher_and_static_indices():
    with pytest.raises(ShapeError):
        compile_type(IndexedType(ReferenceType('::java::a::B'), (StaticIndex('x'),)))
    with pytest.raises(UnsupportedDispatcherError):
        compile_type(IndexedType(static('a'), (DynamicIndex(('x',)),)))
