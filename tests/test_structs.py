import pytest

from mcdoc_typegen.errors import ShapeError
from mcdoc_typegen.expressions import compile_type
from mcdoc_typegen.mcdoc_types import (BooleanType, DispatcherType, DynamicIndex, NumericType, ReferenceType,
                                       StringType, StructPairField, StructSpreadField, StructType)
from mcdoc_typegen.tsnodes import IntersectionType, TypeAlias, TypeLiteral, TypeReference

from helpers import attr, compile_node, import_paths, make_state, render, string

THING = {'minecraft:thing': {'a': BooleanType(), 'b': StringType()}}
THING_ACCESS = "(S extends keyof SymbolThing ? SymbolThing[S] : Record<string, unknown>)"


def pair(key, type_def, **kwargs):
    return StructPairField(key, type_def, **kwargs)


def spread(path):
    return StructSpreadField(ReferenceType(path))


def thing_dispatcher(property='type'):
    return DispatcherType('minecraft:thing', (DynamicIndex((property,)),))


def test_single_spread_collapses_to_its_source():
    result = compile_node(StructType((spread('::java::a::Base'),)))

    assert result.type == TypeReference('Base')
    assert import_paths(result) == ['::java::a::Base']


def test_spreads_around_own_fields_intersect_in_order():
    struct = StructType((
        spread('::java::a::Base'),
        pair('x', StringType()),
        spread('::java::a::Extra'),
    ))

    result = compile_node(struct)

    assert isinstance(result.type, IntersectionType)
    assert result.type.render() == '(Base & { x: string } & Extra)'
    assert import_paths(result) == ['::java::a::Base', '::java::a::Extra']


def test_two_leading_spreads_and_own_fields():
    struct = StructType((spread('::java::a::One'), spread('::java::a::Two'), pair('x', BooleanType())))

    assert render(struct) == '(One & Two & { x: boolean })'


def test_plain_record():
    struct = StructType((pair('count', NumericType('int')), pair('name', StringType(), optional=True)))

    result = compile_node(struct)

    assert isinstance(result.type, TypeLiteral)
    assert result.type.render() == '{ count: NBTInt, name?: string }'


def test_empty_struct():
    assert render(StructType(())) == 'Record<string, never>'


def test_removed_and_deprecated_fields_are_skipped():
    struct = StructType((
        pair('old', StringType(), attributes=(attr('until', string('1.20')),)),
        pair('legacy', StringType(), deprecated=True),
        pair('kept', BooleanType()),
    ))

    assert render(struct) == '{ kept: boolean }'


def test_field_descriptions_render_as_docs():
    struct = StructType((pair('count', NumericType('int'), desc='How many'),))

    assert render(struct) == '{\n    /** How many */\n    count: NBTInt,\n}'


def test_dynamic_keys_become_mapped_types():
    assert render(StructType((pair(StringType(), BooleanType()),))) == '{ [Key in string]?: boolean }'

    state = make_state(registries={'item': ('minecraft:stick',)})
    keyed = StructType((pair(StringType(attributes=(attr('id', string('item')),)), BooleanType()),))
    assert render(keyed, state) == "{ [Key in Registry['minecraft:item']]?: boolean }"


def test_invalid_keys_and_spreads():
    with pytest.raises(ShapeError):
        compile_type(StructType((pair(BooleanType(), StringType()),)))
    with pytest.raises(ShapeError):
        compile_type(StructType((StructSpreadField(StringType()),)))


def test_dispatcher_keyed_on_a_sibling_property():
    state = make_state(dispatchers=THING)
    struct = StructType((pair('type', StringType()), pair('config', thing_dispatcher())))

    result = compile_node(struct, state, is_root=True, name='Holder', module_path='::java::data::thing')

    assert result.type.render() == (
        "{ [S in string]: { type: S, config: " + THING_ACCESS + " } }[string]"
    )
    assert import_paths(result) == ['::java::dispatcher::SymbolThing']
    assert state.reference_counters['minecraft:thing'].count('::java::data::thing') == 1


def test_missing_property_at_root_makes_the_declaration_generic():
    state = make_state(dispatchers=THING)
    struct = StructType((pair('config', thing_dispatcher()),))

    result = compile_node(struct, state, is_root=True, name='Holder')

    assert isinstance(result.type, TypeAlias)
    assert result.type.render() == 'export type Holder<S = undefined> = { config: ' + THING_ACCESS + ' }'


def test_missing_property_below_root_fails():
    state = make_state(dispatchers=THING)
    struct = StructType((pair('inner', StructType((pair('config', thing_dispatcher()),))),))

    with pytest.raises(ShapeError):
        compile_node(struct, state, is_root=True, name='Holder')


def test_two_selectors_conflict():
    state = make_state(dispatchers=THING)
    struct = StructType((
        pair('a', StringType()),
        pair('b', StringType()),
        pair('one', thing_dispatcher('a')),
        pair('two', thing_dispatcher('b')),
    ))

    with pytest.raises(ShapeError):
        compile_node(struct, state)
