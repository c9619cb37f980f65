import pytest

from mcdoc_typegen.errors import TypegenError
from mcdoc_typegen.generator import TypesGenerator, referenced_paths
from mcdoc_typegen.mcdoc_types import (BooleanType, DispatcherType, DynamicIndex, ReferenceType, StringType,
                                       StructPairField, StructType, SymbolEntry, SymbolTable)
from mcdoc_typegen.tsnodes import ReExport

from helpers import attr, string

THING = '::java::data::thing'

HOLDER = StructType((
    StructPairField('type', StringType()),
    StructPairField('config', DispatcherType('minecraft:thing', (DynamicIndex(('type',)),))),
))

DISPATCHERS = {
    'minecraft:thing': {
        'a': StructType((StructPairField('x', StringType()),)),
        'b': BooleanType(),
    },
}


def symbols(**extra):
    entries = {
        f'{THING}::Holder': SymbolEntry(HOLDER, doc=' A holder '),
        f'{THING}::Alias': SymbolEntry(ReferenceType(f'{THING}::Holder')),
        '::java::data::user::User': SymbolEntry(ReferenceType(f'{THING}::Alias')),
    }
    entries.update(extra)
    return SymbolTable(entries)


@pytest.fixture
def generator():
    return TypesGenerator(symbols(), DISPATCHERS, registries={'minecraft:thing_type': ['a', 'b']})


def test_end_to_end(generator):
    modules = generator.resolve_types()

    assert sorted(modules) == [
        '::java::data::thing',
        '::java::data::user',
        '::java::dispatcher',
        '::java::registry',
        '::java::resources',
    ]

    thing = modules[THING]
    assert thing.file == 'sandstone/generated/data/thing'
    assert thing.imports == ()
    assert thing.declaration('Holder').render() == (
        "/** A holder */\n"
        "export type Holder = { [S in string]: { type: S, config: "
        "(S extends keyof SymbolThing ? SymbolThing[S] : Record<string, unknown>) } }[string]"
    )
    assert thing.declaration('Alias').render() == 'export type Alias = Holder'
    assert [declaration.name for declaration in thing.declarations] == [
        'Holder', 'Alias', 'ThingA', 'ThingB', 'ThingMap', 'ThingKeys', 'ThingFallback', 'SymbolThing',
    ]
    assert thing.paths == frozenset({f'{THING}::Holder', f'{THING}::Alias'})

    user = modules['::java::data::user']
    assert user.render() == (
        "import type { Holder } from 'sandstone/generated/data/thing'\n"
        "\n"
        "export type User = Holder\n"
    )


def test_inlined_dispatcher_is_reexported(generator):
    modules = generator.resolve_types()
    shared = modules['::java::dispatcher']

    assert shared.declarations[0] == ReExport(('SymbolThing',), 'sandstone/generated/data/thing')
    assert shared.render() == (
        "import type { SymbolThing } from 'sandstone/generated/data/thing'\n"
        "\n"
        "export type { SymbolThing } from 'sandstone/generated/data/thing'\n"
        "\n"
        "export type Dispatcher = { 'minecraft:thing': SymbolThing }\n"
    )
    assert generator.redirects == {'::java::dispatcher::SymbolThing': f'{THING}::SymbolThing'}


def test_unreferenced_dispatcher_stays_shared():
    generator = TypesGenerator(SymbolTable(), DISPATCHERS)
    modules = generator.resolve_types()
    shared = modules['::java::dispatcher']

    assert THING not in modules
    assert [declaration.name for declaration in shared.declarations] == [
        'ThingA', 'ThingB', 'ThingMap', 'ThingKeys', 'ThingFallback', 'SymbolThing', 'Dispatcher',
    ]
    assert shared.imports == ()


def test_registry_module(generator):
    modules = generator.resolve_types()

    assert modules['::java::registry'].render() == (
        "export type THING_TYPE = ('minecraft:a' | 'minecraft:b')\n"
        "\n"
        "export type Registry = { 'minecraft:thing_type': THING_TYPE }\n"
    )
    assert modules['::java::resources'].declaration('ResourceClassTypes') is not None


def test_translation_and_block_state_keys():
    generator = TypesGenerator(SymbolTable(), {}, translation_keys=['b', 'a'], block_state_keys=['axis'])
    modules = generator.resolve_types()
    registry = modules['::java::registry']

    assert registry.declaration('TranslationKey').render() == "export type TranslationKey = ('a' | 'b')"
    assert registry.declaration('BlockStateKey').render() == "export type BlockStateKey = 'axis'"
    assert generator.state.has_translation_keys


def test_passes_run_in_order(generator):
    with pytest.raises(TypegenError):
        generator.precompute_dispatchers()

    generator.resolve_registries()
    with pytest.raises(TypegenError):
        generator.resolve_registries()
    with pytest.raises(TypegenError):
        generator.resolve_module_symbols()


def test_cannot_run_twice(generator):
    generator.resolve_types()
    with pytest.raises(TypegenError):
        generator.resolve_types()


def test_removed_symbols_are_skipped():
    removed = SymbolEntry(BooleanType(), attributes=(attr('until', string('1.20.5')),))
    generator = TypesGenerator(symbols(**{f'{THING}::Old': removed}), DISPATCHERS)

    modules = generator.resolve_types()

    assert modules[THING].declaration('Old') is None


def test_duplicate_nested_structs_are_skipped():
    nested = SymbolEntry(StructType((StructPairField('x', BooleanType()),)))
    generator = TypesGenerator(symbols(**{f'{THING}::Holder::Inner': nested}), DISPATCHERS)

    modules = generator.resolve_types()

    assert f'{THING}::Holder' not in modules


def test_referenced_nested_structs_are_kept():
    nested = SymbolEntry(StructType((StructPairField('x', BooleanType()),)))
    user = SymbolEntry(ReferenceType(f'{THING}::Holder::Inner'))
    generator = TypesGenerator(
        symbols(**{f'{THING}::Holder::Inner': nested, '::java::data::user::Other': user}),
        DISPATCHERS,
    )

    modules = generator.resolve_types()

    assert modules[f'{THING}::Holder'].declaration('Inner').render() == 'export type Inner = { x: boolean }'


def test_referenced_paths_ignore_attributes():
    type_def = StructType(
        (StructPairField('a', ReferenceType('::java::x::A')),),
        attributes=(attr('id', ReferenceType('::java::x::Ignored')),),
    )

    assert referenced_paths([type_def]) == {'::java::x::A'}


def test_dispatcher_stays_shared_when_names_clash():
    table = SymbolTable({
        f'{THING}::Holder': SymbolEntry(HOLDER),
        f'{THING}::ThingMap': SymbolEntry(BooleanType()),
    })
    generator = TypesGenerator(table, DISPATCHERS)

    modules = generator.resolve_types()

    names = [declaration.name for declaration in modules[THING].declarations]
    assert names == ['Holder', 'ThingMap']
    assert generator.redirects == {}
    assert [declaration.render() for declaration in modules[THING].imports] == [
        "import type { SymbolThing } from 'sandstone/generated/dispatcher'",
    ]
    assert modules['::java::dispatcher'].declaration('SymbolThing') is not None


def test_dispatcher_stays_shared_when_an_import_clashes():
    table = symbols(**{f'{THING}::Other': SymbolEntry(ReferenceType('::java::data::user::ThingA'))})
    generator = TypesGenerator(table, DISPATCHERS)

    modules = generator.resolve_types()

    assert THING + '::SymbolThing' not in generator.redirects.values()
    assert modules['::java::dispatcher'].declaration('ThingA') is not None
