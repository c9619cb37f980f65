from mcdoc_typegen.registries import (RESOURCE_CLASSES, block_state_keys, dispatcher_export, normalize_registries,
                                      registry_alias_name, registry_declarations, resource_class_types,
                                      string_registry)


def test_alias_names():
    assert registry_alias_name('block') == 'BLOCK'
    assert registry_alias_name('minecraft:worldgen/biome') == 'WORLDGEN_BIOME'
    assert registry_alias_name('entity_type') == 'ENTITY_TYPE'


def test_normalize():
    registries = normalize_registries({
        'minecraft:block': ['stone', 'minecraft:dirt', 'stone'],
        'item': [],
    })

    assert registries == {'block': ('minecraft:dirt', 'minecraft:stone'), 'item': ()}


def test_declarations_skip_empty_registries():
    declarations = registry_declarations({
        'block': ('minecraft:dirt', 'minecraft:stone'),
        'item': (),
        'worldgen/biome': ('minecraft:plains',),
    })

    assert [declaration.render() for declaration in declarations] == [
        "export type BLOCK = ('minecraft:dirt' | 'minecraft:stone')",
        "export type WORLDGEN_BIOME = 'minecraft:plains'",
        "export type Registry = { 'minecraft:block': BLOCK, 'minecraft:worldgen/biome': WORLDGEN_BIOME }",
    ]


def test_string_registry():
    assert string_registry('TranslationKey', []) is None
    alias = string_registry('TranslationKey', ['b.key', 'a.key', 'b.key'])
    assert alias.render() == "export type TranslationKey = ('a.key' | 'b.key')"


def test_block_state_keys():
    block_states = {
        'minecraft:oak_log': [{'axis': ['x', 'y', 'z']}, {'axis': 'y'}],
        'minecraft:lever': [{'powered': ['false', 'true'], 'face': ['floor', 'wall']}, {}],
        'minecraft:stone': [],
    }

    assert block_state_keys(block_states) == ['axis', 'face', 'powered']


def test_dispatcher_export():
    alias, imports = dispatcher_export({
        'minecraft:thing': ('SymbolThing', 0),
        'minecraft:generic': ('SymbolGeneric', 2),
    })

    assert alias.render() == (
        "export type Dispatcher = { 'minecraft:generic': SymbolGeneric<unknown, unknown>, "
        "'minecraft:thing': SymbolThing }"
    )
    assert list(imports) == ['::java::dispatcher::SymbolGeneric', '::java::dispatcher::SymbolThing']


def test_resource_class_types():
    alias = resource_class_types()
    names = [member.name for member in alias.type.members]

    assert alias.name == 'ResourceClassTypes'
    assert names == sorted(names)
    assert len(names) == len(RESOURCE_CLASSES)
    classes = {member.name: member.type.render() for member in alias.type.members}
    assert classes['MCFunctionClass'] == "'function'"
