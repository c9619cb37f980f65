from mcdoc_typegen.generator import TypesGenerator
from mcdoc_typegen.mcdoc_types import BooleanType, StructPairField, StructType
from mcdoc_typegen.overrides import OVERRIDES

from helpers import table

TEXT = '::java::util::text::Text'


def test_overridden_paths():
    assert sorted(OVERRIDES) == [
        '::java::assets::item_definition::ComponentStrings',
        '::java::data::enchantment::effect::EntityEffect',
        '::java::data::loot::condition::BlockStateProperty',
        '::java::data::recipe::CraftingShaped',
        '::java::util::text::Text',
        '::java::world::component::DataComponentPatch',
    ]


def test_text_is_one_level_deep():
    result = OVERRIDES[TEXT]()

    assert result.type.render() == (
        '(string | TextObject | NBTList<(string | TextObject), { leftExclusive: false, min: 1 }>)'
    )
    assert sorted(result.imports) == ['::java::util::text::TextObject', 'sandstone::NBTList']


def test_crafting_shaped_pattern_parameter():
    result = OVERRIDES['::java::data::recipe::CraftingShaped']()

    assert [param.render() for param in result.type_params] == [
        'PATTERN extends readonly [StringSmallerThan4<string>, StringSmallerThan4<string>?, '
        'StringSmallerThan4<string>?] = readonly [string, string?, string?]'
    ]
    assert 'key: PatternKeys<PATTERN, Ingredient>' in result.type.render()


def test_data_component_patch_removals():
    result = OVERRIDES['::java::world::component::DataComponentPatch']()

    assert result.type.render() == (
        '({ [Key in keyof SymbolDataComponent]?: SymbolDataComponent[Key] } & '
        '{ [Key in keyof SymbolDataComponent as `!${Extract<Key, string>}`]?: Record<string, never> })'
    )


def test_override_replaces_the_compiled_symbol():
    # The struct key is invalid, so compiling it would fail
    invalid = StructType((StructPairField(BooleanType(), BooleanType()),))
    generator = TypesGenerator(table({TEXT: invalid}), {})

    modules = generator.resolve_types()

    module = modules['::java::util::text']
    assert module.declaration('Text').render().startswith('export type Text = (string | TextObject')
    assert [declaration.render() for declaration in module.imports] == [
        "import type { NBTList } from 'sandstone'",
    ]
