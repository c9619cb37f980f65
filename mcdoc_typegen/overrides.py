"""
Hand written types for symbols the generic compiler renders badly

Each entry replaces the whole compiled declaration of its path, either
because the generated type recurses forever or because it is too large for
the TypeScript checker.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .imports import ImportList
from .tsnodes import (EMPTY_OBJECT, NAMESPACED_STRING, STRING, BooleanLiteral, ConditionalType, IndexedAccess,
                      IntersectionType, MappedType, NumberLiteral, OptionalElement, PropertySignature,
                      StringLiteral, TemplateLiteral, TupleType, TypeLiteral, TypeNode, TypeOperator,
                      TypeParameter, TypeReference, UnionType)


@dataclass(frozen=True)
class OverrideResult:
    type: TypeNode
    imports: Optional[ImportList] = None
    type_params: Tuple[TypeParameter, ...] = ()


def keyof(node: TypeNode) -> TypeNode:
    return TypeOperator('keyof', node)


def entity_effect() -> OverrideResult:
    # LiteralUnion<keyof SymbolEntityEffect> keeps the type small compared to the registry pattern
    symbol = TypeReference('SymbolEntityEffect')
    key_type = TypeReference('LiteralUnion', (keyof(symbol),))
    value = IntersectionType((
        TypeLiteral((PropertySignature('type', TypeReference('S')),)),
        ConditionalType(TypeReference('S'), keyof(symbol), IndexedAccess(symbol, TypeReference('S')),
                        TypeReference('RootNBT')),
    ))
    return OverrideResult(
        IndexedAccess(MappedType('S', key_type, value), key_type),
        ImportList([
            'sandstone::LiteralUnion',
            '::java::dispatcher::SymbolEntityEffect',
            'sandstone::arguments::nbt::RootNBT',
        ]),
    )


def block_state_property() -> OverrideResult:
    # The dispatcher form is correct but too large to check
    return OverrideResult(
        TypeLiteral((
            PropertySignature('block', IndexedAccess(TypeReference('Registry'), StringLiteral('minecraft:block'))),
            PropertySignature('properties', TypeReference('SymbolMcdocBlockStates', (StringLiteral('%none'),)),
                              optional=True),
        )),
        ImportList(['::java::registry::Registry', '::java::dispatcher::SymbolMcdocBlockStates']),
    )


def data_component_patch() -> OverrideResult:
    symbol = TypeReference('SymbolDataComponent')
    components = MappedType('Key', keyof(symbol), IndexedAccess(symbol, TypeReference('Key')))
    removals = MappedType(
        'Key',
        keyof(symbol),
        EMPTY_OBJECT,
        name_type=TemplateLiteral('!', ((TypeReference('Extract', (TypeReference('Key'), STRING)), ''),)),
    )
    return OverrideResult(
        IntersectionType((components, removals)),
        ImportList(['::java::dispatcher::SymbolDataComponent']),
    )


def component_strings() -> OverrideResult:
    symbol = TypeReference('SymbolDataComponent')
    cases = MappedType(
        'S',
        keyof(symbol),
        IntersectionType((
            TypeLiteral((PropertySignature('component', TypeReference('S')),)),
            TypeReference('SelectCases', (IndexedAccess(symbol, TypeReference('S')),)),
        )),
    )
    known = TypeReference('NonNullable', (IndexedAccess(cases, keyof(symbol)),))
    fallback = IntersectionType((
        TypeReference('RootNBT'),
        TypeLiteral((PropertySignature('component', NAMESPACED_STRING),)),
    ))
    return OverrideResult(
        UnionType((known, fallback)),
        ImportList([
            '::java::dispatcher::SymbolDataComponent',
            '::java::assets::item_definition::SelectCases',
            'sandstone::arguments::nbt::RootNBT',
        ]),
    )


def text() -> OverrideResult:
    # Text is recursive through NBTList<Text>; one level is enough
    content = UnionType((STRING, TypeReference('TextObject')))
    return OverrideResult(
        UnionType((
            STRING,
            TypeReference('TextObject'),
            TypeReference('NBTList', (content, TypeLiteral((
                PropertySignature('leftExclusive', BooleanLiteral(False)),
                PropertySignature('min', NumberLiteral(1)),
            )))),
        )),
        ImportList(['::java::util::text::TextObject', 'sandstone::NBTList']),
    )


def crafting_shaped() -> OverrideResult:
    """`key` is derived from the characters used in `pattern`"""
    row = TypeReference('StringSmallerThan4', (STRING,))
    pattern = TypeParameter(
        'PATTERN',
        constraint=TypeOperator('readonly', TupleType((row, OptionalElement(row), OptionalElement(row)))),
        default=TypeOperator('readonly', TupleType((STRING, OptionalElement(STRING), OptionalElement(STRING)))),
    )
    body = IntersectionType((
        TypeReference('NotificationInfo'),
        TypeReference('CraftingBookInfo'),
        TypeLiteral((
            PropertySignature('pattern', TypeReference('PATTERN')),
            PropertySignature('key', TypeReference('PatternKeys', (TypeReference('PATTERN'), TypeReference('Ingredient')))),
            PropertySignature('result', TypeReference('ItemStackTemplate')),
        )),
    ))
    return OverrideResult(
        body,
        ImportList([
            '::java::data::recipe::NotificationInfo',
            '::java::data::recipe::CraftingBookInfo',
            '::java::data::recipe::Ingredient',
            '::java::world::item::ItemStackTemplate',
            'sandstone::arguments::StringSmallerThan4',
            'sandstone::arguments::PatternKeys',
        ]),
        (pattern,),
    )


OVERRIDES: Dict[str, Callable[[], OverrideResult]] = {
    '::java::data::enchantment::effect::EntityEffect': entity_effect,
    '::java::data::loot::condition::BlockStateProperty': block_state_property,
    '::java::world::component::DataComponentPatch': data_component_patch,
    '::java::assets::item_definition::ComponentStrings': component_strings,
    '::java::util::text::Text': text,
    '::java::data::recipe::CraftingShaped': crafting_shaped,
}
