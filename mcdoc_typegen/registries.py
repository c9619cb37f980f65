"""
Registries and aggregate exports

Every non-empty registry becomes a literal union in the registry module,

    export type BLOCK = ('minecraft:dirt' | 'minecraft:stone')
    export type Registry = { 'minecraft:block': BLOCK, ... }

next to the two plain string registries (localization keys and block state
property names). The dispatcher module gets a `Dispatcher` aggregate keyed
by registry id, and the resources module maps sandstone resource classes to
their resource types.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import DEFAULT_NAMESPACE, DISPATCHER_MODULE
from .context import strip_namespace
from .imports import ImportList
from .tsnodes import (UNKNOWN, PropertySignature, StringLiteral, TypeAlias, TypeLiteral, TypeReference,
                      union_of)

logger = logging.getLogger(__name__)


def registry_alias_name(registry: str) -> str:
    """`worldgen/biome` -> `WORLDGEN_BIOME`"""
    return re.sub(r'[^A-Za-z0-9]+', '_', strip_namespace(registry)).strip('_').upper()


def namespaced(value: str) -> str:
    return value if ':' in value else f"{DEFAULT_NAMESPACE}:{value}"


def normalize_registries(registries: Dict[str, Iterable[str]]) -> Dict[str, Tuple[str, ...]]:
    """Registry key without namespace -> sorted, namespaced, unique values"""
    normalized = {}
    for registry, values in registries.items():
        normalized[strip_namespace(registry)] = tuple(sorted({namespaced(value) for value in values}))
    return normalized


def registry_declarations(registries: Dict[str, Tuple[str, ...]]) -> List[TypeAlias]:
    """One literal union per non-empty registry, then the `Registry` map"""
    declarations = []
    properties = []
    for registry in sorted(registries):
        values = registries[registry]
        if not values:
            logger.debug("Skipping empty registry %s", registry)
            continue
        name = registry_alias_name(registry)
        declarations.append(TypeAlias(name, union_of(StringLiteral(value) for value in values)))
        properties.append(PropertySignature(namespaced(registry), TypeReference(name)))

    declarations.append(TypeAlias('Registry', TypeLiteral(tuple(properties))))
    return declarations


def string_registry(name: str, values: Iterable[str]) -> Optional[TypeAlias]:
    values = sorted(set(values))
    if not values:
        logger.debug("Skipping empty string registry %s", name)
        return None
    return TypeAlias(name, union_of(StringLiteral(value) for value in values))


def block_state_keys(block_states: Dict[str, Any]) -> List[str]:
    """Property names from `{block: [{property: [values]}, {property: default}]}`"""
    keys = set()
    for data in block_states.values():
        if data:
            keys.update(data[0])
    return sorted(keys)


def dispatcher_export(symbols: Dict[str, Tuple[str, int]]) -> Tuple[TypeAlias, ImportList]:
    """`Dispatcher` maps each registry id onto its symbol, generics set to unknown

    `symbols` is registry -> (symbol name, required generic count).
    """
    properties = []
    imports = ImportList()
    for registry in sorted(symbols):
        name, generic_count = symbols[registry]
        imports.insert(f"{DISPATCHER_MODULE}::{name}")
        properties.append(PropertySignature(registry, TypeReference(name, (UNKNOWN,) * generic_count)))
    return TypeAlias('Dispatcher', TypeLiteral(tuple(properties))), imports


# Sandstone resource classes by resource type
RESOURCE_CLASSES = {
    # Datapack resources
    'advancement': 'AdvancementClass',
    'banner_pattern': 'BannerPatternClass',
    'chat_type': 'ChatTypeClass',
    'damage_type': 'DamageTypeClass',
    'dialog': 'DialogClass',
    'enchantment': 'EnchantmentClass',
    'enchantment_provider': 'EnchantmentProviderClass',
    'function': 'MCFunctionClass',
    'instrument': 'InstrumentClass',
    'item_modifier': 'ItemModifierClass',
    'jukebox_song': 'JukeboxSongClass',
    'loot_table': 'LootTableClass',
    'predicate': 'PredicateClass',
    'recipe': 'RecipeClass',
    'structure': 'StructureClass',
    'test_environment': 'TestEnvironmentClass',
    'test_instance': 'TestInstanceClass',
    'trim_material': 'TrimMaterialClass',
    'trim_pattern': 'TrimPatternClass',

    # Resourcepack resources
    'atlas': 'AtlasClass',
    'block_definition': 'BlockStateClass',
    'equipment': 'EquipmentClass',
    'font': 'FontClass',
    'item_definition': 'ItemModelDefinitionClass',
    'lang': 'LanguageClass',
    'model': 'ModelClass',
    'particle': 'ParticleClass',
    'post_effect': 'PostEffectClass',
    'sound': 'SoundEventClass',
    'texture': 'TextureClass',
}


def resource_class_types() -> TypeAlias:
    """`{ AdvancementClass: 'advancement', ... }`, ordered by class name"""
    properties = tuple(
        PropertySignature(class_name, StringLiteral(resource))
        for resource, class_name in sorted(RESOURCE_CLASSES.items(), key=lambda item: item[1])
    )
    return TypeAlias('ResourceClassTypes', TypeLiteral(properties))
