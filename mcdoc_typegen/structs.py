"""
Struct composition

A struct compiles to the intersection of its parts in a fixed order:
spreads seen before the first fixed key (inherited), the literal of its own
fixed keys, then spreads seen after (merged). A single part is returned as
is. Dynamic keys become optional mapped types and count as inherited.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from .attributes import id_registry, is_deprecated, is_removed, significant_attribute, validate_attributes
from .context import CompileContext, Compiled, TypeResult
from .errors import ShapeError
from .expressions import HANDLERS, compile_type, expect, merge_child_dispatchers, registry_type, sandstone
from .imports import ImportList, merge_imports
from .mcdoc_types import (ConcreteType, DispatcherType, ReferenceType, StringType, StructPairField,
                          StructSpreadField, StructType, TemplateType, TypeDefinition, UnionType)
from .tsnodes import (EMPTY_OBJECT, NON_EMPTY_STRING, STRING, UNDEFINED, IndexedAccess,
                      MappedType, PropertySignature, TypeAlias, TypeLiteral, TypeNode, TypeParameter,
                      TypeReference, UnionType as UnionNode, intersection_of, pascal_case)

logger = logging.getLogger(__name__)

KeyCompiler = Callable[[CompileContext], Tuple[TypeNode, Optional[ImportList]]]

SPREAD_KINDS = (ReferenceType, DispatcherType, ConcreteType, TemplateType)

# Dynamic key attributes that only admit a plain string
STRING_KEY_ATTRIBUTES = frozenset(('texture_slot', 'criterion', 'dispatcher_key', 'translation_key', 'permutation'))


@dataclass
class _Pair:
    key: str
    value: Compiled
    optional: bool
    desc: Optional[str]


@dataclass
class _DynamicPair:
    key: KeyCompiler
    value: Compiled


@dataclass
class _Spread:
    value: Compiled


def _static_key(node: TypeNode, *import_paths: str) -> KeyCompiler:
    def compile(ctx):
        return node, (ImportList(import_paths) if import_paths else None)
    return compile


def string_key(key: StringType) -> KeyCompiler:
    attribute = significant_attribute(key.attributes)

    if attribute is None:
        if key.length_range is not None and (key.length_range.min or 0) >= 1:
            return _static_key(NON_EMPTY_STRING)
        return _static_key(STRING)

    if attribute.name == 'id':
        registry = id_registry(attribute)
        if registry is None:
            return _static_key(NON_EMPTY_STRING)
        return lambda ctx: registry_type(registry, ctx)
    if attribute.name == 'item_slots':
        node = TypeReference('LiteralUnion', (TypeReference('ENTITY_SLOTS'),))
        return _static_key(node, 'sandstone::arguments::ENTITY_SLOTS', sandstone('LiteralUnion'))
    if attribute.name == 'objective':
        return _static_key(UnionNode((STRING, TypeReference('ObjectiveClass'))), sandstone('ObjectiveClass'))
    if attribute.name == 'crafting_ingredient':
        return _static_key(TypeReference('CRAFTING_INGREDIENT'), 'sandstone::arguments::CRAFTING_INGREDIENT')
    if attribute.name in STRING_KEY_ATTRIBUTES:
        return _static_key(STRING)

    raise ShapeError(f"Unsupported struct key attribute '{attribute.name}'", 'struct')


def struct_key(key: TypeDefinition) -> KeyCompiler:
    """Key type of a dynamic pair"""
    validate_attributes(key.attributes)

    if isinstance(key, StringType):
        return string_key(key)
    if isinstance(key, ReferenceType) and key.path is None:
        raise ShapeError("Struct key reference has no path", 'struct')
    if isinstance(key, ConcreteType) and not (isinstance(key.child, ReferenceType) and key.child.path is not None):
        raise ShapeError("Struct key concrete type must wrap a reference", 'struct')
    if not isinstance(key, (ReferenceType, ConcreteType, UnionType)):
        raise ShapeError(f"Struct key must be a reference, string or union, got {key.kind}", 'struct')

    compiled = compile_type(key)

    def compile(ctx):
        result = compiled(ctx.nested())
        return result.type, result.imports
    return compile


def _field_docs(desc: Optional[str], value_docs: Optional[List[str]]) -> Tuple[str, ...]:
    docs = []
    if desc:
        docs.append(desc.strip())
    if value_docs:
        if docs:
            docs.append('')
            docs.append('Value:')
        docs.extend(value_docs)
    return tuple(docs)


def mcdoc_struct(type_def: TypeDefinition) -> Compiled:
    struct = expect(type_def, StructType)

    entries = []
    for field in struct.fields:
        validate_attributes(field.attributes)
        if is_removed(field.attributes) or is_deprecated(field.attributes):
            logger.debug("Skipping version gated struct field")
            continue

        if isinstance(field, StructSpreadField):
            if not isinstance(field.type, SPREAD_KINDS):
                raise ShapeError(f"Struct spread must be a reference-like type, got {field.type.kind}", 'struct')
            entries.append(_Spread(compile_type(field.type)))
        elif isinstance(field, StructPairField):
            if field.deprecated:
                continue
            if isinstance(field.key, str):
                entries.append(_Pair(field.key, compile_type(field.type), field.optional, field.desc))
            else:
                entries.append(_DynamicPair(struct_key(field.key), compile_type(field.type)))
        else:
            raise ShapeError(f"Unknown struct field {field!r}", 'struct')

    def compile(ctx: CompileContext) -> TypeResult:
        inherit: List[TypeNode] = []
        merge: List[TypeNode] = []
        members: List[PropertySignature] = []
        pair_index = {}
        pair_inserted = False
        imports = None
        child_dispatcher = None

        for entry in entries:
            if isinstance(entry, _Pair):
                name = f"{ctx.name}{pascal_case(entry.key)}" if ctx.name else None
                value = entry.value(ctx.nested(name))
                imports = merge_imports(imports, value.imports)
                child_dispatcher = merge_child_dispatchers(child_dispatcher, value.child_dispatcher)

                pair_index[entry.key] = len(members)
                members.append(PropertySignature(entry.key, value.type, entry.optional,
                                                 _field_docs(entry.desc, value.docs)))
                pair_inserted = True

            elif isinstance(entry, _DynamicPair):
                key_type, key_imports = entry.key(ctx)
                value = entry.value(ctx.nested(ctx.name))
                imports = merge_imports(merge_imports(imports, key_imports), value.imports)
                child_dispatcher = merge_child_dispatchers(child_dispatcher, value.child_dispatcher)
                inherit.append(MappedType('Key', key_type, value.type))

            else:
                spread = entry.value(ctx.nested(ctx.name))
                imports = merge_imports(imports, spread.imports)
                child_dispatcher = merge_child_dispatchers(child_dispatcher, spread.child_dispatcher)
                if pair_inserted:
                    merge.append(spread.type)
                else:
                    inherit.append(spread.type)

        # Resolve dispatchers keyed on one of our own properties
        selector = None
        selector_type = None
        generic_root = False
        remaining = []
        for parent_count, property in child_dispatcher or []:
            if parent_count > 0:
                if ctx.is_root:
                    generic_root = True
                remaining.append((parent_count - 1, property))
                continue

            if property == selector:
                continue
            if selector is not None:
                raise ShapeError(f"Struct dispatches on both '{selector}' and '{property}'", 'struct', ctx.name)

            index = pair_index.get(property)
            if index is None:
                if ctx.is_root:
                    generic_root = True
                    continue
                raise ShapeError(f"Dynamic dispatcher refers to missing property '{property}'", 'struct', ctx.name)

            selector = property
            selector_type = members[index].type
            members[index] = replace(members[index], type=TypeReference('S'))

        types = list(inherit)
        if pair_inserted:
            types.append(TypeLiteral(tuple(members)))
        types.extend(merge)

        inner = intersection_of(types) if types else EMPTY_OBJECT

        if selector is not None:
            # Distribute over every possible discriminator value
            inner = IndexedAccess(MappedType('S', selector_type, inner, optional=False), selector_type)

        if generic_root:
            if ctx.name is None:
                raise ShapeError("Struct with an unresolved dispatcher needs a name", 'struct')
            inner = TypeAlias(ctx.name, inner, (TypeParameter('S', default=UNDEFINED),))

        return TypeResult(inner, imports, None, remaining or None)

    return compile


HANDLERS['struct'] = mcdoc_struct
