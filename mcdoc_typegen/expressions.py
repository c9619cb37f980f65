"""
Type expression compiler

`compile_type(type_def)` looks up the handler for the node's kind. A handler
validates the node straight away and returns a function that, given a
CompileContext, produces the TypeScript expression and the imports it needs.
Struct and dispatcher handlers register themselves from their own modules.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .attributes import (id_registry, is_removed, significant_attribute, string_argument,
                         validate_attributes)
from .config import DEFAULT_NAMESPACE, REGISTRY_MODULE
from .context import ChildDispatcher, CompileContext, Compiled, Handler, TypeResult
from .errors import ShapeError
from .imports import ImportList, add_import, merge_imports, symbol_name
from .mcdoc_types import (ConcreteType, EnumType, ListType, LiteralType, NumericType,
                          PrimitiveArrayType, ReferenceType, StringType, SymbolTable,
                          TemplateType, TupleType, TypeDefinition, UnionType)
from .ranges import length_range_generic, non_integral_generic, whole_number_generic
from .tsnodes import (BOOLEAN, NAMESPACED_STRING, NEVER, NON_EMPTY_STRING, NUMBER, STRING,
                      TAG_STRING, UNDEFINED, UNKNOWN, BooleanLiteral, IndexedAccess, NumberLiteral,
                      StringLiteral, TupleType as TupleNode, TypeAlias, TypeNode,
                      TypeParameter, TypeReference, UnionType as UnionNode, union_of)

logger = logging.getLogger(__name__)

HANDLERS: Dict[str, Handler] = {}


def compile_type(type_def: TypeDefinition) -> Compiled:
    """Validate `type_def` and return its compile function"""
    handler = HANDLERS.get(type_def.kind)
    if handler is None:
        raise ShapeError("Unsupported type kind", type_def.kind)
    validate_attributes(type_def.attributes)
    return handler(type_def)


def expect(type_def: TypeDefinition, cls, path: Optional[str] = None):
    if not isinstance(type_def, cls):
        raise ShapeError(f"Expected {cls.__name__}, got {type(type_def).__name__}", type_def.kind, path)
    return type_def


def merge_child_dispatchers(*lists: Optional[List[ChildDispatcher]]) -> Optional[List[ChildDispatcher]]:
    merged = []
    for items in lists:
        if items:
            merged.extend(items)
    return merged or None


def sandstone(name: str) -> str:
    return f"sandstone::{name}"


def _static(node: TypeNode, import_path: Optional[str] = None, docs: Optional[List[str]] = None) -> Compiled:
    def compile(ctx: CompileContext) -> TypeResult:
        imports = ImportList([import_path]) if import_path is not None else None
        return TypeResult(node, imports, list(docs) if docs else None)
    return compile


# Registries

def registry_id(registry: str) -> str:
    return registry if ':' in registry else f"{DEFAULT_NAMESPACE}:{registry}"


def registry_type(registry: str, ctx: CompileContext) -> Tuple[TypeNode, Optional[ImportList]]:
    """`Registry['minecraft:x']`, or a namespaced string for unknown/empty registries"""
    if not ctx.state.has_registry(registry):
        logger.debug("Registry %s is empty, using a namespaced string", registry)
        return NAMESPACED_STRING, None
    node = IndexedAccess(TypeReference('Registry'), StringLiteral(registry_id(registry)))
    return node, ImportList([f"{REGISTRY_MODULE}::Registry"])


# Keywords

def mcdoc_keyword(type_def: TypeDefinition) -> Compiled:
    return _static(UNKNOWN)


def mcdoc_boolean(type_def: TypeDefinition) -> Compiled:
    return _static(BOOLEAN)


# Numbers

WHOLE_NUMBERS = {
    'byte': 'NBTByte',
    'short': 'NBTShort',
    'int': 'NBTInt',
    'long': 'NBTLong',
}


def mcdoc_numeric(type_def: TypeDefinition) -> Compiled:
    numeric = expect(type_def, NumericType)
    kind = numeric.numeric_kind
    value_range = numeric.value_range

    if kind in WHOLE_NUMBERS:
        name = WHOLE_NUMBERS[kind]
        if value_range is None:
            return _static(TypeReference(name), sandstone(name))
        generic, docs = whole_number_generic(value_range)
        return _static(TypeReference(name, (generic,)), sandstone(name), docs)

    if kind == 'float':
        if value_range is None:
            return _static(TypeReference('NBTFloat'), sandstone('NBTFloat'))
        generic, docs = non_integral_generic(value_range)
        return _static(TypeReference('NBTFloat', (NUMBER, generic)), sandstone('NBTFloat'), docs)

    if kind == 'double':
        # Plain numbers are accepted wherever a double is
        if value_range is None:
            return _static(UnionNode((TypeReference('NBTDouble'), NUMBER)), sandstone('NBTDouble'))
        generic, docs = non_integral_generic(value_range)
        node = UnionNode((TypeReference('NBTDouble', (NUMBER, generic)), NUMBER))
        return _static(node, sandstone('NBTDouble'), docs)

    raise ShapeError(f"Unknown numeric kind {kind!r}", kind)


# Lists and arrays

ARRAYS = {
    'byte_array': 'NBTByteArray',
    'int_array': 'NBTIntArray',
    'long_array': 'NBTLongArray',
}


def mcdoc_primitive_array(type_def: TypeDefinition) -> Compiled:
    array = expect(type_def, PrimitiveArrayType)
    name = ARRAYS[array.array_kind]

    docs = []
    if array.value_range is not None:
        docs.append(f"Value range: {array.value_range}")
    if array.length_range is None:
        return _static(TypeReference(name), sandstone(name), docs)

    generic, length_docs = length_range_generic(array.length_range, 'Array')
    return _static(TypeReference(name, (generic,)), sandstone(name), docs + length_docs)


def mcdoc_list(type_def: TypeDefinition) -> Compiled:
    list_type = expect(type_def, ListType)
    item = compile_type(list_type.item)

    def compile(ctx: CompileContext) -> TypeResult:
        result = item(ctx.nested(ctx.name))

        child_dispatcher = None
        if result.child_dispatcher:
            child_dispatcher = []
            for parent_count, property in result.child_dispatcher:
                if parent_count == 0:
                    raise ShapeError(f"Dynamic dispatcher on '{property}' cannot be resolved through a list",
                                     'list', ctx.name)
                child_dispatcher.append((parent_count - 1, property))

        if list_type.length_range is None:
            return TypeResult(TypeReference('Array', (result.type,)), result.imports, result.docs, child_dispatcher)

        generic, docs = length_range_generic(list_type.length_range, 'List')
        imports = merge_imports(ImportList([sandstone('NBTList')]), result.imports)
        return TypeResult(
            TypeReference('NBTList', (result.type, generic)),
            imports,
            docs + (result.docs or []),
            child_dispatcher,
        )

    return compile


# Literals

NBT_LITERALS = {
    'byte': 'NBTByte',
    'short': 'NBTShort',
    'float': 'NBTFloat',
}


def literal_node(kind: str, value) -> Tuple[TypeNode, Optional[str]]:
    """Literal type for a value of the given literal kind, plus its import"""
    if kind == 'boolean':
        return BooleanLiteral(bool(value)), None
    if kind == 'string':
        return StringLiteral(str(value)), None
    if kind in ('int', 'double'):
        return NumberLiteral(value), None
    if kind in NBT_LITERALS:
        name = NBT_LITERALS[kind]
        return TypeReference(name, (NumberLiteral(value),)), sandstone(name)
    if kind == 'long':
        # Longs exceed the safe integer range, so sandstone takes them as strings
        return TypeReference('NBTLong', (StringLiteral(str(int(value))),)), sandstone('NBTLong')
    raise ShapeError(f"Unknown literal kind {kind!r}", 'literal')


def mcdoc_literal(type_def: TypeDefinition) -> Compiled:
    literal = expect(type_def, LiteralType)
    node, import_path = literal_node(literal.literal_kind, literal.value)
    return _static(node, import_path)


# Strings

# Attributes that refine a string without changing its sandstone type
PLAIN_STRING_ATTRIBUTES = frozenset((
    'block_predicate', 'color', 'command', 'crafting_ingredient', 'criterion', 'entity',
    'game_rule', 'integer', 'item_slots', 'match_regex', 'nbt', 'nbt_path', 'objective',
    'regex_pattern', 'score_holder', 'team', 'texture_slot', 'time_pattern',
    'translation_value', 'uuid', 'vector', 'dispatcher_key',
))


def mcdoc_string(type_def: TypeDefinition) -> Compiled:
    """Strings as value types; struct keys are handled by the struct compiler"""
    string = expect(type_def, StringType)
    attribute = significant_attribute(string.attributes)

    length_docs = []
    if string.length_range is not None:
        length_docs = [f"String length range: {string.length_range}"]

    if attribute is None:
        if string.length_range is not None and (string.length_range.min or 0) >= 1:
            return _static(NON_EMPTY_STRING, None, length_docs)
        return _static(STRING, None, length_docs)

    if attribute.name == 'id':
        registry = id_registry(attribute)
        if attribute.value is None or registry is None:
            return _static(NAMESPACED_STRING)
        tags = string_argument(attribute.value, 'tags')

        def compile_id(ctx: CompileContext) -> TypeResult:
            node, imports = registry_type(registry, ctx)
            if tags == 'required':
                node = TAG_STRING
                imports = None
            elif tags in ('allowed', 'implicit'):
                node = UnionNode((node, TAG_STRING))
            return TypeResult(node, imports)
        return compile_id

    if attribute.name == 'translation_key':
        def compile_translation_key(ctx: CompileContext) -> TypeResult:
            if not ctx.state.has_translation_keys:
                return TypeResult(STRING)
            imports = ImportList([sandstone('LiteralUnion'), f"{REGISTRY_MODULE}::TranslationKey"])
            return TypeResult(TypeReference('LiteralUnion', (TypeReference('TranslationKey'),)), imports)
        return compile_translation_key

    if attribute.name in PLAIN_STRING_ATTRIBUTES:
        return _static(STRING, None, length_docs)

    raise ShapeError(f"Unsupported string attribute '{attribute.name}'", 'string')


# References

def resolve_alias(symbols: SymbolTable, path: str) -> str:
    """Follow one hop when `path` is itself a bare reference"""
    entry = symbols.get(path)
    if entry is None or entry.attributes:
        return path
    target = entry.type_def
    if isinstance(target, ReferenceType) and target.path is not None and not target.attributes:
        if target.path != path:
            return target.path
    return path


def mcdoc_reference(type_def: TypeDefinition) -> Compiled:
    reference = expect(type_def, ReferenceType)
    if reference.path is None:
        raise ShapeError("Reference has no path", 'reference')

    def compile(ctx: CompileContext) -> TypeResult:
        path = reference.path
        if path not in ctx.generics:
            path = resolve_alias(ctx.state.symbols, path)

        imports = None
        if path not in ctx.generics:
            imports = ImportList([path])

        args = ctx.generic_types or ()
        return TypeResult(TypeReference(symbol_name(path), tuple(args)), imports)

    return compile


def mcdoc_concrete(type_def: TypeDefinition) -> Compiled:
    concrete = expect(type_def, ConcreteType)
    if concrete.child.kind != 'reference':
        raise ShapeError(f"Concrete type must wrap a reference, got {concrete.child.kind}", 'concrete')

    child = compile_type(concrete.child)
    type_args = [compile_type(arg) for arg in concrete.type_args]

    def compile(ctx: CompileContext) -> TypeResult:
        imports = None
        child_dispatcher = None
        resolved = []
        for arg in type_args:
            result = arg(ctx.nested())
            resolved.append(result.type)
            imports = merge_imports(imports, result.imports)
            child_dispatcher = merge_child_dispatchers(child_dispatcher, result.child_dispatcher)

        result = child(ctx.nested().derive(generic_types=tuple(resolved)))
        imports = merge_imports(imports, result.imports)
        return TypeResult(result.type, imports, result.docs, child_dispatcher)

    return compile


def mcdoc_template(type_def: TypeDefinition) -> Compiled:
    template = expect(type_def, TemplateType)
    child = compile_type(template.child)
    params = tuple(TypeParameter(symbol_name(path)) for path in template.type_params)

    def compile(ctx: CompileContext) -> TypeResult:
        if ctx.name is None or not ctx.is_root:
            raise ShapeError("Template must be declared at the root of a named symbol", 'template', ctx.name)

        # The body stays at the root, so unresolved dispatchers surface as `S`
        generics = ctx.generics | frozenset(template.type_params)
        result = child(ctx.derive(generics=generics, generic_types=None, index_keys=None))

        body = result.type
        type_params = params
        if isinstance(body, TypeAlias):
            type_params += body.type_params
            body = body.type
        if result.child_dispatcher and not any(param.name == 'S' for param in type_params):
            type_params += (TypeParameter('S', default=UNDEFINED),)

        alias = TypeAlias(ctx.name, body, type_params, docs=tuple(result.docs or ()))
        return TypeResult(alias, result.imports, None, result.child_dispatcher)

    return compile


# Enums, unions and tuples

def mcdoc_enum(type_def: TypeDefinition) -> Compiled:
    enum = expect(type_def, EnumType)
    values = []
    for value in enum.values:
        if is_removed(validate_attributes(value.attributes)):
            continue
        values.append(value)

    def compile(ctx: CompileContext) -> TypeResult:
        imports = None
        nodes = []
        docs = []
        for value in values:
            node, import_path = literal_node(enum.enum_kind, value.value)
            nodes.append(node)
            if import_path is not None:
                imports = add_import(imports, import_path)
            if value.desc:
                docs.append(f"`{value.identifier}`: {value.desc.strip()}")
        return TypeResult(union_of(nodes), imports, docs or None)

    return compile


def _live_members(members) -> List[TypeDefinition]:
    live = []
    for member in members:
        if is_removed(validate_attributes(member.attributes)):
            logger.debug("Skipping removed %s member", member.kind)
            continue
        live.append(member)
    return live


def mcdoc_union(type_def: TypeDefinition) -> Compiled:
    union = expect(type_def, UnionType)
    members = [compile_type(member) for member in _live_members(union.members)]

    def compile(ctx: CompileContext) -> TypeResult:
        if not members:
            return TypeResult(NEVER)

        results = [member(ctx.nested(ctx.name)) for member in members]
        if len(results) == 1:
            return results[0]

        imports = None
        child_dispatcher = None
        docs = []
        for index, result in enumerate(results):
            imports = merge_imports(imports, result.imports)
            child_dispatcher = merge_child_dispatchers(child_dispatcher, result.child_dispatcher)
            if result.docs:
                docs.append('*either*' if index == 0 else '*or*')
                docs.extend(result.docs)

        return TypeResult(UnionNode(tuple(result.type for result in results)), imports, docs or None,
                          child_dispatcher)

    return compile


def mcdoc_tuple(type_def: TypeDefinition) -> Compiled:
    tuple_type = expect(type_def, TupleType)
    items = [compile_type(item) for item in _live_members(tuple_type.items)]

    def compile(ctx: CompileContext) -> TypeResult:
        imports = None
        child_dispatcher = None
        elements = []
        for item in items:
            result = item(ctx.nested(ctx.name))
            elements.append(result.type)
            imports = merge_imports(imports, result.imports)
            child_dispatcher = merge_child_dispatchers(child_dispatcher, result.child_dispatcher)
        return TypeResult(TupleNode(tuple(elements)), imports, None, child_dispatcher)

    return compile


HANDLERS.update({
    'any': mcdoc_keyword,
    'unsafe': mcdoc_keyword,
    'boolean': mcdoc_boolean,
    'string': mcdoc_string,
    'literal': mcdoc_literal,
    'byte': mcdoc_numeric,
    'short': mcdoc_numeric,
    'int': mcdoc_numeric,
    'long': mcdoc_numeric,
    'float': mcdoc_numeric,
    'double': mcdoc_numeric,
    'byte_array': mcdoc_primitive_array,
    'int_array': mcdoc_primitive_array,
    'long_array': mcdoc_primitive_array,
    'list': mcdoc_list,
    'enum': mcdoc_enum,
    'union': mcdoc_union,
    'tuple': mcdoc_tuple,
    'reference': mcdoc_reference,
    'concrete': mcdoc_concrete,
    'template': mcdoc_template,
})
