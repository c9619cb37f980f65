"""
Dispatcher references

`minecraft:x[[type]]` style types index into the generated `SymbolX`
declaration. Three index shapes are understood:

- one dynamic index ending in a property name (`[[type]]`, `[[%parent.id]]`)
- one static index (`[foo]`, `[%fallback]`)
- the map key of an enclosing mapped type (`[[%key]]`)
"""

from typing import Optional, Tuple

from .config import DISPATCHER_MODULE
from .context import CompileContext, Compiled, TypeResult
from .errors import ShapeError, UnsupportedDispatcherError
from .expressions import HANDLERS, compile_type, expect
from .imports import ImportList
from .mcdoc_types import DispatcherType, DynamicIndex, IndexedType, KeywordAccessor, StaticIndex, TypeDefinition
from .tsnodes import (UNDEFINED, UNKNOWN, UNKNOWN_RECORD, ConditionalType, IndexedAccess, StringLiteral,
                      TypeNode, TypeOperator, TypeReference, is_literal)

FALLBACK = StringLiteral('%fallback')
NONE = StringLiteral('%none')

DYNAMIC = 'dynamic'
STATIC = 'static'
MAP_KEY = 'key'

SIMPLE_KEY_INDEX = (DynamicIndex((KeywordAccessor('key'),)),)


def index_shape(dispatcher: DispatcherType) -> str:
    indices = dispatcher.parallel_indices
    if len(indices) == 1 and isinstance(indices[0], DynamicIndex):
        if indices[0].accessor and isinstance(indices[0].accessor[-1], str):
            return DYNAMIC
    if len(indices) == 1 and isinstance(indices[0], StaticIndex):
        return STATIC
    if indices == SIMPLE_KEY_INDEX:
        return MAP_KEY
    raise UnsupportedDispatcherError(dispatcher.registry, f"unsupported index pattern {indices!r}")


def sub_index(base: TypeNode, keys: Tuple[str, ...]) -> TypeNode:
    """`base['a']['b']`, with each step guarded by a keyof check"""
    if not keys:
        return base
    key = StringLiteral(keys[0])
    return ConditionalType(key, TypeOperator('keyof', base), sub_index(IndexedAccess(base, key), keys[1:]),
                           UNKNOWN_RECORD)


def member_access(symbol: TypeNode, key: TypeNode, index_keys: Tuple[str, ...] = ()) -> TypeNode:
    """`symbol[key]`; a non literal key falls back to an unknown record"""
    body = sub_index(IndexedAccess(symbol, key), index_keys)
    if is_literal(key):
        return body
    return ConditionalType(key, TypeOperator('keyof', symbol), body, UNKNOWN_RECORD)


def mcdoc_dispatcher(type_def: TypeDefinition) -> Compiled:
    dispatcher = expect(type_def, DispatcherType)
    registry = dispatcher.registry
    shape = index_shape(dispatcher)
    index = dispatcher.parallel_indices[0]

    def compile(ctx: CompileContext) -> TypeResult:
        info = ctx.state.dispatcher_info.get(registry)
        if info is None:
            raise UnsupportedDispatcherError(registry, "unknown dispatcher")

        if ctx.module_path is not None:
            ctx.state.count_dispatcher_reference(registry, ctx.module_path)

        generics = tuple(ctx.generic_types or ())
        if len(generics) < info.generic_count:
            generics += (UNKNOWN,) * (info.generic_count - len(generics))

        index_keys = ctx.index_keys or ()
        symbol = TypeReference(info.symbol_name, generics)
        child_dispatcher: Optional[list] = None

        if shape == DYNAMIC:
            if ctx.is_root:
                # No enclosing struct can supply S
                node = sub_index(TypeReference(info.symbol_name, generics + (FALLBACK,)), index_keys)
            else:
                child_dispatcher = [(len(index.accessor) - 1, index.accessor[-1])]
                node = member_access(symbol, TypeReference('S'), index_keys)
                if info.has_none:
                    node = ConditionalType(
                        TypeReference('S'),
                        UNDEFINED,
                        TypeReference(info.symbol_name, generics + (NONE,)),
                        node,
                    )
        elif shape == STATIC:
            if index.value == '%fallback':
                node = sub_index(TypeReference(info.symbol_name, generics + (FALLBACK,)), index_keys)
            else:
                node = member_access(symbol, StringLiteral(index.value), index_keys)
        else:
            node = member_access(symbol, TypeReference('Key'), index_keys)

        imports = ImportList([f"{DISPATCHER_MODULE}::{info.symbol_name}"])
        return TypeResult(node, imports, None, child_dispatcher)

    return compile


def mcdoc_indexed(type_def: TypeDefinition) -> Compiled:
    """Static property access into a dispatcher case, `minecraft:x[[type]][foo]`"""
    indexed = expect(type_def, IndexedType)
    if not isinstance(indexed.child, DispatcherType):
        raise ShapeError(f"Indexed type must wrap a dispatcher, got {indexed.child.kind}", 'indexed')

    keys = []
    for index in indexed.parallel_indices:
        if not isinstance(index, StaticIndex):
            raise UnsupportedDispatcherError(indexed.child.registry, "dynamic index on an indexed access")
        keys.append(index.value)

    child = compile_type(indexed.child)
    index_keys = tuple(keys)

    def compile(ctx: CompileContext) -> TypeResult:
        return child(ctx.derive(index_keys=index_keys))

    return compile


HANDLERS['dispatcher'] = mcdoc_dispatcher
HANDLERS['indexed'] = mcdoc_indexed
