"""
Dispatcher symbols

A dispatcher `minecraft:x` compiles to one declaration per member plus

    type XMap<G> = { 'a': XA<G>, 'b': XB<G> }
    type XKeys<G> = ('a' | 'b')
    type XFallback<G> = (XA<G> | XB<G> | XFallbackType<G>)
    export type SymbolX<G, CASE extends ('map' | 'keys' | '%fallback' | '%none') = 'map'> =
        CASE extends 'map' ? XMap<G> : CASE extends 'keys' ? XKeys<G> : ...

where G are the type parameters of the first non-special member when it is
a template.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from .config import DEFAULT_NAMESPACE
from .context import CompileContext, DispatcherInfo, ResolverState, TypeResult
from .errors import UnsupportedDispatcherError
from .expressions import compile_type
from .imports import ImportList, merge_imports, symbol_name
from .mcdoc_types import TemplateType, TypeDefinition
from .tsnodes import (NEVER, ConditionalType, PropertySignature, StringLiteral, TypeAlias, TypeLiteral,
                      TypeNode, TypeParameter, TypeReference, UnionType, pascal_case, union_of)

logger = logging.getLogger(__name__)

UNKNOWN_MEMBER = '%unknown'
NONE_MEMBER = '%none'
SPECIAL_MEMBERS = (UNKNOWN_MEMBER, NONE_MEMBER)

CASES = ('map', 'keys', '%fallback', '%none')
CASE_PARAMETER = 'CASE'

RESERVED_SUFFIXES = ('Map', 'Keys', 'Fallback', 'FallbackType', 'NoneType')


def dispatcher_name(registry: str) -> str:
    """`minecraft:entity_effect` -> `EntityEffect`, `mcdoc:block_states` -> `McdocBlockStates`"""
    namespace, separator, path = registry.partition(':')
    if not separator:
        namespace, path = DEFAULT_NAMESPACE, registry
    if namespace == DEFAULT_NAMESPACE:
        return pascal_case(path)
    return pascal_case(namespace) + pascal_case(path)


def member_suffix(key: str) -> str:
    suffix = pascal_case(key.replace('/', '_').replace(':', '_'))
    if suffix in RESERVED_SUFFIXES:
        suffix += 'Member'
    return suffix


def dispatcher_info(registry: str, members: Dict[str, TypeDefinition]) -> DispatcherInfo:
    """Symbol name, hoisted generics and special members of a dispatcher"""
    type_params: Tuple[TypeParameter, ...] = ()
    for key, member in members.items():
        if key in SPECIAL_MEMBERS:
            continue
        if isinstance(member, TemplateType):
            type_params = tuple(TypeParameter(symbol_name(path)) for path in member.type_params)
        break

    return DispatcherInfo(
        name=dispatcher_name(registry),
        type_params=type_params,
        has_fallback=UNKNOWN_MEMBER in members,
        has_none=NONE_MEMBER in members,
    )


@dataclass
class DispatcherResult:
    registry: str
    info: DispatcherInfo
    members: List[TypeAlias] = field(default_factory=list)
    map: Optional[TypeAlias] = None
    keys: Optional[TypeAlias] = None
    fallback: Optional[TypeAlias] = None
    symbol: Optional[TypeAlias] = None
    imports: Optional[ImportList] = None
    location_counts: List[Tuple[str, int]] = field(default_factory=list)

    @property
    def symbol_name(self) -> str:
        return self.info.symbol_name

    @property
    def required_generics(self) -> int:
        return self.info.generic_count

    @property
    def declarations(self) -> List[TypeAlias]:
        return self.members + [self.map, self.keys, self.fallback, self.symbol]

    def case_type(self, case: str) -> TypeNode:
        """Branch of the symbol selected by `case`; never when unreachable"""
        node = self.symbol.type
        while isinstance(node, ConditionalType):
            if node.extends == StringLiteral(case):
                return node.true_type
            node = node.false_type
        return NEVER


def _hoist(alias: TypeAlias, hoisted: Tuple[TypeParameter, ...]) -> Tuple[TypeParameter, ...]:
    own = {param.name for param in alias.type_params}
    return tuple(param for param in hoisted if param.name not in own) + alias.type_params


def _member_alias(name: str, result: TypeResult, hoisted: Tuple[TypeParameter, ...]) -> TypeAlias:
    if isinstance(result.type, TypeAlias):
        return replace(result.type, name=name, type_params=_hoist(result.type, hoisted), exported=False)
    return TypeAlias(name, result.type, hoisted, exported=False, docs=tuple(result.docs or ()))


def build_dispatcher_symbol(registry: str, members: Dict[str, TypeDefinition],
                            state: ResolverState) -> DispatcherResult:
    info = state.dispatcher_info.get(registry)
    if info is None:
        raise UnsupportedDispatcherError(registry, "metadata was not precomputed")

    name = info.name
    hoisted = info.type_params
    args = tuple(TypeReference(param.name) for param in hoisted)
    result = DispatcherResult(registry, info)

    # Members are compiled outside any module, so they add no placement references
    ctx = CompileContext(state, is_root=True)

    map_members = []
    fallback_members = []
    none_reference = None

    for key, member in members.items():
        if key == UNKNOWN_MEMBER:
            alias_name = f"{name}FallbackType"
        elif key == NONE_MEMBER:
            alias_name = f"{name}NoneType"
        else:
            alias_name = name + member_suffix(key)

        compiled = compile_type(member)(ctx.derive(name=alias_name))
        alias = _member_alias(alias_name, compiled, hoisted)
        result.members.append(alias)
        result.imports = merge_imports(result.imports, compiled.imports)

        reference = TypeReference(alias_name, args)
        if key == NONE_MEMBER:
            none_reference = reference
            continue
        fallback_members.append(reference)
        if key != UNKNOWN_MEMBER:
            map_members.append(PropertySignature(key, reference))

    keys = [StringLiteral(member.name) for member in map_members]

    result.map = TypeAlias(f"{name}Map", TypeLiteral(tuple(map_members)), hoisted, exported=False)
    result.keys = TypeAlias(f"{name}Keys", union_of(keys), hoisted, exported=False)
    result.fallback = TypeAlias(f"{name}Fallback", union_of(fallback_members), hoisted, exported=False)

    case = TypeReference(CASE_PARAMETER)
    chain: TypeNode = NEVER
    if none_reference is not None:
        chain = ConditionalType(case, StringLiteral('%none'), none_reference, NEVER, parenthesized=False)
    chain = ConditionalType(case, StringLiteral('%fallback'), TypeReference(f"{name}Fallback", args), chain,
                            parenthesized=False)
    chain = ConditionalType(case, StringLiteral('keys'), TypeReference(f"{name}Keys", args), chain,
                            parenthesized=False)
    chain = ConditionalType(case, StringLiteral('map'), TypeReference(f"{name}Map", args), chain,
                            parenthesized=False)

    case_param = TypeParameter(
        CASE_PARAMETER,
        constraint=UnionType(tuple(StringLiteral(value) for value in CASES)),
        default=StringLiteral('map'),
    )
    result.symbol = TypeAlias(info.symbol_name, chain, hoisted + (case_param,))

    counter = state.reference_counters.get(registry)
    if counter is not None:
        result.location_counts = counter.ranked()

    logger.debug("Built %s with %d members", info.symbol_name, len(result.members))
    return result
