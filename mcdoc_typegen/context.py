"""
Compile context and handler results

A CompileContext is handed explicitly to every handler. Shared mutable
state lives in one ResolverState per generator run.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from .config import DEFAULT_NAMESPACE
from .imports import ImportList
from .mcdoc_types import SymbolTable, TypeDefinition
from .placement import ReferenceCounter, decide_placement, is_namespace_special
from .tsnodes import TypeAlias, TypeNode, TypeParameter

# (parent_count, property): a dynamic dispatcher nested `parent_count`
# structs deep asks for the struct that owns `property`.
ChildDispatcher = Tuple[int, str]


@dataclass(frozen=True)
class DispatcherInfo:
    name: str
    type_params: Tuple[TypeParameter, ...] = ()
    has_fallback: bool = False
    has_none: bool = False

    @property
    def symbol_name(self) -> str:
        return f"Symbol{self.name}"

    @property
    def generic_count(self) -> int:
        return len(self.type_params)


@dataclass
class TypeResult:
    type: Union[TypeNode, TypeAlias]
    imports: Optional[ImportList] = None
    docs: Optional[List[str]] = None
    child_dispatcher: Optional[List[ChildDispatcher]] = None


def strip_namespace(registry: str) -> str:
    prefix = f"{DEFAULT_NAMESPACE}:"
    return registry[len(prefix):] if registry.startswith(prefix) else registry


class ResolverState:
    """Everything a run shares between handlers"""

    def __init__(self, symbols: Optional[SymbolTable] = None):
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.dispatcher_info: Dict[str, DispatcherInfo] = {}
        self.reference_counters: Dict[str, ReferenceCounter] = {}
        self.registries: Dict[str, Tuple[str, ...]] = {}
        self.has_translation_keys = False
        self.placements: Dict[str, Optional[str]] = {}

    def count_dispatcher_reference(self, registry: str, module_path: str):
        counter = self.reference_counters.get(registry)
        if counter is None:
            counter = self.reference_counters[registry] = ReferenceCounter()
        counter.add(module_path)

    def has_registry(self, registry: str) -> bool:
        """Known and non-empty"""
        return bool(self.registries.get(strip_namespace(registry)))

    def placement(self, registry: str) -> Optional[str]:
        """Owning module of a dispatcher, None for the shared module; decided once"""
        if registry not in self.placements:
            if is_namespace_special(registry):
                self.placements[registry] = None
            else:
                self.placements[registry] = decide_placement(self.reference_counters.get(registry))
        return self.placements[registry]


@dataclass(frozen=True)
class CompileContext:
    state: ResolverState = field(compare=False)
    is_root: bool = False
    name: Optional[str] = None
    module_path: Optional[str] = None
    generics: FrozenSet[str] = frozenset()
    generic_types: Optional[Tuple[TypeNode, ...]] = None
    index_keys: Optional[Tuple[str, ...]] = None

    def nested(self, name: Optional[str] = None) -> 'CompileContext':
        """Context for a child type; per-call arguments do not carry over"""
        return replace(self, is_root=False, name=name, generic_types=None, index_keys=None)

    def derive(self, **changes) -> 'CompileContext':
        return replace(self, **changes)


Compiled = Callable[[CompileContext], TypeResult]
Handler = Callable[[TypeDefinition], Compiled]
