"""
Types generator

Runs the four passes over a symbol dump, in this order:

1. registries: literal unions every `id` string can point at
2. dispatcher metadata: symbol names and generic arity, so that forward
   references to dispatchers resolve while compiling modules
3. module symbols: every symbol table entry compiled into its module
4. dispatcher symbols: the dispatch tables, placed next to their dominant
   consumer or in the shared dispatcher module

`resolve_types` runs all of them and returns the finalized modules.
"""

import logging
from dataclasses import fields, is_dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Set

from .attributes import is_removed, validate_attributes
from .config import DISPATCHER_MODULE, REGISTRY_MODULE, RESOURCES_MODULE
from .context import CompileContext, ResolverState, TypeResult
from .dispatcher_symbols import DispatcherResult, build_dispatcher_symbol, dispatcher_info
from .errors import TypegenError
from .expressions import compile_type
from .imports import module_file, split_symbol_path, symbol_name
from .mcdoc_types import ReferenceType, StructType, SymbolEntry, SymbolTable, TypeDefinition
from .modules import FinalizedModule, ModuleArena, ResolvedModule
from .overrides import OVERRIDES
from .registries import (dispatcher_export, normalize_registries, registry_declarations, resource_class_types,
                         string_registry)
from .tsnodes import UNDEFINED, ReExport, TypeAlias, TypeParameter

# Importing these registers the struct and dispatcher handlers
from . import dispatch, structs  # noqa: F401

logger = logging.getLogger(__name__)

PHASES = ('registries', 'dispatcher metadata', 'module symbols', 'dispatcher symbols')


def referenced_paths(values: Iterable[Any]) -> Set[str]:
    """Every path a `reference` type points at, anywhere below `values`"""
    paths = set()
    stack = list(values)
    while stack:
        value = stack.pop()
        if isinstance(value, (list, tuple)):
            stack.extend(value)
            continue
        if not is_dataclass(value) or isinstance(value, type):
            continue
        if isinstance(value, ReferenceType) and value.path is not None:
            paths.add(value.path)
        for item in fields(value):
            if item.name != 'attributes':
                stack.append(getattr(value, item.name))
    return paths


def symbol_docs(entry: SymbolEntry, result: TypeResult) -> tuple:
    docs = []
    if entry.doc:
        docs.append(entry.doc.strip())
    if result.docs:
        docs.extend(result.docs)
    return tuple(docs)


class TypesGenerator:
    def __init__(self, symbols: SymbolTable, dispatchers: Dict[str, Dict[str, TypeDefinition]],
                 registries: Optional[Dict[str, Iterable[str]]] = None,
                 translation_keys: Optional[Iterable[str]] = None,
                 block_state_keys: Optional[Iterable[str]] = None):
        self.state = ResolverState(symbols)
        self.dispatchers = dispatchers
        self.registries = registries or {}
        self.translation_keys = list(translation_keys or ())
        self.block_state_keys = list(block_state_keys or ())

        self.arena = ModuleArena()
        self.completed: List[str] = []
        self.dispatcher_results: Dict[str, DispatcherResult] = {}
        self.redirects: Dict[str, str] = {}
        self.modules: Optional[Dict[str, FinalizedModule]] = None

    def _begin(self, phase: str):
        done = len(self.completed)
        expected = PHASES[done] if done < len(PHASES) else None
        if phase != expected:
            raise TypegenError(f"Cannot run the {phase} pass now, expected {expected or 'nothing'}")
        logger.info("Resolving %s", phase)

    def _finish(self, phase: str):
        self.completed.append(phase)

    # Pass 1

    def resolve_registries(self):
        self._begin('registries')
        self.state.registries = normalize_registries(self.registries)

        bucket = self.arena.bucket(REGISTRY_MODULE)
        for declaration in registry_declarations(self.state.registries):
            bucket.add(declaration)

        translation_keys = string_registry('TranslationKey', self.translation_keys)
        if translation_keys is not None:
            bucket.add(translation_keys)
            self.state.has_translation_keys = True

        block_state_keys = string_registry('BlockStateKey', self.block_state_keys)
        if block_state_keys is not None:
            bucket.add(block_state_keys)

        self.arena.bucket(RESOURCES_MODULE).add(resource_class_types())
        self._finish('registries')

    # Pass 2

    def precompute_dispatchers(self):
        self._begin('dispatcher metadata')
        for registry, members in self.dispatchers.items():
            self.state.dispatcher_info[registry] = dispatcher_info(registry, members)
        self._finish('dispatcher metadata')

    # Pass 3

    def is_duplicate_nested(self, path: str, entry: SymbolEntry, referenced: Set[str]) -> bool:
        """Inline structs are also published under their parent's path"""
        if not isinstance(entry.type_def, StructType):
            return False
        parent, _ = split_symbol_path(path)
        return parent in self.state.symbols and path not in referenced

    def resolve_module_symbols(self):
        self._begin('module symbols')
        referenced = referenced_paths(entry.type_def for _, entry in self.state.symbols.items())
        referenced |= referenced_paths(
            member for members in self.dispatchers.values() for member in members.values()
        )

        for path, entry in self.state.symbols.items():
            validate_attributes(entry.attributes)
            if is_removed(entry.attributes):
                logger.debug("Skipping removed symbol %s", path)
                continue

            module_path, name = split_symbol_path(path)

            override = OVERRIDES.get(path)
            if override is not None:
                result = override()
                declaration = TypeAlias(name, result.type, result.type_params,
                                        docs=(entry.doc.strip(),) if entry.doc else ())
                self.arena.bucket(module_path).add(declaration, result.imports, path)
                continue

            if self.is_duplicate_nested(path, entry, referenced):
                logger.debug("Skipping duplicate nested struct %s", path)
                continue

            ctx = CompileContext(self.state, is_root=True, name=name, module_path=module_path)
            result = compile_type(entry.type_def)(ctx)
            self.arena.bucket(module_path).add(self._declaration(name, entry, result), result.imports, path)

        self._finish('module symbols')

    def _declaration(self, name: str, entry: SymbolEntry, result: TypeResult) -> TypeAlias:
        if isinstance(result.type, TypeAlias):
            entry_docs = (entry.doc.strip(),) if entry.doc else ()
            return replace(result.type, docs=entry_docs + result.type.docs)

        docs = symbol_docs(entry, result)
        type_params = ()
        if result.child_dispatcher:
            # Still waiting on a struct above the root, callers supply S
            type_params = (TypeParameter('S', default=UNDEFINED),)
        return TypeAlias(name, result.type, type_params, docs=docs)

    # Pass 4

    def inline_conflicts(self, bucket: ResolvedModule, result: DispatcherResult) -> Set[str]:
        """Names that would be declared twice if `result` moved into `bucket`"""
        own_import = f"{DISPATCHER_MODULE}::{result.symbol_name}"
        declared = bucket.declared_names()
        taken = declared | bucket.imported_names(ignore=(own_import,))

        clashes = {declaration.name for declaration in result.declarations} & taken
        for path in result.imports or ():
            name = symbol_name(path)
            if path != own_import and not bucket.is_local(path) and name in declared:
                clashes.add(name)
        return clashes

    def resolve_dispatcher_symbols(self):
        self._begin('dispatcher symbols')
        shared = self.arena.bucket(DISPATCHER_MODULE)
        aggregate = {}

        for registry in sorted(self.dispatchers):
            result = build_dispatcher_symbol(registry, self.dispatchers[registry], self.state)
            self.dispatcher_results[registry] = result
            aggregate[registry] = (result.symbol_name, result.required_generics)

            owner = self.state.placement(registry)
            if owner is not None:
                clashes = self.inline_conflicts(self.arena.bucket(owner), result)
                if clashes:
                    logger.debug("Keeping %s shared, %s already defined in %s",
                                 result.symbol_name, ", ".join(sorted(clashes)), owner)
                    owner = None
            if owner is None:
                logger.debug("Placing %s in the shared dispatcher module", result.symbol_name)
                bucket = shared
            else:
                logger.debug("Inlining %s into %s %r", result.symbol_name, owner, result.location_counts)
                bucket = self.arena.bucket(owner)
                self.redirects[f"{DISPATCHER_MODULE}::{result.symbol_name}"] = f"{owner}::{result.symbol_name}"
                shared.add(ReExport((result.symbol_name,), module_file(owner)))

            for index, declaration in enumerate(result.declarations):
                # Imports are carried once per dispatcher
                bucket.add(declaration, result.imports if index == 0 else None)

        declaration, imports = dispatcher_export(aggregate)
        shared.add(declaration, imports)
        self._finish('dispatcher symbols')

    def resolve_types(self) -> Dict[str, FinalizedModule]:
        self.resolve_registries()
        self.precompute_dispatchers()
        self.resolve_module_symbols()
        self.resolve_dispatcher_symbols()

        self.modules = self.arena.finalize(self.redirects)
        logger.info("Resolved %d modules", len(self.modules))
        return self.modules
