"""Shared builders for the test suite"""

from mcdoc_typegen.context import CompileContext, ResolverState
from mcdoc_typegen.dispatcher_symbols import dispatcher_info
from mcdoc_typegen.expressions import compile_type
from mcdoc_typegen.mcdoc_types import Attribute, AttributeTree, LiteralType, SymbolEntry, SymbolTable


def string(value):
    return LiteralType('string', value)


def tree(**values):
    return AttributeTree(tuple(values.items()))


def attr(name, value=None):
    return Attribute(name, value)


def table(entries):
    return SymbolTable({path: SymbolEntry(type_def) for path, type_def in entries.items()})


def make_state(symbols=None, dispatchers=None, registries=None):
    state = ResolverState(table(symbols or {}))
    for registry, members in (dispatchers or {}).items():
        state.dispatcher_info[registry] = dispatcher_info(registry, members)
    state.registries = dict(registries or {})
    return state


def compile_node(type_def, state=None, **changes):
    """Compile `type_def` in a fresh context, nested unless `is_root` is passed"""
    ctx = CompileContext(state if state is not None else make_state(), **changes)
    return compile_type(type_def)(ctx)


def render(type_def, state=None, **changes):
    return compile_node(type_def, state, **changes).type.render()


def import_paths(result):
    return list(result.imports) if result.imports is not None else []
