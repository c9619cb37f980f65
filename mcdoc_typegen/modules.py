"""
Output modules

Compiled declarations accumulate in one ResolvedModule per module path.
Once every pass has run, `ModuleArena.finalize` freezes them into
FinalizedModule values with collapsed import declarations.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .errors import TypegenError
from .imports import ImportList, collapse_imports, merge_imports, module_file, split_symbol_path, symbol_name
from .tsnodes import Declaration, ImportDeclaration, ReExport, TypeAlias


@dataclass
class ResolvedModule:
    path: str
    declarations: List[Declaration] = field(default_factory=list)
    imports: Optional[ImportList] = None
    paths: Set[str] = field(default_factory=set)

    def add(self, declaration: Declaration, imports: Optional[ImportList] = None,
            source_path: Optional[str] = None):
        self.declarations.append(declaration)
        self.imports = merge_imports(self.imports, imports)
        if source_path is not None:
            self.paths.add(source_path)

    def declared_names(self) -> Set[str]:
        return {declaration.name for declaration in self.declarations if isinstance(declaration, TypeAlias)}

    def imported_names(self, ignore: Iterable[str] = ()) -> Set[str]:
        """Names brought in from other modules"""
        ignore = set(ignore)
        return {symbol_name(path) for path in self.imports or () if path not in ignore and not self.is_local(path)}

    def is_local(self, import_path: str) -> bool:
        module, _ = split_symbol_path(import_path)
        return module == self.path


@dataclass(frozen=True)
class FinalizedModule:
    path: str
    file: str
    declarations: Tuple[Declaration, ...]
    imports: Tuple[ImportDeclaration, ...]
    paths: FrozenSet[str] = frozenset()

    def declaration(self, name: str) -> Optional[TypeAlias]:
        for declaration in self.declarations:
            if isinstance(declaration, TypeAlias) and declaration.name == name:
                return declaration
        return None

    def render(self) -> str:
        parts = []
        if self.imports:
            parts.append('\n'.join(declaration.render() for declaration in self.imports))
        re_exports = [declaration for declaration in self.declarations if isinstance(declaration, ReExport)]
        if re_exports:
            parts.append('\n'.join(declaration.render() for declaration in re_exports))
        for declaration in self.declarations:
            if not isinstance(declaration, ReExport):
                parts.append(declaration.render())
        return '\n\n'.join(parts) + '\n'


class ModuleArena:
    """Module path -> ResolvedModule, created on first write"""

    def __init__(self):
        self.modules: Dict[str, ResolvedModule] = {}
        self.finalized = False

    def bucket(self, path: str) -> ResolvedModule:
        if self.finalized:
            raise TypegenError(f"Cannot write to {path} after the modules were finalized")
        module = self.modules.get(path)
        if module is None:
            module = self.modules[path] = ResolvedModule(path)
        return module

    def finalize(self, redirects: Optional[Dict[str, str]] = None) -> Dict[str, FinalizedModule]:
        """Freeze every module

        `redirects` maps import paths onto the path a symbol actually ended up
        under, e.g. a dispatcher symbol inlined into its only consumer.
        """
        self.finalized = True
        redirects = redirects or {}
        result = {}
        for path in sorted(self.modules):
            module = self.modules[path]

            imports = None
            if module.imports is not None:
                redirected = ImportList(redirects.get(item, item) for item in module.imports)
                imports = ImportList().merge(redirected, module.is_local)

            result[path] = FinalizedModule(
                path=path,
                file=module_file(path),
                declarations=tuple(module.declarations),
                imports=tuple(collapse_imports(imports)),
                paths=frozenset(module.paths),
            )
        return result
