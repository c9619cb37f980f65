"""
Import registry

An ImportList is the sorted, duplicate-free set of symbol paths a compiled
unit needs. Paths look like `::java::data::loot::LootTable` or
`sandstone::NBTInt`; `collapse_imports` turns them into one import
declaration per target file.
"""

import bisect
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .config import GENERATED_ROOT, JAVA_ROOT, PATH_SEPARATOR, SANDSTONE_ROOT
from .errors import ShapeError
from .tsnodes import ImportDeclaration


class ImportList:
    """Sorted import paths with an index map for membership checks"""

    def __init__(self, paths: Iterable[str] = ()):
        self.ordered: List[str] = []
        self.check: Dict[str, int] = {}
        for path in paths:
            self.insert(path)

    def insert(self, path: str) -> bool:
        """Insert `path`, returning False when it was already present"""
        if path in self.check:
            return False

        index = bisect.bisect_left(self.ordered, path)
        self.ordered.insert(index, path)

        # Every entry at or after the insertion point moved one slot
        for position in range(index, len(self.ordered)):
            self.check[self.ordered[position]] = position
        return True

    def merge(self, other: Optional['ImportList'], exclude: Optional[Callable[[str], bool]] = None) -> 'ImportList':
        if other is None:
            return self
        for path in other.ordered:
            if exclude is not None and exclude(path):
                continue
            self.insert(path)
        return self

    def copy(self) -> 'ImportList':
        duplicate = ImportList()
        duplicate.ordered = list(self.ordered)
        duplicate.check = dict(self.check)
        return duplicate

    def __contains__(self, path: str) -> bool:
        return path in self.check

    def __iter__(self) -> Iterator[str]:
        return iter(self.ordered)

    def __len__(self) -> int:
        return len(self.ordered)

    def __eq__(self, other):
        if not isinstance(other, ImportList):
            return NotImplemented
        return self.ordered == other.ordered

    def __repr__(self):
        return f"ImportList({self.ordered!r})"


def add_import(imports: Optional[ImportList], path: str) -> ImportList:
    """Insert into `imports`, creating the list when there is none yet"""
    if imports is None:
        imports = ImportList()
    imports.insert(path)
    return imports


def merge_imports(imports: Optional[ImportList], other: Optional[ImportList],
                  exclude: Optional[Callable[[str], bool]] = None) -> Optional[ImportList]:
    """Fold `other` into `imports`; never aliases `other`"""
    if other is None or len(other) == 0:
        return imports
    if imports is None:
        imports = ImportList()
    return imports.merge(other, exclude)


# Path conventions

def split_symbol_path(path: str) -> Tuple[str, str]:
    """`::java::a::b::Name` -> (`::java::a::b`, `Name`)"""
    module, separator, name = path.rpartition(PATH_SEPARATOR)
    if not separator or not name:
        raise ShapeError(f"Import path has no symbol name: {path!r}", 'import', path)
    return module, name


def symbol_name(path: str) -> str:
    return path.rsplit(PATH_SEPARATOR, 1)[-1]


def module_file(module_path: str) -> str:
    """Map a module path onto the file it is imported from

    `::java::a::b` -> `sandstone/generated/a/b`, `sandstone::x` -> `sandstone/x`
    """
    segments = module_path.split(PATH_SEPARATOR)
    if segments and segments[0] == '':
        segments = segments[1:]
    if not segments:
        raise ShapeError("Empty module path", 'import', module_path)

    root, rest = segments[0], segments[1:]
    if root == JAVA_ROOT:
        return '/'.join([GENERATED_ROOT] + rest)
    if root == SANDSTONE_ROOT:
        return '/'.join([SANDSTONE_ROOT] + rest)
    raise ShapeError(f"Unsupported import root {root!r}", 'import', module_path)


def collapse_imports(imports: Optional[ImportList],
                     exclude_module: Optional[str] = None) -> List[ImportDeclaration]:
    """Group import paths by target file, one declaration per file

    Files are ordered, names within a file are sorted and unique. Paths whose
    module is `exclude_module` are dropped since they are local symbols.
    """
    if imports is None:
        return []

    files: List[str] = []
    names: Dict[str, List[str]] = {}

    for path in imports:
        module, name = split_symbol_path(path)
        if exclude_module is not None and module == exclude_module:
            continue
        target = module_file(module)
        if target not in names:
            bisect.insort(files, target)
            names[target] = []
        index = bisect.bisect_left(names[target], name)
        if index == len(names[target]) or names[target][index] != name:
            names[target].insert(index, name)

    return [ImportDeclaration(target, tuple(names[target])) for target in files]
