import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mcdoc_typegen.errors import ShapeError
from mcdoc_typegen.imports import (ImportList, add_import, collapse_imports, merge_imports, module_file,
                                   split_symbol_path)

paths = st.lists(st.text(alphabet='abAB:_', min_size=1, max_size=8), max_size=30)


@given(paths)
@settings(max_examples=200)
def test_insert_keeps_paths_sorted_and_unique(items):
    imports = ImportList(items)

    assert imports.ordered == sorted(set(items))
    assert all(imports.check[path] == index for index, path in enumerate(imports.ordered))


@given(paths, st.randoms())
def test_insertion_order_does_not_matter(items, random):
    shuffled = list(items)
    random.shuffle(shuffled)

    assert ImportList(items) == ImportList(shuffled)


def test_insert_reports_duplicates():
    imports = ImportList()
    assert imports.insert('::java::a::B')
    assert not imports.insert('::java::a::B')
    assert len(imports) == 1


def test_merge_skips_excluded_paths():
    imports = ImportList(['::java::a::A'])
    imports.merge(ImportList(['::java::b::B', '::java::a::C']), lambda path: path.startswith('::java::a'))

    assert imports.ordered == ['::java::a::A', '::java::b::B']


def test_merge_imports_never_aliases_the_other_list():
    other = ImportList(['sandstone::NBTInt'])
    merged = merge_imports(None, other)
    merged.insert('sandstone::NBTByte')

    assert list(other) == ['sandstone::NBTInt']
    assert merge_imports(None, ImportList()) is None


def test_add_import_creates_the_list():
    assert list(add_import(None, 'sandstone::NBTInt')) == ['sandstone::NBTInt']


def test_module_file():
    assert module_file('::java::data::loot') == 'sandstone/generated/data/loot'
    assert module_file('sandstone::arguments') == 'sandstone/arguments'
    assert module_file('sandstone') == 'sandstone'
    with pytest.raises(ShapeError):
        module_file('::other::thing')


def test_split_symbol_path():
    assert split_symbol_path('::java::data::loot::LootTable') == ('::java::data::loot', 'LootTable')
    with pytest.raises(ShapeError):
        split_symbol_path('LootTable')


def test_collapse_groups_names_by_file():
    imports = ImportList([
        '::java::data::loot::LootTable',
        'sandstone::arguments::nbt::RootNBT',
        '::java::data::loot::LootPool',
        'sandstone::NBTInt',
    ])

    rendered = [declaration.render() for declaration in collapse_imports(imports)]

    assert rendered == [
        "import type { NBTInt } from 'sandstone'",
        "import type { RootNBT } from 'sandstone/arguments/nbt'",
        "import type { LootPool, LootTable } from 'sandstone/generated/data/loot'",
    ]


def test_collapse_drops_the_excluded_module():
    imports = ImportList(['::java::data::loot::LootTable', 'sandstone::NBTInt'])

    declarations = collapse_imports(imports, exclude_module='::java::data::loot')

    assert [declaration.module for declaration in declarations] == ['sandstone']
    assert collapse_imports(None) == []
