"""
mcdoc schema model

Frozen dataclasses for the mcdoc type definitions published by the
spyglass symbol dump, and the loader that builds them from JSON.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, Optional, Tuple, Union

from .errors import ShapeError

# Range kind bits
LEFT_EXCLUSIVE = 0b10
RIGHT_EXCLUSIVE = 0b01


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class NumericRange:
    kind: int = 0
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None

    @property
    def left_exclusive(self) -> bool:
        return bool(self.kind & LEFT_EXCLUSIVE)

    @property
    def right_exclusive(self) -> bool:
        return bool(self.kind & RIGHT_EXCLUSIVE)

    def __str__(self):
        if self.kind == 0 and self.min is not None and self.min == self.max:
            return format_number(self.min)
        low = format_number(self.min) if self.min is not None else ''
        high = format_number(self.max) if self.max is not None else ''
        left = '<' if self.left_exclusive else ''
        right = '<' if self.right_exclusive else ''
        return f"{low}{left}..{right}{high}"

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> Optional['NumericRange']:
        if data is None:
            return None
        return cls(kind=data.get('kind', 0), min=data.get('min'), max=data.get('max'))


# Attributes

@dataclass(frozen=True)
class AttributeTree:
    values: Tuple[Tuple[str, 'AttributeValue'], ...]

    def get(self, name: str, default=None):
        for key, value in self.values:
            if key == name:
                return value
        return default

    def keys(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self.values)


@dataclass(frozen=True)
class Attribute:
    name: str
    value: Optional['AttributeValue'] = None


# Type definitions

class TypeDefinition:
    """Base class of every mcdoc type node"""
    kind: ClassVar[str] = ''
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class AnyType(TypeDefinition):
    kind: ClassVar[str] = 'any'
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class UnsafeType(TypeDefinition):
    kind: ClassVar[str] = 'unsafe'
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class BooleanType(TypeDefinition):
    kind: ClassVar[str] = 'boolean'
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class StringType(TypeDefinition):
    kind: ClassVar[str] = 'string'
    length_range: Optional[NumericRange] = None
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class NumericType(TypeDefinition):
    """byte, short, int, long, float or double"""
    numeric_kind: str
    value_range: Optional[NumericRange] = None
    attributes: Tuple[Attribute, ...] = ()

    @property
    def kind(self) -> str:
        return self.numeric_kind


@dataclass(frozen=True)
class PrimitiveArrayType(TypeDefinition):
    """byte_array, int_array or long_array"""
    array_kind: str
    value_range: Optional[NumericRange] = None
    length_range: Optional[NumericRange] = None
    attributes: Tuple[Attribute, ...] = ()

    @property
    def kind(self) -> str:
        return self.array_kind


@dataclass(frozen=True)
class ListType(TypeDefinition):
    kind: ClassVar[str] = 'list'
    item: TypeDefinition
    length_range: Optional[NumericRange] = None
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class TupleType(TypeDefinition):
    kind: ClassVar[str] = 'tuple'
    items: Tuple[TypeDefinition, ...]
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class EnumField:
    identifier: str
    value: Union[str, int, float]
    desc: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class EnumType(TypeDefinition):
    kind: ClassVar[str] = 'enum'
    enum_kind: str
    values: Tuple[EnumField, ...]
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class LiteralType(TypeDefinition):
    kind: ClassVar[str] = 'literal'
    literal_kind: str
    value: Union[str, bool, int, float]
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class StructPairField:
    key: Union[str, TypeDefinition]
    type: TypeDefinition
    optional: bool = False
    deprecated: bool = False
    desc: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()
    kind: ClassVar[str] = 'pair'


@dataclass(frozen=True)
class StructSpreadField:
    type: TypeDefinition
    attributes: Tuple[Attribute, ...] = ()
    kind: ClassVar[str] = 'spread'


StructField = Union[StructPairField, StructSpreadField]


@dataclass(frozen=True)
class StructType(TypeDefinition):
    kind: ClassVar[str] = 'struct'
    fields: Tuple[StructField, ...]
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ReferenceType(TypeDefinition):
    kind: ClassVar[str] = 'reference'
    path: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class ConcreteType(TypeDefinition):
    kind: ClassVar[str] = 'concrete'
    child: TypeDefinition
    type_args: Tuple[TypeDefinition, ...] = ()
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class TemplateType(TypeDefinition):
    kind: ClassVar[str] = 'template'
    child: TypeDefinition
    type_params: Tuple[str, ...] = ()
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class KeywordAccessor:
    """`%key` or `%parent` inside a dynamic index"""
    keyword: str


@dataclass(frozen=True)
class StaticIndex:
    value: str
    kind: ClassVar[str] = 'static'


@dataclass(frozen=True)
class DynamicIndex:
    accessor: Tuple[Union[str, KeywordAccessor], ...]
    kind: ClassVar[str] = 'dynamic'


Index = Union[StaticIndex, DynamicIndex]


@dataclass(frozen=True)
class DispatcherType(TypeDefinition):
    kind: ClassVar[str] = 'dispatcher'
    registry: str
    parallel_indices: Tuple[Index, ...]
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class IndexedType(TypeDefinition):
    kind: ClassVar[str] = 'indexed'
    child: TypeDefinition
    parallel_indices: Tuple[Index, ...]
    attributes: Tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class UnionType(TypeDefinition):
    kind: ClassVar[str] = 'union'
    members: Tuple[TypeDefinition, ...]
    attributes: Tuple[Attribute, ...] = ()


NUMERIC_KINDS = ('byte', 'short', 'int', 'long', 'float', 'double')
ARRAY_KINDS = ('byte_array', 'int_array', 'long_array')


# Symbol table

@dataclass(frozen=True)
class SymbolEntry:
    type_def: TypeDefinition
    doc: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()


@dataclass
class SymbolTable:
    """path -> symbol entry, in insertion order"""
    entries: Dict[str, SymbolEntry] = field(default_factory=dict)

    def __contains__(self, path: str) -> bool:
        return path in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, path: str) -> Optional[SymbolEntry]:
        return self.entries.get(path)

    def items(self):
        return self.entries.items()

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'SymbolTable':
        """Build from the `mcdoc` section of a symbol dump (or the whole dump)"""
        if 'mcdoc' in data and isinstance(data['mcdoc'], dict):
            data = data['mcdoc']
        entries = {}
        for path, value in data.items():
            entries[path] = parse_symbol(value, path)
        return cls(entries)


def parse_symbol(value: Dict[str, Any], path: Optional[str] = None) -> SymbolEntry:
    if 'typeDef' in value:
        return SymbolEntry(
            type_def=parse_type(value['typeDef'], path),
            doc=value.get('desc', value.get('doc')),
            attributes=parse_attributes(value.get('attributes'), path),
        )
    return SymbolEntry(type_def=parse_type(value, path), doc=value.get('desc'))


def load_dispatchers(data: Dict[str, Any]) -> Dict[str, Dict[str, TypeDefinition]]:
    """Build dispatcher member maps from the `mcdoc/dispatcher` section"""
    if 'mcdoc/dispatcher' in data:
        data = data['mcdoc/dispatcher']
    dispatchers = {}
    for registry, members in data.items():
        dispatchers[registry] = {
            key: parse_symbol(member, f"{registry}[{key}]").type_def
            for key, member in members.items()
        }
    return dispatchers


# JSON loading

def require(data: Dict[str, Any], key: str, kind: Optional[str], path: Optional[str] = None) -> Any:
    """`data[key]`, or a ShapeError naming the kind and path"""
    if not isinstance(data, dict) or key not in data:
        raise ShapeError(f"Missing required field '{key}'", kind, path)
    return data[key]


def parse_attributes(data: Optional[list], path: Optional[str] = None) -> Tuple[Attribute, ...]:
    if not data:
        return ()
    return tuple(
        Attribute(require(item, 'name', 'attribute', path), parse_attribute_value(item.get('value'), path))
        for item in data
    )


def parse_attribute_value(data: Any, path: Optional[str] = None):
    if data is None:
        return None
    if isinstance(data, dict) and data.get('kind') == 'tree':
        return AttributeTree(tuple(
            (key, parse_attribute_value(value, path)) for key, value in data.get('values', {}).items()
        ))
    return parse_type(data, path)


def parse_index(data: Dict[str, Any], path: Optional[str] = None) -> Index:
    if data.get('kind') == 'static':
        return StaticIndex(require(data, 'value', 'dispatcher', path))
    if data.get('kind') == 'dynamic':
        accessor = []
        for part in require(data, 'accessor', 'dispatcher', path):
            if isinstance(part, str):
                accessor.append(part)
            else:
                accessor.append(KeywordAccessor(require(part, 'keyword', 'dispatcher', path)))
        return DynamicIndex(tuple(accessor))
    raise ShapeError(f"Unknown index kind {data.get('kind')!r}", 'dispatcher', path)


def parse_field(data: Dict[str, Any], path: Optional[str] = None) -> StructField:
    attributes = parse_attributes(data.get('attributes'), path)
    if data.get('kind') == 'spread':
        return StructSpreadField(parse_type(require(data, 'type', 'struct', path), path), attributes)
    if data.get('kind') != 'pair':
        raise ShapeError(f"Unknown struct field kind {data.get('kind')!r}", 'struct', path)
    key = require(data, 'key', 'struct', path)
    if not isinstance(key, str):
        key = parse_type(key, path)
    return StructPairField(
        key=key,
        type=parse_type(require(data, 'type', 'struct', path), path),
        optional=bool(data.get('optional', False)),
        deprecated=bool(data.get('deprecated', False)),
        desc=data.get('desc'),
        attributes=attributes,
    )


def parse_type(data: Dict[str, Any], path: Optional[str] = None) -> TypeDefinition:
    """Convert one JSON type node into a TypeDefinition"""
    if not isinstance(data, dict) or 'kind' not in data:
        raise ShapeError(f"Expected a type object, got {data!r}", None, path)

    kind = data['kind']
    attributes = parse_attributes(data.get('attributes'), path)

    if kind == 'any':
        return AnyType(attributes)
    elif kind == 'unsafe':
        return UnsafeType(attributes)
    elif kind == 'boolean':
        return BooleanType(attributes)
    elif kind == 'string':
        return StringType(NumericRange.from_json(data.get('lengthRange')), attributes)
    elif kind in NUMERIC_KINDS:
        return NumericType(kind, NumericRange.from_json(data.get('valueRange')), attributes)
    elif kind in ARRAY_KINDS:
        return PrimitiveArrayType(
            kind,
            NumericRange.from_json(data.get('valueRange')),
            NumericRange.from_json(data.get('lengthRange')),
            attributes,
        )
    elif kind == 'list':
        return ListType(
            parse_type(require(data, 'item', kind, path), path),
            NumericRange.from_json(data.get('lengthRange')),
            attributes,
        )
    elif kind == 'tuple':
        return TupleType(tuple(parse_type(item, path) for item in require(data, 'items', kind, path)), attributes)
    elif kind == 'enum':
        values = tuple(
            EnumField(
                identifier=require(value, 'identifier', kind, path),
                value=require(value, 'value', kind, path),
                desc=value.get('desc'),
                attributes=parse_attributes(value.get('attributes'), path),
            )
            for value in require(data, 'values', kind, path)
        )
        return EnumType(data.get('enumKind', 'string'), values, attributes)
    elif kind == 'literal':
        literal = require(data, 'value', kind, path)
        return LiteralType(require(literal, 'kind', kind, path), require(literal, 'value', kind, path), attributes)
    elif kind == 'struct':
        return StructType(tuple(parse_field(item, path) for item in require(data, 'fields', kind, path)), attributes)
    elif kind == 'reference':
        return ReferenceType(data.get('path'), attributes)
    elif kind == 'concrete':
        return ConcreteType(
            parse_type(require(data, 'child', kind, path), path),
            tuple(parse_type(arg, path) for arg in data.get('typeArgs', [])),
            attributes,
        )
    elif kind == 'template':
        return TemplateType(
            parse_type(require(data, 'child', kind, path), path),
            tuple(require(param, 'path', kind, path) for param in data.get('typeParams', [])),
            attributes,
        )
    elif kind == 'dispatcher':
        return DispatcherType(
            require(data, 'registry', kind, path),
            tuple(parse_index(index, path) for index in require(data, 'parallelIndices', kind, path)),
            attributes,
        )
    elif kind == 'indexed':
        return IndexedType(
            parse_type(require(data, 'child', kind, path), path),
            tuple(parse_index(index, path) for index in require(data, 'parallelIndices', kind, path)),
            attributes,
        )
    elif kind == 'union':
        members = require(data, 'members', kind, path)
        return UnionType(tuple(parse_type(member, path) for member in members), attributes)

    raise ShapeError(f"Unsupported type kind {kind!r}", kind, path)
