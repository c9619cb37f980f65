"""
TypeScript type nodes

Immutable type-expression and declaration nodes produced by the type
expression compiler. Every node renders itself to TypeScript source text.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

IDENTIFIER = re.compile(r'^[A-Za-z_$][A-Za-z0-9_$]*$')


def quote(value: str) -> str:
    """Render a single quoted string literal"""
    return "'" + value.replace('\\', '\\\\').replace("'", "\\'").replace('\n', '\\n') + "'"


def property_name(name: str) -> str:
    if IDENTIFIER.match(name):
        return name
    return quote(name)


def render_docs(docs: Tuple[str, ...], indent: str = '') -> str:
    """Render a JSDoc block, or an empty string when there are no docs"""
    if not docs:
        return ''
    lines = []
    for doc in docs:
        lines.extend(doc.replace('*/', '*\\/').split('\n'))
    if len(lines) == 1:
        return f'{indent}/** {lines[0]} */\n'
    body = ''.join(f'{indent} * {line}'.rstrip() + '\n' for line in lines)
    return f'{indent}/**\n{body}{indent} */\n'


class TypeNode:
    """Base class of every type expression"""

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self):
        return self.render()


@dataclass(frozen=True)
class Keyword(TypeNode):
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class TypeReference(TypeNode):
    name: str
    args: Tuple[TypeNode, ...] = ()

    def render(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}<{', '.join(arg.render() for arg in self.args)}>"


@dataclass(frozen=True)
class StringLiteral(TypeNode):
    value: str

    def render(self) -> str:
        return quote(self.value)


@dataclass(frozen=True)
class NumberLiteral(TypeNode):
    value: Union[int, float]

    def render(self) -> str:
        if isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return json.dumps(self.value)


@dataclass(frozen=True)
class BooleanLiteral(TypeNode):
    value: bool

    def render(self) -> str:
        return 'true' if self.value else 'false'


@dataclass(frozen=True)
class UnionType(TypeNode):
    members: Tuple[TypeNode, ...]

    def render(self) -> str:
        if len(self.members) == 1:
            return self.members[0].render()
        return f"({' | '.join(member.render() for member in self.members)})"


@dataclass(frozen=True)
class IntersectionType(TypeNode):
    members: Tuple[TypeNode, ...]

    def render(self) -> str:
        if len(self.members) == 1:
            return self.members[0].render()
        return f"({' & '.join(member.render() for member in self.members)})"


@dataclass(frozen=True)
class PropertySignature:
    name: str
    type: TypeNode
    optional: bool = False
    docs: Tuple[str, ...] = ()

    def render(self) -> str:
        marker = '?' if self.optional else ''
        return f'{property_name(self.name)}{marker}: {self.type.render()}'


@dataclass(frozen=True)
class TypeLiteral(TypeNode):
    members: Tuple[PropertySignature, ...] = ()

    def render(self) -> str:
        if not self.members:
            return '{}'
        if not any(member.docs for member in self.members):
            return '{ ' + ', '.join(member.render() for member in self.members) + ' }'
        lines = ['{']
        for member in self.members:
            lines.append(render_docs(member.docs, '    ') + f'    {member.render()},')
        lines.append('}')
        return '\n'.join(lines)


@dataclass(frozen=True)
class MappedType(TypeNode):
    """`{ [Key in Constraint as NameType]?: Value }`"""
    key_name: str
    constraint: TypeNode
    value: TypeNode
    optional: bool = True
    name_type: Optional[TypeNode] = None

    def render(self) -> str:
        renamed = f' as {self.name_type.render()}' if self.name_type is not None else ''
        marker = '?' if self.optional else ''
        return f'{{ [{self.key_name} in {self.constraint.render()}{renamed}]{marker}: {self.value.render()} }}'


@dataclass(frozen=True)
class IndexedAccess(TypeNode):
    object: TypeNode
    index: TypeNode

    def render(self) -> str:
        return f'{self.object.render()}[{self.index.render()}]'


@dataclass(frozen=True)
class ConditionalType(TypeNode):
    check: TypeNode
    extends: TypeNode
    true_type: TypeNode
    false_type: TypeNode
    parenthesized: bool = True

    def render(self) -> str:
        text = (f'{self.check.render()} extends {self.extends.render()} ? '
                f'{self.true_type.render()} : {self.false_type.render()}')
        return f'({text})' if self.parenthesized else text


@dataclass(frozen=True)
class TypeOperator(TypeNode):
    """`keyof T` and `readonly T`"""
    operator: str
    type: TypeNode

    def render(self) -> str:
        return f'{self.operator} {self.type.render()}'


@dataclass(frozen=True)
class TemplateLiteral(TypeNode):
    head: str
    spans: Tuple[Tuple[TypeNode, str], ...]

    def render(self) -> str:
        text = self.head
        for span_type, literal in self.spans:
            text += '${' + span_type.render() + '}' + literal
        return '`' + text + '`'


@dataclass(frozen=True)
class OptionalElement(TypeNode):
    type: TypeNode

    def render(self) -> str:
        return f'{self.type.render()}?'


@dataclass(frozen=True)
class TupleType(TypeNode):
    elements: Tuple[TypeNode, ...]

    def render(self) -> str:
        return f"[{', '.join(element.render() for element in self.elements)}]"


@dataclass(frozen=True)
class TypeParameter:
    name: str
    constraint: Optional[TypeNode] = None
    default: Optional[TypeNode] = None

    def render(self) -> str:
        text = self.name
        if self.constraint is not None:
            text += f' extends {self.constraint.render()}'
        if self.default is not None:
            text += f' = {self.default.render()}'
        return text


# Declarations

@dataclass(frozen=True)
class TypeAlias:
    name: str
    type: TypeNode
    type_params: Tuple[TypeParameter, ...] = ()
    exported: bool = True
    docs: Tuple[str, ...] = ()

    def render(self) -> str:
        params = ''
        if self.type_params:
            params = f"<{', '.join(param.render() for param in self.type_params)}>"
        export = 'export ' if self.exported else ''
        return render_docs(self.docs) + f'{export}type {self.name}{params} = {self.type.render()}'


@dataclass(frozen=True)
class ReExport:
    names: Tuple[str, ...]
    module: str

    def render(self) -> str:
        return f"export type {{ {', '.join(self.names)} }} from {quote(self.module)}"


@dataclass(frozen=True)
class ImportDeclaration:
    module: str
    names: Tuple[str, ...] = field(default_factory=tuple)

    def render(self) -> str:
        return f"import type {{ {', '.join(self.names)} }} from {quote(self.module)}"


Declaration = Union[TypeAlias, ReExport]


# Shared nodes

STRING = Keyword('string')
NUMBER = Keyword('number')
BOOLEAN = Keyword('boolean')
UNKNOWN = Keyword('unknown')
NEVER = Keyword('never')
UNDEFINED = Keyword('undefined')
ANY = Keyword('any')

EMPTY_OBJECT = TypeReference('Record', (STRING, NEVER))
UNKNOWN_RECORD = TypeReference('Record', (STRING, UNKNOWN))
NON_EMPTY_STRING = TemplateLiteral('', ((ANY, ''), (STRING, '')))
NAMESPACED_STRING = TemplateLiteral('', ((STRING, ':'), (STRING, '')))
TAG_STRING = TemplateLiteral('#', ((STRING, ':'), (STRING, '')))


def pascal_case(text: str) -> str:
    """`entity_effect` -> `EntityEffect`, `worldgen/biome` -> `WorldgenBiome`"""
    parts = re.split(r'[_/:\-.\s]+', text)
    return ''.join(part[:1].upper() + part[1:] for part in parts if part)


def union_of(members) -> TypeNode:
    members = tuple(members)
    if not members:
        return NEVER
    if len(members) == 1:
        return members[0]
    return UnionType(members)


def intersection_of(members) -> TypeNode:
    members = tuple(members)
    if len(members) == 1:
        return members[0]
    return IntersectionType(members)


def is_literal(node: TypeNode) -> bool:
    return isinstance(node, (StringLiteral, NumberLiteral, BooleanLiteral))
