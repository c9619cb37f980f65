"""
Attribute validation

Every mcdoc attribute the generator understands is listed in ATTRIBUTES
together with the shape its value must have. Anything else stops the run:
a misused attribute is a schema bug, not something to paper over.
"""

from typing import Dict, Iterable, Optional, Sequence, Tuple

from .errors import InvalidAttributeError
from .mcdoc_types import Attribute, AttributeTree, LiteralType, TypeDefinition

NUMERIC_LITERALS = ('byte', 'short', 'int', 'long', 'float', 'double')
VERSION_ATTRIBUTES = ('since', 'until', 'deprecated')


def describe_value(value) -> str:
    """Short description of a received attribute value for error messages"""
    if value is None:
        return 'absent'
    if isinstance(value, AttributeTree):
        return f"tree({', '.join(value.keys())})"
    if isinstance(value, LiteralType):
        return f"{value.literal_kind} literal {value.value!r}"
    if isinstance(value, TypeDefinition):
        return f"{value.kind} type"
    return repr(value)


class Shape:
    """Expected shape of an attribute value"""

    def check(self, attribute: str, value) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError

    def matches(self, attribute: str, value) -> bool:
        try:
            self.check(attribute, value)
        except InvalidAttributeError:
            return False
        return True

    def fail(self, attribute: str, value):
        raise InvalidAttributeError(attribute, f"expected {self.describe()}", describe_value(value))


class Absent(Shape):
    def check(self, attribute, value):
        if value is not None:
            self.fail(attribute, value)

    def describe(self):
        return 'no value'


class StringValue(Shape):
    def __init__(self, choices: Optional[Sequence[str]] = None):
        self.choices = tuple(choices) if choices is not None else None

    def check(self, attribute, value):
        if not (isinstance(value, LiteralType) and value.literal_kind == 'string'):
            self.fail(attribute, value)
        if self.choices is not None and value.value not in self.choices:
            self.fail(attribute, value)

    def describe(self):
        if self.choices is None:
            return 'a string'
        return 'one of ' + ', '.join(repr(choice) for choice in self.choices)


class NumberValue(Shape):
    def check(self, attribute, value):
        if not (isinstance(value, LiteralType) and value.literal_kind in NUMERIC_LITERALS):
            self.fail(attribute, value)

    def describe(self):
        return 'a number'


class BooleanValue(Shape):
    def check(self, attribute, value):
        if not (isinstance(value, LiteralType) and value.literal_kind == 'boolean'):
            self.fail(attribute, value)

    def describe(self):
        return 'a boolean'


class TypeValue(Shape):
    def check(self, attribute, value):
        if not isinstance(value, TypeDefinition):
            self.fail(attribute, value)

    def describe(self):
        return 'a type'


class Maybe(Shape):
    def __init__(self, shape: Shape):
        self.shape = shape

    def check(self, attribute, value):
        if value is not None:
            self.shape.check(attribute, value)

    def describe(self):
        return f"no value or {self.shape.describe()}"


class OneOf(Shape):
    def __init__(self, *shapes: Shape):
        self.shapes = shapes

    def check(self, attribute, value):
        if not any(shape.matches(attribute, value) for shape in self.shapes):
            self.fail(attribute, value)

    def describe(self):
        return ' or '.join(shape.describe() for shape in self.shapes)


class Tree(Shape):
    """Named sub-arguments, e.g. `#[command(slash="allowed")]`"""

    def __init__(self, fields: Dict[str, Shape], required: Sequence[str] = (),
                 exactly_one_of: Sequence[str] = ()):
        self.fields = fields
        self.required = tuple(required)
        self.exactly_one_of = tuple(exactly_one_of)

    def check(self, attribute, value):
        if not isinstance(value, AttributeTree):
            self.fail(attribute, value)

        for key in value.keys():
            if key not in self.fields:
                raise InvalidAttributeError(attribute, f"unknown argument '{key}'", describe_value(value))

        if self.exactly_one_of:
            present = [key for key in self.exactly_one_of if value.get(key) is not None]
            if len(present) != 1:
                raise InvalidAttributeError(
                    attribute,
                    f"exactly one of {', '.join(self.exactly_one_of)} is required",
                    describe_value(value),
                )

        for key in self.required:
            if value.get(key) is None:
                raise InvalidAttributeError(attribute, f"missing argument '{key}'", describe_value(value))

        for key, item in value.values:
            self.fields[key].check(f"{attribute}.{key}", item)

    def describe(self):
        return f"tree({', '.join(self.fields)})"


ABSENT = Absent()
STRING = StringValue()
NUMBER = NumberValue()
BOOLEAN = BooleanValue()
TYPE = TypeValue()
DEFINITION = Tree({'definition': BOOLEAN})

ATTRIBUTES: Dict[str, Shape] = {
    # Version gating
    'since': STRING,
    'until': STRING,
    'deprecated': Maybe(STRING),

    # Identifiers
    'id': OneOf(ABSENT, STRING, Tree({
        'registry': STRING,
        'tags': StringValue(('allowed', 'implicit', 'required')),
        'definition': BOOLEAN,
        'prefix': StringValue(('!',)),
        'path': STRING,
        'exclude': OneOf(STRING, TYPE),
        'empty': StringValue(('allowed',)),
    }, required=('registry',))),
    'dispatcher_key': STRING,
    'item_slots': ABSENT,
    'objective': ABSENT,
    'score_holder': ABSENT,
    'team': ABSENT,
    'uuid': ABSENT,
    'translation_key': ABSENT,
    'translation_value': ABSENT,
    'texture_slot': Tree({'kind': StringValue(('definition', 'value', 'reference'))}, required=('kind',)),
    'criterion': Maybe(DEFINITION),
    'crafting_ingredient': Maybe(DEFINITION),
    'permutation': DEFINITION,
    'game_rule': Tree({'type': StringValue(('boolean', 'int'))}, required=('type',)),

    # Formats
    'color': StringValue(('hex_rgb', 'hex_argb', 'dec_rgb', 'dec_argb', 'composite_rgb', 'composite_argb', 'named')),
    'command': Tree({
        'slash': StringValue(('allowed', 'required', 'chat', 'none')),
        'macro': StringValue(('implicit', 'allowed', 'required')),
        'empty': StringValue(('allowed',)),
        'max_length': NUMBER,
        'incomplete': StringValue(('allowed',)),
    }, exactly_one_of=('macro', 'slash')),
    'entity': OneOf(ABSENT, Tree({
        'amount': StringValue(('single', 'multiple')),
        'type': StringValue(('entities', 'players')),
    })),
    'vector': Tree({'dimension': NUMBER, 'integer': BOOLEAN, 'min': NUMBER}, required=('dimension',)),
    'bitfield': TYPE,
    'integer': Maybe(Tree({'min': NUMBER, 'max': NUMBER})),
    'divisible_by': NUMBER,
    'block_predicate': ABSENT,
    'nbt': Maybe(TYPE),
    'nbt_path': Maybe(TYPE),
    'regex_pattern': ABSENT,
    'match_regex': STRING,
    'time_pattern': ABSENT,

    # Legacy markers, never carry a value
    'canonical': ABSENT,
    'text_component': ABSENT,
    'url': ABSENT,
    'random': ABSENT,
}


def validate_attribute(attribute: Attribute) -> Attribute:
    shape = ATTRIBUTES.get(attribute.name)
    if shape is None:
        raise InvalidAttributeError(attribute.name, "unrecognized attribute", describe_value(attribute.value))
    shape.check(attribute.name, attribute.value)
    return attribute


def validate_attributes(attributes: Iterable[Attribute]) -> Tuple[Attribute, ...]:
    return tuple(validate_attribute(attribute) for attribute in attributes)


# Helpers for handlers

def find_attribute(attributes: Iterable[Attribute], name: str) -> Optional[Attribute]:
    for attribute in attributes:
        if attribute.name == name:
            return attribute
    return None


def is_removed(attributes: Iterable[Attribute]) -> bool:
    """Removed in some version, so absent from the latest one"""
    return find_attribute(attributes, 'until') is not None


def is_deprecated(attributes: Iterable[Attribute]) -> bool:
    return find_attribute(attributes, 'deprecated') is not None


def significant_attribute(attributes: Iterable[Attribute]) -> Optional[Attribute]:
    """First attribute that is not a version or deprecation marker"""
    for attribute in attributes:
        if attribute.name not in VERSION_ATTRIBUTES:
            return attribute
    return None


def string_argument(value, key: Optional[str] = None) -> Optional[str]:
    """Read a string literal from a value, or from one argument of a tree"""
    if key is not None:
        if not isinstance(value, AttributeTree):
            return None
        value = value.get(key)
    if isinstance(value, LiteralType) and value.literal_kind == 'string':
        return value.value
    return None


def id_registry(attribute: Attribute) -> Optional[str]:
    """Registry named by `#[id="x"]` or `#[id(registry="x")]`"""
    if isinstance(attribute.value, AttributeTree):
        return string_argument(attribute.value, 'registry')
    return string_argument(attribute.value)
