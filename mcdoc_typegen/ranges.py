"""
Numeric range encoding

Ranges become a generic parameter object of at most
`{leftExclusive, rightExclusive, min, max}`. A two-sided range is only
spelled out as a literal `{min, max}` while its cardinality stays within
RANGE_CARDINALITY_LIMIT; wider ranges keep only a normalized boundary so
the type checker never has to expand a huge numeric literal union.
"""

from typing import List, Optional, Tuple, Union

from .config import RANGE_CARDINALITY_LIMIT
from .mcdoc_types import NumericRange, format_number
from .tsnodes import BooleanLiteral, NumberLiteral, PropertySignature, TypeLiteral

Number = Union[int, float]


def is_integral(value: Optional[Number]) -> bool:
    return value is not None and float(value).is_integer()


def range_cardinality(low: Number, high: Number) -> Optional[int]:
    """Number of integers in the closed range [low, high], None if not integral"""
    if not (is_integral(low) and is_integral(high)):
        return None
    return max(int(high) - int(low) + 1, 0)


def within_cardinality(low: Number, high: Number) -> bool:
    cardinality = range_cardinality(low, high)
    return cardinality is not None and cardinality <= RANGE_CARDINALITY_LIMIT


def _number(value: Number) -> NumberLiteral:
    if is_integral(value):
        return NumberLiteral(int(value))
    return NumberLiteral(value)


def _literal(entries: List[Tuple[str, object]]) -> TypeLiteral:
    members = []
    for name, value in entries:
        if isinstance(value, bool):
            members.append(PropertySignature(name, BooleanLiteral(value)))
        else:
            members.append(PropertySignature(name, _number(value)))
    return TypeLiteral(tuple(members))


def _exclusive_docs(value_range: NumericRange) -> List[str]:
    docs = []
    if value_range.min is not None and value_range.left_exclusive:
        docs.append(f"Minimum is exclusive; must be higher than {format_number(value_range.min)}")
    if value_range.max is not None and value_range.right_exclusive:
        docs.append(f"Maximum is exclusive; must be lower than {format_number(value_range.max)}")
    return docs


def whole_number_generic(value_range: NumericRange) -> Tuple[TypeLiteral, List[str]]:
    """Generic object for byte/short/int/long ranges

    Exclusive bounds are folded into the effective bound, so no exclusivity
    flags are emitted.
    """
    docs = [f"Range: {value_range}"]
    low = value_range.min
    high = value_range.max

    if low is not None and value_range.left_exclusive:
        low = low + 1
        docs.append(f"Effective minimum: {format_number(low)}")
    if high is not None and value_range.right_exclusive:
        high = high - 1
        docs.append(f"Effective maximum: {format_number(high)}")

    entries = []
    if low is not None and high is not None and within_cardinality(low, high):
        entries = [('min', low), ('max', high)]
    elif low is not None and low >= 0:
        entries = [('min', 1 if low >= 1 else 0)]
    elif high is not None and high <= 0:
        entries = [('max', -1 if high < 0 else 0)]

    return _literal(entries), docs


def _bounded_generic(value_range: NumericRange) -> TypeLiteral:
    low = value_range.min
    high = value_range.max

    if low is not None and high is not None and within_cardinality(low, high):
        return _literal([
            ('leftExclusive', value_range.left_exclusive),
            ('rightExclusive', value_range.right_exclusive),
            ('min', low),
            ('max', high),
        ])

    # Boundary only: a weaker bound that keeps the sign information
    if low is not None and low >= 0:
        bound = 1 if low >= 1 else 0
        exclusive = value_range.left_exclusive if low == bound else low > bound
        return _literal([('leftExclusive', exclusive), ('min', bound)])
    if high is not None and high <= 0:
        bound = -1 if high <= -1 else 0
        exclusive = value_range.right_exclusive if high == bound else high < bound
        return _literal([('rightExclusive', exclusive), ('max', bound)])
    return _literal([])


def non_integral_generic(value_range: NumericRange) -> Tuple[TypeLiteral, List[str]]:
    """Generic object for float/double ranges"""
    docs = [f"Range: {value_range}"] + _exclusive_docs(value_range)
    return _bounded_generic(value_range), docs


def length_range_generic(value_range: NumericRange, label: str) -> Tuple[TypeLiteral, List[str]]:
    """Generic object for list and array lengths"""
    docs = [f"{label} length range: {value_range}"] + _exclusive_docs(value_range)
    return _bounded_generic(value_range), docs
