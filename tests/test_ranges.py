from mcdoc_typegen.mcdoc_types import LEFT_EXCLUSIVE, RIGHT_EXCLUSIVE, NumericRange
from mcdoc_typegen.ranges import (length_range_generic, non_integral_generic, range_cardinality,
                                  whole_number_generic)


def test_cardinality_limit_is_inclusive():
    generic, docs = whole_number_generic(NumericRange(0, 0, 99))
    assert generic.render() == '{ min: 0, max: 99 }'
    assert docs == ['Range: 0..99']


def test_range_over_the_limit_keeps_only_a_boundary():
    generic, _ = whole_number_generic(NumericRange(0, 0, 100))
    assert generic.render() == '{ min: 0 }'

    generic, _ = whole_number_generic(NumericRange(0, 1, 100))
    assert generic.render() == '{ min: 1, max: 100 }'


def test_range_cardinality():
    assert range_cardinality(0, 99) == 100
    assert range_cardinality(0, 0.5) is None


def test_exclusive_bounds_are_folded_for_whole_numbers():
    generic, docs = whole_number_generic(NumericRange(LEFT_EXCLUSIVE, 0, 10))

    assert generic.render() == '{ min: 1, max: 10 }'
    assert docs == ['Range: 0<..10', 'Effective minimum: 1']


def test_negative_and_mixed_whole_number_ranges():
    assert whole_number_generic(NumericRange(0, -1000, -5))[0].render() == '{ max: -1 }'
    assert whole_number_generic(NumericRange(0, -10, 1000))[0].render() == '{}'
    assert whole_number_generic(NumericRange(0, None, 0))[0].render() == '{ max: 0 }'


def test_non_integral_small_range_is_literal():
    generic, docs = non_integral_generic(NumericRange(0, 0, 1))

    assert generic.render() == '{ leftExclusive: false, rightExclusive: false, min: 0, max: 1 }'
    assert docs == ['Range: 0..1']


def test_non_integral_exclusive_minimum():
    generic, docs = non_integral_generic(NumericRange(LEFT_EXCLUSIVE, 0, None))

    assert generic.render() == '{ leftExclusive: true, min: 0 }'
    assert docs == ['Range: 0<..', 'Minimum is exclusive; must be higher than 0']


def test_fractional_bounds_round_to_an_exclusive_boundary():
    generic, _ = non_integral_generic(NumericRange(0, 0.5, 1000.5))
    assert generic.render() == '{ leftExclusive: true, min: 0 }'


def test_length_range():
    generic, docs = length_range_generic(NumericRange(0, 1, None), 'List')

    assert generic.render() == '{ leftExclusive: false, min: 1 }'
    assert docs == ['List length range: 1..']


def test_range_text():
    assert str(NumericRange(0, 5, 5)) == '5'
    assert str(NumericRange(LEFT_EXCLUSIVE | RIGHT_EXCLUSIVE, 0, 1)) == '0<..<1'
    assert str(NumericRange(0, 0.5, None)) == '0.5..'
