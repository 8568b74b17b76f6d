import itertools

import pytest

from osbind._core.engines.polling import exponential, iter_intervals


def test_fixed_interval_repeats_forever():
    intervals = iter_intervals(1.5)
    assert list(itertools.islice(intervals, 5)) == [1.5, 1.5, 1.5, 1.5, 1.5]


def test_integer_interval_is_converted_to_float():
    intervals = iter_intervals(2)
    assert next(intervals) == 2.0
    assert isinstance(next(intervals), float)


def test_schedule_repeats_its_last_interval():
    intervals = iter_intervals([1, 2, 5])
    assert list(itertools.islice(intervals, 6)) == [1, 2, 5, 5, 5, 5]


def test_schedule_from_a_generator():
    intervals = iter_intervals(delay for delay in [0.1, 0.2])
    assert list(itertools.islice(intervals, 4)) == [0.1, 0.2, 0.2, 0.2]


def test_empty_schedule_fails():
    with pytest.raises(ValueError, match=r"empty"):
        list(itertools.islice(iter_intervals([]), 3))


@pytest.mark.parametrize('interval', [-1, [1, -1]])
def test_negative_intervals_fail(interval):
    with pytest.raises(ValueError, match=r"negative"):
        list(itertools.islice(iter_intervals(interval), 3))


def test_exponential_growth_is_capped():
    intervals = exponential(1, 2, 10)
    assert list(itertools.islice(intervals, 7)) == [1, 2, 4, 8, 10, 10, 10]


def test_exponential_growth_without_a_cap():
    intervals = exponential(0.5, 3, None)
    assert list(itertools.islice(intervals, 4)) == [0.5, 1.5, 4.5, 13.5]


def test_exponential_defaults():
    intervals = exponential()
    assert list(itertools.islice(intervals, 8)) == [1, 2, 4, 8, 16, 32, 60, 60]


@pytest.mark.parametrize('initial, factor', [(0, 2), (-1, 2), (1, 0.5)])
def test_exponential_must_grow_from_a_positive_value(initial, factor):
    with pytest.raises(ValueError):
        next(exponential(initial, factor))


def test_exponential_schedule_is_accepted_as_interval():
    intervals = iter_intervals(exponential(1, 2, 4))
    assert list(itertools.islice(intervals, 5)) == [1, 2, 4, 4, 4]


@pytest.mark.parametrize('interval', [-1, -0.5, [], [1, -1], (-1,)])
def test_invalid_intervals_fail_before_iterating(interval):
    with pytest.raises(ValueError):
        iter_intervals(interval)


def test_empty_generator_fails_before_iterating():
    with pytest.raises(ValueError, match=r"empty"):
        iter_intervals(delay for delay in [])
