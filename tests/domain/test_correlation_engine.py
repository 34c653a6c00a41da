import pytest

from conftest import make_series
from src.domain.entities.price_series import PricePoint, PriceSeries
from src.domain.errors import EmptySeries, InsufficientSamples, UndefinedCorrelation
from src.domain.services.correlation_engine import (
    AlignmentPolicy,
    align,
    correlate,
    round_coefficient,
    try_correlate,
)

RISING = [10, 12, 14, 16, 18]
FALLING = [20, 19, 18, 17, 16]
NOISY = [3, 1, 4, 1, 5, 9, 2, 6]


def test_linear_opposite_series_are_perfectly_negatively_correlated() -> None:
    coefficient = correlate(make_series("A", RISING), make_series("B", FALLING))
    assert coefficient == pytest.approx(-1.0)
    assert round_coefficient(coefficient) == -1.0


def test_correlation_is_symmetric() -> None:
    a = make_series("A", NOISY)
    b = make_series("B", [2, 7, 1, 8, 2, 8, 1, 8])
    assert correlate(a, b) == pytest.approx(correlate(b, a))


def test_self_correlation_is_one() -> None:
    a = make_series("A", NOISY)
    assert correlate(a, a) == pytest.approx(1.0)


def test_known_coefficient() -> None:
    a = make_series("A", [1, 2, 3, 4])
    b = make_series("B", [1, 3, 2, 4])
    # cov = 4/3, var_a = 5/3, var_b = 5/3
    assert correlate(a, b) == pytest.approx(0.8)


def test_unequal_lengths_use_leading_samples_only() -> None:
    a = make_series("A", [1, 2, 3, 4, 5])
    b = make_series("B", [2, 1, 3])
    assert correlate(a, b) == pytest.approx(correlate(a.head(3), b))


def test_trailing_samples_of_longer_series_do_not_matter() -> None:
    b = make_series("B", [2, 1, 3])
    first = correlate(make_series("A", [1, 2, 3, 4, 5]), b)
    second = correlate(make_series("A", [1, 2, 3, 1000, -50]), b)
    assert first == second


def test_constant_series_has_undefined_correlation() -> None:
    flat = make_series("FLAT", [5, 5, 5, 5])
    rising = make_series("UP", [1, 2, 3, 4])

    with pytest.raises(UndefinedCorrelation) as excinfo:
        correlate(flat, rising)

    assert excinfo.value.ticker_a == "FLAT"
    assert excinfo.value.ticker_b == "UP"
    assert try_correlate(flat, rising) is None
    assert try_correlate(rising, flat) is None


@pytest.mark.parametrize("price", [0.1, 3.3, 231.95])
def test_constant_series_with_inexact_mean_is_undefined(price: float) -> None:
    # The float mean of [0.1] * 3 is 0.10000000000000002, not 0.1.
    flat = make_series("FLAT", [price] * 3)
    rising = make_series("UP", [1, 2, 3])

    with pytest.raises(UndefinedCorrelation):
        correlate(flat, rising)
    with pytest.raises(UndefinedCorrelation):
        correlate(rising, flat)
    assert try_correlate(flat, rising) is None


def test_series_constant_only_after_truncation_is_undefined() -> None:
    a = make_series("A", [7, 7, 7, 1, 2])
    b = make_series("B", [1, 2, 3])
    with pytest.raises(UndefinedCorrelation):
        correlate(a, b)


def test_empty_alignment_is_an_error() -> None:
    with pytest.raises(EmptySeries):
        correlate(PriceSeries(ticker="A", points=()), make_series("B", RISING))


def test_single_aligned_sample_is_an_error() -> None:
    with pytest.raises(InsufficientSamples):
        correlate(make_series("A", [10]), make_series("B", RISING))


def test_try_correlate_still_raises_for_short_series() -> None:
    with pytest.raises(InsufficientSamples):
        try_correlate(make_series("A", [10]), make_series("B", [11]))


def test_positional_alignment_truncates_longer_series() -> None:
    a, b = align(make_series("A", [1, 2, 3, 4, 5]), make_series("B", [9, 8, 7]))
    assert a.prices == [1, 2, 3]
    assert b.prices == [9, 8, 7]


def test_timestamp_join_pairs_matching_samples() -> None:
    a = PriceSeries(
        ticker="A",
        points=(
            PricePoint(1.0, "t1"),
            PricePoint(2.0, "t2"),
            PricePoint(3.0, "t3"),
            PricePoint(4.0, "t4"),
        ),
    )
    b = PriceSeries(
        ticker="B",
        points=(PricePoint(10.0, "t2"), PricePoint(30.0, "t4"), PricePoint(99.0, "t5")),
    )

    joined_a, joined_b = align(a, b, AlignmentPolicy.TIMESTAMP_JOIN)

    assert joined_a.prices == [2.0, 4.0]
    assert joined_b.prices == [10.0, 30.0]
    assert correlate(a, b, AlignmentPolicy.TIMESTAMP_JOIN) == pytest.approx(1.0)


def test_timestamp_join_without_overlap_is_empty() -> None:
    a = PriceSeries(ticker="A", points=(PricePoint(1.0, "t1"), PricePoint(2.0, "t2")))
    b = PriceSeries(ticker="B", points=(PricePoint(1.0, "t8"), PricePoint(2.0, "t9")))
    with pytest.raises(EmptySeries):
        correlate(a, b, AlignmentPolicy.TIMESTAMP_JOIN)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.123456, 0.1235),
        (0.12345, 0.1234),
        (0.12355, 0.1236),
        (-0.99999, -1.0),
        (0.5, 0.5),
    ],
)
def test_round_coefficient_rounds_half_to_even(value: float, expected: float) -> None:
    assert round_coefficient(value) == expected


def test_round_coefficient_rejects_nan() -> None:
    with pytest.raises(ValueError):
        round_coefficient(float("nan"))
