"""
Unit tests for point and parameter sensitivities and currency amounts.
"""

from datetime import date
import numpy as np
import pandas as pd
import pytest

from ratesens.currency import CurrencyAmount, CurrencyPair, MultiCurrencyAmount
from ratesens.indices import GB_RPI, USD_FED_FUND, USD_LIBOR_3M, PriceIndexObservation
from ratesens.sensitivity import (
    CurrencyParameterSensitivities,
    CurrencyParameterSensitivity,
    PointSensitivities,
    PointSensitivityBuilder,
    SensitivityKind,
    fx_forward_sensitivity,
    ibor_rate_sensitivity,
    inflation_rate_sensitivity,
    overnight_rate_sensitivity,
    zero_rate_sensitivity,
)


class TestPointSensitivity:
    """Tests for single point sensitivities."""

    def test_zero_rate_keys(self):
        sens = zero_rate_sensitivity("USD", 2.5, -120.0)
        assert sens.kind == SensitivityKind.ZERO_RATE
        assert sens.year_fraction == 2.5
        assert sens.value_currency == "USD"

    def test_same_currency_is_not_stored(self):
        sens = zero_rate_sensitivity("USD", 2.5, 1.0, "USD")
        assert sens.sensitivity_currency is None

    def test_ibor_keys(self):
        obs = USD_LIBOR_3M.observe(date(2015, 1, 8))
        sens = ibor_rate_sensitivity(obs, 10.0)
        assert sens.index == USD_LIBOR_3M
        assert sens.fixing_date == date(2015, 1, 8)
        with pytest.raises(AttributeError):
            sens.year_fraction

    def test_overnight_end_date_defaults_to_maturity(self):
        obs = USD_FED_FUND.observe_on(date(2015, 1, 9))
        assert overnight_rate_sensitivity(obs, 1.0).end_date == date(2015, 1, 12)
        assert overnight_rate_sensitivity(obs, 1.0, date(2015, 1, 15)).end_date == date(2015, 1, 15)

    def test_inflation_keys(self):
        obs = PriceIndexObservation.of(GB_RPI, date(2015, 3, 1))
        sens = inflation_rate_sensitivity(obs, 2.0)
        assert sens.reference_month == pd.Period("2015-03", freq="M")
        assert sens.currency == "GBP"

    def test_fx_forward_requires_reference_in_pair(self):
        pair = CurrencyPair.of("EUR", "USD")
        sens = fx_forward_sensitivity(pair, "EUR", date(2015, 6, 1), 3.0, "USD")
        assert sens.currency == "EUR"
        assert sens.value_currency == "USD"
        with pytest.raises(ValueError):
            fx_forward_sensitivity(pair, "GBP", date(2015, 6, 1), 3.0, "USD")

    def test_combined_with_matching_key_sums(self):
        a = zero_rate_sensitivity("USD", 1.0, 2.0)
        b = zero_rate_sensitivity("USD", 1.0, 3.0)
        built = a.combined_with(b).build()
        assert built.size == 1
        assert built.sensitivities[0].value == 5.0

    def test_combined_with_different_key_keeps_both(self):
        a = zero_rate_sensitivity("USD", 1.0, 2.0)
        b = zero_rate_sensitivity("USD", 2.0, 3.0)
        assert a.combined_with(b).build().size == 2


class TestPointSensitivities:
    """Tests for point sensitivity collections."""

    @pytest.fixture
    def points(self):
        return PointSensitivities.of(
            zero_rate_sensitivity("USD", 2.0, 1.0),
            zero_rate_sensitivity("EUR", 1.0, 4.0),
            zero_rate_sensitivity("USD", 1.0, 2.0),
            zero_rate_sensitivity("USD", 2.0, 5.0),
        )

    def test_normalized_merges_and_sorts(self, points):
        normalized = points.normalized()
        assert [(s.currency, s.year_fraction, s.value) for s in normalized] == [
            ("EUR", 1.0, 4.0),
            ("USD", 1.0, 2.0),
            ("USD", 2.0, 6.0),
        ]

    def test_normalized_is_order_independent(self, points):
        reversed_points = PointSensitivities.of(*reversed(points.sensitivities))
        assert reversed_points.normalized() == points.normalized()

    def test_normalized_drops_zeros(self):
        points = PointSensitivities.of(
            zero_rate_sensitivity("USD", 1.0, 2.0),
            zero_rate_sensitivity("USD", 1.0, -2.0),
        )
        assert points.normalized().size == 0

    def test_equal_with_tolerance(self, points):
        other = PointSensitivities.of(
            zero_rate_sensitivity("USD", 2.0, 6.0 + 1e-12),
            zero_rate_sensitivity("USD", 1.0, 2.0),
            zero_rate_sensitivity("EUR", 1.0, 4.0),
        )
        assert points.equal_with_tolerance(other, 1e-10)
        assert not points.equal_with_tolerance(other.multiplied_by(2.0), 1e-10)

    def test_missing_key_compares_to_zero(self):
        a = PointSensitivities.of(zero_rate_sensitivity("USD", 1.0, 1e-12))
        assert a.equal_with_tolerance(PointSensitivities.empty(), 1e-10)

    def test_to_frame(self, points):
        frame = points.to_frame()
        assert list(frame.columns) == ["kind", "currency", "sensitivity_currency", "keys", "value"]
        assert frame["value"].sum() == pytest.approx(12.0)


class TestPointSensitivityBuilder:
    """Tests for the sensitivity accumulator."""

    def test_none_is_identity(self):
        sens = zero_rate_sensitivity("USD", 1.0, 2.0)
        built = PointSensitivityBuilder.none().combined_with(sens).build()
        assert built == PointSensitivities.of(sens)
        assert PointSensitivityBuilder.none().is_empty()

    def test_multiplied_by(self):
        builder = PointSensitivityBuilder.of(
            zero_rate_sensitivity("USD", 1.0, 2.0),
            zero_rate_sensitivity("USD", 2.0, 3.0),
        ).multiplied_by(-10.0)
        assert [s.value for s in builder.build()] == [-20.0, -30.0]

    def test_with_sensitivity_currency(self):
        builder = PointSensitivityBuilder.of(zero_rate_sensitivity("EUR", 1.0, 2.0))
        converted = builder.with_sensitivity_currency("USD").build()
        assert converted.sensitivities[0].value_currency == "USD"

    def test_normalize(self):
        builder = PointSensitivityBuilder.of(
            zero_rate_sensitivity("USD", 1.0, 2.0),
            zero_rate_sensitivity("USD", 1.0, 3.0),
        )
        assert builder.normalize().build().sensitivities[0].value == 5.0

    def test_builders_are_immutable(self):
        builder = PointSensitivityBuilder.of(zero_rate_sensitivity("USD", 1.0, 2.0))
        builder.combined_with(zero_rate_sensitivity("USD", 2.0, 3.0))
        assert builder.build().size == 1


class TestParameterSensitivities:
    """Tests for per-curve parameter sensitivities."""

    def test_of_makes_read_only_vector(self):
        sens = CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0, 2.0])
        with pytest.raises(ValueError):
            sens.sensitivity[0] = 0.0

    def test_labels_must_match(self):
        with pytest.raises(ValueError):
            CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0, 2.0], ["1Y"])

    def test_combined_with_sums_same_key(self):
        a = CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0, 2.0])
        b = CurrencyParameterSensitivity.of("USD-DSC", "USD", [0.5, 0.5])
        c = CurrencyParameterSensitivity.of("EUR-DSC", "EUR", [3.0])
        combined = CurrencyParameterSensitivities.of(a, c).combined_with(b)
        assert combined.size == 2
        np.testing.assert_allclose(combined.get("USD-DSC", "USD").sensitivity, [1.5, 2.5])
        assert combined.total() == {"EUR": 3.0, "USD": 4.0}

    def test_size_mismatch_rejected(self):
        a = CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0, 2.0])
        b = CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0])
        with pytest.raises(ValueError):
            CurrencyParameterSensitivities.of(a, b)

    def test_find_and_get(self):
        sens = CurrencyParameterSensitivities.of(CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0]))
        assert sens.find("EUR-DSC", "EUR") is None
        with pytest.raises(ValueError):
            sens.get("EUR-DSC", "EUR")

    def test_equal_with_tolerance(self):
        a = CurrencyParameterSensitivities.of(CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0, 2.0]))
        b = CurrencyParameterSensitivities.of(CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0, 2.0 + 1e-9]))
        assert a.equal_with_tolerance(b, 1e-8)
        assert not a.equal_with_tolerance(b, 1e-10)
        assert CurrencyParameterSensitivities.empty().equal_with_tolerance(a.multiplied_by(0.0), 1e-12)

    def test_to_frame_uses_labels(self):
        sens = CurrencyParameterSensitivities.of(
            CurrencyParameterSensitivity.of("USD-DSC", "USD", [1.0, 2.0], ["1Y", "2Y"])
        )
        frame = sens.to_frame()
        assert list(frame["label"]) == ["1Y", "2Y"]
        assert frame["sensitivity"].sum() == pytest.approx(3.0)


class TestCurrencyAmounts:
    """Tests for currency value types."""

    def test_pair_parse_and_inverse(self):
        pair = CurrencyPair.parse("eur/usd")
        assert pair == CurrencyPair("EUR", "USD")
        assert pair.inverse() == CurrencyPair("USD", "EUR")
        assert pair.is_inverse(pair.inverse())
        assert pair.other("EUR") == "USD"

    def test_pair_requires_distinct_currencies(self):
        with pytest.raises(ValueError):
            CurrencyPair.of("USD", "USD")

    def test_currency_amount_mismatch(self):
        with pytest.raises(ValueError):
            CurrencyAmount("USD", 1.0).plus(CurrencyAmount("EUR", 1.0))

    def test_multi_currency_amount(self):
        total = MultiCurrencyAmount.of(
            CurrencyAmount("USD", 1.0), CurrencyAmount("EUR", 2.0), CurrencyAmount("USD", 3.0)
        )
        assert total.currencies == ["EUR", "USD"]
        assert total.get_amount("USD").amount == 4.0
        assert total.get_amount("GBP").amount == 0.0
