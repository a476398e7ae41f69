"""
Unit tests for Ibor and inflation rate computations and the dispatcher.
"""

from datetime import date
import numpy as np
import pandas as pd
import pytest

from ratesens.computations import (
    ApproxForwardOvernightAveragedRateComputationFn,
    DispatchingRateComputationFn,
    ExplainKey,
    ExplainMap,
    ForwardIborAveragedRateComputationFn,
    ForwardIborRateComputationFn,
    ForwardInflationInterpolatedRateComputationFn,
    ForwardOvernightAveragedRateComputationFn,
    IborAveragedFixing,
    IborAveragedRateComputation,
    IborRateComputation,
    InflationInterpolatedRateComputation,
    OvernightAveragedRateComputation,
)
from ratesens.conventions import DayCount
from ratesens.curves import Curve, CurveMetadata
from ratesens.errors import DomainError
from ratesens.indices import EUR_EURIBOR_3M, GB_RPI, USD_FED_FUND, USD_LIBOR_3M
from ratesens.rates import RatesProvider

VALUATION = date(2015, 1, 8)
PAST_FIXING = date(2015, 1, 6)
FUTURE_FIXING = date(2015, 3, 2)
EPS = 1e-7


@pytest.fixture
def provider():
    times = [0.25, 0.5, 1.0, 2.0]
    libor = Curve(CurveMetadata.zero_rates("USD-LIBOR-3M", DayCount.ACT_365F), times, [0.012, 0.013, 0.015, 0.018])
    fed_fund = Curve(CurveMetadata.zero_rates("USD-FED-FUND", DayCount.ACT_365F), times, [0.009, 0.010, 0.012, 0.015])
    rpi = Curve(CurveMetadata.prices("GB-RPI-CURVE"), [1.0, 12.0, 24.0], [256.0, 262.0, 270.0])
    return RatesProvider(
        VALUATION,
        index_curves={USD_LIBOR_3M: libor, USD_FED_FUND: fed_fund, GB_RPI: rpi},
        time_series={
            USD_LIBOR_3M: {PAST_FIXING: 0.0025},
            GB_RPI: pd.Series([257.0, 257.5], index=pd.PeriodIndex(["2014-10", "2014-11"], freq="M")),
        },
    )


def _bumped_rate_sensitivity(fn, computation, provider, curve_name):
    curve = provider.curves[curve_name]
    fd = np.zeros(curve.parameter_count)
    for i in range(curve.parameter_count):
        value = curve.get_parameter(i)
        up = fn.rate(computation, None, None, provider.with_curve_parameter(curve_name, i, value + EPS))
        down = fn.rate(computation, None, None, provider.with_curve_parameter(curve_name, i, value - EPS))
        fd[i] = (up - down) / (2 * EPS)
    return fd


class TestIborRate:
    """Tests for the single Ibor fixing rate."""

    fn = ForwardIborRateComputationFn()

    def test_past_fixing(self, provider):
        comp = IborRateComputation.of(USD_LIBOR_3M, PAST_FIXING)
        assert self.fn.rate(comp, None, None, provider) == 0.0025
        assert self.fn.rate_sensitivity(comp, None, None, provider).is_empty()

    def test_forward(self, provider):
        comp = IborRateComputation.of(USD_LIBOR_3M, FUTURE_FIXING)
        assert comp.index == USD_LIBOR_3M
        assert self.fn.rate(comp, None, None, provider) == provider.ibor_index_rate(comp.observation)
        sens = self.fn.rate_sensitivity(comp, None, None, provider).build()
        assert sens.size == 1
        assert sens.sensitivities[0].value == 1.0

    def test_sensitivity_matches_bump(self, provider):
        comp = IborRateComputation.of(USD_LIBOR_3M, FUTURE_FIXING)
        points = self.fn.rate_sensitivity(comp, None, None, provider).build()
        analytic = provider.parameter_sensitivity(points).get("USD-LIBOR-3M", "USD").sensitivity
        fd = _bumped_rate_sensitivity(self.fn, comp, provider, "USD-LIBOR-3M")
        np.testing.assert_allclose(analytic, fd, atol=1e-6)

    def test_explain(self, provider):
        comp = IborRateComputation.of(USD_LIBOR_3M, PAST_FIXING)
        builder = ExplainMap.builder()
        rate = self.fn.explain_rate(comp, None, None, provider, builder)
        explain = builder.build()
        assert explain[ExplainKey.COMBINED_RATE] == rate == 0.0025
        (observation,) = explain[ExplainKey.OBSERVATIONS]
        assert observation[ExplainKey.FROM_FIXING_SERIES] is True
        assert observation[ExplainKey.START_DATE] == comp.observation.effective_date
        assert explain.to_dict()["Observations"][0]["Index"] == "USD-LIBOR-3M"


class TestIborAveragedRate:
    """Tests for the weighted average of Ibor fixings."""

    fn = ForwardIborAveragedRateComputationFn()

    @pytest.fixture
    def computation(self):
        return IborAveragedRateComputation.of([
            IborAveragedFixing(USD_LIBOR_3M.observe(PAST_FIXING), weight=2.0),
            IborAveragedFixing(USD_LIBOR_3M.observe(FUTURE_FIXING), weight=3.0),
            IborAveragedFixing(USD_LIBOR_3M.observe(date(2015, 4, 1)), weight=1.0, fixed_rate=0.01),
        ])

    def test_rate(self, provider, computation):
        forward = provider.ibor_index_rate(USD_LIBOR_3M.observe(FUTURE_FIXING))
        expected = (2.0 * 0.0025 + 3.0 * forward + 1.0 * 0.01) / 6.0
        assert self.fn.rate(computation, None, None, provider) == pytest.approx(expected, rel=1e-14)

    def test_sensitivity_only_for_forward_fixings(self, provider, computation):
        sens = self.fn.rate_sensitivity(computation, None, None, provider).build()
        assert sens.size == 1
        assert sens.sensitivities[0].fixing_date == FUTURE_FIXING
        assert sens.sensitivities[0].value == pytest.approx(0.5)

    def test_sensitivity_matches_bump(self, provider, computation):
        points = self.fn.rate_sensitivity(computation, None, None, provider).build()
        analytic = provider.parameter_sensitivity(points).get("USD-LIBOR-3M", "USD").sensitivity
        fd = _bumped_rate_sensitivity(self.fn, computation, provider, "USD-LIBOR-3M")
        np.testing.assert_allclose(analytic, fd, atol=1e-6)

    def test_explain_weights(self, provider, computation):
        builder = ExplainMap.builder()
        self.fn.explain_rate(computation, None, None, provider, builder)
        observations = builder.build()[ExplainKey.OBSERVATIONS]
        assert [o[ExplainKey.WEIGHT] for o in observations] == [2.0, 3.0, 1.0]
        assert observations[2][ExplainKey.INDEX_VALUE] == 0.01

    def test_validation(self):
        with pytest.raises(ValueError):
            IborAveragedRateComputation.of([])
        with pytest.raises(ValueError):
            IborAveragedFixing(USD_LIBOR_3M.observe(FUTURE_FIXING), weight=-1.0)
        with pytest.raises(ValueError):
            IborAveragedRateComputation.of([
                IborAveragedFixing(USD_LIBOR_3M.observe(FUTURE_FIXING)),
                IborAveragedFixing(EUR_EURIBOR_3M.observe(FUTURE_FIXING)),
            ])


class TestInflationInterpolated:
    """Tests for the interpolated inflation rate."""

    fn = ForwardInflationInterpolatedRateComputationFn()
    WEIGHT = 0.25

    @pytest.fixture
    def computation(self):
        return InflationInterpolatedRateComputation.of(GB_RPI, "2014-10", "2015-10", self.WEIGHT)

    def test_of_uses_following_months(self, computation):
        assert computation.start_interpolation_month == pd.Period("2014-11", freq="M")
        assert computation.end_interpolation_month == pd.Period("2015-11", freq="M")

    def test_rate(self, provider, computation):
        w = self.WEIGHT
        start = w * 257.0 + (1 - w) * 257.5
        # months 9 and 10 after January 2015 on the curve
        end = w * (256.0 + 8 * 6 / 11) + (1 - w) * (256.0 + 9 * 6 / 11)
        assert self.fn.rate(computation, None, None, provider) == pytest.approx(end / start - 1.0, rel=1e-12)

    def test_sensitivity_matches_bump(self, provider, computation):
        points = self.fn.rate_sensitivity(computation, None, None, provider).build()
        assert points.size == 2
        analytic = provider.parameter_sensitivity(points).get("GB-RPI-CURVE", "GBP").sensitivity
        fd = _bumped_rate_sensitivity(self.fn, computation, provider, "GB-RPI-CURVE")
        np.testing.assert_allclose(analytic, fd, rtol=1e-6, atol=1e-8)

    def test_explain(self, provider, computation):
        builder = ExplainMap.builder()
        rate = self.fn.explain_rate(computation, None, None, provider, builder)
        explain = builder.build()
        assert explain[ExplainKey.COMBINED_RATE] == rate
        assert [o[ExplainKey.WEIGHT] for o in explain[ExplainKey.OBSERVATIONS]] == [0.25, 0.75, 0.25, 0.75]

    def test_validation(self):
        with pytest.raises(ValueError):
            InflationInterpolatedRateComputation.of(GB_RPI, "2014-10", "2015-10", 1.5)
        with pytest.raises(ValueError):
            InflationInterpolatedRateComputation.of(GB_RPI, "2015-10", "2014-10", 0.5)


class TestDispatcher:
    """Tests for routing computations to their functions."""

    @pytest.fixture
    def averaged(self):
        return OvernightAveragedRateComputation(USD_FED_FUND, date(2015, 2, 2), date(2015, 5, 1))

    def test_routes_ibor(self, provider):
        comp = IborRateComputation.of(USD_LIBOR_3M, FUTURE_FIXING)
        dispatcher = DispatchingRateComputationFn()
        assert dispatcher.rate(comp, None, None, provider) == ForwardIborRateComputationFn().rate(
            comp, None, None, provider)

    def test_averaged_is_approximate_by_default(self, provider, averaged):
        expected = ApproxForwardOvernightAveragedRateComputationFn().rate(averaged, None, None, provider)
        assert DispatchingRateComputationFn().rate(averaged, None, None, provider) == expected

    def test_exact_averaged(self, provider, averaged):
        expected = ForwardOvernightAveragedRateComputationFn().rate(averaged, None, None, provider)
        dispatcher = DispatchingRateComputationFn(approximate_averaged=False)
        assert dispatcher.rate(averaged, None, None, provider) == expected

    def test_sensitivity_and_explain_delegate(self, provider, averaged):
        dispatcher = DispatchingRateComputationFn()
        assert not dispatcher.rate_sensitivity(averaged, None, None, provider).is_empty()
        builder = ExplainMap.builder()
        rate = dispatcher.explain_rate(averaged, None, None, provider, builder)
        assert builder.build()[ExplainKey.COMBINED_RATE] == rate

    def test_override(self, provider):
        class FixedRateFn:
            def rate(self, computation, start_date, end_date, provider):
                return 0.05

        comp = IborRateComputation.of(USD_LIBOR_3M, FUTURE_FIXING)
        dispatcher = DispatchingRateComputationFn({IborRateComputation: FixedRateFn()})
        assert dispatcher.rate(comp, None, None, provider) == 0.05

    def test_unknown_computation(self, provider):
        with pytest.raises(DomainError):
            DispatchingRateComputationFn().rate(object(), None, None, provider)
