"""
Unit tests for pricers module.
"""

from datetime import date
import math
import pytest

from ratesens.computations import ExplainKey, IborRateComputation, OvernightCompoundedRateComputation
from ratesens.conventions import CompoundedRateType, DayCount, year_fraction
from ratesens.currency import CurrencyAmount
from ratesens.curves import ConstantCurve, Curve, CurveMetadata, create_flat_curve
from ratesens.errors import DomainError
from ratesens.indices import USD_FED_FUND, USD_LIBOR_3M
from ratesens.models import HullWhiteModel, HullWhiteOneFactorParameters
from ratesens.pricers import (
    CashFlowEquivalentCalculator,
    DiscountingPaymentPricer,
    DiscountingSwapPricer,
    FixedRatePeriod,
    HullWhiteSwaptionPhysicalProductPricer,
    LongShort,
    PayReceive,
    Payment,
    RateAccrualPeriod,
    SettlementType,
    Swap,
    SwapLeg,
    Swaption,
    present_value_of_payments,
    swap_present_value,
)
from ratesens.rates import RatesProvider
from ratesens.sensitivity import FiniteDifferenceSensitivityCalculator

VALUATION = date(2015, 1, 22)
NOTIONAL = 1_000_000.0
FD_TOLERANCE = NOTIONAL * 1e-8


@pytest.fixture
def provider():
    """USD discounting, Libor and Fed Fund curves."""
    times = [0.25, 0.5, 1.0, 2.0, 5.0, 10.0]
    dsc = Curve(CurveMetadata.zero_rates("USD-DSC", DayCount.ACT_365F), times,
                [0.0030, 0.0035, 0.0050, 0.0080, 0.0150, 0.0210])
    libor = Curve(CurveMetadata.zero_rates("USD-LIBOR-3M", DayCount.ACT_365F), times,
                  [0.0025, 0.0032, 0.0055, 0.0095, 0.0170, 0.0230])
    fed_fund = Curve(CurveMetadata.zero_rates("USD-FED-FUND", DayCount.ACT_365F), times,
                     [0.0012, 0.0020, 0.0038, 0.0075, 0.0140, 0.0200])
    return RatesProvider(
        VALUATION,
        discount_curves={"USD": dsc},
        index_curves={USD_LIBOR_3M: libor, USD_FED_FUND: fed_fund},
    )


def _ibor_periods(start, count, notional=NOTIONAL, spread=0.0):
    periods = []
    for _ in range(count):
        comp = IborRateComputation.of(USD_LIBOR_3M, USD_LIBOR_3M.calculate_fixing_from_effective(start))
        obs = comp.observation
        periods.append(RateAccrualPeriod(
            obs.maturity_date, obs.effective_date, obs.maturity_date, obs.year_fraction,
            comp, notional, "USD", spread=spread,
        ))
        start = obs.maturity_date
    return periods


def _swap(start, fixed_rate, fixed_direction=PayReceive.PAY, count=8, spread=0.0):
    """Semi-annual fixed against 3M Libor, fixed dates aligned with every second Libor period."""
    ibor = _ibor_periods(start, count, spread=spread)
    fixed = [
        FixedRatePeriod(
            second.payment_date, first.start_date, second.end_date,
            year_fraction(first.start_date, second.end_date, DayCount.THIRTY_360),
            fixed_rate, NOTIONAL, "USD",
        )
        for first, second in zip(ibor[::2], ibor[1::2])
    ]
    float_direction = PayReceive.RECEIVE if fixed_direction is PayReceive.PAY else PayReceive.PAY
    return Swap.of(SwapLeg.of(fixed_direction, fixed), SwapLeg.of(float_direction, ibor))


def _pv_fn(pricer, swap):
    return lambda p: pricer.present_value(swap, p).get_amount("USD")


class TestDiscountingPaymentPricer:
    """Test cases for DiscountingPaymentPricer."""

    VALUATION = date(2014, 1, 22)
    PAYMENT = Payment("USD", 1e8, date(2014, 3, 19))

    @pytest.fixture
    def constant_provider(self):
        curve = ConstantCurve(CurveMetadata.discount_factors("USD-DSC", DayCount.ACT_365F), 0.96)
        return RatesProvider(self.VALUATION, discount_curves={"USD": curve})

    @pytest.fixture
    def flat_provider(self):
        return RatesProvider(self.VALUATION, discount_curves={"USD": create_flat_curve("USD-DSC", 0.02)})

    def test_present_value(self, constant_provider):
        """Present value is amount times discount factor."""
        pv = DiscountingPaymentPricer().present_value(self.PAYMENT, constant_provider)
        assert pv.currency == "USD"
        assert pv.amount == pytest.approx(9.6e7, rel=1e-14)

    def test_settled_payment(self, constant_provider):
        """A payment before the valuation date has no value and no sensitivity."""
        pricer = DiscountingPaymentPricer()
        past = Payment.of(CurrencyAmount("USD", 1e8), date(2014, 1, 21))
        assert pricer.present_value(past, constant_provider).amount == 0.0
        assert pricer.forecast_value(past, constant_provider).amount == 0.0
        assert pricer.present_value_sensitivity(past, constant_provider).is_empty()

    def test_payment_on_valuation_date(self, constant_provider):
        """A payment on the valuation date is still valued."""
        today = Payment("USD", 1e8, self.VALUATION)
        assert DiscountingPaymentPricer().present_value(today, constant_provider).amount == pytest.approx(9.6e7)

    def test_forecast_value(self, constant_provider):
        """Forecast value is the undiscounted amount."""
        assert DiscountingPaymentPricer().forecast_value(self.PAYMENT, constant_provider) == self.PAYMENT.value

    def test_sensitivity_to_constant_discount_factor(self, constant_provider):
        """The parameter of a constant discount factor curve has sensitivity equal to the amount."""
        points = DiscountingPaymentPricer().present_value_sensitivity(self.PAYMENT, constant_provider).build()
        sens = constant_provider.parameter_sensitivity(points).get("USD-DSC", "USD")
        assert sens.sensitivity[0] == pytest.approx(1e8, rel=1e-12)

    def test_sensitivity_matches_bump(self, flat_provider):
        """Zero-rate sensitivity agrees with finite differences."""
        pricer = DiscountingPaymentPricer()
        points = pricer.present_value_sensitivity(self.PAYMENT, flat_provider).build()
        analytic = flat_provider.parameter_sensitivity(points)
        fd = FiniteDifferenceSensitivityCalculator().sensitivity(
            flat_provider, lambda p: pricer.present_value(self.PAYMENT, p))
        assert analytic.equal_with_tolerance(fd, 1.0)

    def test_present_value_with_spread(self, flat_provider):
        """Continuous spread multiplies the discount factor by exp(-s * t)."""
        pricer = DiscountingPaymentPricer()
        base = pricer.present_value(self.PAYMENT, flat_provider).amount
        t = flat_provider.discount_factors("USD").relative_year_fraction(self.PAYMENT.date)
        with_spread = pricer.present_value_with_spread(self.PAYMENT, flat_provider, 0.01).amount
        assert with_spread == pytest.approx(base * math.exp(-0.01 * t), rel=1e-12)
        assert pricer.present_value_with_spread(self.PAYMENT, flat_provider, 0.0).amount == pytest.approx(base)

    @pytest.mark.parametrize("rate_type, periods", [
        (CompoundedRateType.CONTINUOUS, 0),
        (CompoundedRateType.PERIODIC, 4),
    ])
    def test_sensitivity_with_spread_matches_bump(self, flat_provider, rate_type, periods):
        """Spread-adjusted zero-rate sensitivity agrees with finite differences."""
        pricer = DiscountingPaymentPricer()
        points = pricer.present_value_sensitivity_with_spread(
            self.PAYMENT, flat_provider, 0.005, rate_type, periods).build()
        analytic = flat_provider.parameter_sensitivity(points)
        fd = FiniteDifferenceSensitivityCalculator().sensitivity(
            flat_provider,
            lambda p: pricer.present_value_with_spread(self.PAYMENT, p, 0.005, rate_type, periods),
        )
        assert analytic.equal_with_tolerance(fd, 1.0)

    def test_explain(self, constant_provider):
        """Explain map records discount factor and present value."""
        explain = DiscountingPaymentPricer().explain_present_value(self.PAYMENT, constant_provider)
        assert explain[ExplainKey.DISCOUNT_FACTOR] == 0.96
        assert explain[ExplainKey.PRESENT_VALUE] == pytest.approx(9.6e7)
        assert explain[ExplainKey.PAYMENT_DATE] == self.PAYMENT.date
        assert explain.get(ExplainKey.COMPLETED) is None

    def test_explain_settled(self, constant_provider):
        """Explain map of a settled payment is marked completed."""
        past = Payment("USD", 1e8, date(2014, 1, 21))
        explain = DiscountingPaymentPricer().explain_present_value(past, constant_provider)
        assert explain[ExplainKey.COMPLETED] is True
        assert explain[ExplainKey.PRESENT_VALUE] == 0.0

    def test_present_value_of_payments(self, constant_provider):
        """Payments are summed after discounting."""
        payments = [self.PAYMENT, Payment("USD", -5e7, date(2014, 6, 19)), Payment("USD", 1e6, date(2013, 12, 1))]
        assert present_value_of_payments(payments, constant_provider) == pytest.approx(0.96 * 5e7)


class TestDiscountingSwapPricer:
    """Test cases for DiscountingSwapPricer."""

    START = date(2015, 3, 24)

    def test_leg_signs(self, provider):
        """Received leg is positive and paid leg negative."""
        pricer = DiscountingSwapPricer()
        swap = _swap(self.START, 0.01)
        fixed, floating = swap.legs
        assert pricer.leg_present_value(fixed, provider).amount < 0.0
        assert pricer.leg_present_value(floating, provider).amount > 0.0

    def test_fixed_leg_value(self, provider):
        """Fixed leg value is the discounted sum of coupons."""
        pricer = DiscountingSwapPricer()
        leg = _swap(self.START, 0.01).fixed_leg
        expected = sum(
            -p.notional * p.rate * p.year_fraction * provider.discount_factor("USD", p.payment_date)
            for p in leg.periods
        )
        assert pricer.leg_present_value(leg, provider).amount == pytest.approx(expected, rel=1e-14)
        assert pricer.fixed_leg_pvbp(leg, provider) * 0.01 == pytest.approx(expected, rel=1e-14)

    def test_par_rate_gives_zero_value(self, provider):
        """A swap struck at its par rate is worth zero."""
        pricer = DiscountingSwapPricer()
        par = pricer.par_rate(_swap(self.START, 0.01), provider)
        assert 0.0 < par < 0.05
        assert swap_present_value(_swap(self.START, par), provider) == pytest.approx(0.0, abs=1e-6)

    def test_payer_and_receiver_offset(self, provider):
        """Payer and receiver swaps have opposite values."""
        payer = swap_present_value(_swap(self.START, 0.012), provider)
        receiver = swap_present_value(_swap(self.START, 0.012, PayReceive.RECEIVE), provider)
        assert payer == pytest.approx(-receiver, rel=1e-12)

    def test_spread_adds_annuity(self, provider):
        """A spread on the floating leg adds spread times the floating annuity."""
        base = swap_present_value(_swap(self.START, 0.012), provider)
        spread = swap_present_value(_swap(self.START, 0.012, spread=0.001), provider)
        annuity = sum(
            p.notional * p.year_fraction * provider.discount_factor("USD", p.payment_date)
            for p in _ibor_periods(self.START, 8)
        )
        assert spread - base == pytest.approx(0.001 * annuity, rel=1e-10)

    def test_sensitivity_matches_bump(self, provider):
        """Curve sensitivity of the swap agrees with finite differences on both curves."""
        pricer = DiscountingSwapPricer()
        swap = _swap(self.START, 0.012)
        points = pricer.present_value_sensitivity(swap, provider).build()
        analytic = provider.parameter_sensitivity(points)
        assert analytic.find("USD-DSC", "USD") is not None
        assert analytic.find("USD-LIBOR-3M", "USD") is not None
        fd = FiniteDifferenceSensitivityCalculator().sensitivity(provider, _pv_fn(pricer, swap))
        assert analytic.equal_with_tolerance(fd, FD_TOLERANCE)

    def test_overnight_leg_sensitivity(self, provider):
        """An overnight compounded leg is priced through the same dispatcher."""
        pricer = DiscountingSwapPricer()
        start, end = date(2015, 2, 2), date(2015, 8, 3)
        comp = OvernightCompoundedRateComputation.of(USD_FED_FUND, start, end)
        period = RateAccrualPeriod(end, start, end, year_fraction(start, end, DayCount.ACT_360),
                                   comp, NOTIONAL, "USD")
        fixed = FixedRatePeriod(end, start, end, year_fraction(start, end, DayCount.ACT_360),
                                0.004, NOTIONAL, "USD")
        swap = Swap.of(SwapLeg.of(PayReceive.PAY, [fixed]), SwapLeg.of(PayReceive.RECEIVE, [period]))
        points = pricer.present_value_sensitivity(swap, provider).build()
        analytic = provider.parameter_sensitivity(points)
        assert analytic.find("USD-FED-FUND", "USD") is not None
        fd = FiniteDifferenceSensitivityCalculator().sensitivity(provider, _pv_fn(pricer, swap))
        assert analytic.equal_with_tolerance(fd, FD_TOLERANCE)

    def test_paid_period_is_ignored(self, provider):
        """Periods paid before the valuation date contribute nothing."""
        pricer = DiscountingSwapPricer()
        period = FixedRatePeriod(date(2015, 1, 21), date(2014, 7, 21), date(2015, 1, 21), 0.5, 0.01, NOTIONAL, "USD")
        assert pricer.period_present_value(period, provider) == 0.0
        assert pricer.period_present_value_sensitivity(period, provider).is_empty()

    def test_par_rate_errors(self, provider):
        """Par rate needs a single-currency swap with a fixed leg."""
        pricer = DiscountingSwapPricer()
        floating = SwapLeg.of(PayReceive.RECEIVE, _ibor_periods(self.START, 2))
        with pytest.raises(DomainError):
            pricer.par_rate(Swap.of(floating), provider)
        eur_fixed = FixedRatePeriod(date(2015, 9, 24), self.START, date(2015, 9, 24), 0.5, 0.01, NOTIONAL, "EUR")
        with pytest.raises(DomainError):
            pricer.par_rate(Swap.of(SwapLeg.of(PayReceive.PAY, [eur_fixed]), floating), provider)

    def test_leg_validation(self):
        """Legs need periods in a single currency."""
        with pytest.raises(ValueError):
            SwapLeg.of(PayReceive.PAY, [])
        periods = [
            FixedRatePeriod(date(2015, 9, 24), self.START, date(2015, 9, 24), 0.5, 0.01, NOTIONAL, "USD"),
            FixedRatePeriod(date(2016, 3, 24), date(2015, 9, 24), date(2016, 3, 24), 0.5, 0.01, NOTIONAL, "EUR"),
        ]
        with pytest.raises(ValueError):
            SwapLeg.of(PayReceive.PAY, periods)


class TestCashFlowEquivalent:
    """Test cases for CashFlowEquivalentCalculator."""

    START = date(2015, 3, 24)

    def test_present_value_matches_swap(self, provider):
        """Cash-flow equivalents have the present value of the swap."""
        swap = _swap(self.START, 0.012)
        payments = CashFlowEquivalentCalculator().swap(swap, provider)
        assert present_value_of_payments(payments, provider) == pytest.approx(
            swap_present_value(swap, provider), abs=1e-6)

    def test_present_value_matches_swap_with_spread(self, provider):
        """The spread payment keeps the equivalence."""
        swap = _swap(self.START, 0.012, spread=0.0015)
        payments = CashFlowEquivalentCalculator().swap(swap, provider)
        assert present_value_of_payments(payments, provider) == pytest.approx(
            swap_present_value(swap, provider), abs=1e-6)

    def test_payments_merged_and_sorted(self, provider):
        """One payment per date, in date order."""
        swap = _swap(self.START, 0.012)
        payments = CashFlowEquivalentCalculator().swap(swap, provider)
        dates = [p.date for p in payments]
        assert dates == sorted(set(dates))
        # start of the first Libor period plus the end of each of the eight
        assert len(payments) == 9
        assert payments[0].date == self.START
        assert payments[0].amount == pytest.approx(NOTIONAL, rel=1e-2)

    def test_fixed_leg(self, provider):
        """Fixed coupons become single payments."""
        leg = _swap(self.START, 0.012).fixed_leg
        payments = CashFlowEquivalentCalculator().fixed_leg(leg, provider)
        assert [p.date for p in payments] == [p.payment_date for p in leg.periods]
        assert payments[0].amount == pytest.approx(-NOTIONAL * 0.012 * leg.periods[0].year_fraction)

    def test_rejects_overnight_period(self, provider):
        """Only Ibor periods have an equivalent."""
        start, end = date(2015, 2, 2), date(2015, 8, 3)
        comp = OvernightCompoundedRateComputation.of(USD_FED_FUND, start, end)
        leg = SwapLeg.of(PayReceive.RECEIVE, [RateAccrualPeriod(end, start, end, 0.5, comp, NOTIONAL, "USD")])
        with pytest.raises(DomainError):
            CashFlowEquivalentCalculator().ibor_leg(leg, provider)

    def test_rejects_gearing(self, provider):
        """A geared Ibor period has no equivalent."""
        (period,) = _ibor_periods(self.START, 1)
        geared = RateAccrualPeriod(
            period.payment_date, period.start_date, period.end_date, period.year_fraction,
            period.rate_computation, NOTIONAL, "USD", gearing=2.0,
        )
        with pytest.raises(DomainError):
            CashFlowEquivalentCalculator().ibor_leg(SwapLeg.of(PayReceive.RECEIVE, [geared]), provider)


class TestHullWhiteSwaption:
    """Test cases for HullWhiteSwaptionPhysicalProductPricer."""

    EXPIRY = date(2016, 1, 21)
    SWAP_START = date(2016, 1, 25)
    STRIKE = 0.015

    @pytest.fixture
    def model(self):
        params = HullWhiteOneFactorParameters.of(0.01, [0.01, 0.011, 0.012, 0.013, 0.014], [0.5, 1.0, 2.0, 5.0])
        return HullWhiteModel(params, VALUATION)

    def _swaption(self, direction, long_short=LongShort.LONG, settlement=SettlementType.PHYSICAL, expiry=None):
        underlying = _swap(self.SWAP_START, self.STRIKE, direction, count=20)
        return Swaption(expiry or self.EXPIRY, underlying, long_short, settlement)

    def test_values_are_positive(self, provider, model):
        """Long payer and receiver swaptions have positive value."""
        pricer = HullWhiteSwaptionPhysicalProductPricer()
        payer = pricer.present_value(self._swaption(PayReceive.PAY), provider, model)
        receiver = pricer.present_value(self._swaption(PayReceive.RECEIVE), provider, model)
        assert payer.currency == "USD"
        assert payer.amount > 0.0
        assert receiver.amount > 0.0

    def test_payer_receiver_parity(self, provider, model):
        """Payer minus receiver equals the payer swap."""
        pricer = HullWhiteSwaptionPhysicalProductPricer()
        payer = pricer.present_value(self._swaption(PayReceive.PAY), provider, model).amount
        receiver = pricer.present_value(self._swaption(PayReceive.RECEIVE), provider, model).amount
        swap_pv = swap_present_value(_swap(self.SWAP_START, self.STRIKE, PayReceive.PAY, count=20), provider)
        assert payer - receiver == pytest.approx(swap_pv, abs=NOTIONAL * 1e-12)

    @pytest.mark.parametrize("direction", [PayReceive.PAY, PayReceive.RECEIVE])
    def test_long_short(self, provider, model, direction):
        """Short position is the negative of the long."""
        pricer = HullWhiteSwaptionPhysicalProductPricer()
        long = pricer.present_value(self._swaption(direction), provider, model).amount
        short = pricer.present_value(self._swaption(direction, LongShort.SHORT), provider, model).amount
        assert short == pytest.approx(-long, rel=1e-14)

    def test_value_increases_with_volatility(self, provider, model):
        """Higher volatility gives a higher option value."""
        pricer = HullWhiteSwaptionPhysicalProductPricer()
        params = HullWhiteOneFactorParameters.of(0.01, [0.02, 0.022, 0.024, 0.026, 0.028], [0.5, 1.0, 2.0, 5.0])
        high_vol = HullWhiteModel(params, VALUATION)
        swaption = self._swaption(PayReceive.RECEIVE)
        assert (pricer.present_value(swaption, provider, high_vol).amount
                > pricer.present_value(swaption, provider, model).amount)

    def test_expired(self, provider, model):
        """An expired swaption is worth zero."""
        swaption = self._swaption(PayReceive.PAY, expiry=date(2015, 1, 20))
        pv = HullWhiteSwaptionPhysicalProductPricer().present_value(swaption, provider, model)
        assert pv == CurrencyAmount.zero("USD")

    def test_cash_settlement_rejected(self, provider, model):
        """Only physical settlement is supported."""
        swaption = self._swaption(PayReceive.PAY, settlement=SettlementType.CASH)
        with pytest.raises(DomainError):
            HullWhiteSwaptionPhysicalProductPricer().present_value(swaption, provider, model)

    def test_swaption_validation(self):
        """Expiry must not be after the swap start and the swap must be single currency."""
        underlying = _swap(self.SWAP_START, self.STRIKE)
        with pytest.raises(ValueError):
            Swaption(date(2016, 2, 1), underlying)
        eur_fixed = FixedRatePeriod(date(2016, 7, 25), self.SWAP_START, date(2016, 7, 25), 0.5, 0.01, NOTIONAL, "EUR")
        cross = Swap.of(SwapLeg.of(PayReceive.PAY, [eur_fixed]), underlying.legs[1])
        with pytest.raises(ValueError):
            Swaption(self.EXPIRY, cross)
