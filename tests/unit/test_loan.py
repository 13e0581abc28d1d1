"""Unit tests for immofind.domain.calculator.loan."""

import pytest
from pydantic import ValidationError

from immofind.domain.calculator.loan import (
    MAX_TERM_MONTHS,
    calculate_annuity_from_repayment_rate,
    calculate_annuity_payment,
    calculate_fixed_principal_term_months,
    calculate_remaining_balance,
    calculate_repayment_rate_from_annuity,
    derive_monthly_principal,
    derive_term_years,
    generate_amortization_schedule,
    generate_annuity_schedule,
    generate_fixed_principal_schedule,
    resolve_monthly_annuity,
)
from immofind.domain.models.loan import LoanParameters, LoanType
from immofind.domain.models.status import CalculationStatus


class TestCalculateAnnuityPayment:
    """Tests for the closed-form annuity."""

    def test_standard_loan(self):
        """A 20-year loan at 3.5 % costs around 1160 € a month."""
        pmt = calculate_annuity_payment(200000, 0.035, 20)
        assert 1150 < pmt < 1170

    def test_zero_principal(self):
        assert calculate_annuity_payment(0, 0.035, 20) == 0.0

    def test_zero_rate(self):
        """Zero interest degrades to principal / months."""
        assert calculate_annuity_payment(120000, 0.0, 10) == 1000.0

    def test_zero_term(self):
        assert calculate_annuity_payment(200000, 0.035, 0) == 0.0

    def test_negative_rate(self):
        assert calculate_annuity_payment(200000, -0.01, 20) == 0.0

    def test_short_term(self):
        """Shorter terms mean higher payments."""
        assert calculate_annuity_payment(200000, 0.035, 15) > calculate_annuity_payment(200000, 0.035, 25)


class TestRepaymentRate:
    """Tests for the interest + repayment rate convention."""

    def test_german_quote(self):
        """240 000 € at 2 % interest and 2 % repayment is 800 € a month."""
        assert calculate_annuity_from_repayment_rate(240000, 0.02, 0.02) == pytest.approx(800.0)

    def test_no_principal(self):
        assert calculate_annuity_from_repayment_rate(0, 0.02, 0.02) == 0.0

    def test_inverse(self):
        assert calculate_repayment_rate_from_annuity(240000, 0.02, 800) == pytest.approx(0.02)
        assert calculate_repayment_rate_from_annuity(240000, 0.02, 1000) == pytest.approx(0.03)

    def test_inverse_without_principal(self):
        assert calculate_repayment_rate_from_annuity(0, 0.02, 800) is None

    def test_annuity_below_interest_gives_negative_rate(self):
        assert calculate_repayment_rate_from_annuity(240000, 0.02, 300) < 0

    def test_precedence(self):
        """Explicit annuity beats repayment rate, which beats the term."""
        assert resolve_monthly_annuity(240000, 0.02, 30, 0.02, 1234.0) == 1234.0
        assert resolve_monthly_annuity(240000, 0.02, 30, 0.02) == pytest.approx(800.0)
        assert resolve_monthly_annuity(240000, 0.02, 30) == pytest.approx(
            calculate_annuity_payment(240000, 0.02, 30)
        )
        assert resolve_monthly_annuity(240000, 0.02) == 0.0


class TestFixedPrincipalHelpers:
    """Tests for the term / monthly principal derivation."""

    def test_derive_term_years(self):
        assert derive_term_years(120000, 1000) == pytest.approx(10.0)
        assert derive_term_years(120000, 0) is None
        assert derive_term_years(0, 1000) is None

    def test_derive_monthly_principal(self):
        assert derive_monthly_principal(120000, 10) == pytest.approx(1000.0)
        assert derive_monthly_principal(120000, 0) is None

    def test_term_months_rounds_up(self):
        assert calculate_fixed_principal_term_months(120000, 1000) == 120
        assert calculate_fixed_principal_term_months(100000, 3000) == 34
        assert calculate_fixed_principal_term_months(100000, 0) == 0

    def test_term_months_absorbs_float_noise(self):
        monthly = derive_monthly_principal(100000, 7)
        assert calculate_fixed_principal_term_months(100000, monthly) == 84


class TestAnnuitySchedule:
    """Tests for generate_annuity_schedule."""

    def test_first_month(self):
        schedule = generate_annuity_schedule(240000, 0.02, annual_repayment_rate=0.02)
        first = schedule.entries[0]
        assert schedule.status is CalculationStatus.OK
        assert schedule.monthly_payment == pytest.approx(800.0)
        assert first.interest_portion == pytest.approx(400.0)
        assert first.principal_portion == pytest.approx(400.0)
        assert first.remaining_balance == pytest.approx(239600.0)

    def test_repayment_rate_loan_repays_fully(self):
        """2 % + 2 % repays in a little under 35 years."""
        schedule = generate_annuity_schedule(240000, 0.02, annual_repayment_rate=0.02)
        assert 410 < schedule.term_months < 420
        assert schedule.final_balance == 0.0
        assert schedule.total_principal == pytest.approx(240000, abs=0.01)

    def test_last_payment_capped_at_balance(self):
        schedule = generate_annuity_schedule(240000, 0.02, annual_repayment_rate=0.02)
        last = schedule.entries[-1]
        assert last.payment < schedule.monthly_payment

    def test_closed_form_term(self):
        schedule = generate_annuity_schedule(200000, 0.035, term_years=20)
        assert schedule.term_months == 240
        assert schedule.final_balance == 0.0
        assert schedule.total_principal == pytest.approx(200000, abs=0.01)

    def test_term_caps_repayment_rate_loan(self):
        """A term shorter than the repayment period leaves a residual balance."""
        schedule = generate_annuity_schedule(240000, 0.02, term_years=10, annual_repayment_rate=0.02)
        assert schedule.term_months == 120
        assert schedule.final_balance > 0
        assert schedule.final_balance == pytest.approx(
            calculate_remaining_balance(240000, 0.02, 800, 10), rel=1e-9
        )

    def test_zero_rate(self):
        schedule = generate_annuity_schedule(120000, 0.0, term_years=10)
        assert schedule.monthly_payment == 1000.0
        assert schedule.total_interest == 0.0
        assert schedule.term_months == 120

    def test_annuity_not_covering_interest(self):
        """400 € a month on 240 000 € at 2 % never repays anything."""
        schedule = generate_annuity_schedule(240000, 0.02, monthly_annuity=400)
        assert schedule.status is CalculationStatus.INSUFFICIENT_INPUTS
        assert schedule.entries == []

    @pytest.mark.parametrize(
        "principal, rate, kwargs",
        [
            (0, 0.02, {"annual_repayment_rate": 0.02}),
            (-1000, 0.02, {"annual_repayment_rate": 0.02}),
            (240000, -0.01, {"annual_repayment_rate": 0.02}),
            (240000, 0.02, {"term_years": 0}),
            (240000, 0.02, {}),
            (100000, 0.03, {"term_years": 0.04, "annual_repayment_rate": 0.02}),
        ],
    )
    def test_insufficient_inputs(self, principal, rate, kwargs):
        schedule = generate_annuity_schedule(principal, rate, **kwargs)
        assert not schedule.is_computable
        assert schedule.term_months == 0

    def test_open_ended_schedule_stops_at_cap(self):
        """An annuity barely above the interest is cut off at the cap."""
        schedule = generate_annuity_schedule(240000, 0.02, monthly_annuity=400.01)
        assert schedule.term_months == MAX_TERM_MONTHS
        assert schedule.final_balance > 0

    def test_balance_after(self):
        schedule = generate_annuity_schedule(240000, 0.02, annual_repayment_rate=0.02)
        assert schedule.balance_after(0) == 240000
        assert schedule.balance_after(1) == pytest.approx(239600.0)
        assert schedule.balance_after(10000) == 0.0


class TestFixedPrincipalSchedule:
    """Tests for generate_fixed_principal_schedule."""

    def test_from_term(self):
        schedule = generate_fixed_principal_schedule(120000, 0.03, term_years=10)
        assert schedule.status is CalculationStatus.OK
        assert schedule.term_months == 120
        assert schedule.monthly_payment == pytest.approx(1300.0)
        assert schedule.entries[1].interest_portion == pytest.approx(297.5)
        assert schedule.total_interest == pytest.approx(18150.0)

    def test_payment_falls(self):
        schedule = generate_fixed_principal_schedule(120000, 0.03, monthly_principal=1000)
        payments = [e.payment for e in schedule.entries]
        assert all(a > b for a, b in zip(payments, payments[1:]))

    def test_exact_balances(self):
        schedule = generate_fixed_principal_schedule(120000, 0.03, monthly_principal=1000)
        for entry in schedule.entries:
            assert entry.remaining_balance == pytest.approx(max(0.0, 120000 - entry.period_index * 1000))

    def test_uneven_last_month(self):
        schedule = generate_fixed_principal_schedule(100000, 0.03, monthly_principal=3000)
        assert schedule.term_months == 34
        assert schedule.entries[-1].principal_portion == pytest.approx(1000.0)
        assert schedule.final_balance == 0.0

    def test_missing_driver(self):
        schedule = generate_fixed_principal_schedule(120000, 0.03)
        assert schedule.status is CalculationStatus.INSUFFICIENT_INPUTS


class TestGenerateAmortizationSchedule:
    """Tests for the LoanParameters entry point."""

    def test_annuity(self):
        params = LoanParameters(principal=240000, annual_interest_rate=0.02, annual_repayment_rate=0.02)
        schedule = generate_amortization_schedule(params)
        assert schedule.loan_type is LoanType.ANNUITY
        assert schedule.monthly_payment == pytest.approx(800.0)

    def test_fixed_principal_from_amount(self):
        params = LoanParameters(
            principal=120000,
            annual_interest_rate=0.03,
            loan_type=LoanType.FIXED_PRINCIPAL,
            monthly_principal_amount=2000,
        )
        schedule = generate_amortization_schedule(params)
        assert schedule.loan_type is LoanType.FIXED_PRINCIPAL
        assert schedule.term_months == 60

    def test_fixed_principal_rejects_both_drivers(self):
        with pytest.raises(ValidationError):
            LoanParameters(
                principal=120000,
                annual_interest_rate=0.03,
                loan_type=LoanType.FIXED_PRINCIPAL,
                monthly_principal_amount=2000,
                term_years=10,
            )

    def test_negative_rate_rejected(self):
        with pytest.raises(ValidationError):
            LoanParameters(principal=120000, annual_interest_rate=-0.01)


class TestRemainingBalance:
    """Tests for the closed-form remaining balance."""

    def test_before_start(self):
        assert calculate_remaining_balance(240000, 0.02, 800, 0) == 240000

    def test_no_principal(self):
        assert calculate_remaining_balance(0, 0.02, 800, 10) == 0.0

    def test_never_negative(self):
        assert calculate_remaining_balance(240000, 0.02, 800, 50) == 0.0

    def test_zero_rate(self):
        assert calculate_remaining_balance(120000, 0.0, 1000, 5) == pytest.approx(60000.0)

    def test_matches_schedule(self):
        schedule = generate_annuity_schedule(240000, 0.02, annual_repayment_rate=0.02)
        for years in (1, 5, 10, 20):
            assert calculate_remaining_balance(240000, 0.02, 800, years) == pytest.approx(
                schedule.balance_after(years * 12), rel=1e-9
            )


class TestScheduleFrames:
    """Tests for the DataFrame views."""

    def test_monthly_frame(self):
        schedule = generate_fixed_principal_schedule(120000, 0.03, term_years=10)
        frame = schedule.to_frame()
        assert list(frame.columns) == ["Monat", "Rate", "Zinsen", "Tilgung", "Restschuld"]
        assert len(frame) == 120
        assert frame["Rate"].iloc[0] == pytest.approx(1300.0)

    def test_yearly_frame(self):
        schedule = generate_annuity_schedule(240000, 0.02, annual_repayment_rate=0.02)
        yearly = schedule.to_yearly_frame()
        assert len(yearly) == 35
        assert yearly["Tilgung"].sum() == pytest.approx(240000, abs=0.01)
        assert yearly["Restschuld"].iloc[-1] == 0.0

    def test_empty_schedule(self):
        schedule = generate_annuity_schedule(0, 0.02, annual_repayment_rate=0.02)
        assert schedule.to_frame().empty
        assert schedule.to_yearly_frame().empty
        assert "Jahr" in schedule.to_yearly_frame().columns
