from datetime import date

import pytest
from pydantic import ValidationError

from engine.errors import RentScheduleError
from engine.rent_schedule import compute_deposit, compute_lease_rent_schedule
from models import PaymentFrequency, ScheduleInput


def _quarterly_lease(**overrides):
    base = dict(
        startDate="2024-03-06",
        endDate="2025-03-05",
        paymentFrequency="quarterly",
        baseIndexValue=130.64,
        knownIndexPoints=[{"effectiveDate": "2025-01-01", "indexValue": 136.45}],
        chargesGrowthRate=0.02,
        officeRentHT=3000,
        parkingRentHT=500,
        chargesHT=300,
        taxesHT=200,
        otherCostsHT=0,
        depositMonths=3,
        franchiseMonths=6,
        incentiveAmount=4000,
        horizonYears=2,
    )
    base.update(overrides)
    return base


def _monthly_lease(**overrides):
    base = dict(
        start_date=date(2025, 1, 15),
        end_date=date(2025, 4, 14),
        payment_frequency=PaymentFrequency.MONTHLY,
        base_index_value=125.0,
        office_rent_ht=1500.0,
        horizon_years=1,
    )
    base.update(overrides)
    return ScheduleInput(**base)


def test_quarterly_schedule_with_franchise_incentive_and_indexation():
    result = compute_lease_rent_schedule(_quarterly_lease())
    schedule = result.schedule
    assert len(schedule) == 5

    first = schedule[0]
    assert first.period_start == date(2024, 3, 6)
    assert first.period_end == date(2024, 3, 31)
    assert first.period_type == "quarter"
    assert first.quarter == 1
    assert first.month is None
    assert first.office_rent_ht == 857.14
    assert first.parking_rent_ht == 142.86
    assert first.charges_ht == 85.71
    assert first.taxes_ht == 57.14
    assert first.franchise_ht == -1000.0
    assert first.incentives_ht == -4000.0
    assert first.index_factor == 1.0
    assert abs(first.net_rent_ht - (-3857.15)) < 1e-9

    last = schedule[-1]
    assert last.period_start == date(2025, 1, 1)
    assert last.period_end == date(2025, 3, 5)
    assert last.quarter == 1
    assert last.year == 2025
    assert last.index_value == 136.45
    assert last.index_factor >= 1
    assert last.office_rent_ht == round(3000 * 136.45 / 130.64, 2)

    assert result.summary.deposit_ht == 4000.0
    assert result.summary.tcam is not None and result.summary.tcam > 0


def test_monthly_schedule_without_optional_inputs():
    result = compute_lease_rent_schedule(_monthly_lease())
    assert len(result.schedule) == 4

    first = result.schedule[0]
    assert first.period_start == date(2025, 1, 15)
    assert first.period_type == "month"
    assert first.month == 1
    assert first.quarter is None
    assert first.office_rent_ht == 822.58
    assert first.net_rent_ht == first.office_rent_ht
    assert result.summary.tcam is None
    assert result.summary.deposit_ht == 0.0


def test_full_period_bills_full_indexed_rent():
    result = compute_lease_rent_schedule(_monthly_lease())
    for row in result.schedule[1:]:
        assert row.index_factor == 1.0
        assert row.office_rent_ht == 1500.0


def test_mid_month_start_prorates_on_natural_month_length():
    # June has 30 days; starting on the 10th bills 21 of them.
    result = compute_lease_rent_schedule(
        _monthly_lease(start_date=date(2025, 6, 10), end_date=date(2025, 9, 30), office_rent_ht=1000.0)
    )
    assert result.schedule[0].office_rent_ht == round(1000.0 * 21 / 30, 2)


def test_indexed_components_follow_known_points_then_extrapolate():
    lease = _quarterly_lease(endDate="2026-03-05", franchiseMonths=0, incentiveAmount=0)
    result = compute_lease_rent_schedule(lease)
    factors = [row.index_factor for row in result.schedule]

    # Before the published point the base index holds.
    assert all(f == 1.0 for f in factors[:4])
    # On and after it the factor never decreases and keeps growing past it.
    assert factors[4] == round(136.45 / 130.64, 6)
    assert factors[5] > factors[4]
    assert factors == sorted(factors)


def test_charges_escalate_on_anniversary_not_calendar_year():
    result = compute_lease_rent_schedule(
        _monthly_lease(
            start_date=date(2024, 3, 6),
            end_date=date(2026, 3, 5),
            horizon_years=2,
            charges_ht=100.0,
            taxes_ht=50.0,
            charges_growth_rate=0.10,
        )
    )
    by_start = {row.period_start: row for row in result.schedule}
    # 2025-03-01 is before the first anniversary (2025-03-06): still year 0.
    assert by_start[date(2025, 3, 1)].charges_ht == 100.0
    assert by_start[date(2025, 4, 1)].charges_ht == 110.0
    assert by_start[date(2025, 4, 1)].taxes_ht == 55.0
    # Charges are not indexed.
    assert by_start[date(2025, 4, 1)].index_factor == 1.0


def test_franchise_is_consumed_in_order_and_exhausts():
    result = compute_lease_rent_schedule(_quarterly_lease())
    franchise = [row.franchise_ht for row in result.schedule]
    assert franchise == [-1000.0, -3500.0, -2500.0, 0.0, 0.0]

    monthly_rent = (3000 + 500) / 3
    assert abs(sum(franchise) + monthly_rent * 6) <= 0.01 * len(franchise)


def test_fractional_franchise_months():
    result = compute_lease_rent_schedule(
        _monthly_lease(
            start_date=date(2025, 1, 1),
            end_date=date(2025, 12, 31),
            office_rent_ht=1000.0,
            franchise_months=1.5,
        )
    )
    assert [row.franchise_ht for row in result.schedule[:3]] == [-1000.0, -500.0, 0.0]
    assert result.schedule[1].net_rent_ht == 500.0


def test_incentive_is_a_single_lump_on_first_period():
    result = compute_lease_rent_schedule(_quarterly_lease())
    incentives = [row.incentives_ht for row in result.schedule]
    assert incentives[0] == -4000.0
    assert all(v == 0.0 for v in incentives[1:])


def test_adjustments_are_never_positive():
    result = compute_lease_rent_schedule(_quarterly_lease())
    for row in result.schedule:
        assert row.franchise_ht <= 0
        assert row.incentives_ht <= 0


def test_yearly_totals_match_schedule():
    result = compute_lease_rent_schedule(_quarterly_lease(endDate="2026-03-05"))
    totals = result.summary.yearly_totals
    assert [t.year for t in totals] == [2024, 2025, 2026]

    schedule_net = sum(row.net_rent_ht for row in result.schedule)
    totals_net = sum(t.net_rent_ht for t in totals)
    assert abs(schedule_net - totals_net) <= 0.01 * len(result.schedule)

    year_2024 = [row for row in result.schedule if row.year == 2024]
    expected_base = sum(r.office_rent_ht + r.parking_rent_ht + r.other_costs_ht for r in year_2024)
    assert abs(totals[0].base_rent_ht - expected_base) < 0.005
    assert totals[0].incentives_ht == -4000.0
    assert totals[1].incentives_ht == 0.0


def test_deposit_uses_monthly_equivalent_of_per_period_amounts():
    # Same economics expressed per month and per quarter give the same deposit.
    monthly = _monthly_lease(office_rent_ht=1000.0, parking_rent_ht=100.0, charges_ht=50.0, deposit_months=3)
    quarterly = _monthly_lease(
        payment_frequency=PaymentFrequency.QUARTERLY,
        office_rent_ht=3000.0,
        parking_rent_ht=300.0,
        charges_ht=150.0,
        deposit_months=3,
    )
    assert compute_deposit(monthly) == 3450.0
    assert compute_deposit(quarterly) == 3450.0


def test_deposit_with_mismatched_convention_is_not_detected():
    # Monthly amounts passed on a quarterly lease: the deposit comes out a third of the real one.
    lease = _monthly_lease(payment_frequency=PaymentFrequency.QUARTERLY, office_rent_ht=1000.0, deposit_months=3)
    assert compute_deposit(lease) == 1000.0


def test_negative_concessions_are_clamped_to_zero():
    result = compute_lease_rent_schedule(
        _monthly_lease(franchise_months=-2, incentive_amount=-100, deposit_months=-1)
    )
    assert all(row.franchise_ht == 0.0 for row in result.schedule)
    assert all(row.incentives_ht == 0.0 for row in result.schedule)
    assert result.summary.deposit_ht == 0.0


def test_horizon_caps_schedule_before_end_date():
    result = compute_lease_rent_schedule(
        _monthly_lease(start_date=date(2025, 1, 1), end_date=date(2034, 12, 31), horizon_years=1)
    )
    assert len(result.schedule) == 13
    assert result.schedule[-1].period_start == date(2026, 1, 1)
    assert result.schedule[-1].period_end == date(2026, 1, 1)


def test_same_input_gives_same_result():
    lease = _quarterly_lease()
    assert compute_lease_rent_schedule(lease) == compute_lease_rent_schedule(lease)


def test_rows_are_immutable():
    row = compute_lease_rent_schedule(_monthly_lease()).schedule[0]
    with pytest.raises(ValidationError):
        row.office_rent_ht = 0.0


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"endDate": "2024-03-05"}, "end_date"),
        ({"baseIndexValue": 0}, "base_index_value"),
        ({"baseIndexValue": -10}, "base_index_value"),
        ({"horizonYears": 0}, "horizon_years"),
        ({"paymentFrequency": "annual"}, "(?i)payment_?frequency"),
    ],
)
def test_invalid_input_is_rejected(overrides, message):
    with pytest.raises(RentScheduleError, match=message):
        compute_lease_rent_schedule(_quarterly_lease(**overrides))


def test_missing_office_rent_is_rejected():
    lease = _quarterly_lease()
    del lease["officeRentHT"]
    with pytest.raises(RentScheduleError, match="(?i)office_?rent"):
        compute_lease_rent_schedule(lease)


def test_schedule_error_is_a_value_error():
    with pytest.raises(ValueError):
        compute_lease_rent_schedule(_quarterly_lease(horizonYears=-1))


def test_horizon_past_calendar_limit_is_capped_by_end_date():
    result = compute_lease_rent_schedule(
        _monthly_lease(start_date=date(2024, 1, 1), end_date=date(2025, 1, 1), horizon_years=8000)
    )
    assert len(result.schedule) == 13
    assert result.schedule[-1].period_end == date(2025, 1, 1)


@pytest.mark.parametrize("field", ["baseIndexValue", "officeRentHT", "chargesGrowthRate"])
def test_nan_amounts_are_rejected(field):
    with pytest.raises(RentScheduleError, match="Invalid schedule input"):
        compute_lease_rent_schedule(_quarterly_lease(**{field: float("nan")}))


def test_infinite_base_index_is_rejected():
    with pytest.raises(RentScheduleError):
        compute_lease_rent_schedule(_quarterly_lease(baseIndexValue=float("inf")))
