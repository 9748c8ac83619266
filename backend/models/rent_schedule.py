"""
Input and output models for the lease rent schedule engine.

All monetary amounts are HT (excluding VAT). Input amounts are expressed per
one full payment period: a monthly amount for monthly leases, a quarterly
amount for quarterly leases. The engine does not check this convention.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class KnownIndexPoint(BaseModel):
    """A published index value and the date it takes effect."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    effective_date: date = Field(validation_alias=AliasChoices("effective_date", "effectiveDate"))
    index_value: float = Field(validation_alias=AliasChoices("index_value", "indexValue"))


class ScheduleInput(BaseModel):
    """
    Lease economics for one schedule computation.

    Range checks that the engine reports as RentScheduleError (dates order,
    positive base index, positive horizon) are left to the engine.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True, allow_inf_nan=False)

    start_date: date = Field(validation_alias=AliasChoices("start_date", "startDate"))
    end_date: date = Field(validation_alias=AliasChoices("end_date", "endDate"))
    payment_frequency: PaymentFrequency = Field(
        validation_alias=AliasChoices("payment_frequency", "paymentFrequency"),
    )
    base_index_value: float = Field(
        validation_alias=AliasChoices("base_index_value", "baseIndexValue"),
        description="Index level in effect at start_date",
    )
    known_index_points: List[KnownIndexPoint] = Field(
        default_factory=list,
        validation_alias=AliasChoices("known_index_points", "knownIndexPoints"),
    )
    charges_growth_rate: float = Field(
        default=0.0,
        validation_alias=AliasChoices("charges_growth_rate", "chargesGrowthRate"),
        description="Annual escalation of charges and taxes (e.g. 0.02 for 2%)",
    )

    office_rent_ht: float = Field(validation_alias=AliasChoices("office_rent_ht", "officeRentHT"))
    parking_rent_ht: float = Field(default=0.0, validation_alias=AliasChoices("parking_rent_ht", "parkingRentHT"))
    charges_ht: float = Field(default=0.0, validation_alias=AliasChoices("charges_ht", "chargesHT"))
    taxes_ht: float = Field(default=0.0, validation_alias=AliasChoices("taxes_ht", "taxesHT"))
    other_costs_ht: float = Field(default=0.0, validation_alias=AliasChoices("other_costs_ht", "otherCostsHT"))

    deposit_months: float = Field(default=0.0, validation_alias=AliasChoices("deposit_months", "depositMonths"))
    franchise_months: float = Field(default=0.0, validation_alias=AliasChoices("franchise_months", "franchiseMonths"))
    incentive_amount: float = Field(default=0.0, validation_alias=AliasChoices("incentive_amount", "incentiveAmount"))
    horizon_years: int = Field(default=3, validation_alias=AliasChoices("horizon_years", "horizonYears"))


class RentSchedulePeriod(BaseModel):
    """One billed period. Adjustments (franchise, incentives) are <= 0."""
    model_config = ConfigDict(frozen=True)

    period_start: date
    period_end: date
    period_type: Literal["month", "quarter"]
    year: int
    month: Optional[int] = None
    quarter: Optional[int] = None
    index_value: float
    index_factor: float
    office_rent_ht: float = 0.0
    parking_rent_ht: float = 0.0
    other_costs_ht: float = 0.0
    charges_ht: float = 0.0
    taxes_ht: float = 0.0
    franchise_ht: float = 0.0
    incentives_ht: float = 0.0
    net_rent_ht: float = 0.0


class YearlyTotalSummary(BaseModel):
    """Calendar-year rollup; base_rent_ht is office + parking + other costs."""
    model_config = ConfigDict(frozen=True)

    year: int
    base_rent_ht: float = 0.0
    charges_ht: float = 0.0
    taxes_ht: float = 0.0
    franchise_ht: float = 0.0
    incentives_ht: float = 0.0
    net_rent_ht: float = 0.0


class ComputeLeaseRentScheduleSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    deposit_ht: float = 0.0
    tcam: Optional[float] = Field(default=None, description="Index CAGR derived from known points")
    yearly_totals: List[YearlyTotalSummary] = Field(default_factory=list)


class ComputeLeaseRentScheduleResult(BaseModel):
    """Response of POST /rent/compute-schedule."""
    model_config = ConfigDict(frozen=True)

    summary: ComputeLeaseRentScheduleSummary
    schedule: List[RentSchedulePeriod] = Field(default_factory=list)
