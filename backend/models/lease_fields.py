"""
Lease fields as delivered by the extraction side, and index series points.

These are plain, already-extracted values (no confidence wrappers). They are
turned into a ScheduleInput by services.schedule_input.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class LeaseIndexType(str, Enum):
    ILAT = "ILAT"
    ILC = "ILC"
    ICC = "ICC"


def coerce_index_type(value: Any) -> Optional[LeaseIndexType]:
    """Accept casing/spacing variants ("ilat", " Ilc ") and unknown values as None."""
    if value is None:
        return None
    if isinstance(value, LeaseIndexType):
        return value
    s = str(value).strip().upper()
    for it in LeaseIndexType:
        if it.value == s:
            return it
    return None


_FREQUENCY_MAP = {
    "monthly": "monthly",
    "mensuel": "monthly",
    "mensuelle": "monthly",
    "quarterly": "quarterly",
    "trimestriel": "quarterly",
    "trimestrielle": "quarterly",
    "annual": "annual",
    "yearly": "annual",
    "annuel": "annual",
    "annuelle": "annual",
}


class IndexSeriesPoint(BaseModel):
    """One quarterly publication of a rental reference index."""
    year: int = Field(ge=1900, le=2200)
    quarter: int = Field(ge=1, le=4)
    value: float = Field(gt=0.0)


class LeaseScheduleFields(BaseModel):
    """Extracted lease fields needed to build a rent schedule. Every field is optional."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)

    effective_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("effective_date", "effectiveDate"))
    signature_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("signature_date", "signatureDate"))
    extraction_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("extraction_date", "extractionDate"))
    duration_years: Optional[float] = Field(default=None, validation_alias=AliasChoices("duration_years", "duration"))
    payment_frequency: Optional[Literal["monthly", "quarterly", "annual"]] = Field(
        default=None,
        validation_alias=AliasChoices("payment_frequency", "paymentFrequency"),
    )

    annual_rent_excl_tax_excl_charges: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("annual_rent_excl_tax_excl_charges", "annualRentExclTaxExclCharges"),
    )
    quarterly_rent_excl_tax_excl_charges: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("quarterly_rent_excl_tax_excl_charges", "quarterlyRentExclTaxExclCharges"),
    )
    annual_parking_rent_excl_charges: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("annual_parking_rent_excl_charges", "annualParkingRentExclCharges"),
    )
    quarterly_parking_rent_excl_charges: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("quarterly_parking_rent_excl_charges", "quarterlyParkingRentExclCharges"),
    )

    annual_charges_provision_excl_tax: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("annual_charges_provision_excl_tax", "annualChargesProvisionExclTax"),
    )
    quarterly_charges_provision_excl_tax: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("quarterly_charges_provision_excl_tax", "quarterlyChargesProvisionExclTax"),
    )
    property_tax_amount: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("property_tax_amount", "propertyTaxAmount"),
    )
    office_tax_amount: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("office_tax_amount", "officeTaxAmount"),
    )

    rent_free_period_months: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("rent_free_period_months", "rentFreePeriodMonths"),
    )
    indexation_type: Optional[LeaseIndexType] = Field(
        default=None,
        validation_alias=AliasChoices("indexation_type", "indexationType"),
    )

    @field_validator("payment_frequency", mode="before")
    @classmethod
    def coerce_payment_frequency(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return _FREQUENCY_MAP.get(str(v).strip().lower())

    @field_validator("indexation_type", mode="before")
    @classmethod
    def coerce_indexation_type(cls, v: Any) -> Optional[LeaseIndexType]:
        return coerce_index_type(v)


class ScheduleFromFieldsRequest(BaseModel):
    """Body of POST /rent/compute-schedule-from-fields."""
    model_config = ConfigDict(populate_by_name=True)

    lease_fields: LeaseScheduleFields = Field(validation_alias=AliasChoices("lease_fields", "fields"))
    index_series: Dict[str, List[IndexSeriesPoint]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("index_series", "indexSeries"),
        description="Points per index type, e.g. {\"ILAT\": [{year, quarter, value}, ...]}",
    )
