# app/domain/listing.py
from __future__ import annotations

import enum
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any


class _Unset(enum.Enum):
    token = 0

    def __repr__(self) -> str:
        return "UNSET"


# "Field not present in this payload" (distinct from an explicit None).
UNSET = _Unset.token


@dataclass(frozen=True)
class ListingRecord:
    """
    Mapped listing row, one attribute per `listings` column.

    `listing_id` is the only required field. `photo_time` is tri-state:
    UNSET means the upstream payload did not carry the field at all, and the
    column is left out of the write so the stored value survives.
    """

    listing_id: str
    display_id: str | None = None
    address: str | None = None
    street_name: str | None = None
    city: str | None = None
    postal_city: str | None = None
    state_or_province: str | None = None
    postal_code: str | None = None
    county_or_parish: str | None = None
    country_subdivision: str | None = None
    subdivision_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    high_school_district: str | None = None
    parcel_number: str | None = None
    universal_parcel_id: str | None = None
    tax_lot: str | None = None
    property_type: str | None = None
    property_sub_type: str | None = None
    property_sub_type_additional: str | None = None
    structure_type: str | None = None
    architectural_style: str | None = None
    mls_status: str | None = None
    standard_status: str | None = None
    previous_standard_status: str | None = None
    special_listing_conditions: str | None = None
    listing_terms: str | None = None
    occupant_type: str | None = None
    property_condition: str | None = None
    disclosures: str | None = None
    list_price: float | None = None
    previous_list_price: float | None = None
    days_on_market: int | None = None
    cumulative_days_on_market: int | None = None
    days_on_market_replication: int | None = None
    days_on_market_replication_date: date | None = None
    days_on_market_replication_increasing_yn: bool | None = None
    bedrooms_total: int | None = None
    main_level_bedrooms: int | None = None
    bathrooms_total_integer: int | None = None
    bathrooms_half: int | None = None
    living_area: float | None = None
    living_area_units: str | None = None
    living_area_source: str | None = None
    lot_size_area: float | None = None
    lot_size_acres: float | None = None
    lot_size_square_feet: float | None = None
    lot_size_units: str | None = None
    lot_features: str | None = None
    year_built: int | None = None
    stories_total: int | None = None
    levels: str | None = None
    entry_level: str | None = None
    entry_location: str | None = None
    number_of_units_total: int | None = None
    common_walls: str | None = None
    elevation_units: str | None = None
    garage_yn: bool | None = None
    attached_garage_yn: bool | None = None
    garage_spaces: float | None = None
    open_parking_spaces: int | None = None
    flooring: str | None = None
    appliances: str | None = None
    interior_features: str | None = None
    room_type: str | None = None
    cooling: str | None = None
    cooling_yn: bool | None = None
    heating: str | None = None
    heating_yn: bool | None = None
    fireplace_yn: bool | None = None
    fireplace_features: str | None = None
    roof: str | None = None
    fencing: str | None = None
    security_features: str | None = None
    water_source: str | None = None
    view: str | None = None
    view_yn: bool | None = None
    pool_private_yn: bool | None = None
    pool_features: str | None = None
    spa_yn: bool | None = None
    spa_features: str | None = None
    patio_and_porch_features: str | None = None
    community_features: str | None = None
    new_construction_yn: bool | None = None
    property_attached_yn: bool | None = None
    senior_community_yn: bool | None = None
    land_lease_yn: bool | None = None
    additional_parcels_yn: bool | None = None
    human_modified_yn: bool | None = None
    association_yn: bool | None = None
    association_name: str | None = None
    association_fee: float | None = None
    association_fee_frequency: str | None = None
    association_fee2_frequency: str | None = None
    association_amenities: str | None = None
    common_interest: str | None = None
    list_agent_key: str | None = None
    list_agent_first_name: str | None = None
    list_agent_last_name: str | None = None
    list_agent_full_name: str | None = None
    list_agent_email: str | None = None
    list_agent_direct_phone: str | None = None
    list_agent_office_phone: str | None = None
    list_agent_aor: str | None = None
    co_list_agent_full_name: str | None = None
    list_office_name: str | None = None
    list_office_email: str | None = None
    public_remarks: str | None = None
    images: str | None = None
    photos_count: int | None = None
    listing_contract_date: date | None = None
    on_market_date: date | None = None
    back_on_market_date: date | None = None
    original_entry_timestamp: datetime | None = None
    modification_timestamp: datetime | None = None
    status_change_timestamp: datetime | None = None
    major_change_timestamp: datetime | None = None
    price_change_timestamp: datetime | None = None
    photo_time: datetime | None | _Unset = UNSET

    def to_row(self) -> dict[str, Any]:
        """Column -> value for the upsert, in LISTING_COLUMNS order."""
        row: dict[str, Any] = {"listing_id": self.listing_id}
        for col in LISTING_COLUMNS:
            row[col] = getattr(self, col)
        if self.photo_time is not UNSET:
            row["photo_time"] = self.photo_time
        return row


# Columns always written (overwritten on conflict). Excludes the key and the
# conditional photo_time column.
LISTING_COLUMNS: tuple[str, ...] = tuple(
    f.name for f in fields(ListingRecord) if f.name not in ("listing_id", "photo_time")
)
