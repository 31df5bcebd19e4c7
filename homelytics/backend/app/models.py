# app/models.py
from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# -----------------------------
# Core enums
# -----------------------------
class JobRunStatus(str, enum.Enum):
    running = "running"
    success = "success"
    failed = "failed"
    skipped = "skipped"


# -----------------------------
# Operational state
# -----------------------------
class FeedToken(Base):
    """Cached bearer token, one row per upstream feed."""

    __tablename__ = "feed_tokens"

    feed_name: Mapped[str] = mapped_column(String(64), primary_key=True)
    access_token: Mapped[str] = mapped_column(Text)
    # naive UTC
    expires_at: Mapped[datetime] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class SyncCursor(Base):
    """Next page boundary for a sync job, counted from position 0 of the ordered feed."""

    __tablename__ = "sync_cursors"

    job_name: Mapped[str] = mapped_column(String(64), primary_key=True)
    offset: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class SyncLease(Base):
    __tablename__ = "sync_leases"

    job_name: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner: Mapped[str] = mapped_column(String(128))
    expires_at: Mapped[datetime] = mapped_column(DateTime)


class JobRun(Base):
    """
    Tracks job executions (listing sync, token refresh).
    """
    __tablename__ = "job_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_name: Mapped[str] = mapped_column(String(80), index=True)

    status: Mapped[JobRunStatus] = mapped_column(Enum(JobRunStatus), default=JobRunStatus.running, index=True)

    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # store error message
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    # optional metadata: {"page_size": ..., "owner": ...}
    meta_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    # SyncReport.snapshot()
    summary_json: Mapped[str | None] = mapped_column(Text, nullable=True)


# -----------------------------
# Listings
# -----------------------------
class Listing(Base):
    """
    Local copy of one upstream Property record.

    Column names must stay in lock-step with app.domain.listing.ListingRecord;
    the upsert writes exactly those columns.
    """

    __tablename__ = "listings"

    listing_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Address / location
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    street_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    city: Mapped[str | None] = mapped_column(String(80), nullable=True, index=True)
    postal_city: Mapped[str | None] = mapped_column(String(80), nullable=True)
    state_or_province: Mapped[str | None] = mapped_column(String(20), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    county_or_parish: Mapped[str | None] = mapped_column(String(80), nullable=True)
    country_subdivision: Mapped[str | None] = mapped_column(String(80), nullable=True)
    subdivision_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    high_school_district: Mapped[str | None] = mapped_column(String(120), nullable=True)
    parcel_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    universal_parcel_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    tax_lot: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Classification / status
    property_type: Mapped[str | None] = mapped_column(String(60), nullable=True, index=True)
    property_sub_type: Mapped[str | None] = mapped_column(String(60), nullable=True)
    property_sub_type_additional: Mapped[str | None] = mapped_column(Text, nullable=True)
    structure_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    architectural_style: Mapped[str | None] = mapped_column(Text, nullable=True)
    mls_status: Mapped[str | None] = mapped_column(String(40), nullable=True, index=True)
    standard_status: Mapped[str | None] = mapped_column(String(40), nullable=True)
    previous_standard_status: Mapped[str | None] = mapped_column(String(40), nullable=True)
    special_listing_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    listing_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    occupant_type: Mapped[str | None] = mapped_column(String(40), nullable=True)
    property_condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    disclosures: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Price / market
    list_price: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)
    previous_list_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    days_on_market: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cumulative_days_on_market: Mapped[int | None] = mapped_column(Integer, nullable=True)
    days_on_market_replication: Mapped[int | None] = mapped_column(Integer, nullable=True)
    days_on_market_replication_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    days_on_market_replication_increasing_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Dimensions
    bedrooms_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    main_level_bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms_total_integer: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms_half: Mapped[int | None] = mapped_column(Integer, nullable=True)
    living_area: Mapped[float | None] = mapped_column(Float, nullable=True)
    living_area_units: Mapped[str | None] = mapped_column(String(40), nullable=True)
    living_area_source: Mapped[str | None] = mapped_column(String(80), nullable=True)
    lot_size_area: Mapped[float | None] = mapped_column(Float, nullable=True)
    lot_size_acres: Mapped[float | None] = mapped_column(Float, nullable=True)
    lot_size_square_feet: Mapped[float | None] = mapped_column(Float, nullable=True)
    lot_size_units: Mapped[str | None] = mapped_column(String(40), nullable=True)
    lot_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stories_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    levels: Mapped[str | None] = mapped_column(Text, nullable=True)
    entry_level: Mapped[str | None] = mapped_column(String(40), nullable=True)
    entry_location: Mapped[str | None] = mapped_column(String(80), nullable=True)
    number_of_units_total: Mapped[int | None] = mapped_column(Integer, nullable=True)
    common_walls: Mapped[str | None] = mapped_column(Text, nullable=True)
    elevation_units: Mapped[str | None] = mapped_column(String(40), nullable=True)

    # Parking
    garage_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    attached_garage_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    garage_spaces: Mapped[float | None] = mapped_column(Float, nullable=True)
    open_parking_spaces: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Features
    flooring: Mapped[str | None] = mapped_column(Text, nullable=True)
    appliances: Mapped[str | None] = mapped_column(Text, nullable=True)
    interior_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    room_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    cooling: Mapped[str | None] = mapped_column(Text, nullable=True)
    cooling_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    heating: Mapped[str | None] = mapped_column(Text, nullable=True)
    heating_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    fireplace_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    fireplace_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    roof: Mapped[str | None] = mapped_column(Text, nullable=True)
    fencing: Mapped[str | None] = mapped_column(Text, nullable=True)
    security_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    water_source: Mapped[str | None] = mapped_column(Text, nullable=True)
    view: Mapped[str | None] = mapped_column(Text, nullable=True)
    view_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    pool_private_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    pool_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    spa_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    spa_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    patio_and_porch_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    community_features: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_construction_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    property_attached_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    senior_community_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    land_lease_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    additional_parcels_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    human_modified_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Association
    association_yn: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    association_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    association_fee: Mapped[float | None] = mapped_column(Float, nullable=True)
    association_fee_frequency: Mapped[str | None] = mapped_column(String(40), nullable=True)
    association_fee2_frequency: Mapped[str | None] = mapped_column(String(40), nullable=True)
    association_amenities: Mapped[str | None] = mapped_column(Text, nullable=True)
    common_interest: Mapped[str | None] = mapped_column(String(80), nullable=True)

    # Agent / office
    list_agent_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
    list_agent_first_name: Mapped[str | None] = mapped_column(String(80), nullable=True)
    list_agent_last_name: Mapped[str | None] = mapped_column(String(80), nullable=True)
    list_agent_full_name: Mapped[str | None] = mapped_column(String(160), nullable=True)
    list_agent_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    list_agent_direct_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    list_agent_office_phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    list_agent_aor: Mapped[str | None] = mapped_column(String(80), nullable=True)
    co_list_agent_full_name: Mapped[str | None] = mapped_column(String(160), nullable=True)
    list_office_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    list_office_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Remarks / media
    public_remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    images: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON array of URLs, feed order
    photos_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    photo_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Timeline
    listing_contract_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    on_market_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    back_on_market_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    original_entry_timestamp: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    modification_timestamp: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status_change_timestamp: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    major_change_timestamp: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    price_change_timestamp: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
