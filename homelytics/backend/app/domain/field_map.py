# app/domain/field_map.py
from __future__ import annotations

import json
from typing import Any, Callable, NamedTuple

from .listing import UNSET, ListingRecord
from .parsing import get_first, to_date, to_datetime, to_float, to_int, to_text, to_yn

KEY_FIELD = "ListingKey"
MEDIA_FIELD = "Media"
PHOTO_TIME_FIELD = "PhotosChangeTimestamp"

_COERCE: dict[str, Callable[[Any], Any]] = {
    "text": to_text,
    "int": to_int,
    "float": to_float,
    "date": to_date,
    "datetime": to_datetime,
    "yn": to_yn,
}


class FieldSpec(NamedTuple):
    column: str
    remote: str
    kind: str


# local column <- RESO Data Dictionary field
FIELD_MAP: tuple[FieldSpec, ...] = (
    FieldSpec("display_id", "ListingId", "text"),
    # Address / location
    FieldSpec("address", "UnparsedAddress", "text"),
    FieldSpec("street_name", "StreetName", "text"),
    FieldSpec("city", "City", "text"),
    FieldSpec("postal_city", "PostalCity", "text"),
    FieldSpec("state_or_province", "StateOrProvince", "text"),
    FieldSpec("postal_code", "PostalCode", "text"),
    FieldSpec("county_or_parish", "CountyOrParish", "text"),
    FieldSpec("country_subdivision", "CountrySubdivision", "text"),
    FieldSpec("subdivision_name", "SubdivisionName", "text"),
    FieldSpec("latitude", "Latitude", "float"),
    FieldSpec("longitude", "Longitude", "float"),
    FieldSpec("high_school_district", "HighSchoolDistrict", "text"),
    FieldSpec("parcel_number", "ParcelNumber", "text"),
    FieldSpec("universal_parcel_id", "UniversalParcelId", "text"),
    FieldSpec("tax_lot", "TaxLot", "text"),
    # Classification / status
    FieldSpec("property_type", "PropertyType", "text"),
    FieldSpec("property_sub_type", "PropertySubType", "text"),
    FieldSpec("property_sub_type_additional", "PropertySubTypeAdditional", "text"),
    FieldSpec("structure_type", "StructureType", "text"),
    FieldSpec("architectural_style", "ArchitecturalStyle", "text"),
    FieldSpec("mls_status", "MlsStatus", "text"),
    FieldSpec("standard_status", "StandardStatus", "text"),
    FieldSpec("previous_standard_status", "PreviousStandardStatus", "text"),
    FieldSpec("special_listing_conditions", "SpecialListingConditions", "text"),
    FieldSpec("listing_terms", "ListingTerms", "text"),
    FieldSpec("occupant_type", "OccupantType", "text"),
    FieldSpec("property_condition", "PropertyCondition", "text"),
    FieldSpec("disclosures", "Disclosures", "text"),
    # Price / market
    FieldSpec("list_price", "ListPrice", "float"),
    FieldSpec("previous_list_price", "PreviousListPrice", "float"),
    FieldSpec("days_on_market", "DaysOnMarket", "int"),
    FieldSpec("cumulative_days_on_market", "CumulativeDaysOnMarket", "int"),
    FieldSpec("days_on_market_replication", "DaysOnMarketReplication", "int"),
    FieldSpec("days_on_market_replication_date", "DaysOnMarketReplicationDate", "date"),
    FieldSpec("days_on_market_replication_increasing_yn", "DaysOnMarketReplicationIncreasingYN", "yn"),
    # Dimensions
    FieldSpec("bedrooms_total", "BedroomsTotal", "int"),
    FieldSpec("main_level_bedrooms", "MainLevelBedrooms", "int"),
    FieldSpec("bathrooms_total_integer", "BathroomsTotalInteger", "int"),
    FieldSpec("bathrooms_half", "BathroomsHalf", "int"),
    FieldSpec("living_area", "LivingArea", "float"),
    FieldSpec("living_area_units", "LivingAreaUnits", "text"),
    FieldSpec("living_area_source", "LivingAreaSource", "text"),
    FieldSpec("lot_size_area", "LotSizeArea", "float"),
    FieldSpec("lot_size_acres", "LotSizeAcres", "float"),
    FieldSpec("lot_size_square_feet", "LotSizeSquareFeet", "float"),
    FieldSpec("lot_size_units", "LotSizeUnits", "text"),
    FieldSpec("lot_features", "LotFeatures", "text"),
    FieldSpec("year_built", "YearBuilt", "int"),
    FieldSpec("stories_total", "StoriesTotal", "int"),
    FieldSpec("levels", "Levels", "text"),
    FieldSpec("entry_level", "EntryLevel", "text"),
    FieldSpec("entry_location", "EntryLocation", "text"),
    FieldSpec("number_of_units_total", "NumberOfUnitsTotal", "int"),
    FieldSpec("common_walls", "CommonWalls", "text"),
    FieldSpec("elevation_units", "ElevationUnits", "text"),
    # Parking
    FieldSpec("garage_yn", "GarageYN", "yn"),
    FieldSpec("attached_garage_yn", "AttachedGarageYN", "yn"),
    FieldSpec("garage_spaces", "GarageSpaces", "float"),
    FieldSpec("open_parking_spaces", "OpenParkingSpaces", "int"),
    # Features
    FieldSpec("flooring", "Flooring", "text"),
    FieldSpec("appliances", "Appliances", "text"),
    FieldSpec("interior_features", "InteriorFeatures", "text"),
    FieldSpec("room_type", "RoomType", "text"),
    FieldSpec("cooling", "Cooling", "text"),
    FieldSpec("cooling_yn", "CoolingYN", "yn"),
    FieldSpec("heating", "Heating", "text"),
    FieldSpec("heating_yn", "HeatingYN", "yn"),
    FieldSpec("fireplace_yn", "FireplaceYN", "yn"),
    FieldSpec("fireplace_features", "FireplaceFeatures", "text"),
    FieldSpec("roof", "Roof", "text"),
    FieldSpec("fencing", "Fencing", "text"),
    FieldSpec("security_features", "SecurityFeatures", "text"),
    FieldSpec("water_source", "WaterSource", "text"),
    FieldSpec("view", "View", "text"),
    FieldSpec("view_yn", "ViewYN", "yn"),
    FieldSpec("pool_private_yn", "PoolPrivateYN", "yn"),
    FieldSpec("pool_features", "PoolFeatures", "text"),
    FieldSpec("spa_yn", "SpaYN", "yn"),
    FieldSpec("spa_features", "SpaFeatures", "text"),
    FieldSpec("patio_and_porch_features", "PatioAndPorchFeatures", "text"),
    FieldSpec("community_features", "CommunityFeatures", "text"),
    FieldSpec("new_construction_yn", "NewConstructionYN", "yn"),
    FieldSpec("property_attached_yn", "PropertyAttachedYN", "yn"),
    FieldSpec("senior_community_yn", "SeniorCommunityYN", "yn"),
    FieldSpec("land_lease_yn", "LandLeaseYN", "yn"),
    FieldSpec("additional_parcels_yn", "AdditionalParcelsYN", "yn"),
    FieldSpec("human_modified_yn", "HumanModifiedYN", "yn"),
    # Association
    FieldSpec("association_yn", "AssociationYN", "yn"),
    FieldSpec("association_name", "AssociationName", "text"),
    FieldSpec("association_fee", "AssociationFee", "float"),
    FieldSpec("association_fee_frequency", "AssociationFeeFrequency", "text"),
    FieldSpec("association_fee2_frequency", "AssociationFee2Frequency", "text"),
    FieldSpec("association_amenities", "AssociationAmenities", "text"),
    FieldSpec("common_interest", "CommonInterest", "text"),
    # Agent / office
    FieldSpec("list_agent_key", "ListAgentKey", "text"),
    FieldSpec("list_agent_first_name", "ListAgentFirstName", "text"),
    FieldSpec("list_agent_last_name", "ListAgentLastName", "text"),
    FieldSpec("list_agent_full_name", "ListAgentFullName", "text"),
    FieldSpec("list_agent_email", "ListAgentEmail", "text"),
    FieldSpec("list_agent_direct_phone", "ListAgentDirectPhone", "text"),
    FieldSpec("list_agent_office_phone", "ListAgentOfficePhone", "text"),
    FieldSpec("list_agent_aor", "ListAgentAOR", "text"),
    FieldSpec("co_list_agent_full_name", "CoListAgentFullName", "text"),
    FieldSpec("list_office_name", "ListOfficeName", "text"),
    FieldSpec("list_office_email", "ListOfficeEmail", "text"),
    # Remarks / media
    FieldSpec("public_remarks", "PublicRemarks", "text"),
    FieldSpec("photos_count", "PhotosCount", "int"),
    # Timeline
    FieldSpec("listing_contract_date", "ListingContractDate", "date"),
    FieldSpec("on_market_date", "OnMarketDate", "date"),
    FieldSpec("back_on_market_date", "BackOnMarketDate", "date"),
    FieldSpec("original_entry_timestamp", "OriginalEntryTimestamp", "datetime"),
    FieldSpec("modification_timestamp", "ModificationTimestamp", "datetime"),
    FieldSpec("status_change_timestamp", "StatusChangeTimestamp", "datetime"),
    FieldSpec("major_change_timestamp", "MajorChangeTimestamp", "datetime"),
    FieldSpec("price_change_timestamp", "PriceChangeTimestamp", "datetime"),
)


def listing_key(remote: dict[str, Any]) -> str | None:
    key = get_first(remote, KEY_FIELD)
    return str(key) if key is not None else None


def media_urls(remote: dict[str, Any]) -> list[str]:
    """MediaURLs in feed order (the page query expands Media ordered by Order)."""
    media = remote.get(MEDIA_FIELD)
    if not isinstance(media, list):
        return []
    out: list[str] = []
    for m in media:
        if not isinstance(m, dict):
            continue
        url = m.get("MediaURL")
        if url:
            out.append(str(url))
    return out


def map_record(remote: dict[str, Any]) -> ListingRecord:
    """
    Pure RESO Property -> ListingRecord transform. Never raises; absent or
    unparsable fields become None.

    Callers must only pass records that carry a ListingKey (see listing_key()).
    """
    values: dict[str, Any] = {}
    for spec in FIELD_MAP:
        values[spec.column] = _COERCE[spec.kind](remote.get(spec.remote))

    urls = media_urls(remote)
    values["images"] = json.dumps(urls) if urls else None

    if PHOTO_TIME_FIELD in remote:
        values["photo_time"] = to_datetime(remote[PHOTO_TIME_FIELD])
    else:
        values["photo_time"] = UNSET

    return ListingRecord(listing_id=listing_key(remote) or "", **values)
