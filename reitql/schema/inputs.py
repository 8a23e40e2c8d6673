from __future__ import annotations

import datetime
from typing import List, Optional

import strawberry

from ..core.sorting import BuildingSortKey, SortOrder, TransactionSortKey
from .types import BigInt, TransactionCategory


@strawberry.input(name="SearchConditionMinMax")
class MinMaxInput:
    min: Optional[BigInt] = None
    max: Optional[BigInt] = None


@strawberry.input(name="SearchConditionMinMaxFloat")
class MinMaxFloatInput:
    min: Optional[float] = None
    max: Optional[float] = None


@strawberry.input(name="SearchConditionMinMaxDate")
class MinMaxDateInput:
    min: Optional[datetime.date] = None
    max: Optional[datetime.date] = None


@strawberry.input(name="SearchConditionLatLng", description="All four bounds or none")
class LatLngInput:
    north: Optional[float] = None
    south: Optional[float] = None
    east: Optional[float] = None
    west: Optional[float] = None


@strawberry.input(name="SearchConditionLocation")
class LocationInput:
    prefecture_ids: Optional[List[strawberry.ID]] = None
    ward_ids: Optional[List[strawberry.ID]] = None
    city_ids: Optional[List[strawberry.ID]] = None


@strawberry.input(name="SearchConditionStation")
class StationInput:
    station_ids: List[strawberry.ID]
    max_time: int = strawberry.field(description="Maximum walking minutes")
    min_time: Optional[int] = strawberry.field(default=None, description="Minimum walking minutes (default 0)")


@strawberry.input(
    name="SearchConditionAssetType",
    description="Matches any asset type set to true; none set matches every asset type",
)
class AssetTypeInput:
    is_office: Optional[bool] = None
    is_retail: Optional[bool] = None
    is_hotel: Optional[bool] = None
    is_logistic: Optional[bool] = None
    is_residential: Optional[bool] = None
    is_health_care: Optional[bool] = None
    is_other: Optional[bool] = None


@strawberry.input(name="SearchTransactionInput")
class SearchTransactionInput:
    location: Optional[LocationInput] = None
    station: Optional[StationInput] = None
    asset_type: Optional[AssetTypeInput] = None
    transaction_date: Optional[MinMaxDateInput] = None
    transaction_price: Optional[MinMaxInput] = None
    transaction_categories: Optional[List[TransactionCategory]] = None
    completion_year: Optional[MinMaxInput] = None
    gross_floor_area: Optional[MinMaxInput] = None
    press_release_date: Optional[MinMaxDateInput] = None
    include_bulk: Optional[bool] = None
    appraisal_price: Optional[MinMaxInput] = None
    appraisal_cap_rate: Optional[MinMaxFloatInput] = None
    j_reit_corporation_ids: Optional[List[strawberry.ID]] = None
    include_delisted: Optional[bool] = None
    use_apportioned_price: Optional[bool] = None
    latitude_and_longitude: Optional[LatLngInput] = None


@strawberry.input(name="SearchJReitBuildingCondition")
class SearchJReitBuildingCondition:
    name: Optional[str] = None
    j_reit_corporation_ids: Optional[List[strawberry.ID]] = None
    location: Optional[LocationInput] = None
    station: Optional[StationInput] = None
    latitude_and_longitude: Optional[LatLngInput] = None
    completed_year: Optional[MinMaxInput] = None
    land_area: Optional[MinMaxInput] = None
    gross_floor_area: Optional[MinMaxInput] = None
    total_leasable_area: Optional[MinMaxInput] = None
    acquisition_date: Optional[MinMaxDateInput] = None
    acquisition_price: Optional[MinMaxInput] = None
    appraised_price: Optional[MinMaxInput] = None
    initial_cap_rate: Optional[MinMaxFloatInput] = None
    cap_rate: Optional[MinMaxFloatInput] = None
    transfer_date: Optional[MinMaxDateInput] = None
    asset_type: Optional[AssetTypeInput] = None
    is_transferred: Optional[bool] = strawberry.field(
        default=None, description="true: transferred only, false: held only, null: both"
    )
    is_delisted: Optional[bool] = strawberry.field(
        default=None, description="true: delisted only, false: listed only, null: both"
    )


@strawberry.input(name="PaginateCondition")
class PaginateInput:
    offset: int = 0
    limit: Optional[int] = strawberry.field(default=None, description="Page size (server default when omitted)")


@strawberry.input(name="JReitTransactionSortCondition")
class TransactionSortInput:
    key: TransactionSortKey
    order: SortOrder = SortOrder.ASC


@strawberry.input(name="JReitTransactionSortAndPaginateCondition")
class TransactionSortAndPaginationInput:
    sort: Optional[TransactionSortInput] = None
    pagination: Optional[PaginateInput] = None


@strawberry.input(name="JReitBuildingSortCondition")
class BuildingSortInput:
    key: BuildingSortKey
    order: SortOrder = SortOrder.ASC


@strawberry.input(name="JReitBuildingSortAndPaginateCondition")
class BuildingSortAndPaginationInput:
    sort: Optional[BuildingSortInput] = None
    pagination: Optional[PaginateInput] = None


@strawberry.input(name="JReitBuildingIdWithCorporationId")
class BuildingCorporationInput:
    building_id: strawberry.ID
    corporation_id: strawberry.ID
