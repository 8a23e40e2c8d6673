"""GraphQL output types.

Relations resolve through the request's batch loaders, so rendering a page of N
buildings costs one query per relation rather than one per building. Relation fields
are nullable: a failed loader batch nulls the field and reports a field error while
sibling fields still resolve.
"""
from __future__ import annotations

import datetime
from typing import List, NewType, Optional

import strawberry

from ..core.sorting import PageInfo
from ..loaders import BuildingCorporationKey, HeldBuilding
from ..models import (
    JReitAppraisal,
    JReitAppraisalHistory,
    JReitBuilding,
    JReitCapRateHistory,
    JReitCorporation,
    JReitDataHubIdMapping,
    JReitFinancial,
    JReitPressRelease,
    JReitTransaction,
    TransactionCategoryValue,
)
from .context import get_loaders

# Yen amounts exceed the 32-bit GraphQL Int
BigInt = NewType("BigInt", int)
BIG_INT_SCALAR = strawberry.scalar(
    name="BigInt",
    serialize=int,
    parse_value=int,
    description="Integer value that may exceed 32 bits",
)

TransactionCategory = strawberry.enum(TransactionCategoryValue, name="TransactionCategory")  # type: ignore


def _id(value) -> Optional[strawberry.ID]:
    return None if value is None else strawberry.ID(str(value))


def _window(rows: list, first: Optional[int], last: Optional[int]) -> list:
    """Leading ``first`` or trailing ``last`` rows; ``first`` wins when both are given."""
    if first is not None:
        if first < 0:
            raise ValueError(f"first must be non-negative, got {first}")
        return rows[:first]
    if last is not None:
        if last < 0:
            raise ValueError(f"last must be non-negative, got {last}")
        return rows[len(rows) - last:] if last else []
    return rows


@strawberry.type(name="OffsetPageInfo")
class OffsetPageInfoType:
    page: int
    total_pages: int
    total_count: int

    @classmethod
    def from_page_info(cls, info: PageInfo) -> "OffsetPageInfoType":
        return cls(page=info.page, total_pages=info.total_pages, total_count=info.total_count)


@strawberry.type(name="JReitCorporation", description="J-REIT investment corporation")
class JReitCorporationType:
    id: strawberry.ID
    name: str
    is_delisted: bool

    @classmethod
    def from_model(cls, row: JReitCorporation) -> "JReitCorporationType":
        return cls(id=_id(row.id), name=row.name, is_delisted=row.is_delisted == 1)


@strawberry.type(name="JReitAppraisal")
class JReitAppraisalType:
    id: strawberry.ID
    appraisal_company: Optional[str]
    appraisal_date: Optional[datetime.date]
    appraisal_price: Optional[BigInt]
    cap_rate: Optional[float]
    final_cap_rate: Optional[float]
    discount_rate: Optional[float]
    noi: Optional[BigInt]

    @classmethod
    def from_model(cls, row: JReitAppraisal) -> "JReitAppraisalType":
        return cls(
            id=_id(row.id),
            appraisal_company=row.appraisal_company,
            appraisal_date=row.appraisal_date,
            appraisal_price=row.appraisal_price,
            cap_rate=row.cap_rate,
            final_cap_rate=row.final_cap_rate,
            discount_rate=row.discount_rate,
            noi=row.noi,
        )


@strawberry.type(name="JReitAppraisalHistory")
class JReitAppraisalHistoryType:
    id: strawberry.ID
    appraisal_date: datetime.date
    appraisal_price: Optional[BigInt]
    cap_rate: Optional[float]
    appraisal_company: Optional[str]

    @classmethod
    def from_model(cls, row: JReitAppraisalHistory) -> "JReitAppraisalHistoryType":
        return cls(
            id=_id(row.id),
            appraisal_date=row.appraisal_date,
            appraisal_price=row.appraisal_price,
            cap_rate=row.cap_rate,
            appraisal_company=row.appraisal_company,
        )


@strawberry.type(name="JReitCapRateHistory")
class JReitCapRateHistoryType:
    id: strawberry.ID
    # fiscal period closing date; the first row carries the acquisition date
    closing_date: datetime.date
    cap_rate: Optional[float]

    @classmethod
    def from_model(cls, row: JReitCapRateHistory) -> "JReitCapRateHistoryType":
        return cls(id=_id(row.id), closing_date=row.closing_date, cap_rate=row.cap_rate)


@strawberry.type(name="JReitFinancial")
class JReitFinancialType:
    id: strawberry.ID
    fiscal_period_start_date: datetime.date
    fiscal_period_end_date: datetime.date
    rent_revenue: Optional[BigInt]
    noi: Optional[BigInt]
    occupancy_rate: Optional[float]

    @classmethod
    def from_model(cls, row: JReitFinancial) -> "JReitFinancialType":
        return cls(
            id=_id(row.id),
            fiscal_period_start_date=row.fiscal_period_start_date,
            fiscal_period_end_date=row.fiscal_period_end_date,
            rent_revenue=row.rent_revenue,
            noi=row.noi,
            occupancy_rate=row.occupancy_rate,
        )


@strawberry.type(name="JReitPressRelease")
class JReitPressReleaseType:
    id: strawberry.ID
    title: str
    url: Optional[str]
    release_date: datetime.date

    @classmethod
    def from_model(cls, row: JReitPressRelease) -> "JReitPressReleaseType":
        return cls(id=_id(row.id), title=row.title, url=row.url, release_date=row.release_date)


@strawberry.type(name="JReitIdMapping")
class JReitIdMappingType:
    j_reit_building_id: strawberry.ID
    j_reit_corporation_id: strawberry.ID
    data_hub_building_id: strawberry.ID

    @classmethod
    def from_model(cls, row: JReitDataHubIdMapping) -> "JReitIdMappingType":
        return cls(
            j_reit_building_id=_id(row.j_reit_building_id),
            j_reit_corporation_id=_id(row.j_reit_corporation_id),
            data_hub_building_id=_id(row.data_hub_building_id),
        )


@strawberry.type(name="JReitTransaction")
class JReitTransactionType:
    id: strawberry.ID
    transaction_date: Optional[datetime.date]
    transaction_category: TransactionCategory
    transaction_price: Optional[BigInt]
    apportioned_transaction_price: Optional[BigInt]
    is_bulk: bool
    transaction_partner: Optional[str]
    leasable_area: Optional[float]
    total_leasable_area: Optional[float]
    leasable_units: Optional[int]
    land_ownership_type: Optional[str]
    land_ownership_ratio: Optional[float]
    building_ownership_type: Optional[str]
    building_ownership_ratio: Optional[float]
    property_manager: Optional[str]
    pml_assessment_company: Optional[str]
    trustee: Optional[str]
    press_release_date: Optional[datetime.date]

    building_id: strawberry.Private[str]
    corporation_id: strawberry.Private[str]
    appraisal_id: strawberry.Private[Optional[str]]

    @classmethod
    def from_model(cls, row: JReitTransaction) -> "JReitTransactionType":
        return cls(
            id=_id(row.id),
            transaction_date=row.transaction_date,
            transaction_category=TransactionCategoryValue(row.transaction_category),
            transaction_price=row.transaction_price,
            apportioned_transaction_price=row.apportioned_transaction_price,
            is_bulk=row.is_bulk == 1,
            transaction_partner=row.transaction_partner,
            leasable_area=row.leasable_area,
            total_leasable_area=row.total_leasable_area,
            leasable_units=row.leasable_units,
            land_ownership_type=row.land_ownership_type,
            land_ownership_ratio=row.land_ownership_ratio,
            building_ownership_type=row.building_ownership_type,
            building_ownership_ratio=row.building_ownership_ratio,
            property_manager=row.property_manager,
            pml_assessment_company=row.pml_assessment_company,
            trustee=row.trustee,
            press_release_date=row.press_release_date,
            building_id=row.j_reit_building_id,
            corporation_id=row.j_reit_corporation_id,
            appraisal_id=row.j_reit_appraisal_id,
        )

    @strawberry.field(description="The building, as held by this transaction's corporation")
    async def building(self, info: strawberry.Info) -> Optional["JReitBuildingType"]:
        row = await get_loaders(info).buildings.load(self.building_id)
        return JReitBuildingType.from_model(row, self.corporation_id) if row is not None else None

    @strawberry.field
    async def corporation(self, info: strawberry.Info) -> Optional[JReitCorporationType]:
        row = await get_loaders(info).corporations.load(self.corporation_id)
        return JReitCorporationType.from_model(row) if row is not None else None

    @strawberry.field
    async def appraisal(self, info: strawberry.Info) -> Optional[JReitAppraisalType]:
        if self.appraisal_id is None:
            return None
        row = await get_loaders(info).appraisals.load(self.appraisal_id)
        return JReitAppraisalType.from_model(row) if row is not None else None


@strawberry.type(name="JReitBuildingAssetType", description="A building may have several asset types")
class JReitBuildingAssetType:
    is_office: bool
    is_retail: bool
    is_hotel: bool
    is_logistic: bool
    is_residential: bool
    is_health_care: bool
    is_other: bool


@strawberry.type(name="JReitBuildingBuildingSpec")
class JReitBuildingSpecType:
    name: str
    address: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    nearest_station: Optional[str]
    completed_year: Optional[int]
    completed_month: Optional[int]
    gross_floor_area: Optional[float]
    basement: Optional[int]
    groundfloor: Optional[int]
    structure: Optional[str]
    floor_plan: Optional[str]


@strawberry.type(name="JReitBuildingLandSpec")
class JReitLandSpecType:
    land: Optional[float]
    building_coverage_ratio: Optional[float]
    floor_area_ratio: Optional[float]


@strawberry.type(name="JReitBuilding")
class JReitBuildingType:
    id: strawberry.ID
    office_building_id: Optional[strawberry.ID]
    residential_building_id: Optional[strawberry.ID]
    asset_type: JReitBuildingAssetType
    building_spec: JReitBuildingSpecType
    land_spec: JReitLandSpecType

    corporation_id: strawberry.Private[Optional[str]]

    @classmethod
    def from_model(cls, row: JReitBuilding, corporation_id: Optional[str] = None) -> "JReitBuildingType":
        return cls(
            id=_id(row.id),
            office_building_id=_id(row.office_building_id),
            residential_building_id=_id(row.residential_building_id),
            asset_type=JReitBuildingAssetType(
                is_office=row.is_office == 1,
                is_retail=row.is_retail == 1,
                is_hotel=row.is_hotel == 1,
                is_logistic=row.is_logistic == 1,
                is_residential=row.is_residential == 1,
                is_health_care=row.is_health_care == 1,
                is_other=row.is_other == 1,
            ),
            building_spec=JReitBuildingSpecType(
                name=row.name,
                address=row.address,
                latitude=row.latitude,
                longitude=row.longitude,
                nearest_station=row.nearest_station,
                completed_year=row.completed_year,
                completed_month=row.completed_month,
                gross_floor_area=row.gross_floor_area,
                basement=row.basement,
                groundfloor=row.floor,
                structure=row.structure,
                floor_plan=row.floor_plan,
            ),
            land_spec=JReitLandSpecType(
                land=row.land,
                building_coverage_ratio=row.building_coverage_ratio,
                floor_area_ratio=row.floor_area_ratio,
            ),
            corporation_id=corporation_id,
        )

    @classmethod
    def from_held(cls, held: HeldBuilding) -> "JReitBuildingType":
        return cls.from_model(held.building, held.corporation_id)

    def _holding_key(self) -> Optional[BuildingCorporationKey]:
        if self.corporation_id is None:
            return None
        return BuildingCorporationKey(str(self.id), self.corporation_id)

    async def _transaction_rows(self, info) -> List[JReitTransaction]:
        loaders = get_loaders(info)
        key = self._holding_key()
        if key is not None:
            return await loaders.transactions_by_building_and_corporation.load(key)
        return await loaders.transactions_by_building.load(str(self.id))

    async def _data_hub_building_id(self, info) -> Optional[str]:
        key = self._holding_key()
        if key is None:
            return None
        return await get_loaders(info).data_hub_building_ids.load(key)

    async def _series(self, info, loader_name: str) -> list:
        data_hub_id = await self._data_hub_building_id(info)
        if data_hub_id is None:
            return []
        return await getattr(get_loaders(info), loader_name).load(data_hub_id)

    @strawberry.field
    async def j_reit_corporation(self, info: strawberry.Info) -> Optional[JReitCorporationType]:
        if self.corporation_id is None:
            return None
        row = await get_loaders(info).corporations.load(self.corporation_id)
        return JReitCorporationType.from_model(row) if row is not None else None

    @strawberry.field(description="Transactions of this holding, oldest first")
    async def transactions(self, info: strawberry.Info) -> Optional[List[JReitTransactionType]]:
        return [JReitTransactionType.from_model(row) for row in await self._transaction_rows(info)]

    @strawberry.field
    async def initial_acquisition(self, info: strawberry.Info) -> Optional[JReitTransactionType]:
        for row in await self._transaction_rows(info):
            if row.transaction_category == TransactionCategoryValue.INITIAL_ACQUISITION:
                return JReitTransactionType.from_model(row)
        return None

    @strawberry.field
    async def latest_transaction(self, info: strawberry.Info) -> Optional[JReitTransactionType]:
        rows = await self._transaction_rows(info)
        dated = [row for row in rows if row.transaction_date is not None]
        candidates = dated or rows
        return JReitTransactionType.from_model(candidates[-1]) if candidates else None

    @strawberry.field
    async def transfer_transaction(self, info: strawberry.Info) -> Optional[JReitTransactionType]:
        for row in await self._transaction_rows(info):
            if row.transaction_category == TransactionCategoryValue.FULL_TRANSFER:
                return JReitTransactionType.from_model(row)
        return None

    @strawberry.field
    async def appraisal_histories(self, info: strawberry.Info) -> Optional[List[JReitAppraisalHistoryType]]:
        rows = await self._series(info, 'appraisal_histories')
        return [JReitAppraisalHistoryType.from_model(row) for row in rows]

    @strawberry.field(description="When both first and last are given, first wins")
    async def cap_rate_histories(
        self,
        info: strawberry.Info,
        first: Optional[int] = None,
        last: Optional[int] = None,
    ) -> Optional[List[JReitCapRateHistoryType]]:
        rows = await self._series(info, 'cap_rate_histories')
        return [JReitCapRateHistoryType.from_model(row) for row in _window(rows, first, last)]

    @strawberry.field(description="When both first and last are given, first wins")
    async def financials(
        self,
        info: strawberry.Info,
        first: Optional[int] = None,
        last: Optional[int] = None,
    ) -> Optional[List[JReitFinancialType]]:
        rows = await self._series(info, 'financials')
        return [JReitFinancialType.from_model(row) for row in _window(rows, first, last)]

    @strawberry.field
    async def latest_financial(self, info: strawberry.Info) -> Optional[JReitFinancialType]:
        rows = _window(await self._series(info, 'financials'), None, 1)
        return JReitFinancialType.from_model(rows[0]) if rows else None

    @strawberry.field
    async def press_releases(self, info: strawberry.Info) -> Optional[List[JReitPressReleaseType]]:
        rows = await self._series(info, 'press_releases')
        return [JReitPressReleaseType.from_model(row) for row in rows]


@strawberry.type(name="SearchTransactionResult")
class SearchTransactionResultType:
    nodes: List[JReitTransactionType]
    page_info: OffsetPageInfoType


@strawberry.type(name="SearchJReitBuildingResult")
class SearchJReitBuildingResultType:
    j_reit_buildings: List[JReitBuildingType]
    total_count: int
    page_info: OffsetPageInfoType
