from __future__ import annotations

import logging
from typing import List, Optional

import strawberry

from ..core.filters import parse_ids, parse_string_ids
from ..loaders import BuildingCorporationKey
from ..models import JReitCorporation, JReitDataHubIdMapping
from ..search import list_buildings, search_buildings, search_transactions
from .context import get_loaders, get_roles, get_settings, get_storage
from .inputs import (
    BuildingCorporationInput,
    BuildingSortAndPaginationInput,
    SearchJReitBuildingCondition,
    SearchTransactionInput,
    TransactionSortAndPaginationInput,
)
from .types import (
    JReitBuildingType,
    JReitCorporationType,
    JReitIdMappingType,
    JReitTransactionType,
    OffsetPageInfoType,
    SearchJReitBuildingResultType,
    SearchTransactionResultType,
)

logger = logging.getLogger(__name__)


def _split(sort_and_pagination):
    if sort_and_pagination is None:
        return None, None
    return sort_and_pagination.sort, sort_and_pagination.pagination


@strawberry.type
class Query:
    @strawberry.field(description="J-REIT corporations ordered by id")
    async def j_reit_corporations(
        self,
        info: strawberry.Info,
        include_delisted: bool = True,
    ) -> List[JReitCorporationType]:
        clause = None if include_delisted else JReitCorporation.is_delisted == 0
        rows = await get_storage(info).fetch_where(JReitCorporation, clause, order_by=[JReitCorporation.id.asc()])
        return [JReitCorporationType.from_model(row) for row in rows]

    @strawberry.field(description="Held buildings, one entry per holding corporation; all of them when ids is omitted")
    async def j_reit_buildings(
        self,
        info: strawberry.Info,
        ids: Optional[List[strawberry.ID]] = None,
        sort_and_pagination: Optional[BuildingSortAndPaginationInput] = None,
    ) -> List[JReitBuildingType]:
        sort, pagination = _split(sort_and_pagination)
        building_ids = None if ids is None else list(parse_string_ids(ids, 'ids') or ())
        keys = await list_buildings(get_storage(info), building_ids, sort, pagination, get_settings(info))
        rows = await get_loaders(info).buildings.load_many([building_id for building_id, _ in keys])
        return [
            JReitBuildingType.from_model(row, corporation_id)
            for row, (_, corporation_id) in zip(rows, keys)
            if row is not None
        ]

    @strawberry.field
    async def j_reit_buildings_per_corporation(
        self,
        info: strawberry.Info,
        ids: List[BuildingCorporationInput],
    ) -> List[JReitBuildingType]:
        keys = [BuildingCorporationKey(str(i.building_id), str(i.corporation_id)) for i in ids]
        held = await get_loaders(info).buildings_per_corporation.load_many(keys)
        return [JReitBuildingType.from_held(h) for h in held if h is not None]

    @strawberry.field(description="Office buildings by office building id; ids without a J-REIT building are skipped")
    async def j_reit_building_by_office_building_ids(
        self,
        info: strawberry.Info,
        office_building_ids: List[strawberry.ID],
    ) -> List[JReitBuildingType]:
        keys = parse_ids(office_building_ids, 'office_building_ids') or ()
        rows = await get_loaders(info).buildings_by_office_building_id.load_many(list(keys))
        return [JReitBuildingType.from_model(row) for row in rows if row is not None]

    @strawberry.field
    async def search_j_reit_buildings_per_corporation(
        self,
        info: strawberry.Info,
        search_condition: SearchJReitBuildingCondition,
        sort_and_pagination: Optional[BuildingSortAndPaginationInput] = None,
    ) -> SearchJReitBuildingResultType:
        sort, pagination = _split(sort_and_pagination)
        result = await search_buildings(
            get_storage(info), get_roles(info), search_condition, sort, pagination, get_settings(info)
        )
        keys = [BuildingCorporationKey(building_id, corporation_id) for building_id, corporation_id in result.keys]
        held = await get_loaders(info).buildings_per_corporation.load_many(keys)
        # Keep the search order
        return SearchJReitBuildingResultType(
            j_reit_buildings=[JReitBuildingType.from_held(h) for h in held if h is not None],
            total_count=result.total_count,
            page_info=OffsetPageInfoType.from_page_info(result.page_info),
        )

    @strawberry.field
    async def search_transactions(
        self,
        info: strawberry.Info,
        input: SearchTransactionInput,
        sort_and_pagination: Optional[TransactionSortAndPaginationInput] = None,
    ) -> SearchTransactionResultType:
        sort, pagination = _split(sort_and_pagination)
        result = await search_transactions(get_storage(info), input, sort, pagination, get_settings(info))
        rows = await get_loaders(info).transactions.load_many([key[0] for key in result.keys])
        return SearchTransactionResultType(
            nodes=[JReitTransactionType.from_model(row) for row in rows if row is not None],
            page_info=OffsetPageInfoType.from_page_info(result.page_info),
        )

    @strawberry.field(description="Transactions by id in the requested order; unknown ids are skipped")
    async def transactions(self, info: strawberry.Info, ids: List[strawberry.ID]) -> List[JReitTransactionType]:
        if not ids:
            raise ValueError("ids must not be empty")
        rows = await get_loaders(info).transactions.load_many([str(i) for i in ids])
        return [JReitTransactionType.from_model(row) for row in rows if row is not None]

    @strawberry.field
    async def j_reit_id_mapping_by_data_hub_id(
        self,
        info: strawberry.Info,
        data_hub_building_id: strawberry.ID,
    ) -> Optional[JReitIdMappingType]:
        rows = await get_storage(info).fetch_where(
            JReitDataHubIdMapping,
            JReitDataHubIdMapping.data_hub_building_id == str(data_hub_building_id),
            order_by=[JReitDataHubIdMapping.id.asc()],
            limit=1,
        )
        return JReitIdMappingType.from_model(rows[0]) if rows else None
