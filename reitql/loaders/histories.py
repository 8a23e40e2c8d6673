"""Data-hub keyed lookups: id mappings and the per-building history series."""
from __future__ import annotations

from typing import Dict, List

from sqlalchemy import and_, or_

from ..models import (
    JReitAppraisalHistory,
    JReitCapRateHistory,
    JReitDataHubIdMapping,
    JReitFinancial,
    JReitPressRelease,
)
from .batch import group_rows
from .keys import BuildingCorporationKey


async def fetch_data_hub_building_ids(loaders, keys: List[BuildingCorporationKey]) -> Dict[BuildingCorporationKey, str]:
    """One query for all pairs, then a lookup table keyed by pair."""
    clause = or_(*(
        and_(
            JReitDataHubIdMapping.j_reit_building_id == key.building_id,
            JReitDataHubIdMapping.j_reit_corporation_id == key.corporation_id,
        )
        for key in keys
    ))
    rows = await loaders.storage.fetch_where(JReitDataHubIdMapping, clause, order_by=[JReitDataHubIdMapping.id.asc()])
    lookup: Dict[BuildingCorporationKey, str] = {}
    for row in rows:
        lookup.setdefault(BuildingCorporationKey(row.j_reit_building_id, row.j_reit_corporation_id), row.data_hub_building_id)
    return lookup


def _series_fetcher(model, date_column: str):
    async def fetch(loaders, keys: List[str]) -> Dict[str, list]:
        order_by = [getattr(model, date_column).asc(), model.id.asc()]
        rows = await loaders.storage.fetch_by_keys(model, 'data_hub_building_id', keys, order_by=order_by)
        return group_rows(rows, lambda row: row.data_hub_building_id)
    fetch.__name__ = f"fetch_{model.__tablename__}"
    return fetch


fetch_appraisal_histories = _series_fetcher(JReitAppraisalHistory, 'appraisal_date')
fetch_cap_rate_histories = _series_fetcher(JReitCapRateHistory, 'closing_date')
fetch_financials = _series_fetcher(JReitFinancial, 'fiscal_period_end_date')
fetch_press_releases = _series_fetcher(JReitPressRelease, 'release_date')
