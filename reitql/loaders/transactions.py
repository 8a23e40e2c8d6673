"""Transaction lists per building and per (building, corporation) holding.

Lists are ordered by transaction date ascending (undated rows last), then by
category rank, then by id.
"""
from __future__ import annotations

from typing import Dict, List

from ..models import JReitTransaction
from .batch import group_rows
from .keys import BuildingCorporationKey


def transaction_order(storage) -> list:
    return [
        *storage.adapter.order_nulls_last(JReitTransaction.transaction_date),
        JReitTransaction.transaction_category.asc(),
        JReitTransaction.id.asc(),
    ]


async def fetch_transactions_by_building(loaders, keys: List[str]) -> Dict[str, List[JReitTransaction]]:
    storage = loaders.storage
    rows = await storage.fetch_by_keys(
        JReitTransaction, 'j_reit_building_id', keys, order_by=transaction_order(storage)
    )
    return group_rows(rows, lambda row: row.j_reit_building_id)


async def fetch_transactions_by_building_and_corporation(
    loaders, keys: List[BuildingCorporationKey]
) -> Dict[BuildingCorporationKey, List[JReitTransaction]]:
    storage = loaders.storage
    rows = await storage.fetch_by_keys(
        JReitTransaction,
        'combined_transaction_id',
        [key.combined_transaction_id for key in keys],
        order_by=transaction_order(storage),
    )
    return group_rows(rows, lambda row: BuildingCorporationKey(row.j_reit_building_id, row.j_reit_corporation_id))


async def fetch_transactions(loaders, keys: List[str]) -> Dict[str, JReitTransaction]:
    rows = await loaders.storage.fetch_by_keys(JReitTransaction, 'id', keys)
    return {row.id: row for row in rows}
