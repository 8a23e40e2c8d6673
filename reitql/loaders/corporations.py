from __future__ import annotations

from typing import Dict, List

from ..models import JReitAppraisal, JReitCorporation


async def fetch_corporations(loaders, keys: List[str]) -> Dict[str, JReitCorporation]:
    rows = await loaders.storage.fetch_by_keys(JReitCorporation, 'id', keys)
    return {row.id: row for row in rows}


async def fetch_appraisals(loaders, keys: List[str]) -> Dict[str, JReitAppraisal]:
    rows = await loaders.storage.fetch_by_keys(JReitAppraisal, 'id', keys)
    return {row.id: row for row in rows}
