from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import and_

from ..errors import InconsistentKeyState
from ..models import JReitBuilding, JReitTransaction
from .keys import BuildingCorporationKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeldBuilding:
    """A building row seen through one corporation's holding."""
    building: JReitBuilding
    corporation_id: Optional[str] = None


async def fetch_buildings(loaders, keys: List[str]) -> Dict[str, JReitBuilding]:
    rows = await loaders.storage.fetch_by_keys(JReitBuilding, 'id', keys)
    return {row.id: row for row in rows}


async def fetch_buildings_per_corporation(
    loaders, keys: List[BuildingCorporationKey]
) -> Dict[BuildingCorporationKey, HeldBuilding]:
    """Resolve (building, corporation) pairs that have at least one transaction."""
    by_combined_id = {key.combined_transaction_id: key for key in keys}
    rows = await loaders.storage.fetch_by_keys(JReitTransaction, 'combined_transaction_id', list(by_combined_id))
    held = list(dict.fromkeys(by_combined_id[row.combined_transaction_id] for row in rows))
    buildings = await loaders.buildings.load_many([key.building_id for key in held])
    out: Dict[BuildingCorporationKey, HeldBuilding] = {}
    for key, building in zip(held, buildings):
        if building is None:
            raise InconsistentKeyState(
                'buildings_per_corporation', key, f"transaction references missing building {key.building_id!r}"
            )
        out[key] = HeldBuilding(building=building, corporation_id=key.corporation_id)
    return out


async def fetch_buildings_by_office_building_id(loaders, keys: List[int]) -> Dict[int, JReitBuilding]:
    # Only office assets; some non-office rows carry an office building id
    mapping_rows = await loaders.storage.fetch_where(
        JReitBuilding,
        and_(JReitBuilding.office_building_id.in_(list(keys)), JReitBuilding.is_office == 1),
        order_by=[JReitBuilding.id.asc()],
    )
    buildings = await loaders.buildings.load_many([row.id for row in mapping_rows])
    out: Dict[int, JReitBuilding] = {}
    for building in buildings:
        if building is None:
            continue
        # Rows come from the buildings loader cache, not the mapping query above
        if building.office_building_id is None:
            raise InconsistentKeyState(
                'buildings_by_office_building_id', building.id, "office_building_id is None"
            )
        out.setdefault(int(building.office_building_id), building)
    logger.debug(f"buildings_by_office_building_id: {len(out)} of {len(keys)} keys matched")
    return out
