from __future__ import annotations

from functools import partial

from .batch import make_loader
from .buildings import (
    fetch_buildings,
    fetch_buildings_by_office_building_id,
    fetch_buildings_per_corporation,
)
from .corporations import fetch_appraisals, fetch_corporations
from .histories import (
    fetch_appraisal_histories,
    fetch_cap_rate_histories,
    fetch_data_hub_building_ids,
    fetch_financials,
    fetch_press_releases,
)
from .transactions import (
    fetch_transactions,
    fetch_transactions_by_building,
    fetch_transactions_by_building_and_corporation,
)


class RequestLoaders:
    """All batch loaders for one request; create one per traversal and drop it afterwards."""

    def __init__(self, storage):
        self.storage = storage
        # 1:1
        self.buildings = self._loader('buildings', fetch_buildings)
        self.buildings_per_corporation = self._loader('buildings_per_corporation', fetch_buildings_per_corporation)
        self.buildings_by_office_building_id = self._loader(
            'buildings_by_office_building_id', fetch_buildings_by_office_building_id
        )
        self.corporations = self._loader('corporations', fetch_corporations)
        self.appraisals = self._loader('appraisals', fetch_appraisals)
        self.transactions = self._loader('transactions', fetch_transactions)
        self.data_hub_building_ids = self._loader('data_hub_building_ids', fetch_data_hub_building_ids)
        # 1:N
        self.transactions_by_building = self._loader(
            'transactions_by_building', fetch_transactions_by_building, many=True
        )
        self.transactions_by_building_and_corporation = self._loader(
            'transactions_by_building_and_corporation', fetch_transactions_by_building_and_corporation, many=True
        )
        self.appraisal_histories = self._loader('appraisal_histories', fetch_appraisal_histories, many=True)
        self.cap_rate_histories = self._loader('cap_rate_histories', fetch_cap_rate_histories, many=True)
        self.financials = self._loader('financials', fetch_financials, many=True)
        self.press_releases = self._loader('press_releases', fetch_press_releases, many=True)

    def _loader(self, name, fetch, many: bool = False):
        return make_loader(name, partial(fetch, self), many=many)
