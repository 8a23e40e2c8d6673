from __future__ import annotations

from dataclasses import dataclass

from ..models import combined_transaction_id


@dataclass(frozen=True)
class BuildingCorporationKey:
    """A building as held by one corporation; hashable, usable as a loader key."""
    building_id: str
    corporation_id: str

    @property
    def combined_transaction_id(self) -> str:
        return combined_transaction_id(self.building_id, self.corporation_id)
