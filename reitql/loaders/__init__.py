from __future__ import annotations

from .batch import make_loader, group_rows, align
from .buildings import HeldBuilding
from .context import RequestLoaders
from .keys import BuildingCorporationKey

__all__ = [
    'make_loader',
    'group_rows',
    'align',
    'HeldBuilding',
    'RequestLoaders',
    'BuildingCorporationKey',
]
