from __future__ import annotations
from typing import Any, List

# Radius used by MySQL's ST_Distance_Sphere; kept identical across dialects.
EARTH_RADIUS_METERS = 6370986.0


class BaseAdapter:
    name = 'base'

    def distance_sphere(self, lon1, lat1, lon2, lat2):
        """Great-circle distance in meters between two (lon, lat) points."""
        raise NotImplementedError

    def order_nulls_last(self, expr, descending: bool = False) -> List[Any]:
        # Null sort values go last for both directions
        ordered = expr.desc() if descending else expr.asc()
        return [ordered.nulls_last()]
