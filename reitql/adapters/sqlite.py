from __future__ import annotations
import math
from sqlalchemy import func
from .base import BaseAdapter, EARTH_RADIUS_METERS

DISTANCE_FUNCTION_NAME = 'st_distance_sphere'


def distance_sphere(lon1, lat1, lon2, lat2):
    """Haversine distance in meters; registered on SQLite connections."""
    if None in (lon1, lat1, lon2, lat2):
        return None
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


class SQLiteAdapter(BaseAdapter):
    name = 'sqlite'

    def distance_sphere(self, lon1, lat1, lon2, lat2):
        # Requires the function registered by reitql.db.register_sqlite_functions
        return getattr(func, DISTANCE_FUNCTION_NAME)(lon1, lat1, lon2, lat2)
