from __future__ import annotations
from sqlalchemy import func, literal
from .base import BaseAdapter, EARTH_RADIUS_METERS


class PostgresAdapter(BaseAdapter):
    name = 'postgres'

    def distance_sphere(self, lon1, lat1, lon2, lat2):
        # Haversine with core math functions so no extension is needed
        d_lat = func.radians(lat2 - lat1)
        d_lon = func.radians(lon2 - lon1)
        a = (
            func.power(func.sin(d_lat / 2), 2)
            + func.cos(func.radians(lat1)) * func.cos(func.radians(lat2)) * func.power(func.sin(d_lon / 2), 2)
        )
        return literal(2 * EARTH_RADIUS_METERS) * func.asin(func.least(literal(1.0), func.sqrt(a)))
