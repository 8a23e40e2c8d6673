from __future__ import annotations
from typing import Any, List
from sqlalchemy import func
from .base import BaseAdapter


class MySQLAdapter(BaseAdapter):
    name = 'mysql'

    def distance_sphere(self, lon1, lat1, lon2, lat2):
        return func.ST_Distance_Sphere(func.Point(lon1, lat1), func.Point(lon2, lat2))

    def order_nulls_last(self, expr, descending: bool = False) -> List[Any]:
        # MySQL has no NULLS LAST; sort on the null test first
        return [expr.is_(None).asc(), expr.desc() if descending else expr.asc()]
