"""Caller capabilities supplied by the authentication collaborator."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Roles:
    principal_id: Optional[str] = None
    market_research_login: bool = False
    deal_management_jreit: bool = False

    @property
    def can_view_j_reit_buildings(self) -> bool:
        # J-REIT visibility is all-or-nothing
        return self.market_research_login or self.deal_management_jreit

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Roles":
        data = data or {}
        return cls(
            principal_id=data.get('principal_id'),
            market_research_login=bool(data.get('market_research_login', False)),
            deal_management_jreit=bool(data.get('deal_management_jreit', False)),
        )
