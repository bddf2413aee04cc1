from __future__ import annotations

from typing import List, Protocol

from ..models import Plan


class PlanCatalog(Protocol):
    """Read-only lookup of purchasable plans."""

    def resolve(self, plan_key: str) -> Plan:
        """Return the plan for ``plan_key``.

        Raises:
            PlanNotFound: no plan has this key
            PlanUnavailable: the plan exists but is disabled
        """
        ...

    def list_plans(self) -> List[Plan]:
        ...
