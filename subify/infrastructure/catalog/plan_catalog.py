"""In-process plan catalog loaded from configuration."""

from __future__ import annotations

import copy
import json
import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...domain.exceptions import PlanNotFound, PlanUnavailable
from ...domain.models import BillingPeriod, Money, Plan
from ...domain.ports.catalog import PlanCatalog

logger = logging.getLogger(__name__)

DEFAULT_PLANS_PATH = Path(__file__).with_name("default_plans.json")


class PlanDefinition(BaseModel):
    """Shape of one plan entry in a catalog file."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    key: str = Field(..., min_length=1)
    name: Optional[str] = None
    price: int = Field(..., ge=0, description="Price in minor units")
    currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    billing_period: Optional[str] = Field(
        default="1 month", description="e.g. '1 month', '1 year'; null for non-expiring"
    )
    features: Dict[str, Any] = Field(default_factory=dict)
    active: bool = True

    @field_validator("billing_period")
    @classmethod
    def _check_period(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            BillingPeriod.parse(value)
        return value

    def to_plan(self) -> Plan:
        return Plan(
            key=self.key,
            name=self.name,
            price=Money(self.price, self.currency),
            billing_period=BillingPeriod.parse(self.billing_period) if self.billing_period else None,
            features=self.features,
            is_active=self.active,
        )


class CatalogDocument(BaseModel):
    plans: List[PlanDefinition]


class StaticPlanCatalog(PlanCatalog):
    """Read-only plan lookup shared across requests.

    The only way to change the content is ``reload()``, which rebuilds the
    whole catalog from its source and swaps it in one step.
    """

    def __init__(self, plans: Iterable[Plan], source: Optional[Path] = None) -> None:
        self._source = source
        self._lock = threading.Lock()
        self._plans = self._index(plans)

    @classmethod
    def from_definitions(cls, definitions: Iterable[Dict[str, Any]]) -> StaticPlanCatalog:
        return cls(_parse_definitions(list(definitions)))

    @classmethod
    def from_file(cls, path: Path) -> StaticPlanCatalog:
        return cls(_load_file(path), source=path)

    @classmethod
    def default(cls) -> StaticPlanCatalog:
        """Catalog of the plans bundled with the package."""
        return cls(_load_file(DEFAULT_PLANS_PATH))

    def resolve(self, plan_key: str) -> Plan:
        with self._lock:
            plan = self._plans.get(plan_key)
        if plan is None:
            raise PlanNotFound(plan_key)
        if not plan.is_active:
            raise PlanUnavailable(plan_key)
        return _detached(plan)

    def list_plans(self) -> List[Plan]:
        with self._lock:
            plans = list(self._plans.values())
        return [_detached(plan) for plan in plans if plan.is_active]

    def reload(self) -> int:
        """Re-read the catalog source. Returns the number of plans loaded."""
        if self._source is None:
            raise RuntimeError("Plan catalog has no file source to reload from.")
        plans = self._index(_load_file(self._source))
        with self._lock:
            self._plans = plans
        logger.info("Plan catalog reloaded from %s (%s plans)", self._source, len(plans))
        return len(plans)

    @staticmethod
    def _index(plans: Iterable[Plan]) -> Dict[str, Plan]:
        indexed: Dict[str, Plan] = {}
        for plan in plans:
            if plan.key in indexed:
                raise ValueError(f"Duplicate plan key in catalog: {plan.key}")
            indexed[plan.key] = plan
        return indexed


def _detached(plan: Plan) -> Plan:
    # Callers get their own features mapping; the shared catalog entry stays untouched.
    return replace(plan, features=copy.deepcopy(plan.features))


def _parse_definitions(definitions: List[Dict[str, Any]]) -> List[Plan]:
    try:
        document = CatalogDocument.model_validate({"plans": definitions})
    except ValidationError as exc:
        raise ValueError(f"Invalid plan catalog: {exc}") from exc
    return [definition.to_plan() for definition in document.plans]


def _load_file(path: Path) -> List[Plan]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Unable to read plan catalog {path}: {exc}") from exc
    definitions = raw.get("plans") if isinstance(raw, dict) else raw
    if not isinstance(definitions, list):
        raise ValueError(f"Plan catalog {path} must contain a list of plans")
    return _parse_definitions(definitions)
