from typing import List

from fastapi import APIRouter, Depends

from ....core.dependencies import get_plan_catalog
from ....domain.ports.catalog import PlanCatalog
from ...api.schemas.plan_schemas import PlanResponse

router = APIRouter(prefix="/api/plans", tags=["Plans"])


@router.get("", response_model=List[PlanResponse])
async def list_plans(catalog: PlanCatalog = Depends(get_plan_catalog)) -> List[PlanResponse]:
    """List plans currently available for purchase."""
    return [PlanResponse.from_plan(plan) for plan in catalog.list_plans()]
