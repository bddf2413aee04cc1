"""API router for subscription creation and lookup."""

import json
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....application.services.subscription_pipeline import SubscriptionPipeline
from ....core.dependencies import get_persistence_gateway, get_subscription_pipeline
from ....domain.ports.persistence import SubscriptionRepository
from ...api.schemas.subscription_schemas import (
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    SubscriptionResponse,
)

router = APIRouter(prefix="/api/subscriptions", tags=["Subscriptions"])


@router.post("", response_model=CreateSubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    payload: CreateSubscriptionRequest,
    pipeline: SubscriptionPipeline = Depends(get_subscription_pipeline),
) -> CreateSubscriptionResponse:
    """Charge the payment method and record the subscription.

    Failures are raised as ``SubscriptionError`` and rendered by the
    application-level exception handler.
    """
    subscription = await pipeline.create(payload.to_domain())
    return CreateSubscriptionResponse.from_subscription(subscription)


@router.get("", response_model=List[SubscriptionResponse])
async def search_subscriptions(
    user_id: Optional[int] = Query(None, alias="userId", gt=0),
    feature: Optional[str] = Query(None, min_length=1, description="Feature key, dotted for nested values"),
    value: Optional[str] = Query(None, description="JSON literal or plain string"),
    repository: SubscriptionRepository = Depends(get_persistence_gateway),
) -> List[SubscriptionResponse]:
    """Find subscriptions by user or by a feature captured in their snapshot."""
    if feature is not None:
        if value is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Provide a value for the feature filter.")
        items = repository.find_by_feature(feature, _parse_feature_value(value))
        if user_id is not None:
            items = [item for item in items if item.user_id == user_id]
    elif user_id is not None:
        items = repository.list_by_user_id(user_id)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filter by userId or by feature and value.",
        )
    return [SubscriptionResponse.from_subscription(item) for item in items]


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def get_subscription(
    subscription_id: int,
    repository: SubscriptionRepository = Depends(get_persistence_gateway),
) -> SubscriptionResponse:
    subscription = repository.get_by_id(subscription_id)
    if subscription is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    return SubscriptionResponse.from_subscription(subscription)


def _parse_feature_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw
