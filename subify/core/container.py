from dataclasses import dataclass

from ..application.services.subscription_pipeline import SubscriptionPipeline
from ..domain.ports.payments import PaymentGateway
from ..domain.ports.persistence import PersistenceGateway
from ..infrastructure.catalog.plan_catalog import StaticPlanCatalog
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    plan_catalog: StaticPlanCatalog
    payment_gateway: PaymentGateway
    subscription_pipeline: SubscriptionPipeline
