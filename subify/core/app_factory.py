from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.pricing import PricingCalculator
from ..application.services.subscription_pipeline import SubscriptionPipeline
from ..domain.exceptions import SubscriptionError
from ..domain.ports.payments import PaymentGateway
from ..infrastructure.catalog.plan_catalog import StaticPlanCatalog
from ..infrastructure.payments.registry import build_payment_gateway
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.routers import plans as plans_router
from ..presentation.api.routers import subscriptions as subscriptions_router

logger = logging.getLogger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    payment_gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Subify", lifespan=_create_lifespan(settings, payment_gateway))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(plans_router.router)
    app.include_router(subscriptions_router.router)

    @app.exception_handler(SubscriptionError)
    async def subscription_error_handler(request: Request, exc: SubscriptionError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.error_code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        container: ApplicationContainer = app.state.container  # type: ignore[attr-defined]
        return {
            "ok": True,
            "payment_provider": container.payment_gateway.name,
            "plans": len(container.plan_catalog.list_plans()),
        }

    return app


def _create_lifespan(settings: Settings, payment_gateway: Optional[PaymentGateway]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        persistence = SQLitePersistence(settings.database_path)
        if settings.plan_catalog_path:
            plan_catalog = StaticPlanCatalog.from_file(settings.plan_catalog_path)
        else:
            logger.info("PLAN_CATALOG_PATH not set; using built-in plans.")
            plan_catalog = StaticPlanCatalog.default()
        gateway = payment_gateway or build_payment_gateway(settings)
        pipeline = SubscriptionPipeline(
            plan_catalog,
            gateway,
            persistence,
            PricingCalculator(),
            charge_timeout=settings.payment_timeout_seconds,
        )

        container = ApplicationContainer(
            settings=settings,
            persistence=persistence,
            plan_catalog=plan_catalog,
            payment_gateway=gateway,
            subscription_pipeline=pipeline,
        )

        app.state.container = container  # type: ignore[attr-defined]
        logger.info("Subify started with payment provider %s", gateway.name)

        try:
            yield
        finally:
            persistence.close()

    return lifespan
