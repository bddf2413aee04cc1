from datetime import datetime, timezone

import pytest

from subify.application.services.subscription_pipeline import SubscriptionPipeline
from subify.infrastructure.catalog.plan_catalog import StaticPlanCatalog
from subify.infrastructure.persistence.sqlite import SQLitePersistence
from tests.fakes import RecordingGateway

FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def catalog() -> StaticPlanCatalog:
    return StaticPlanCatalog.default()


@pytest.fixture
def repository(tmp_path):
    persistence = SQLitePersistence(tmp_path / "subify.db")
    yield persistence
    persistence.close()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def pipeline(catalog, gateway, repository) -> SubscriptionPipeline:
    return SubscriptionPipeline(catalog, gateway, repository, clock=lambda: FIXED_NOW)
