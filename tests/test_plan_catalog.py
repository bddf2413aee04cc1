import json
from datetime import datetime, timezone

import pytest

from subify.domain.exceptions import PlanNotFound, PlanUnavailable
from subify.domain.models import BillingPeriod, Money
from subify.infrastructure.catalog.plan_catalog import DEFAULT_PLANS_PATH, StaticPlanCatalog


class TestStaticPlanCatalog:
    def test_resolves_known_plan(self, catalog):
        plan = catalog.resolve("basic_monthly")

        assert plan.price == Money(1000, "USD")
        assert plan.billing_period == BillingPeriod("month", 1)
        assert plan.features["access"] == "full"

    def test_unknown_plan(self, catalog):
        with pytest.raises(PlanNotFound) as exc_info:
            catalog.resolve("invalid_plan")
        assert exc_info.value.plan_key == "invalid_plan"

    def test_disabled_plan(self, catalog):
        with pytest.raises(PlanUnavailable):
            catalog.resolve("legacy_monthly")

    def test_list_plans_hides_disabled(self, catalog):
        keys = {plan.key for plan in catalog.list_plans()}
        assert "basic_monthly" in keys
        assert "legacy_monthly" not in keys

    def test_non_expiring_plan(self, catalog):
        assert catalog.resolve("lifetime").billing_period is None

    def test_duplicate_keys_rejected(self):
        definition = {"key": "a", "price": 1}
        with pytest.raises(ValueError):
            StaticPlanCatalog.from_definitions([definition, definition])

    def test_invalid_definition_rejected(self):
        with pytest.raises(ValueError):
            StaticPlanCatalog.from_definitions([{"key": "a", "price": -5}])
        with pytest.raises(ValueError):
            StaticPlanCatalog.from_definitions([{"key": "a", "price": 5, "billing_period": "fortnight"}])

    def test_reload_swaps_content_from_file(self, tmp_path):
        path = tmp_path / "plans.json"
        path.write_text(json.dumps({"plans": [{"key": "starter", "price": 500}]}))
        catalog = StaticPlanCatalog.from_file(path)
        assert catalog.resolve("starter").price == Money(500, "USD")

        path.write_text(json.dumps({"plans": [{"key": "starter", "price": 700, "active": False}]}))
        assert catalog.reload() == 1

        with pytest.raises(PlanUnavailable):
            catalog.resolve("starter")

    def test_reload_keeps_previous_catalog_on_bad_file(self, tmp_path):
        path = tmp_path / "plans.json"
        path.write_text(json.dumps([{"key": "starter", "price": 500}]))
        catalog = StaticPlanCatalog.from_file(path)

        path.write_text("{not json")
        with pytest.raises(ValueError):
            catalog.reload()
        assert catalog.resolve("starter").price.amount == 500

    def test_reload_without_source(self):
        catalog = StaticPlanCatalog.from_definitions([{"key": "starter", "price": 500}])
        with pytest.raises(RuntimeError):
            catalog.reload()

    def test_resolved_features_are_private_copies(self, catalog):
        plan = catalog.resolve("pro_monthly")
        plan.features["limits"]["api_calls"] = 1
        plan.features["support"].append("phone")

        fresh = catalog.resolve("pro_monthly")
        assert fresh.features["limits"]["api_calls"] == 10000
        assert fresh.features["support"] == ["email", "chat"]

    def test_listed_features_are_private_copies(self, catalog):
        for plan in catalog.list_plans():
            plan.features.clear()

        assert catalog.resolve("basic_monthly").features["access"] == "full"

    def test_default_catalog_reads_bundled_plans(self, catalog):
        assert DEFAULT_PLANS_PATH.is_file()
        bundled = StaticPlanCatalog.from_file(DEFAULT_PLANS_PATH)

        assert [plan.key for plan in catalog.list_plans()] == [plan.key for plan in bundled.list_plans()]
        assert catalog.resolve("pro_yearly").billing_period == BillingPeriod("year", 1)
        assert catalog.resolve("lifetime").features["projects"] is None


class TestBillingPeriod:
    def test_parse(self):
        assert BillingPeriod.parse("month") == BillingPeriod("month", 1)
        assert BillingPeriod.parse("3 months") == BillingPeriod("month", 3)
        assert BillingPeriod.parse("1 Year") == BillingPeriod("year", 1)

    @pytest.mark.parametrize("value", ["", "0 month", "two months", "1 fortnight", "1 2 month"])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            BillingPeriod.parse(value)

    def test_month_clamps_to_end_of_month(self):
        start = datetime(2026, 1, 31, 12, tzinfo=timezone.utc)
        assert BillingPeriod("month").advance(start) == datetime(2026, 2, 28, 12, tzinfo=timezone.utc)

    def test_year_across_leap_day(self):
        start = datetime(2028, 2, 29, tzinfo=timezone.utc)
        assert BillingPeriod("year").advance(start) == datetime(2029, 2, 28, tzinfo=timezone.utc)

    def test_month_rolls_over_year(self):
        start = datetime(2026, 11, 15, tzinfo=timezone.utc)
        assert BillingPeriod("month", 3).advance(start) == datetime(2027, 2, 15, tzinfo=timezone.utc)

    def test_days_and_weeks(self):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert BillingPeriod("day", 10).advance(start) == datetime(2026, 1, 11, tzinfo=timezone.utc)
        assert BillingPeriod("week", 2).advance(start) == datetime(2026, 1, 15, tzinfo=timezone.utc)
