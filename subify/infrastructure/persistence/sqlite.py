import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple, Union

from ...domain.exceptions import RepositoryError
from ...domain.models import Money, Subscription, SubscriptionStatus
from ...domain.ports.persistence import PersistenceGateway


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed implementation of the persistence gateway.

    The feature snapshot is stored as a JSON document on the subscription
    row. Every leaf of the document is also written to
    ``subscription_features`` so "snapshot contains key=value" lookups hit an
    index instead of scanning documents.
    """

    def __init__(self, path: Union[Path, str]) -> None:
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._initialize()

    def _initialize(self) -> None:
        with self._lock, self._conn:
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS subscriptions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    plan_key TEXT NOT NULL,
                    status TEXT NOT NULL,
                    starts_at TEXT NOT NULL,
                    ends_at TEXT,
                    features_snapshot TEXT NOT NULL,
                    price INTEGER NOT NULL CHECK (price >= 0),
                    currency TEXT NOT NULL CHECK (length(currency) = 3),
                    transaction_id TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_subscriptions_user_id
                    ON subscriptions(user_id);
                CREATE INDEX IF NOT EXISTS idx_subscriptions_plan_key
                    ON subscriptions(plan_key);
                CREATE INDEX IF NOT EXISTS idx_subscriptions_status
                    ON subscriptions(status);

                CREATE TABLE IF NOT EXISTS subscription_features (
                    subscription_id INTEGER NOT NULL,
                    feature_key TEXT NOT NULL,
                    feature_value TEXT NOT NULL,
                    PRIMARY KEY (subscription_id, feature_key, feature_value),
                    FOREIGN KEY(subscription_id) REFERENCES subscriptions(id) ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_subscription_features_lookup
                    ON subscription_features(feature_key, feature_value);
                """
            )

    def close(self) -> None:
        self._conn.close()

    # SubscriptionRepository API --------------------------------------------
    def add(self, subscription: Subscription) -> Subscription:
        if subscription.status is not SubscriptionStatus.ACTIVE:
            raise RepositoryError(
                f"Refusing to store subscription in state {subscription.status.value}"
            )
        snapshot = subscription.features_snapshot
        document = json.dumps(snapshot, ensure_ascii=False, sort_keys=True)
        now = self._now()
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(
                    """
                    INSERT INTO subscriptions (
                        user_id, plan_key, status, starts_at, ends_at,
                        features_snapshot, price, currency, transaction_id,
                        created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        subscription.user_id,
                        subscription.plan_key,
                        subscription.status.value,
                        self._to_iso(subscription.starts_at),
                        self._to_iso(subscription.ends_at) if subscription.ends_at else None,
                        document,
                        subscription.price.amount,
                        subscription.price.currency,
                        subscription.transaction_id,
                        now,
                        now,
                    ),
                )
                subscription_id = cur.lastrowid
                self._conn.executemany(
                    """
                    INSERT INTO subscription_features (subscription_id, feature_key, feature_value)
                    VALUES (?, ?, ?)
                    """,
                    [(subscription_id, key, value) for key, value in _index_entries(snapshot)],
                )
                cur = self._conn.execute("SELECT * FROM subscriptions WHERE id = ?", (subscription_id,))
                row = cur.fetchone()
        except sqlite3.Error as exc:
            raise RepositoryError(f"Failed to persist subscription: {exc}") from exc
        if not row:
            raise RepositoryError("Failed to persist subscription.")
        return self._row_to_subscription(row)

    def get_by_id(self, subscription_id: int) -> Optional[Subscription]:
        row = self._fetch_one("SELECT * FROM subscriptions WHERE id = ?", (subscription_id,))
        return self._row_to_subscription(row) if row else None

    def list_by_user_id(self, user_id: int) -> List[Subscription]:
        rows = self._fetch_all(
            "SELECT * FROM subscriptions WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
        return [self._row_to_subscription(row) for row in rows]

    def find_by_feature(self, feature_key: str, value: Any) -> List[Subscription]:
        rows = self._fetch_all(
            """
            SELECT s.* FROM subscriptions s
            WHERE s.id IN (
                SELECT subscription_id FROM subscription_features
                WHERE feature_key = ? AND feature_value = ?
            )
            ORDER BY s.id
            """,
            (feature_key, _encode(value)),
        )
        return [self._row_to_subscription(row) for row in rows]

    def count(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) AS total FROM subscriptions", ())
        return int(row["total"]) if row else 0

    # Helpers ---------------------------------------------------------------
    def _fetch_one(self, query: str, params: Tuple[Any, ...]) -> Optional[sqlite3.Row]:
        try:
            with self._lock:
                return self._conn.execute(query, params).fetchone()
        except sqlite3.Error as exc:
            raise RepositoryError(str(exc)) from exc

    def _fetch_all(self, query: str, params: Tuple[Any, ...]) -> List[sqlite3.Row]:
        try:
            with self._lock:
                return self._conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise RepositoryError(str(exc)) from exc

    @staticmethod
    def _now() -> str:
        return datetime.now(tz=timezone.utc).isoformat()

    @staticmethod
    def _to_iso(value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()

    @staticmethod
    def _row_to_subscription(row: sqlite3.Row) -> Subscription:
        return Subscription(
            id=row["id"],
            user_id=row["user_id"],
            plan_key=row["plan_key"],
            status=SubscriptionStatus(row["status"]),
            starts_at=datetime.fromisoformat(row["starts_at"]),
            ends_at=datetime.fromisoformat(row["ends_at"]) if row["ends_at"] else None,
            features_snapshot=json.loads(row["features_snapshot"]),
            price=Money(row["price"], row["currency"]),
            transaction_id=row["transaction_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


def _encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _index_entries(features: Dict[str, Any]) -> Set[Tuple[str, str]]:
    return set(_walk(features, ""))


def _walk(features: Dict[str, Any], prefix: str) -> Iterator[Tuple[str, str]]:
    for key, value in features.items():
        path = f"{prefix}{key}"
        yield path, _encode(value)
        if isinstance(value, dict):
            yield from _walk(value, f"{path}.")
        elif isinstance(value, list):
            for item in value:
                yield path, _encode(item)
