import base64
import logging
from datetime import datetime
from typing import Dict, List, Mapping, Tuple
from server.models import PushSubscriptionRecord, UserRecord
from .stores import session_scope

logger = logging.getLogger(__name__)


def user_key(endpoint: str) -> str:
    return "user:" + base64.b64encode(endpoint.encode("utf-8")).decode("ascii")


class SubscriptionRegistry:
    """Server-side record of push subscriptions and synced user task lists."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def add(self, subscription: Mapping) -> bool:
        """Store a subscription unless its endpoint is already known."""
        endpoint = subscription["endpoint"]
        with session_scope(self._session_factory) as db:
            exists = db.query(PushSubscriptionRecord).filter(
                PushSubscriptionRecord.endpoint == endpoint
            ).first()
            if exists:
                return False
            db.add(PushSubscriptionRecord(endpoint=endpoint, subscription=dict(subscription)))
            return True

    def all(self) -> List[dict]:
        with session_scope(self._session_factory) as db:
            rows = db.query(PushSubscriptionRecord).order_by(PushSubscriptionRecord.id).all()
            return [dict(row.subscription) for row in rows]

    def purge(self, endpoint: str) -> None:
        """Forget everything owned by an endpoint the push service rejected."""
        with session_scope(self._session_factory) as db:
            db.query(PushSubscriptionRecord).filter(
                PushSubscriptionRecord.endpoint == endpoint
            ).delete()
            db.query(UserRecord).filter(UserRecord.endpoint == endpoint).delete()
        logger.info(f"🧹 Purged expired push subscription {endpoint}")

    def save_user_record(self, subscription: Mapping, tasks: List[dict]) -> str:
        endpoint = subscription["endpoint"]
        key = user_key(endpoint)
        with session_scope(self._session_factory) as db:
            row = db.query(UserRecord).filter(UserRecord.key == key).first()
            if row is None:
                row = UserRecord(key=key, endpoint=endpoint)
                db.add(row)
            row.subscription = dict(subscription)
            row.tasks = list(tasks)
            row.updated_at = datetime.utcnow()
        return key

    def user_records(self) -> List[Tuple[str, Dict]]:
        with session_scope(self._session_factory) as db:
            rows = db.query(UserRecord).order_by(UserRecord.key).all()
            return [
                (row.key, {"subscription": row.subscription, "tasks": row.tasks or []})
                for row in rows
            ]

    def delete_user_record(self, key: str) -> None:
        with session_scope(self._session_factory) as db:
            db.query(UserRecord).filter(UserRecord.key == key).delete()
