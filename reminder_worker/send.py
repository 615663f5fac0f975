import logging
from typing import Callable, List, Mapping, Optional, Tuple
import requests
from pywebpush import WebPushException, webpush
from server.schemas import PushPayload
from .config import config as default_config, ReminderWorkerConfig
from .scheduler_config import PUSH_TTL_SECONDS, PUSH_TIMEOUT_SECONDS

# Setup logger
logger = logging.getLogger(__name__)

# Push services answer 404/410 once a subscription has been revoked or expired
GONE_STATUS_CODES = (404, 410)

PushSender = Callable[[Mapping, PushPayload], Tuple[Mapping, int]]


def is_gone(status_code: int) -> bool:
    return status_code in GONE_STATUS_CODES


def send_web_push(
    subscription: Mapping,
    payload: PushPayload,
    config: Optional[ReminderWorkerConfig] = None
) -> Tuple[Mapping, int]:
    """
    Sends one Web Push message.

    Arguments:
        subscription (Mapping): Browser PushSubscription JSON (endpoint + keys).
        payload (PushPayload): Validated notification payload.
        config (ReminderWorkerConfig, optional): Dependency injection for config.
    """
    cfg = config or default_config
    endpoint = subscription.get("endpoint") if subscription else None

    # Validation
    if not cfg.push_configured:
        logger.error("Missing VAPID configuration, push not sent")
        return {"status": "error", "message": "Missing VAPID configuration"}, 500
    if not endpoint:
        logger.error("Push subscription has no endpoint")
        return {"status": "error", "message": "Missing subscription endpoint"}, 400

    try:
        resp = webpush(
            subscription_info=dict(subscription),
            data=payload.to_json(),
            vapid_private_key=cfg.VAPID_PRIVATE,
            # pywebpush fills in aud/exp, so hand it a fresh dict every call
            vapid_claims={"sub": cfg.VAPID_CONTACT},
            ttl=PUSH_TTL_SECONDS,
            timeout=PUSH_TIMEOUT_SECONDS,
        )
        return {"status": "ok"}, resp.status_code

    except WebPushException as e:
        status_code = e.response.status_code if e.response is not None else 500
        if is_gone(status_code):
            logger.info(f"Push subscription gone ({status_code}): {endpoint}")
        else:
            logger.error(f"Web push error for {endpoint}: {e}")
        return {"status": "error", "message": str(e)}, status_code

    except requests.Timeout:
        logger.error(f"Web push request timed out: {endpoint}")
        return {"status": "error", "message": "Request timed out"}, 408

    except requests.RequestException as e:
        logger.error(f"Web push transport error for {endpoint}: {e}")
        return {"status": "error", "message": str(e)}, 500


def fan_out(
    registry,
    payload: PushPayload,
    sender: PushSender = send_web_push
) -> List[dict]:
    """
    Push one payload to every stored subscription.

    Keeps going past individual failures; subscriptions the push service
    reports as gone are purged from the registry.
    """
    results = []
    for subscription in registry.all():
        endpoint = subscription.get("endpoint")
        try:
            result, status_code = sender(subscription, payload)
        except Exception as e:
            logger.error(f"Push to {endpoint} raised: {e}")
            results.append({"endpoint": endpoint, "ok": False, "error": str(e)})
            continue

        if 200 <= status_code < 300:
            results.append({"endpoint": endpoint, "ok": True})
            continue

        if is_gone(status_code):
            registry.purge(endpoint)
        results.append({
            "endpoint": endpoint,
            "ok": False,
            "error": result.get("message", f"HTTP {status_code}"),
        })
    return results
