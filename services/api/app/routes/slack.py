"""Slack Events API webhook.

POST /slack/events

Flow:
1. Verify the request signature (401 on failure)
2. url_verification -> echo the challenge as text/plain
3. event_callback with reaction_added / reaction_removed -> reconcile
4. Anything else is acknowledged and ignored

Redeliveries of the same event_id are acknowledged without reprocessing when
Redis is available.
"""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from redis.exceptions import RedisError

from app.dependencies import get_reconciler, utcnow
from app.errors import InvalidError, InvalidSignatureError
from app.services.slack import parse_reaction_event, verify_request
from app.settings import get_settings
from app.stores.redis import claim_event, release_event

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


async def _claim_delivery(event_id: str, ttl: int) -> bool:
    try:
        return await claim_event(event_id, ttl=ttl)
    except (RuntimeError, RedisError) as e:
        # Redis unavailable: process without de-dup.
        logger.warning(f"[slack] dedup unavailable event_id={event_id}: {e}")
        return True


async def _release_delivery(event_id: str) -> None:
    try:
        await release_event(event_id)
    except (RuntimeError, RedisError) as e:
        logger.warning(f"[slack] dedup release failed event_id={event_id}: {e}")


@router.post("/events")
async def handle_events(request: Request) -> Response:
    """Handle Slack Events API push requests."""
    settings = get_settings()
    body = await request.body()

    if not verify_request(signing_secret=settings.slack_signing_secret, body=body, headers=request.headers):
        raise InvalidSignatureError("Slack request signature verification failed")

    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise InvalidError("Request body is not valid JSON") from e
    if not isinstance(payload, dict):
        raise InvalidError("Request body must be a JSON object")

    payload_type = payload.get("type")
    if payload_type == "url_verification":
        return PlainTextResponse(str(payload.get("challenge", "")))

    if payload_type != "event_callback":
        return JSONResponse({"ok": True})

    inner = payload.get("event")
    notification = parse_reaction_event(inner if isinstance(inner, dict) else {})
    if notification is None:
        return JSONResponse({"ok": True})

    event_id = str(payload.get("event_id") or "")
    if event_id and not await _claim_delivery(event_id, settings.event_dedup_ttl_seconds):
        logger.info(
            f"[slack] duplicate delivery event_id={event_id} "
            f"retry_num={request.headers.get('X-Slack-Retry-Num')}"
        )
        return JSONResponse({"ok": True})

    try:
        await get_reconciler().reconcile(notification, now=utcnow())
    except Exception:
        if event_id:
            await _release_delivery(event_id)
        raise

    return JSONResponse({"ok": True})
