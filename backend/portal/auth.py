"""player_session cookie handling.

The cookie holds URL-encoded JSON ``{"token": ..., "player_id": ...}`` so
page scripts can read the player id. It only authenticates a request when
the token matches a live server-side session for the same player.
"""
import json
from urllib.parse import quote, unquote

from flask import current_app, request

from portal import db
from portal.errors import Unauthenticated
from portal.services.verification.sessions import find_live_session

COOKIE_NAME = 'player_session'


def encode_session_cookie(payload: dict) -> str:
    return quote(json.dumps(payload, separators=(',', ':')), safe='')


def decode_session_cookie(raw):
    """Return the cookie payload dict, or None if it is missing or malformed."""
    if not raw:
        return None
    try:
        payload = json.loads(unquote(raw))
    except (ValueError, RecursionError):
        return None
    if not isinstance(payload, dict) or not payload.get('player_id'):
        return None
    return payload


def set_session_cookie(response, player_session):
    cfg = current_app.config
    response.set_cookie(
        COOKIE_NAME,
        encode_session_cookie(player_session.cookie_payload()),
        max_age=int(cfg.get('PLAYER_SESSION_MAX_AGE_SEC', 60 * 60 * 24 * 7)),
        path='/',
        secure=bool(cfg.get('PLAYER_SESSION_COOKIE_SECURE', False)),
        httponly=False,
        samesite='Lax',
    )
    return response


def load_player_session(req):
    """Flask-Login request loader: resolve the cookie to a live PlayerSession."""
    payload = decode_session_cookie(req.cookies.get(COOKIE_NAME))
    if payload is None:
        return None
    return find_live_session(db.session, payload.get('token'), payload['player_id'])


def reject_unauthenticated():
    if COOKIE_NAME not in request.cookies:
        raise Unauthenticated('Not authenticated')
    current_app.logger.info(f"[auth] rejected player_session cookie from {request.remote_addr}")
    raise Unauthenticated('Invalid session')
