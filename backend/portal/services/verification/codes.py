import random
from datetime import timedelta
from typing import Optional

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from portal.errors import UpstreamFailure, ValidationError
from portal.models import PlayerStats, VerificationCode, utcnow

CODE_MIN = 100000
CODE_MAX = 999999

_rng = random.SystemRandom()


def generate_code() -> str:
    """Return a 6-digit numeric code drawn uniformly from [100000, 999999]."""
    return str(_rng.randint(CODE_MIN, CODE_MAX))


def _draw_unused_code(session) -> str:
    # Redemption looks codes up by value alone, so two live codes must not share one.
    # An expired unused code may share a value: redemption picks the newest row.
    now = utcnow()
    while True:
        code = generate_code()
        clash = (
            session.query(VerificationCode.id)
            .filter_by(code=code, used=False)
            .filter(or_(VerificationCode.expires_at.is_(None), VerificationCode.expires_at > now))
            .first()
        )
        if clash is None:
            return code


def _ensure_player_stats(session, player_id: str) -> PlayerStats:
    # Row lock serializes concurrent issuance for the same player (no-op on SQLite)
    stats = (
        session.query(PlayerStats)
        .filter_by(player_id=player_id)
        .with_for_update()
        .first()
    )
    if stats is None:
        stats = PlayerStats(player_id=player_id)
        session.add(stats)
        session.flush()
        current_app.logger.info(f"[verification] created player_stats player={player_id}")
    return stats


def issue_code(session, player_id: str, ttl_seconds: Optional[int] = None) -> str:
    """Issue a fresh verification code for a player.

    - Creates the player's stats row if it does not exist yet
    - Marks every unused code the player still holds as used
    - Inserts the new code as unused, expiring after ``ttl_seconds`` when given

    All writes commit together; any datastore error rolls back and is raised
    as UpstreamFailure.
    """
    if not player_id or not isinstance(player_id, str):
        raise ValidationError('Player ID is required')

    try:
        _ensure_player_stats(session, player_id)
        superseded = (
            session.query(VerificationCode)
            .filter_by(player_id=player_id, used=False)
            .update({'used': True}, synchronize_session=False)
        )
        code = _draw_unused_code(session)
        expires_at = utcnow() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        session.add(VerificationCode(player_id=player_id, code=code, used=False, expires_at=expires_at))
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error(f"[verification] issue failed player={player_id}: {exc}")
        raise UpstreamFailure('Failed to generate verification code') from exc

    current_app.logger.info(
        f"[verification] issued player={player_id} superseded={superseded} expires_at={expires_at}"
    )
    return code
