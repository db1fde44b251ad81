import uuid
from datetime import timedelta
from typing import Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from portal.errors import CodeExpired, InvalidCode, UpstreamFailure, ValidationError
from portal.models import PlayerSession, VerificationCode, utcnow


def redeem_code(session, code, max_age_seconds: int) -> PlayerSession:
    """Exchange an unused verification code for a new player session.

    Raises InvalidCode when no unused code matches (including a code that was
    claimed by a concurrent request), CodeExpired when the code is past its
    expiry. An expired code is left unused; issuing a new code supersedes it.
    """
    if code is None or str(code).strip() == '':
        raise ValidationError('Verification code is required')
    code = str(code).strip()

    try:
        row = (
            session.query(VerificationCode)
            .filter_by(code=code, used=False)
            .order_by(VerificationCode.id.desc())
            .first()
        )
        if row is None:
            current_app.logger.info(f"[verify] unknown or used code={code}")
            raise InvalidCode()

        now = utcnow()
        if row.is_expired(now):
            current_app.logger.info(f"[verify] expired code player={row.player_id} expires_at={row.expires_at}")
            raise CodeExpired()

        # Only the request that flips used=false -> true gets the session
        claimed = (
            session.query(VerificationCode)
            .filter_by(id=row.id, used=False)
            .update({'used': True}, synchronize_session=False)
        )
        if claimed != 1:
            session.rollback()
            current_app.logger.info(f"[verify] lost race for code player={row.player_id}")
            raise InvalidCode()

        player_session = PlayerSession(
            token=str(uuid.uuid4()),
            player_id=row.player_id,
            expires_at=now + timedelta(seconds=max_age_seconds),
        )
        session.add(player_session)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error(f"[verify] redeem failed: {exc}")
        raise UpstreamFailure('Failed to verify code') from exc

    current_app.logger.info(f"[verify] session issued player={player_session.player_id}")
    return player_session


def find_live_session(session, token, player_id) -> Optional[PlayerSession]:
    """Return the live session for ``token`` if it belongs to ``player_id``."""
    if not token or not player_id:
        return None
    player_session = session.get(PlayerSession, str(token))
    if player_session is None or player_session.player_id != player_id:
        return None
    if not player_session.is_live():
        return None
    return player_session


def purge_expired_sessions(session, now=None) -> int:
    """Delete player sessions past their expiry; returns the number removed."""
    cutoff = now or utcnow()
    try:
        removed = (
            session.query(PlayerSession)
            .filter(PlayerSession.expires_at <= cutoff)
            .delete(synchronize_session=False)
        )
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error(f"[sessions] purge failed: {exc}")
        raise UpstreamFailure('Failed to purge sessions') from exc
    current_app.logger.info(f"[sessions] purged {removed} expired sessions")
    return removed
