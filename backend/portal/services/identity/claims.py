import uuid

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from portal.errors import InvalidUsername, Unauthenticated, UpstreamFailure, UsernameTaken
from portal.models import Profile, utcnow

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20


def validate_username(username) -> str:
    if not isinstance(username, str) or not (USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH):
        raise InvalidUsername()
    return username


def _held_by_other(session, username: str, player_id: str) -> bool:
    holder = (
        session.query(Profile.player_id)
        .filter(Profile.username == username, Profile.player_id != player_id)
        .first()
    )
    return holder is not None


def claim_username(session, player_id: str, username, identity_provider, email_domain: str = 'game.local') -> Profile:
    """Claim or change the display name of an authenticated player.

    The first claim creates a confirmed throwaway identity through
    ``identity_provider`` and binds a new profile to it; later claims update
    the username in place. Usernames are unique across players.
    """
    if not player_id:
        raise Unauthenticated('Invalid session')
    validate_username(username)

    try:
        if _held_by_other(session, username, player_id):
            raise UsernameTaken()
        profile = session.query(Profile).filter_by(player_id=player_id).first()
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error(f"[username] lookup failed player={player_id}: {exc}")
        raise UpstreamFailure('Failed to update username') from exc

    if profile is not None:
        profile.username = username
        profile.updated_at = utcnow()
        _commit_profile(session, player_id, username, 'Failed to update username')
        current_app.logger.info(f"[username] updated player={player_id} username={username}")
        return profile

    user = identity_provider.create_user(
        email=f"player_{uuid.uuid4()}@{email_domain}",
        password=str(uuid.uuid4()),
        email_confirm=True,
    )
    profile = Profile(id=user.id, player_id=player_id, username=username)
    session.add(profile)
    _commit_profile(session, player_id, username, 'Failed to create profile')
    current_app.logger.info(f"[username] created profile player={player_id} user={user.id} username={username}")
    return profile


def _commit_profile(session, player_id: str, username: str, failure_message: str) -> None:
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        # The unique index caught a claim that raced past the pre-check
        if _held_by_other(session, username, player_id):
            current_app.logger.info(f"[username] lost race player={player_id} username={username}")
            raise UsernameTaken() from exc
        current_app.logger.error(f"[username] integrity error player={player_id}: {exc}")
        raise UpstreamFailure(failure_message) from exc
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error(f"[username] write failed player={player_id}: {exc}")
        raise UpstreamFailure(failure_message) from exc
