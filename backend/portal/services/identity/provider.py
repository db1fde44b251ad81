from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from portal.errors import UpstreamFailure
from portal.models import User


class LocalIdentityProvider:
    """Identity provider backed by the ``users`` table.

    Mirrors an admin "create user" API: the account is written and committed
    on its own, independent of whatever the caller does next.
    """

    def __init__(self, db):
        self.db = db

    def create_user(self, email: str, password: str, email_confirm: bool = False) -> User:
        session = self.db.session
        user = User(email=email, email_confirmed=email_confirm)
        user.set_password(password)
        try:
            session.add(user)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            current_app.logger.error(f"[identity] create_user failed email={email}: {exc}")
            raise UpstreamFailure('Failed to create user account') from exc
        current_app.logger.info(f"[identity] created user id={user.id}")
        return user
