"""
Unit tests for server-side session management
"""

from datetime import timedelta

import pytest

from vending_info.db.models.user_session import UserSession
from vending_info.services.sessions import (
    clean_expired_sessions,
    create_session,
    revoke_session,
    revoke_user_sessions,
    utcnow,
    verify_session,
)
from vending_info.services.users import authenticate
from tests.utils.factories import OWNER_PASSWORD, SecurityTestDataFactory

pytestmark = pytest.mark.unit


def session_count(db, **filters):
    return db.query(UserSession).filter_by(**filters).count()


class TestCreateSession:

    def test_valid_credentials_yield_a_session_for_the_same_user(self, db_session, owner_user):
        user = authenticate(db_session, "owner@example.com", OWNER_PASSWORD)
        assert user is not None

        user_session = create_session(db_session, user.id)
        resolved = verify_session(db_session, user_session.token)

        assert resolved is not None
        assert resolved.user_id == owner_user.id
        assert resolved.user.email == "owner@example.com"

    def test_expiry_is_24_hours_ahead(self, db_session, owner_user):
        before = utcnow()
        user_session = create_session(db_session, owner_user.id)

        lifetime = user_session.expires_at - before
        assert timedelta(hours=23, minutes=59) < lifetime <= timedelta(hours=24, seconds=5)

    def test_sessions_are_independent(self, db_session, owner_user):
        first = create_session(db_session, owner_user.id)
        second = create_session(db_session, owner_user.id)
        first_token, second_token = first.token, second.token

        assert first_token != second_token
        assert verify_session(db_session, first_token) is not None
        assert verify_session(db_session, second_token) is not None

        revoke_session(db_session, first_token)

        assert verify_session(db_session, first_token) is None
        assert verify_session(db_session, second_token) is not None

    def test_purges_expired_sessions_of_the_user(self, db_session, owner_user):
        expired = create_session(db_session, owner_user.id, lifetime=timedelta(seconds=-1))
        expired_token = expired.token

        create_session(db_session, owner_user.id)

        assert session_count(db_session, token=expired_token) == 0
        assert session_count(db_session, user_id=owner_user.id) == 1


class TestVerifySession:

    @pytest.mark.parametrize("token", SecurityTestDataFactory.create_unknown_tokens())
    def test_never_issued_token(self, db_session, owner_user, token):
        create_session(db_session, owner_user.id)
        assert verify_session(db_session, token) is None

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, db_session, token):
        assert verify_session(db_session, token) is None

    def test_expired_session_is_deleted(self, db_session, owner_user):
        user_session = create_session(db_session, owner_user.id)
        token = user_session.token
        user_session.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert verify_session(db_session, token) is None
        assert session_count(db_session, token=token) == 0


class TestRevocation:

    def test_revoke_session_is_idempotent(self, db_session, owner_user):
        token = create_session(db_session, owner_user.id).token

        assert revoke_session(db_session, token) is True
        assert revoke_session(db_session, token) is False
        assert revoke_session(db_session, None) is False

    def test_revoke_user_sessions_keeps_current(self, db_session, owner_user, other_owner):
        current = create_session(db_session, owner_user.id).token
        create_session(db_session, owner_user.id)
        create_session(db_session, owner_user.id)
        foreign = create_session(db_session, other_owner.id).token

        assert revoke_user_sessions(db_session, owner_user.id, keep_token=current) == 2

        assert verify_session(db_session, current) is not None
        assert verify_session(db_session, foreign) is not None
        assert session_count(db_session, user_id=owner_user.id) == 1

    def test_clean_expired_sessions(self, db_session, owner_user, other_owner):
        create_session(db_session, owner_user.id, lifetime=timedelta(seconds=-1))
        create_session(db_session, other_owner.id, lifetime=timedelta(seconds=-1))
        live = create_session(db_session, owner_user.id).token

        # The live session creation above purged the owner's expired row already
        assert clean_expired_sessions(db_session) == 1
        assert clean_expired_sessions(db_session) == 0
        assert verify_session(db_session, live) is not None
