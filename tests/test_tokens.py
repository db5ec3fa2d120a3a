# tests/test_tokens.py
"""
Token service: minting, redemption (multi-use policy), listing and the admin guard
"""
from concurrent.futures import ThreadPoolExecutor

import pytest

from tarot_gate.access import attempt_unlock
from tarot_gate.admin import AdminCapability
from tarot_gate.db import Database
from tarot_gate.errors import AuthError, DependencyError, ForbiddenError, ValidationError
from tarot_gate.models import AccessToken, Base
from tarot_gate.tokens import TOKEN_ALPHABET, TokenService, generate_token


def _rows(database):
    with database.session() as db:
        return db.query(AccessToken).all()


@pytest.mark.parametrize("count", [1, 2, 17, 50])
def test_create_tokens_returns_distinct_unused_rows(token_service, database, admin, count):
    tokens = token_service.create_tokens(admin, count)

    assert len(tokens) == count
    assert len(set(tokens)) == count

    rows = {r.token: r for r in _rows(database)}
    assert set(rows) == set(tokens)
    assert all(r.used is False for r in rows.values())
    assert all(r.created_at is not None for r in rows.values())


def test_tokens_are_returned_in_creation_order(token_service, database, admin):
    tokens = token_service.create_tokens(admin, 5)

    with database.session() as db:
        stored = [r.token for r in db.query(AccessToken).order_by(AccessToken.id).all()]
    assert stored == tokens


def test_generated_tokens_use_alphanumeric_alphabet(token_service, admin, settings):
    for t in token_service.create_tokens(admin, 10):
        assert len(t) == settings.token_length >= 12
        assert set(t) <= set(TOKEN_ALPHABET)


@pytest.mark.parametrize("count", [0, -1, 51, 1000, "3", 2.5, None, True])
def test_out_of_range_count_is_rejected_not_clamped(token_service, database, admin, count):
    with pytest.raises(ValidationError):
        token_service.create_tokens(admin, count)
    assert _rows(database) == []


@pytest.mark.parametrize("capability", [None, {"is_admin": True}, "admin"])
def test_admin_operations_require_capability(token_service, database, capability):
    with pytest.raises(ForbiddenError):
        token_service.create_tokens(capability, 3)
    with pytest.raises(ForbiddenError):
        token_service.list_unused_tokens(capability)
    assert _rows(database) == []


def test_fresh_tokens_redeem_as_valid(token_service, admin):
    for t in token_service.create_tokens(admin, 3):
        assert token_service.redeem_token(t) is True


def test_unknown_token_is_invalid(token_service, admin):
    issued = token_service.create_token(admin)

    assert token_service.redeem_token("never-issued-token") is False
    assert token_service.redeem_token(issued.lower() + "x") is False


def test_redeem_is_repeatable_and_does_not_mark_used(token_service, database, admin):
    # Tokens are standing invite codes: redemption never consumes them.
    token = token_service.create_token(admin)

    for _ in range(5):
        assert token_service.redeem_token(token) is True

    (row,) = _rows(database)
    assert row.used is False


def test_list_unused_tokens_newest_first(token_service, admin):
    first = token_service.create_tokens(admin, 2)
    second = token_service.create_tokens(admin, 3)

    listed = [r.token for r in token_service.list_unused_tokens(admin)]
    assert listed == list(reversed(first + second))


def test_mark_token_as_used_hides_it_from_unused_list(token_service, admin):
    a, b = token_service.create_tokens(admin, 2)

    assert token_service.mark_token_as_used(a) is True
    assert token_service.mark_token_as_used("missing") is False

    assert [r.token for r in token_service.list_unused_tokens(admin)] == [b]
    # still redeemable under the multi-use policy
    assert token_service.redeem_token(a) is True


def test_store_failure_surfaces_as_dependency_error(token_service, database, admin):
    Base.metadata.drop_all(bind=database.engine)

    with pytest.raises(DependencyError):
        token_service.create_tokens(admin, 2)
    with pytest.raises(DependencyError):
        token_service.redeem_token("anything")
    with pytest.raises(DependencyError):
        token_service.list_unused_tokens(admin)


def test_duplicate_token_insert_is_rejected(token_service, admin, monkeypatch):
    monkeypatch.setattr("tarot_gate.tokens.generate_token", lambda length=16: "SAMEVALUE1234567")

    token_service.create_token(admin)
    with pytest.raises(DependencyError):
        token_service.create_token(admin)


def test_concurrent_single_creations_never_collide(tmp_path, settings):
    database = Database(f"sqlite:///{tmp_path / 'tokens.db'}")
    database.create_all()
    service = TokenService(database, settings)
    admin = AdminCapability(session_id="concurrency-test", issued_at=0.0)

    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(lambda _: service.create_token(admin), range(2)))
    finally:
        database.dispose()

    assert len(set(results)) == 2


def test_generate_token_entropy():
    batch = {generate_token() for _ in range(2000)}
    assert len(batch) == 2000


# ---------- End-user gate ----------

def test_attempt_unlock_accepts_issued_token(token_service, admin):
    token = token_service.create_token(admin)
    assert attempt_unlock(token_service, token) is None


@pytest.mark.parametrize("token", [None, "", "   ", 42, ["abc"]])
def test_attempt_unlock_requires_token(token_service, token):
    with pytest.raises(ValidationError):
        attempt_unlock(token_service, token)


def test_attempt_unlock_rejects_unknown_token(token_service):
    with pytest.raises(AuthError):
        attempt_unlock(token_service, "not-a-real-token")
