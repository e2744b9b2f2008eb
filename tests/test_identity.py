from datetime import datetime, timedelta

import pytest
import pytz
from jose import jwt

from core.exceptions import UnauthenticatedError
from core.identity import IdentityResolver, SessionCache, create_access_token
from schemas.identity import Identity

SECRET = "identity-secret"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_resolve_token():
    resolver = IdentityResolver(secret_key=SECRET)
    token = create_access_token("a" * 24, "educator", secret_key=SECRET)

    identity = resolver.resolve(token)

    assert identity.model_dump() == {"user_id": "a" * 24, "role": "educator"}


@pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
def test_resolve_rejects_missing_or_garbage(token):
    with pytest.raises(UnauthenticatedError):
        IdentityResolver(secret_key=SECRET).resolve(token)


def test_resolve_rejects_wrong_signature():
    token = create_access_token("a" * 24, secret_key="other-secret")
    with pytest.raises(UnauthenticatedError):
        IdentityResolver(secret_key=SECRET).resolve(token)


def test_resolve_rejects_expired_token():
    token = create_access_token("a" * 24, expires_delta=timedelta(seconds=-10), secret_key=SECRET)
    with pytest.raises(UnauthenticatedError):
        IdentityResolver(secret_key=SECRET).resolve(token)


def test_resolver_caches_identities():
    cache = SessionCache(ttl_seconds=60)
    resolver = IdentityResolver(secret_key=SECRET, cache=cache)
    token = create_access_token("a" * 24, secret_key=SECRET)

    first = resolver.resolve(token)
    assert len(cache) == 1
    assert resolver.resolve(token) is first


def test_resolvers_do_not_share_cache():
    token = create_access_token("a" * 24, secret_key=SECRET)
    first = IdentityResolver(secret_key=SECRET)
    second = IdentityResolver(secret_key=SECRET)

    first.resolve(token)

    assert len(first.cache) == 1
    assert len(second.cache) == 0


def test_session_cache_expires_entries():
    clock = FakeClock()
    cache = SessionCache(ttl_seconds=5, clock=clock)
    identity = Identity(user_id="a" * 24)

    cache.set("token", identity)
    clock.now += 4.9
    assert cache.get("token") is identity
    clock.now += 0.2
    assert cache.get("token") is None


def test_session_cache_respects_token_expiry():
    clock = FakeClock()
    cache = SessionCache(ttl_seconds=300, clock=clock)
    cache.set("token", Identity(user_id="a" * 24), expires_in=2)

    clock.now += 3
    assert cache.get("token") is None


def test_session_cache_is_bounded():
    cache = SessionCache(ttl_seconds=60, max_size=2)
    for i in range(3):
        cache.set(f"t{i}", Identity(user_id=str(i) * 24))

    assert len(cache) == 2
    assert cache.get("t0") is None
    assert cache.get("t2") is not None


@pytest.mark.parametrize("subject", ["student-1", "A" * 24, "a" * 23, "é" * 24])
def test_resolve_rejects_malformed_subject(subject):
    token = create_access_token(subject, secret_key=SECRET)
    resolver = IdentityResolver(secret_key=SECRET)

    with pytest.raises(UnauthenticatedError):
        resolver.resolve(token)
    assert len(resolver.cache) == 0


def test_resolve_rejects_token_without_subject():
    expire = datetime.now(pytz.utc) + timedelta(minutes=5)
    token = jwt.encode({"exp": expire, "role": "student"}, SECRET, algorithm="HS256")
    with pytest.raises(UnauthenticatedError):
        IdentityResolver(secret_key=SECRET).resolve(token)
