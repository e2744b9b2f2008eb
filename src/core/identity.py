"""Identity resolution from bearer tokens.

Tokens are HS256 JWTs carrying ``sub`` (the user id) and ``role``. A
resolved identity is cached for a short, fixed window so repeated requests
with the same token skip decoding. The cache belongs to the resolver
instance, and the resolver belongs to whoever builds the application.
"""

import logging
import threading
import time
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

import pytz
from jose import JWTError, jwt

import config
from core.exceptions import UnauthenticatedError
from schemas.identity import Identity
from utils.ids import is_valid_id

logger = logging.getLogger(__name__)


def create_access_token(
    user_id: str,
    role: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    secret_key: str = config.JWT_SECRET_KEY,
    algorithm: str = config.JWT_ALGORITHM,
) -> str:
    """Create a JWT access token.

    Args:
        user_id: Value for the ``sub`` claim.
        role: Optional platform role claim.
        expires_delta: Optional expiration time delta.
        secret_key: Signing key.
        algorithm: Signing algorithm.

    Returns:
        Encoded JWT token string.
    """
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(
            minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode = {"sub": user_id, "exp": expire}
    if role:
        to_encode["role"] = role
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


class SessionCache:
    """Bounded, thread-safe cache of resolved identities with a TTL.

    Entries expire after ``ttl_seconds`` or at their own ``expires_at``,
    whichever comes first. When full, the oldest entry is evicted.
    """

    def __init__(
        self,
        ttl_seconds: float = config.IDENTITY_CACHE_TTL_SECONDS,
        max_size: int = config.IDENTITY_CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: "OrderedDict[str, Tuple[float, Identity]]" = OrderedDict()
        self._lock = threading.Lock()
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock

    def get(self, token: str) -> Optional[Identity]:
        with self._lock:
            entry = self._entries.get(token)
            if entry is None:
                return None
            deadline, identity = entry
            if self._clock() >= deadline:
                del self._entries[token]
                return None
            return identity

    def set(self, token: str, identity: Identity, expires_in: Optional[float] = None) -> None:
        """Cache an identity.

        Args:
            token: The bearer token the identity was resolved from.
            identity: The resolved identity.
            expires_in: Seconds until the token itself expires, if known.
        """
        lifetime = self._ttl if expires_in is None else min(self._ttl, expires_in)
        if lifetime <= 0:
            return
        with self._lock:
            self._entries.pop(token, None)
            while len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)
            self._entries[token] = (self._clock() + lifetime, identity)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class IdentityResolver:
    """Turns bearer tokens into identities."""

    def __init__(
        self,
        secret_key: str = config.JWT_SECRET_KEY,
        algorithm: str = config.JWT_ALGORITHM,
        cache: Optional[SessionCache] = None,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.cache = cache if cache is not None else SessionCache()

    def _decode(self, token: str) -> Dict:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise UnauthenticatedError("Invalid authentication credentials") from exc

    def resolve(self, token: Optional[str]) -> Identity:
        """Resolve a bearer token to an identity.

        Raises:
            UnauthenticatedError: If the token is missing, invalid, expired,
                or its subject is not a well-formed user id.
        """
        if not token:
            raise UnauthenticatedError()

        cached = self.cache.get(token)
        if cached is not None:
            return cached

        payload = self._decode(token)
        user_id = payload.get("sub")
        if not is_valid_id(user_id):
            raise UnauthenticatedError("Invalid authentication credentials")

        identity = Identity(user_id=user_id, role=payload.get("role"))
        expires_in = None
        if payload.get("exp") is not None:
            expires_in = float(payload["exp"]) - time.time()
        self.cache.set(token, identity, expires_in=expires_in)
        return identity
