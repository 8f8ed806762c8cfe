"""
# Identity Manager

Verifies bearer tokens issued by the external identity provider and turns them into a
caller dict the routes can trust:

```python
{"email": "ada@example.com", "uid": "f1x...", "is_admin": False}
```

Tokens are JWTs checked with python-jose. The verification key is either:

- `IDENTITY_TOKEN_SECRET` with `IDENTITY_TOKEN_ALGORITHM` (shared secret or static key), or
- when `IDENTITY_JWKS_URL` is set, the provider's public key whose `kid` matches the token
  header. Providers that sign RS256 tokens with rotating keys need this mode. The key set
  is fetched with requests, cached for `IDENTITY_JWKS_CACHE_SECONDS` and refetched as soon
  as a token names a `kid` the cache does not know.

When `IDENTITY_TOKEN_AUDIENCE` / `IDENTITY_TOKEN_ISSUER` are configured the `aud` / `iss`
claims must match too. Expiry (`exp`) is always enforced.

Admin status is not a token claim: it comes from the `ADMIN_EMAILS` setting so the
identity provider needs no custom claims.
"""

import time
from typing import Any, Dict, List, Optional

from jose import ExpiredSignatureError, JWTError, jwt
import requests

from life_lessons.config import Settings
from life_lessons.managers.logging_manager import get_logger

logger = get_logger(name="identity", prefix="[IDENTITY]")

JWKS_FETCH_TIMEOUT_SECONDS = 5


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified or carries no email."""


class IdentityManager:
    """Bearer token verification against the configured identity provider key."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._jwks: List[Dict[str, Any]] = []
        self._jwks_fetched_at: Optional[float] = None

    def _fetch_jwks(self) -> List[Dict[str, Any]]:
        try:
            response = requests.get(self.settings.IDENTITY_JWKS_URL, timeout=JWKS_FETCH_TIMEOUT_SECONDS)
            response.raise_for_status()
            keys = response.json().get("keys", [])
        except (requests.RequestException, ValueError) as e:
            logger.error("Failed to fetch identity provider keys from %s: %s", self.settings.IDENTITY_JWKS_URL, e)
            raise InvalidTokenError("Identity provider keys unavailable")

        self._jwks = keys
        self._jwks_fetched_at = time.monotonic()
        logger.info("Loaded %d identity provider keys", len(keys))
        return keys

    def _cached_jwks(self) -> List[Dict[str, Any]]:
        if self._jwks_fetched_at is None:
            return self._fetch_jwks()
        if time.monotonic() - self._jwks_fetched_at > self.settings.IDENTITY_JWKS_CACHE_SECONDS:
            return self._fetch_jwks()
        return self._jwks

    def _signing_key(self, token: str) -> Dict[str, Any]:
        """The JWK whose `kid` matches the token header, refetching once on a miss."""
        kid = jwt.get_unverified_header(token).get("kid")
        if not kid:
            raise InvalidTokenError("Token header has no kid")

        key = next((k for k in self._cached_jwks() if k.get("kid") == kid), None)
        if key is None:
            # Keys rotated since the last fetch
            key = next((k for k in self._fetch_jwks() if k.get("kid") == kid), None)
        if key is None:
            raise InvalidTokenError(f"Unknown signing key {kid}")
        return key

    def _verification_key(self, token: str) -> Any:
        if self.settings.IDENTITY_JWKS_URL:
            return self._signing_key(token)

        secret = self.settings.IDENTITY_TOKEN_SECRET.get_secret_value()
        if not secret:
            raise InvalidTokenError("Identity token secret is not configured")
        return secret

    def _decode(self, token: str) -> Dict[str, Any]:
        key = self._verification_key(token)

        options = {"verify_aud": self.settings.IDENTITY_TOKEN_AUDIENCE is not None}
        return jwt.decode(
            token,
            key,
            algorithms=[self.settings.IDENTITY_TOKEN_ALGORITHM],
            audience=self.settings.IDENTITY_TOKEN_AUDIENCE,
            issuer=self.settings.IDENTITY_TOKEN_ISSUER,
            options=options,
        )

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify `token` and return the caller.

        Args:
            token (str): The raw bearer token (without the `Bearer ` prefix).

        Returns:
            dict: `email` (lower-cased), `uid` (the `sub` claim) and `is_admin`.

        Raises:
            InvalidTokenError: If the signature, expiry, audience or issuer check fails, the
                provider keys cannot be loaded, or the token has no `email` claim.
        """
        try:
            payload = self._decode(token)
        except ExpiredSignatureError:
            logger.info("Rejected expired identity token")
            raise InvalidTokenError("Token expired")
        except JWTError as e:
            logger.warning("Rejected identity token: %s", e)
            raise InvalidTokenError("Invalid token")

        email = payload.get("email")
        if not isinstance(email, str) or not email.strip():
            logger.warning("Rejected identity token without an email claim (sub=%s)", payload.get("sub"))
            raise InvalidTokenError("Token has no email")

        email = email.strip().lower()
        return {
            "email": email,
            "uid": payload.get("sub"),
            "is_admin": email in self.settings.admin_email_set,
        }
