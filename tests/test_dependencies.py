"""Tests for the identity manager and the route access guards."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwk, jwt
from pydantic import SecretStr
import pytest
import requests

from life_lessons.managers.identity_manager import IdentityManager, InvalidTokenError
from life_lessons.routes.dependencies import (
    AccessLevel,
    require_access,
    require_access_admin,
    require_access_member,
    require_access_public,
)


@pytest.fixture
def identity_manager(test_settings):
    return IdentityManager(test_settings)


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_verify_token_returns_caller(identity_manager, make_token):
    caller = identity_manager.verify_token(make_token("Reader@Example.com"))

    assert caller == {"email": "reader@example.com", "uid": "uid-Reader@Example.com", "is_admin": False}


def test_verify_token_marks_admins(identity_manager, make_token):
    assert identity_manager.verify_token(make_token("admin@example.com"))["is_admin"] is True


@pytest.mark.parametrize(
    "token_kwargs",
    [
        {"expires_in": timedelta(seconds=-30)},
        {"secret": "some-other-secret"},
        {"email": None},
        {"email": "   "},
    ],
)
def test_verify_token_rejects(identity_manager, make_token, token_kwargs):
    with pytest.raises(InvalidTokenError):
        identity_manager.verify_token(make_token(**token_kwargs))


def test_verify_token_rejects_garbage(identity_manager):
    with pytest.raises(InvalidTokenError):
        identity_manager.verify_token("not.a.jwt")


def test_verify_token_checks_audience_and_issuer(test_settings, make_token):
    strict = IdentityManager(
        test_settings.model_copy(
            update={"IDENTITY_TOKEN_AUDIENCE": "life-lessons", "IDENTITY_TOKEN_ISSUER": "https://id.example.com"}
        )
    )

    good = make_token(aud="life-lessons", iss="https://id.example.com")
    assert strict.verify_token(good)["email"] == "member@example.com"

    with pytest.raises(InvalidTokenError):
        strict.verify_token(make_token(aud="someone-else", iss="https://id.example.com"))
    with pytest.raises(InvalidTokenError):
        strict.verify_token(make_token(aud="life-lessons", iss="https://evil.example.com"))


def test_verify_token_without_configured_secret(test_settings, make_token):
    unconfigured = IdentityManager(test_settings.model_copy(update={"IDENTITY_TOKEN_SECRET": SecretStr("")}))

    with pytest.raises(InvalidTokenError):
        unconfigured.verify_token(make_token())


@pytest.mark.asyncio
async def test_require_access_member_missing_token(identity_manager):
    with pytest.raises(HTTPException) as exc_info:
        await require_access_member(credentials=None, identity_manager=identity_manager)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Unauthorized Access!"


@pytest.mark.asyncio
async def test_require_access_member_invalid_token(identity_manager):
    with pytest.raises(HTTPException) as exc_info:
        await require_access_member(credentials=bearer("garbage"), identity_manager=identity_manager)

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_require_access_member_valid_token(identity_manager, make_token):
    caller = await require_access_member(credentials=bearer(make_token()), identity_manager=identity_manager)

    assert caller["email"] == "member@example.com"


@pytest.mark.asyncio
async def test_require_access_public_never_rejects(identity_manager, make_token):
    assert await require_access_public(credentials=None, identity_manager=identity_manager) is None
    assert await require_access_public(credentials=bearer("garbage"), identity_manager=identity_manager) is None

    caller = await require_access_public(credentials=bearer(make_token()), identity_manager=identity_manager)
    assert caller["email"] == "member@example.com"


@pytest.mark.asyncio
async def test_require_access_admin():
    admin = {"email": "admin@example.com", "is_admin": True}
    assert await require_access_admin(caller=admin) is admin

    with pytest.raises(HTTPException) as exc_info:
        await require_access_admin(caller={"email": "member@example.com", "is_admin": False})
    assert exc_info.value.status_code == 403


def test_require_access_maps_levels():
    assert require_access(AccessLevel.PUBLIC) is require_access_public
    assert require_access(AccessLevel.MEMBER) is require_access_member
    assert require_access(AccessLevel.ADMIN) is require_access_admin


@pytest.fixture(scope="module")
def rsa_signing_keys():
    """Two RS256 key pairs as (private PEM, public JWK) tuples, keyed by kid."""
    keys = {}
    for kid in ("key-1", "key-2"):
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        private_pem = private_key.private_bytes(
            serialization.Encoding.PEM, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
        )
        public_jwk = jwk.construct(private_pem, "RS256").public_key().to_dict()
        public_jwk["kid"] = kid
        keys[kid] = (private_pem, public_jwk)
    return keys


def rs256_token(private_pem, kid, email="member@example.com"):
    claims = {"sub": f"uid-{email}", "email": email, "exp": datetime.now(timezone.utc) + timedelta(hours=1)}
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


def jwks_response(*public_jwks):
    response = MagicMock()
    response.json.return_value = {"keys": list(public_jwks)}
    return response


@pytest.fixture
def jwks_identity_manager(test_settings):
    return IdentityManager(
        test_settings.model_copy(
            update={
                "IDENTITY_JWKS_URL": "https://id.example.com/.well-known/jwks.json",
                "IDENTITY_TOKEN_ALGORITHM": "RS256",
                "IDENTITY_TOKEN_SECRET": SecretStr(""),
            }
        )
    )


def test_verify_token_selects_provider_key_by_kid(jwks_identity_manager, rsa_signing_keys):
    pem_1, jwk_1 = rsa_signing_keys["key-1"]
    pem_2, jwk_2 = rsa_signing_keys["key-2"]

    with patch("life_lessons.managers.identity_manager.requests.get") as get:
        get.return_value = jwks_response(jwk_1, jwk_2)

        assert jwks_identity_manager.verify_token(rs256_token(pem_2, "key-2"))["email"] == "member@example.com"
        assert jwks_identity_manager.verify_token(rs256_token(pem_1, "key-1"))["email"] == "member@example.com"

    get.assert_called_once()


def test_verify_token_refetches_keys_after_rotation(jwks_identity_manager, rsa_signing_keys):
    pem_2, jwk_2 = rsa_signing_keys["key-2"]
    _, jwk_1 = rsa_signing_keys["key-1"]

    with patch("life_lessons.managers.identity_manager.requests.get") as get:
        get.side_effect = [jwks_response(jwk_1), jwks_response(jwk_1, jwk_2)]

        caller = jwks_identity_manager.verify_token(rs256_token(pem_2, "key-2", email="rotated@example.com"))

    assert caller["email"] == "rotated@example.com"
    assert get.call_count == 2


def test_verify_token_rejects_wrong_key_for_kid(jwks_identity_manager, rsa_signing_keys):
    pem_2, _ = rsa_signing_keys["key-2"]
    _, jwk_1 = rsa_signing_keys["key-1"]

    with patch("life_lessons.managers.identity_manager.requests.get") as get:
        get.return_value = jwks_response(jwk_1)

        with pytest.raises(InvalidTokenError):
            jwks_identity_manager.verify_token(rs256_token(pem_2, "key-1"))
        with pytest.raises(InvalidTokenError):
            jwks_identity_manager.verify_token(rs256_token(pem_2, "key-unknown"))


def test_verify_token_when_provider_keys_unavailable(jwks_identity_manager, rsa_signing_keys):
    pem_1, _ = rsa_signing_keys["key-1"]

    with patch("life_lessons.managers.identity_manager.requests.get") as get:
        get.side_effect = requests.ConnectionError("provider down")

        with pytest.raises(InvalidTokenError):
            jwks_identity_manager.verify_token(rs256_token(pem_1, "key-1"))
