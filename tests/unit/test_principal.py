import time

import jwt
import pytest

from secondleash.config.settings import get_settings
from secondleash.web.auth.principal import decode_principal


def _encode(payload: dict[str, object], secret: str | None = None) -> str:
    return jwt.encode(payload, secret or get_settings().jwt_secret, algorithm="HS256")


@pytest.mark.unit
class TestDecodePrincipal:
    def test_valid_token(self) -> None:
        token = _encode({"sub": "u-1", "role": "STAFF", "shelter_id": "shelter-a"})
        principal = decode_principal(token, get_settings())
        assert principal is not None
        assert principal.user_id == "u-1"
        assert principal.role == "STAFF"
        assert principal.shelter_id == "shelter-a"

    def test_token_without_shelter(self) -> None:
        token = _encode({"sub": "u-1", "role": "SUPER_ADMIN"})
        principal = decode_principal(token, get_settings())
        assert principal is not None
        assert principal.shelter_id is None

    def test_wrong_signature_rejected(self) -> None:
        token = _encode({"sub": "u-1", "role": "STAFF"}, secret="x" * 40)
        assert decode_principal(token, get_settings()) is None

    def test_expired_token_rejected(self) -> None:
        token = _encode({"sub": "u-1", "role": "STAFF", "exp": int(time.time()) - 60})
        assert decode_principal(token, get_settings()) is None

    def test_missing_role_claim_rejected(self) -> None:
        assert decode_principal(_encode({"sub": "u-1"}), get_settings()) is None

    def test_garbage_rejected(self) -> None:
        assert decode_principal("not-a-jwt", get_settings()) is None
