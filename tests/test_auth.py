import time
from unittest.mock import patch

import pytest
from jose import jwt

from src.core.auth import AuthError, authenticate, get_bearer_token, validate_token

JWT_KEY = "pool-test-key"


def _token(key=JWT_KEY, **claims):
    payload = {"userId": "anonymous", "exp": int(time.time()) + 300}
    payload.update(claims)
    return jwt.encode(payload, key, algorithm="HS256")


class TestBearerToken:
    def test_valid(self):
        assert get_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [
        "",
        "Bearer",
        "Basic abc",
        "bearer abc",
        "Bearer abc def",
        "Bearer undefined",
    ])
    def test_invalid(self, header):
        with pytest.raises(AuthError):
            get_bearer_token(header)


class TestValidateToken:
    def test_valid(self):
        claims = validate_token(_token(role="guest"), JWT_KEY)
        assert claims["role"] == "guest"

    def test_wrong_key(self):
        with pytest.raises(AuthError):
            validate_token(_token(key="other-key"), JWT_KEY)

    def test_expired(self):
        with pytest.raises(AuthError):
            validate_token(_token(exp=int(time.time()) - 60), JWT_KEY)

    def test_garbage(self):
        with pytest.raises(AuthError):
            validate_token("not-a-jwt", JWT_KEY)


def test_authenticate_returns_token_and_claims():
    token = _token()
    got, claims = authenticate(f"Bearer {token}", JWT_KEY)
    assert got == token
    assert claims["userId"] == "anonymous"


# --- API ---

@patch("src.web.dependencies.settings")
def test_search_requires_token(mock_settings, client, mock_jmrl_client):
    mock_settings.auth_enabled = True
    mock_settings.jwt_key = JWT_KEY

    response = client.post("/api/search", json={"query": "keyword: {cats}"})
    assert response.status_code == 401
    mock_jmrl_client.search.assert_not_called()


@patch("src.web.dependencies.settings")
def test_resource_rejects_bad_signature(mock_settings, client, mock_jmrl_client):
    mock_settings.auth_enabled = True
    mock_settings.jwt_key = JWT_KEY

    response = client.get(
        "/api/resource/1234567",
        headers={"Authorization": f"Bearer {_token(key='other-key')}"},
    )
    assert response.status_code == 401
    mock_jmrl_client.get_bib.assert_not_called()


@patch("src.web.dependencies.settings")
def test_resource_with_valid_token(mock_settings, client, mock_jmrl_client, bib):
    mock_settings.auth_enabled = True
    mock_settings.jwt_key = JWT_KEY
    mock_jmrl_client.get_bib.return_value = bib

    response = client.get(
        "/api/resource/1234567",
        headers={"Authorization": f"Bearer {_token()}"},
    )
    assert response.status_code == 200


@patch("src.web.dependencies.settings")
def test_pool_endpoints_are_public(mock_settings, client):
    mock_settings.auth_enabled = True
    mock_settings.jwt_key = JWT_KEY

    assert client.get("/api/providers").status_code == 200
    assert client.get("/favicon.ico").status_code == 204
