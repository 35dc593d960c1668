from app.core.security import decode_session_token

from conftest import SEED_PASSWORD

API = "/api/v1"


def test_register_sets_session_cookie(client):
    response = client.post(
        f"{API}/auth/register",
        json={"name": "Dana", "email": "dana@example.com", "password": "dana-pass"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "user"
    assert "password_hash" not in data

    token = response.cookies.get("session")
    assert decode_session_token(token) == data["uid"]
    assert response.headers["set-cookie"].startswith(f"session={token};")
    assert '"' not in token
    assert client.get(f"{API}/auth/me").json()["email"] == "dana@example.com"


def test_register_duplicate_email(client):
    response = client.post(
        f"{API}/auth/register",
        json={"name": "Copy", "email": "admin@example.com", "password": "whatever"},
    )
    assert response.status_code == 409
    assert response.json()["code"] == "DUPLICATE_IDENTITY"


def test_login_and_logout(client):
    response = client.post(f"{API}/auth/login", json={"email": "admin@example.com", "password": SEED_PASSWORD})
    assert response.status_code == 200
    assert response.json()["uid"] == "admin123"
    assert client.get(f"{API}/auth/me").status_code == 200

    response = client.post(f"{API}/auth/logout")
    assert response.status_code == 200
    assert client.get(f"{API}/auth/me").status_code == 401


def test_login_wrong_password(client):
    response = client.post(f"{API}/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["code"] == "AUTHENTICATION_FAILED"


def test_update_profile(user_client):
    response = user_client.patch(f"{API}/auth/me", json={"display_name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["display_name"] == "Renamed"

    response = user_client.patch(f"{API}/auth/me", json={"display_name": ""})
    assert response.status_code == 422


def test_change_password(user_client):
    response = user_client.post(
        f"{API}/auth/me/password",
        json={"current_password": SEED_PASSWORD, "new_password": "fresh-pass"},
    )
    assert response.status_code == 200

    response = user_client.post(f"{API}/auth/login", json={"email": "user@example.com", "password": "fresh-pass"})
    assert response.status_code == 200


def test_navigation_endpoint(admin_client):
    data = admin_client.get(f"{API}/navigation").json()
    assert data["role"] == "admin"
    assert len(data["items"]) == 5
