import pytest

from stockdesk.exceptions import NotFoundError
from stockdesk.services import auth_service

API = "/api/v1/auth"


def test_password_round_trip():
    hashed = auth_service.hash_password("secret")
    assert hashed != "secret"
    assert auth_service.verify_password("secret", hashed)
    assert not auth_service.verify_password("wrong", hashed)


def test_token_decodes_to_user(admin_user):
    token = auth_service.create_access_token(admin_user)
    payload = auth_service.decode_token(token)
    assert payload["sub"] == admin_user.id
    assert payload["role"] == "admin"
    assert auth_service.decode_token("not-a-token") is None


def test_ensure_default_admin_only_when_empty(db):
    auth_service.ensure_default_admin(db)
    auth_service.ensure_default_admin(db)
    users = auth_service.list_users(db)
    assert len(users) == 1
    assert users[0].role == "admin"


def test_resolve_actor_id(db, admin_user):
    assert auth_service.resolve_actor_id(db, None) is None
    assert auth_service.resolve_actor_id(db, admin_user.id) == admin_user.id
    with pytest.raises(NotFoundError):
        auth_service.resolve_actor_id(db, "ghost")


def test_login_and_me(client, admin_user):
    resp = client.post(f"{API}/login", json={"username": "admin", "password": "secret"})
    assert resp.status_code == 200
    token = resp.json()["token"]

    me = client.get(f"{API}/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["username"] == "admin"


def test_bad_login(client, admin_user):
    resp = client.post(f"{API}/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401


def test_me_requires_token(client):
    assert client.get(f"{API}/me").status_code == 401


def test_user_management_is_admin_only(client, db, admin_headers):
    resp = client.post(f"{API}/users", json={"username": "clerk", "password": "pw", "display_name": "Clerk"}, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["role"] == "staff"

    clerk = auth_service.authenticate(db, "clerk", "pw")
    clerk_headers = {"Authorization": f"Bearer {auth_service.create_access_token(clerk)}"}
    assert client.get(f"{API}/users", headers=clerk_headers).status_code == 403

    dup = client.post(f"{API}/users", json={"username": "clerk", "password": "pw"}, headers=admin_headers)
    assert dup.status_code == 409
