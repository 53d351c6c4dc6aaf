from stk_community import config
from stk_community.models.admin import Admin
from stk_community.utils.auth import (
    INVALID_CREDENTIALS,
    check_credentials,
    create_session_token,
    decode_session_token,
    is_password_hash,
)


def test_demo_pair_skips_the_store(no_store):
    assert check_credentials(no_store, "demo", "demo-password") is True


def test_stored_admin_is_checked_against_hash(db, stored_admin):
    assert check_credentials(db, "editor", "s3cret-pass") is True
    assert check_credentials(db, "editor", "wrong") is False


def test_unknown_user_is_rejected(db):
    assert check_credentials(db, "nobody", "demo-password") is False


def test_plaintext_row_is_rejected(db):
    db.add(Admin(username="legacy", password="plain"))
    db.commit()
    assert check_credentials(db, "legacy", "plain") is False


def test_session_token_round_trip():
    token = create_session_token("editor")
    assert decode_session_token(token) == "editor"
    assert decode_session_token(token + "x") is None
    assert decode_session_token("not-a-token") is None


def test_is_password_hash():
    assert not is_password_hash("plain")


def test_login_sets_cookie(client):
    resp = client.post("/admin/login", data={"username": "demo", "password": "demo-password"},
                       follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/admin"
    assert config.SESSION_COOKIE_NAME in resp.cookies

    resp = client.get("/admin")
    assert resp.status_code == 200
    assert "Universities" in resp.text


def test_login_failure(client):
    resp = client.post("/admin/login", data={"username": "demo", "password": "nope"})
    assert resp.status_code == 401
    assert INVALID_CREDENTIALS in resp.text


def test_admin_routes_show_login_without_session(client):
    resp = client.get("/admin")
    assert resp.status_code == 200
    assert 'action="/admin/login"' in resp.text

    resp = client.post("/admin/pages/uber-uns", data={"mission": "x"})
    assert resp.status_code == 401
    assert 'action="/admin/login"' in resp.text


def test_logout_clears_cookie(admin_client):
    resp = admin_client.post("/admin/logout", follow_redirects=False)
    assert resp.status_code == 303
    admin_client.cookies.clear()
    assert 'action="/admin/login"' in admin_client.get("/admin").text


def test_bearer_token_flow(client, stored_admin):
    resp = client.post("/token", data={"username": "editor", "password": "s3cret-pass"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    resp = client.get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json() == {"username": "editor"}


def test_token_rejects_bad_credentials(client):
    resp = client.post("/token", data={"username": "editor", "password": "nope"})
    assert resp.status_code == 401
    assert client.get("/me").status_code == 401
