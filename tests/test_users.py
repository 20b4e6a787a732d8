from datetime import timedelta

from sqlalchemy import func, select

from app.models.activities import Activity
from app.models.users import UserRole, Users
from app.schemas.token import TokenType
from app.utils.security import create_token, verify_password
from tests.conftest import PASSWORD, auth_headers, create_user


SIGNUP = {"email": "a@b.com", "password": "secret123", "username": "alice"}


async def test_signup_creates_user_with_hashed_password(client, db, app):
    response = await client.post("/api/users/signup", json=SIGNUP)

    assert response.status_code == 201
    assert response.json() == {
        "message": "Registration successful! Please check your email to activate your account."
    }

    user = (await db.execute(select(Users).where(Users.email == "a@b.com"))).scalar_one()
    assert user.password != "secret123"
    assert verify_password("secret123", user.password)
    assert user.role == "user"

    sent = app.state.mailer.sent
    assert len(sent) == 1
    assert sent[0]["to"] == "a@b.com"
    assert "http://testserver/activate?token=" in sent[0]["html"]


async def test_signup_duplicate_email_conflicts(client, db):
    assert (await client.post("/api/users/signup", json=SIGNUP)).status_code == 201

    response = await client.post("/api/users/signup", json={**SIGNUP, "username": "other"})

    assert response.status_code == 409
    assert response.json() == {"message": "An account with this email already exists."}
    count = (await db.execute(select(func.count(Users.id)))).scalar_one()
    assert count == 1


async def test_signup_ignores_role(client, db):
    response = await client.post("/api/users/signup", json={**SIGNUP, "role": "admin"})

    assert response.status_code == 201
    user = (await db.execute(select(Users).where(Users.email == "a@b.com"))).scalar_one()
    assert user.role == "user"


async def test_signup_succeeds_when_email_fails(client, app):
    app.state.mailer.fail = True

    response = await client.post("/api/users/signup", json=SIGNUP)

    assert response.status_code == 201


async def test_signup_logs_account_activity(client, app, db):
    await client.post("/api/users/signup", json=SIGNUP)

    assert await app.state.activity_logger.drain() == 1
    activity = (await db.execute(select(Activity))).scalar_one()
    assert (activity.type, activity.action, activity.target_type) == ("account", "create", "User")


async def test_signup_validation_error_is_400(client):
    response = await client.post("/api/users/signup", json={"email": "not-an-email", "password": "x"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request"
    assert body["errors"]


async def test_signin_returns_token(client, user):
    response = await client.post("/api/users/signin", json={"email": user.email, "password": PASSWORD})

    assert response.status_code == 200
    assert response.json()["token"]


async def test_signin_rejects_wrong_password(client, user):
    response = await client.post("/api/users/signin", json={"email": user.email, "password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"message": "The provided credentials are invalid."}


async def test_signin_rejects_unknown_email(client):
    response = await client.post("/api/users/signin", json={"email": "ghost@example.com", "password": PASSWORD})

    assert response.status_code == 401


async def test_my_account_requires_token(client):
    response = await client.get("/api/users/my-account")

    assert response.status_code == 401
    assert response.json() == {"message": "Authentication failed: No token was provided."}


async def test_my_account_rejects_invalid_token(client):
    response = await client.get("/api/users/my-account", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401
    assert response.json() == {"message": "Authentication failed: Invalid token provided."}


async def test_my_account_rejects_expired_token(client, settings, user):
    token = create_token(user.id, user.role, settings.jwt, expires_in=timedelta(seconds=-1))

    response = await client.get("/api/users/my-account", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


async def test_my_account_never_returns_password(client, user, user_headers):
    response = await client.get("/api/users/my-account", headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == user.email
    assert "password" not in body


async def test_activate_account(client, settings, user, db):
    token = create_token(user.id, user.role, settings.jwt, token_type=TokenType.ACTIVATION)

    response = await client.get("/api/users/activate", params={"token": token})

    assert response.status_code == 200
    refreshed = await db.get(Users, user.id)
    assert refreshed.email_activated is True


async def test_activate_rejects_access_token(client, settings, user):
    token = create_token(user.id, user.role, settings.jwt)

    response = await client.get("/api/users/activate", params={"token": token})

    assert response.status_code == 401


async def test_change_password(client, user, user_headers, db):
    response = await client.post(
        "/api/users/change-password",
        json={"oldPassword": PASSWORD, "newPassword": "brand-new"},
        headers=user_headers,
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Your password has been updated successfully."}
    refreshed = await db.get(Users, user.id)
    assert verify_password("brand-new", refreshed.password)


async def test_change_password_wrong_old_password(client, user_headers):
    response = await client.post(
        "/api/users/change-password",
        json={"oldPassword": "wrong", "newPassword": "brand-new"},
        headers=user_headers,
    )

    assert response.status_code == 401


async def test_forgot_password_unknown_email(client):
    response = await client.post("/api/users/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 404
    assert response.json() == {"message": "No user found with the provided email address."}


async def test_forgot_then_reset_password(client, app, settings, user, db):
    response = await client.post("/api/users/forgot-password", json={"email": user.email})
    assert response.status_code == 200
    assert "reset-password?token=" in app.state.mailer.sent[-1]["html"]

    reset_token = create_token(user.id, user.role, settings.jwt, token_type=TokenType.RESET)
    response = await client.post(
        "/api/users/reset-password",
        json={"newPassword": "after-reset"},
        headers={"Authorization": f"Bearer {reset_token}"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Your password has been reset successfully."}
    refreshed = await db.get(Users, user.id)
    assert verify_password("after-reset", refreshed.password)


async def test_reset_password_rejects_access_token(client, user_headers):
    response = await client.post("/api/users/reset-password", json={"newPassword": "after-reset"}, headers=user_headers)

    assert response.status_code == 401


async def test_update_user_ignores_password(client, user, user_headers, db):
    response = await client.put(
        "/api/users/",
        json={"firstName": "Alice", "password": "hijack"},
        headers=user_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Your profile has been updated successfully."
    assert body["user"]["first_name"] == "Alice"
    refreshed = await db.get(Users, user.id)
    assert verify_password(PASSWORD, refreshed.password)


async def test_update_user_duplicate_username(client, sessionmaker, user_headers):
    await create_user(sessionmaker, email="other@example.com", username="taken")

    response = await client.put("/api/users/", json={"username": "taken"}, headers=user_headers)

    assert response.status_code == 409


async def test_delete_user(client, user, user_headers, db):
    response = await client.delete("/api/users/", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "User has been deleted successfully."}
    assert await db.get(Users, user.id) is None


async def test_view_user_by_id(client, sessionmaker, user_headers):
    other = await create_user(sessionmaker, email="bob@example.com", username="bob")

    response = await client.get(f"/api/users/{other.id}", headers=user_headers)

    assert response.status_code == 200
    assert response.json()["username"] == "bob"


async def test_search_users(client, sessionmaker, settings, user, user_headers):
    await create_user(sessionmaker, email="bob@example.com", username="bobby")
    admin = await create_user(sessionmaker, email="root@example.com", username="root", role=UserRole.ADMIN)

    response = await client.get("/api/users/search", params={"q": "BOB"}, headers=user_headers)
    assert [found["username"] for found in response.json()["users"]] == ["bobby"]

    response = await client.get("/api/users/search", params={"role": "admin"}, headers=auth_headers(settings, admin))
    assert [found["username"] for found in response.json()["users"]] == ["root"]
