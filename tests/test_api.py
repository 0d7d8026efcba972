"""API endpoint tests."""

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from app.api.v1.dependencies import get_post_service, get_request_context
from app.config import settings
from app.db.session import get_db
from app.identity.provider import IdentityProfile
from app.main import app, create_application
from app.models.notification import Notification
from app.models.post import Post


def _create_post(api, **overrides):
    payload = {"post_type": "lost", "item_name": "Blue umbrella", "date_found": "2024-03-01"}
    payload.update(overrides)
    response = api.post("/api/v1/posts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _cookie_parts(response):
    """Split a Set-Cookie header into the cookie name and its lower-cased attributes."""
    pair, *attributes = response.headers["set-cookie"].split(";")
    return pair.split("=", 1)[0].strip(), {a.strip().lower() for a in attributes}


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test that health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == settings.APP_NAME


class TestAuth:
    """Tests for login, logout and session endpoints."""

    def _start_login(self, client, redirect="/posts/new"):
        response = client.get("/auth/login", params={"redirect": redirect}, follow_redirects=False)
        assert response.status_code == 302
        location = response.headers["location"]
        return parse_qs(urlparse(location).query)["state"][0], location

    def test_login_redirects_to_provider(self, client):
        """Test that login sends the browser to the provider with a domain hint."""
        state, location = self._start_login(client)
        assert location.startswith("https://accounts.example.com/auth")
        assert "hd=wit.edu" in location
        assert len(state) == 32
        assert settings.SESSION_COOKIE_NAME in client.cookies

    def test_full_login_flow(self, client):
        """Test login, callback and session introspection end to end."""
        state, _ = self._start_login(client)
        anonymous_token = client.cookies.get(settings.SESSION_COOKIE_NAME)

        response = client.get(
            "/auth/callback", params={"state": state, "code": "auth-code"}, follow_redirects=False
        )
        assert response.status_code == 302
        assert response.headers["location"] == "/posts/new"
        assert client.cookies.get(settings.SESSION_COOKIE_NAME) != anonymous_token

        data = client.get("/auth/session").json()
        assert data["logged_in"] is True
        assert data["user"]["email"] == "person@wit.edu"

    def test_callback_with_wrong_state(self, client, identity_provider):
        """Test that a forged state is refused before any code exchange."""
        self._start_login(client)
        response = client.get(
            "/auth/callback", params={"state": "forged", "code": "auth-code"}, follow_redirects=False
        )
        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert identity_provider.exchanged_codes == []
        assert client.get("/auth/session").json()["logged_in"] is False

    def test_callback_without_session(self, client):
        """Test that a callback with no prior login attempt is refused."""
        response = client.get(
            "/auth/callback", params={"state": "abc", "code": "auth-code"}, follow_redirects=False
        )
        assert response.status_code == 400

    def test_callback_replay_rejected(self, client):
        """Test that the same state cannot be used twice."""
        state, _ = self._start_login(client)
        params = {"state": state, "code": "auth-code"}
        assert client.get("/auth/callback", params=params, follow_redirects=False).status_code == 302
        assert client.get("/auth/callback", params=params, follow_redirects=False).status_code == 400

    def test_callback_other_domain(self, client, identity_provider):
        """Test that accounts outside the allowed domain get an HTML denial page."""
        identity_provider.profile = IdentityProfile(subject="s-9", email="someone@otherschool.edu")
        state, _ = self._start_login(client)

        response = client.get(
            "/auth/callback", params={"state": state, "code": "auth-code"}, follow_redirects=False
        )
        assert response.status_code == 403
        assert "text/html" in response.headers["content-type"]
        assert "@wit.edu" in response.text

    def test_callback_exchange_failure(self, client, identity_provider):
        """Test that a failed code exchange is reported as a server error."""
        identity_provider.fail = True
        state, _ = self._start_login(client)

        response = client.get(
            "/auth/callback", params={"state": state, "code": "auth-code"}, follow_redirects=False
        )
        assert response.status_code == 500
        assert response.json()["message"] == "Authentication failed"

    def test_offsite_redirect_ignored(self, client):
        """Test that post-login redirects stay on this site."""
        state, _ = self._start_login(client, redirect="https://evil.example.com/")
        response = client.get(
            "/auth/callback", params={"state": state, "code": "auth-code"}, follow_redirects=False
        )
        assert response.headers["location"] == "/"

    def test_session_when_logged_out(self, client):
        """Test session introspection without a cookie."""
        response = client.get("/auth/session")
        assert response.status_code == 200
        assert response.json() == {"status": "success", "logged_in": False, "user": None}

    def test_session_preflight(self, client):
        """Test that OPTIONS on the session endpoint succeeds."""
        assert client.options("/auth/session").status_code == 200

    @pytest.mark.parametrize("method", ["get", "post"])
    def test_logout(self, login_as, alice, method):
        """Test that logout destroys the session."""
        api = login_as(alice)
        assert api.get("/auth/session").json()["logged_in"] is True

        response = getattr(api, method)("/auth/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"
        assert api.get("/auth/session").json()["logged_in"] is False

    def test_logout_without_session(self, client):
        """Test that logout always succeeds."""
        assert client.post("/auth/logout").status_code == 200

    def test_protected_endpoint_requires_login(self, client):
        """Test that API calls without a session get 401 with a login URL."""
        response = client.post("/api/v1/posts", json={"post_type": "lost", "item_name": "Keys"})
        assert response.status_code == 401
        data = response.json()
        assert data["status"] == "error"
        assert data["login_url"].startswith(settings.LOGIN_PATH + "?redirect=")

    def test_session_cookie_attributes_over_http(self, client):
        """Test the session cookie flags on a plain HTTP request."""
        response = client.get("/auth/login", follow_redirects=False)
        name, attributes = _cookie_parts(response)

        assert name == settings.SESSION_COOKIE_NAME
        assert "httponly" in attributes
        assert "samesite=lax" in attributes
        assert f"max-age={settings.SESSION_LIFETIME_SECONDS}" in attributes
        assert "path=/" in attributes
        assert "secure" not in attributes

    def test_session_cookie_secure_over_https(self, client):
        """Test that the session cookie is marked Secure on HTTPS requests."""
        with TestClient(app, base_url="https://testserver") as https_client:
            response = https_client.get("/auth/login", follow_redirects=False)
        _, attributes = _cookie_parts(response)

        assert "secure" in attributes
        assert "httponly" in attributes
        assert "samesite=lax" in attributes

    def test_logout_clears_cookie(self, login_as, alice):
        """Test that logout expires the session cookie."""
        response = login_as(alice).post("/auth/logout")
        name, attributes = _cookie_parts(response)

        assert name == settings.SESSION_COOKIE_NAME
        assert "max-age=0" in attributes
        assert "path=/" in attributes


class TestErrorHandling:
    """Tests for the application-wide error responses."""

    def test_unexpected_error_returns_json(self, client):
        """Test that a bug outside the service errors still yields the JSON error body."""

        class BrokenPostService:
            def list_posts(self, post_type=None):
                raise RuntimeError("boom")

        app.dependency_overrides[get_post_service] = lambda: BrokenPostService()
        with TestClient(app, raise_server_exceptions=False) as broken_client:
            response = broken_client.get("/api/v1/posts")

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"status": "error", "message": "Internal server error"}

    @pytest.fixture
    def page_app(self, db_session):
        page_app = create_application()

        @page_app.get("/account")
        def account(ctx=Depends(get_request_context)):
            return {"user_id": ctx.user_id}

        page_app.dependency_overrides[get_db] = lambda: db_session
        return page_app

    def test_page_without_session_redirects_to_login(self, page_app):
        """Test that browser pages send anonymous visitors to the login flow."""
        with TestClient(page_app) as page_client:
            response = page_client.get("/account", params={"tab": "posts"}, follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == f"{settings.LOGIN_PATH}?redirect=%2Faccount%3Ftab%3Dposts"

    def test_page_requested_as_json_gets_401(self, page_app):
        """Test that JSON clients get a 401 body instead of a redirect."""
        with TestClient(page_app) as page_client:
            response = page_client.get("/account", headers={"Accept": "application/json"})

        assert response.status_code == 401
        assert response.json()["login_url"] == f"{settings.LOGIN_PATH}?redirect=%2Faccount"


class TestPosts:
    """Tests for post endpoints."""

    def test_user_post_starts_pending(self, login_as, alice):
        """Test that a regular user's post awaits approval."""
        data = _create_post(login_as(alice))
        assert data["admin_approval_status"] == "pending"

    def test_admin_post_starts_approved(self, login_as, admin):
        """Test that an admin's post is approved immediately."""
        data = _create_post(login_as(admin))
        assert data["admin_approval_status"] == "approved"

    def test_legacy_admin_post_starts_approved(self, login_as, make_user):
        """Test that the legacy admin flag counts when no role is set."""
        legacy = make_user(role=None, is_admin=True)
        assert _create_post(login_as(legacy))["admin_approval_status"] == "approved"

    def test_list_and_filter(self, client, login_as, alice):
        """Test listing posts, newest first, with a type filter."""
        api = login_as(alice)
        _create_post(api, item_name="Wallet")
        _create_post(api, post_type="found", item_name="Scarf")

        data = client.get("/api/v1/posts").json()
        assert data["count"] == 2

        found = client.get("/api/v1/posts", params={"type": "found"}).json()
        assert [p["item_name"] for p in found["posts"]] == ["Scarf"]

    def test_pending_posts_are_listed(self, client, login_as, alice):
        """Test that the public listing includes unapproved posts."""
        _create_post(login_as(alice))
        posts = client.get("/api/v1/posts").json()["posts"]
        assert posts[0]["admin_approval_status"] == "pending"

    def test_get_post(self, client, login_as, alice):
        """Test fetching a single post."""
        post_id = _create_post(login_as(alice))["id"]
        data = client.get(f"/api/v1/posts/{post_id}").json()
        assert data["user_id"] == alice.id
        assert data["title"] == "Blue umbrella"

    def test_invalid_post_id(self, client):
        """Test that malformed ids are rejected."""
        response = client.get("/api/v1/posts/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["message"] == "Valid Post ID (UUID) is required"

    def test_missing_post(self, client):
        """Test that unknown ids return 404."""
        response = client.get("/api/v1/posts/00000000-0000-4000-8000-000000000000")
        assert response.status_code == 404

    def test_bad_date_rejected(self, login_as, alice):
        """Test that dates must be YYYY-MM-DD."""
        response = login_as(alice).post(
            "/api/v1/posts", json={"post_type": "lost", "item_name": "Keys", "date_found": "03/01/2024"}
        )
        assert response.status_code == 400
        assert "YYYY-MM-DD" in response.json()["message"]

    def test_bad_type_rejected(self, login_as, alice):
        """Test that post_type must be lost or found."""
        response = login_as(alice).post("/api/v1/posts", json={"post_type": "stolen", "item_name": "Keys"})
        assert response.status_code == 400

    def test_owner_updates_post(self, client, login_as, alice):
        """Test that the creator can edit their post."""
        api = login_as(alice)
        post_id = _create_post(api)["id"]

        response = api.put(f"/api/v1/posts/{post_id}", json={"description": "Left in library"})
        assert response.status_code == 200
        assert client.get(f"/api/v1/posts/{post_id}").json()["description"] == "Left in library"

    def test_non_owner_cannot_update_or_delete(self, login_as, alice, bob):
        """Test that other users are refused."""
        post_id = _create_post(login_as(alice))["id"]
        api = login_as(bob)

        assert api.put(f"/api/v1/posts/{post_id}", json={"title": "Mine now"}).status_code == 403
        assert api.delete(f"/api/v1/posts/{post_id}").status_code == 403

    def test_empty_update_rejected(self, login_as, alice):
        """Test that an update with no fields is refused."""
        api = login_as(alice)
        post_id = _create_post(api)["id"]
        response = api.put(f"/api/v1/posts/{post_id}", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"

    def test_owner_cannot_approve_own_post(self, client, login_as, alice):
        """Test that only admins change the approval status."""
        api = login_as(alice)
        post_id = _create_post(api)["id"]

        response = api.put(f"/api/v1/posts/{post_id}", json={"admin_approval_status": "approved"})
        assert response.status_code == 403
        assert client.get(f"/api/v1/posts/{post_id}").json()["admin_approval_status"] == "pending"

    def test_admin_approves_and_owner_is_notified(self, client, login_as, admin, alice):
        """Test that approval changes notify the post's owner."""
        owner_api = login_as(alice)
        post_id = _create_post(owner_api)["id"]

        response = login_as(admin).put(
            f"/api/v1/posts/{post_id}", json={"admin_approval_status": "approved"}
        )
        assert response.status_code == 200
        assert client.get(f"/api/v1/posts/{post_id}").json()["admin_approval_status"] == "approved"

        data = owner_api.get("/api/v1/notifications").json()
        assert data["unread_count"] == 1
        assert data["notifications"][0]["kind"] == "approval"

    def test_admin_invalid_status_rejected(self, login_as, admin, alice):
        """Test that unknown status values are refused."""
        post_id = _create_post(login_as(alice))["id"]
        response = login_as(admin).put(f"/api/v1/posts/{post_id}", json={"admin_approval_status": "published"})
        assert response.status_code == 400

    def test_admin_deletes_any_post(self, client, db_session, login_as, admin, alice):
        """Test that admins can delete other users' posts and their comments."""
        api = login_as(alice)
        post_id = _create_post(api)["id"]
        api.post("/api/v1/comments", json={"post_id": post_id, "content": "Still missing"})

        response = login_as(admin).delete(f"/api/v1/posts/{post_id}")
        assert response.status_code == 200
        assert client.get(f"/api/v1/posts/{post_id}").status_code == 404
        assert db_session.query(Post).count() == 0
        assert client.get("/api/v1/comments", params={"post_id": post_id}).status_code == 404


class TestComments:
    """Tests for comment endpoints."""

    def test_comment_lifecycle(self, client, login_as, alice, bob):
        """Test creating, listing, editing and deleting a comment."""
        post_id = _create_post(login_as(alice))["id"]
        api = login_as(bob)

        response = api.post("/api/v1/comments", json={"post_id": post_id, "content": "  I saw it  "})
        assert response.status_code == 201
        comment = response.json()["comment"]
        assert comment["content"] == "I saw it"
        assert comment["user_email"] == bob.email

        listing = client.get("/api/v1/comments", params={"post_id": post_id}).json()
        assert listing["count"] == 1

        updated = api.put(f"/api/v1/comments/{comment['id']}", json={"content": "Near the gym"})
        assert updated.status_code == 200
        assert updated.json()["comment"]["content"] == "Near the gym"

        assert api.delete(f"/api/v1/comments/{comment['id']}").status_code == 200
        assert client.get(f"/api/v1/comments/{comment['id']}").status_code == 404

    def test_comment_notifies_post_owner(self, login_as, alice, bob):
        """Test that commenting on someone's post notifies them."""
        owner_api = login_as(alice)
        post_id = _create_post(owner_api)["id"]
        login_as(bob).post("/api/v1/comments", json={"post_id": post_id, "content": "Found it"})

        data = owner_api.get("/api/v1/notifications").json()
        assert data["count"] == 1
        assert data["notifications"][0]["kind"] == "comment"
        assert data["notifications"][0]["post_id"] == post_id

    def test_own_comment_does_not_notify(self, login_as, alice):
        """Test that commenting on your own post creates no notification."""
        api = login_as(alice)
        post_id = _create_post(api)["id"]
        api.post("/api/v1/comments", json={"post_id": post_id, "content": "Bump"})
        assert api.get("/api/v1/notifications").json()["count"] == 0

    def test_non_author_cannot_edit(self, login_as, alice, bob):
        """Test that only the author edits a comment."""
        post_id = _create_post(login_as(alice))["id"]
        comment_id = login_as(bob).post(
            "/api/v1/comments", json={"post_id": post_id, "content": "Mine"}
        ).json()["comment"]["id"]

        api = login_as(alice)
        assert api.put(f"/api/v1/comments/{comment_id}", json={"content": "Edited"}).status_code == 403
        assert api.delete(f"/api/v1/comments/{comment_id}").status_code == 403

    def test_admin_moderates_comment(self, login_as, admin, alice):
        """Test that admins can edit and delete any comment."""
        api = login_as(alice)
        post_id = _create_post(api)["id"]
        comment_id = api.post(
            "/api/v1/comments", json={"post_id": post_id, "content": "Spam"}
        ).json()["comment"]["id"]

        admin_api = login_as(admin)
        assert admin_api.put(f"/api/v1/comments/{comment_id}", json={"content": "[removed]"}).status_code == 200
        assert admin_api.delete(f"/api/v1/comments/{comment_id}").status_code == 200

    def test_list_requires_post_id(self, client):
        """Test that listing without a post is refused."""
        assert client.get("/api/v1/comments").status_code == 400

    def test_comment_on_missing_post(self, login_as, alice):
        """Test that comments need an existing post."""
        response = login_as(alice).post(
            "/api/v1/comments",
            json={"post_id": "00000000-0000-4000-8000-000000000000", "content": "Hello"},
        )
        assert response.status_code == 404

    def test_blank_comment_rejected(self, login_as, alice):
        """Test that comments need content."""
        api = login_as(alice)
        post_id = _create_post(api)["id"]
        assert api.post("/api/v1/comments", json={"post_id": post_id, "content": "   "}).status_code == 400


class TestNotifications:
    """Tests for notification endpoints."""

    @pytest.fixture
    def notification(self, db_session, alice):
        record = Notification(user_id=alice.id, kind="comment", message="New comment", is_read=False)
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    def test_recipient_marks_read(self, login_as, alice, notification):
        """Test that the recipient can mark a notification read."""
        api = login_as(alice)
        response = api.put(f"/api/v1/notifications/{notification.id}", json={"is_read": True})
        assert response.status_code == 200

        data = api.get("/api/v1/notifications").json()
        assert data["unread_count"] == 0
        assert api.get("/api/v1/notifications", params={"unread_only": True}).json()["count"] == 0

    def test_is_read_required(self, login_as, alice, notification):
        """Test that the read flag must be supplied."""
        response = login_as(alice).put(f"/api/v1/notifications/{notification.id}", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "is_read field is required"

    def test_admin_cannot_touch_others_notifications(self, login_as, admin, notification):
        """Test that admins get no override on notifications."""
        api = login_as(admin)
        response = api.put(f"/api/v1/notifications/{notification.id}", json={"is_read": True})
        assert response.status_code == 403
        assert api.get(f"/api/v1/notifications/{notification.id}").status_code == 404

    def test_notifications_are_private(self, login_as, bob, notification):
        """Test that other users never see a notification."""
        assert login_as(bob).get("/api/v1/notifications").json()["count"] == 0


class TestUsers:
    """Tests for user endpoints."""

    def test_list_users_admin_only(self, login_as, admin, alice):
        """Test that only admins list users."""
        assert login_as(alice).get("/api/v1/users").status_code == 403

        data = login_as(admin).get("/api/v1/users").json()
        assert data["count"] == 2

    def test_view_own_profile(self, login_as, alice, bob):
        """Test that users see their own profile but not others'."""
        api = login_as(alice)
        assert api.get(f"/api/v1/users/{alice.id}").json()["email"] == alice.email
        assert api.get(f"/api/v1/users/{bob.id}").status_code == 403

    def test_update_own_profile(self, login_as, alice):
        """Test that users can change whitelisted fields."""
        response = login_as(alice).put(
            f"/api/v1/users/{alice.id}", json={"name": "Alice Smith", "phone": "555-123-4567"}
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Alice Smith"
        assert response.json()["phone"] == "555-123-4567"

    def test_user_cannot_change_role(self, login_as, alice):
        """Test that users cannot promote themselves."""
        response = login_as(alice).put(f"/api/v1/users/{alice.id}", json={"role": "admin"})
        assert response.status_code == 403

    def test_user_cannot_change_email(self, login_as, alice):
        """Test that users cannot change their email."""
        response = login_as(alice).put(f"/api/v1/users/{alice.id}", json={"email": "new@wit.edu"})
        assert response.status_code == 403

    def test_invalid_phone(self, login_as, alice):
        """Test that malformed phone numbers are rejected."""
        response = login_as(alice).put(f"/api/v1/users/{alice.id}", json={"phone": "call me"})
        assert response.status_code == 400

    def test_admin_changes_role(self, login_as, admin, alice):
        """Test that admins can promote users."""
        response = login_as(admin).put(f"/api/v1/users/{alice.id}", json={"role": "admin"})
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    def test_promotion_takes_effect_immediately(self, login_as, admin, alice):
        """Test that role changes apply on the user's next request."""
        api = login_as(alice)
        assert api.get("/api/v1/users").status_code == 403

        login_as(admin).put(f"/api/v1/users/{alice.id}", json={"role": "admin"})
        assert api.get("/api/v1/users").status_code == 200

    def test_last_admin_cannot_be_deleted(self, login_as, admin):
        """Test that the only admin cannot delete themselves."""
        response = login_as(admin).delete(f"/api/v1/users/{admin.id}")
        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete the last admin user"

    def test_user_deletes_self(self, login_as, alice):
        """Test that users can delete their own account."""
        api = login_as(alice)
        assert api.delete(f"/api/v1/users/{alice.id}").status_code == 200

    def test_user_cannot_delete_others(self, login_as, alice, bob):
        """Test that users cannot delete other accounts."""
        assert login_as(alice).delete(f"/api/v1/users/{bob.id}").status_code == 403
