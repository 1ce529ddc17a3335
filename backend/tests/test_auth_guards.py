"""Bearer-token gate: header parsing, verifier wiring, and short-circuiting."""

import pytest
from firebase_admin import auth as firebase_auth
from sqlmodel import select

from langschool.errors import Forbidden, Unauthenticated
from langschool.models.review import Review
from langschool.services import identity_service
from langschool.services.identity_service import FirebasePrincipalVerifier, Principal, principal_from_claims
from langschool.utils.auth_guards import extract_bearer_token, require_self
from tests.conftest import ALICE, auth

AUTHENTICATED_CALLS = [
    ("post", "/reviews", {"tutor_id": 1, "rating": 5}),
    ("get", "/reviews/user/alice@example.com", None),
    ("put", "/reviews/1", {"rating": 1}),
    ("delete", "/reviews/1", None),
    ("post", "/tutorials", {"tutor_name": "X", "language": "German"}),
    ("post", "/bookings", {"tutorial_id": 1}),
]


def _call(client, method, path, body, headers=None):
    kwargs = {"headers": headers or {}}
    if body is not None:
        kwargs["json"] = body
    return client.request(method.upper(), path, **kwargs)


class TestExtractBearerToken:
    def test_valid_header(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_missing_header(self):
        with pytest.raises(Unauthenticated):
            extract_bearer_token(None)

    def test_wrong_scheme(self):
        with pytest.raises(Unauthenticated):
            extract_bearer_token("Basic dXNlcjpwYXNz")

    def test_lowercase_scheme_rejected(self):
        with pytest.raises(Unauthenticated):
            extract_bearer_token("bearer abc")

    def test_empty_token(self):
        with pytest.raises(Unauthenticated):
            extract_bearer_token("Bearer    ")


@pytest.mark.parametrize("method,path,body", AUTHENTICATED_CALLS)
def test_missing_header_rejected_before_verification(client, verifier, method, path, body):
    response = _call(client, method, path, body)
    assert response.status_code == 401
    assert response.json() == {"message": "unauthorized access"}
    assert verifier.calls == []


@pytest.mark.parametrize("method,path,body", AUTHENTICATED_CALLS)
def test_non_bearer_header_rejected(client, verifier, method, path, body):
    response = _call(client, method, path, body, headers={"Authorization": "Token alice-token"})
    assert response.status_code == 401
    assert response.json() == {"message": "unauthorized access"}
    assert verifier.calls == []


def test_rejected_token_uses_same_message(client, verifier):
    response = client.post("/reviews", json={"tutor_id": 1, "rating": 5}, headers=auth("forged-token"))
    assert response.status_code == 401
    assert response.json() == {"message": "unauthorized access"}
    assert verifier.calls == ["forged-token"]


def test_unauthenticated_create_writes_nothing(client, session, make_tutorial):
    tutorial = make_tutorial()

    response = client.post("/reviews", json={"tutor_id": tutorial.id, "rating": 5})
    assert response.status_code == 401

    session.expire_all()
    assert session.exec(select(Review)).all() == []
    assert session.get(type(tutorial), tutorial.id).total_reviews == 0


def test_public_listing_needs_no_token(client, verifier, make_tutorial):
    tutorial = make_tutorial()
    response = client.get(f"/reviews/{tutorial.id}")
    assert response.status_code == 200
    assert verifier.calls == []


class TestRequireSelf:
    def test_same_email(self):
        require_self(ALICE, ALICE.email)

    def test_other_email(self):
        with pytest.raises(Forbidden):
            require_self(ALICE, "bob@example.com")


class TestPrincipalFromClaims:
    def test_full_claims(self):
        principal = principal_from_claims({"email": "a@b.com", "name": "A B", "uid": "u1"})
        assert principal == Principal(email="a@b.com", name="A B", uid="u1")
        assert principal.display_name == "A B"

    def test_name_optional(self):
        principal = principal_from_claims({"email": "a@b.com", "sub": "u2"})
        assert principal.name is None
        assert principal.uid == "u2"
        assert principal.display_name == "a@b.com"

    def test_email_required(self):
        with pytest.raises(Unauthenticated):
            principal_from_claims({"uid": "u3", "phone_number": "+15551234567"})


class TestFirebasePrincipalVerifier:
    """Firebase itself is never contacted: verify_id_token is replaced."""

    @pytest.fixture
    def firebase_verifier(self, monkeypatch):
        verifier = FirebasePrincipalVerifier(credentials_path="", project_id="demo-project")
        monkeypatch.setattr(verifier, "_get_app", lambda: None)
        return verifier

    def test_valid_token(self, firebase_verifier, monkeypatch):
        def fake_verify(token, app=None):
            assert token == "good"
            return {"email": "learner@example.com", "name": "Learner", "uid": "abc"}

        monkeypatch.setattr(identity_service.auth, "verify_id_token", fake_verify)

        principal = firebase_verifier.verify("good")
        assert principal.email == "learner@example.com"
        assert principal.name == "Learner"

    def test_invalid_token(self, firebase_verifier, monkeypatch):
        def fake_verify(token, app=None):
            raise firebase_auth.InvalidIdTokenError("bad signature")

        monkeypatch.setattr(identity_service.auth, "verify_id_token", fake_verify)

        with pytest.raises(Unauthenticated):
            firebase_verifier.verify("forged")

    def test_malformed_token(self, firebase_verifier, monkeypatch):
        def fake_verify(token, app=None):
            raise ValueError("Illegal ID token provided")

        monkeypatch.setattr(identity_service.auth, "verify_id_token", fake_verify)

        with pytest.raises(Unauthenticated):
            firebase_verifier.verify("not-a-jwt")

    def test_empty_token_never_reaches_firebase(self, firebase_verifier, monkeypatch):
        def fake_verify(token, app=None):
            raise AssertionError("should not be called")

        monkeypatch.setattr(identity_service.auth, "verify_id_token", fake_verify)

        with pytest.raises(Unauthenticated):
            firebase_verifier.verify("")

    def test_misconfigured_firebase_is_not_a_401(self, monkeypatch):
        verifier = FirebasePrincipalVerifier(credentials_path="/missing/service-account.json", project_id="")

        def broken_app():
            raise ValueError("Invalid certificate argument")

        def fake_verify(token, app=None):
            raise AssertionError("should not be called")

        monkeypatch.setattr(verifier, "_get_app", broken_app)
        monkeypatch.setattr(identity_service.auth, "verify_id_token", fake_verify)

        with pytest.raises(ValueError, match="Invalid certificate"):
            verifier.verify("some-token")
