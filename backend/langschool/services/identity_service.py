"""Firebase identity verification.

Thin wrapper around ``firebase_admin.auth`` that turns an opaque ID token into
a verified Principal. Issuance, refresh and revocation stay with Firebase.

Reads configuration from environment variables:
  - FIREBASE_CREDENTIALS  path to a service-account JSON file
  - FIREBASE_PROJECT_ID   project id, used with application-default credentials
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions

from langschool.errors import Unauthenticated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Verified, request-scoped identity. Never persisted."""

    email: str
    name: Optional[str] = None
    uid: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email


def principal_from_claims(claims: dict) -> Principal:
    """
    Build a Principal from decoded ID-token claims.

    Raises:
        Unauthenticated if the token carries no email claim
    """
    email = (claims.get("email") or "").strip()
    if not email:
        raise Unauthenticated()
    return Principal(email=email, name=claims.get("name") or None, uid=claims.get("uid") or claims.get("sub"))


class FirebasePrincipalVerifier:
    """
    Verifies Firebase ID tokens.

    The Firebase app is initialised on first use so importing the module never
    touches credentials.
    """

    def __init__(self, credentials_path: Optional[str] = None, project_id: Optional[str] = None):
        self.credentials_path = credentials_path if credentials_path is not None else os.getenv("FIREBASE_CREDENTIALS", "")
        self.project_id = project_id if project_id is not None else os.getenv("FIREBASE_PROJECT_ID", "")
        self._app: Optional[firebase_admin.App] = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app()
        except ValueError:
            options = {"projectId": self.project_id} if self.project_id else None
            if self.credentials_path:
                cred = credentials.Certificate(self.credentials_path)
            else:
                cred = credentials.ApplicationDefault()
            self._app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase app initialized (project=%s)", self.project_id or "<from credentials>")
        return self._app

    def verify(self, credential: str) -> Principal:
        """
        Verify an ID token and return its Principal.

        Raises:
            Unauthenticated: token empty, malformed, expired, revoked, signed
                by the wrong key or issued for another project

        Firebase misconfiguration (unreadable credentials, no project) is not
        the caller's fault and propagates as a server error.
        """
        if not credential or not credential.strip():
            raise Unauthenticated()
        app = self._get_app()
        try:
            claims = auth.verify_id_token(credential, app=app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            logger.warning("Rejected ID token: %s", e)
            raise Unauthenticated() from e
        return principal_from_claims(claims)


# Singleton instance
_verifier: Optional[FirebasePrincipalVerifier] = None


def get_principal_verifier() -> FirebasePrincipalVerifier:
    """Get or create the singleton verifier. Overridden in tests."""
    global _verifier
    if _verifier is None:
        _verifier = FirebasePrincipalVerifier()
    return _verifier
