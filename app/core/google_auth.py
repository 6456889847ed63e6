"""Google ID token verification."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from app.core.config import settings

logger = logging.getLogger(__name__)


class GoogleTokenError(Exception):
    """Raised when a Google ID token cannot be verified."""


class GoogleIdentity(BaseModel):
    """Claims taken from a verified Google ID token."""

    subject: str
    email: str
    name: str | None = None
    picture: str | None = None


class GoogleTokenVerifier(ABC):
    """Abstract verifier so the identity provider can be swapped in tests."""

    @abstractmethod
    async def verify(self, token: str) -> GoogleIdentity:
        """Verify ``token`` and return the identity it asserts."""
        raise NotImplementedError


class GoogleAuthVerifier(GoogleTokenVerifier):
    """Verifier backed by google-auth's ``verify_oauth2_token``."""

    def __init__(self, client_id: str | None = None) -> None:
        self.client_id = client_id or settings.google_client_id
        self._request = google_requests.Request()

    def _verify_sync(self, token: str) -> GoogleIdentity:
        try:
            claims = id_token.verify_oauth2_token(token, self._request, self.client_id)
        except (ValueError, GoogleAuthError) as e:
            logger.warning(f"Google token verification failed. Error: {e}")
            raise GoogleTokenError("Invalid Google token") from e

        subject = claims.get("sub")
        email = claims.get("email")
        if not subject or not email:
            raise GoogleTokenError("Invalid token payload")

        return GoogleIdentity(
            subject=str(subject),
            email=str(email),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )

    async def verify(self, token: str) -> GoogleIdentity:
        # google-auth fetches Google's certificates with a blocking HTTP call.
        return await run_in_threadpool(self._verify_sync, token)
