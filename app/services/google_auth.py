import logging
from typing import Optional

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

logger = logging.getLogger(__name__)


class GoogleTokenError(Exception):
    pass


class GoogleTokenVerifier:
    """Verifies Google Sign-In ID tokens against Google's public keys"""

    def __init__(self, client_id: Optional[str]):
        self.client_id = client_id
        self._transport = google_requests.Request()

    def verify(self, credential: str) -> dict:
        """
        Verify an ID token and return its claims.

        Args:
            credential: The ID token posted by the Google sign-in button

        Returns:
            dict: Token payload (sub, email, name, picture, ...)

        Raises:
            GoogleTokenError: If the client id is not configured or the token is invalid
        """
        if not self.client_id:
            raise GoogleTokenError("GOOGLE_CLIENT_ID is not configured")
        try:
            payload = id_token.verify_oauth2_token(credential, self._transport, audience=self.client_id)
        except ValueError as e:
            logger.warning(f"Google token verification failed: {str(e)}")
            raise GoogleTokenError(str(e)) from e

        if not payload or not payload.get("email"):
            raise GoogleTokenError("Token payload has no email")
        return payload
