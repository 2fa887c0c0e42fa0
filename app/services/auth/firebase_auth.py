import os
import logging
from google.oauth2 import id_token
from google.auth.transport import requests
from google.auth import exceptions as google_exceptions
from typing import Optional, Dict
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class FirebaseAuthService:
    """Verifies Firebase ID tokens issued to the web client"""

    def __init__(self, project_id: Optional[str] = None):
        self.project_id = project_id or os.getenv("FIREBASE_PROJECT_ID")
        self._request = requests.Request()

    async def verify_id_token(self, token: str) -> Optional[Dict]:
        """Verify a Firebase ID token and return its verified claims, or None"""
        if not self.project_id:
            # Without an audience google-auth accepts tokens from any Firebase project
            logger.error("[ERROR] FIREBASE_PROJECT_ID is not configured; rejecting token")
            return None

        try:
            claims = id_token.verify_firebase_token(
                token,
                self._request,
                audience=self.project_id
            )
        except ValueError as e:
            # Invalid, expired or wrong-audience token
            logger.info(f"Firebase token verification failed: {e}")
            return None
        except google_exceptions.GoogleAuthError as e:
            logger.warning(f"[WARN] Could not verify Firebase token: {e}")
            return None

        if not claims or not claims.get("email"):
            return None

        return {
            "uid": claims.get("user_id") or claims.get("sub"),
            "email": claims["email"].lower(),
            "email_verified": claims.get("email_verified", False),
            "name": claims.get("name"),
            "picture": claims.get("picture")
        }


firebase_auth_service = FirebaseAuthService()
