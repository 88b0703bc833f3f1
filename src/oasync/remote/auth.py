"""Bearer token resolution.

A token passed on the command line wins. Otherwise Application Default
Credentials are resolved once per run and the token is reused for every
request.
"""

import logging

import google.auth
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request

from oasync.errors import AuthenticationError

log = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPES = ("https://www.googleapis.com/auth/cloud-platform",)


class CredentialProvider:
    def __init__(self, token: str | None = None, scopes=CLOUD_PLATFORM_SCOPES):
        self._token = token or None
        self.scopes = list(scopes)

    def token(self) -> str:
        if self._token is None:
            self._token = self._resolve_default()
        return self._token

    def _resolve_default(self) -> str:
        log.debug("Resolving Application Default Credentials for %s", self.scopes)
        try:
            credentials, project_id = google.auth.default(scopes=self.scopes)
            if not credentials.valid:
                credentials.refresh(Request())
        except GoogleAuthError as e:
            raise AuthenticationError(
                f"No access token given and default credentials are unusable: {e}. "
                "Pass --token or run 'gcloud auth application-default login'."
            ) from e
        log.debug("Default credentials resolved (project %s)", project_id or "n/a")
        return credentials.token
