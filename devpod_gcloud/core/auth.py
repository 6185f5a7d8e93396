"""
DevPod GCloud Provider - Authentication Manager

This module handles Google Cloud authentication and Compute API client creation.
"""

import google.auth
from google.auth.exceptions import DefaultCredentialsError, RefreshError
from google.auth.transport.requests import Request
from googleapiclient import discovery
import googleapiclient.http
import google_auth_httplib2
import httplib2

from devpod_gcloud.core.exceptions import AuthenticationError
from devpod_gcloud.core.config import VERSION

USER_AGENT = f'devpod-gcloud-provider/{VERSION}'


class AuthManager:
    """
    Manages Google Cloud authentication and API client creation.

    This class:
    1. Gets credentials using Application Default Credentials (ADC)
    2. Refreshes credentials if they are expired
    3. Creates an authenticated Compute Engine v1 API client

    Usage:
        auth = AuthManager(logger=logger)
        compute = auth.get_client()
    """

    def __init__(self, logger=None):
        self.logger = logger
        self._credentials = None

    def get_credentials(self):
        """
        Get and validate Google Cloud credentials.

        ADC searches for credentials in this order:
        1. GOOGLE_APPLICATION_CREDENTIALS environment variable
        2. User credentials from gcloud auth application-default login
        3. GCE metadata service (if running on Google Cloud)

        Returns:
            tuple: (credentials, default_project_id)

        Raises:
            AuthenticationError: If credentials not found or invalid
        """
        try:
            credentials, project = google.auth.default()
        except DefaultCredentialsError:
            raise AuthenticationError(
                "No credentials found. You need to authenticate first.",
                fix="gcloud auth application-default login"
            )

        if not credentials.valid and credentials.expired:
            if self.logger:
                self.logger.debug("Refreshing expired credentials...")
            try:
                credentials.refresh(Request())
            except RefreshError as e:
                raise AuthenticationError(
                    f"Credentials expired and refresh failed: {e}",
                    fix="gcloud auth application-default login"
                )

        return credentials, project

    def get_client(self):
        """
        Build an authenticated Compute Engine API client.

        Every request carries a provider specific User-Agent.

        Returns:
            googleapiclient.discovery.Resource for compute v1

        Raises:
            AuthenticationError: If authentication or client construction fails
        """
        if not self._credentials:
            self._credentials, _ = self.get_credentials()

        credentials = self._credentials

        def _request_builder(http, *args, **kwargs):
            """Inject User-Agent header for usage tracking."""
            headers = kwargs.setdefault('headers', {})
            headers['user-agent'] = USER_AGENT
            auth_http = google_auth_httplib2.AuthorizedHttp(
                credentials,
                http=httplib2.Http()
            )
            return googleapiclient.http.HttpRequest(auth_http, *args, **kwargs)

        try:
            return discovery.build(
                'compute',
                'v1',
                credentials=credentials,
                cache_discovery=False,
                requestBuilder=_request_builder
            )
        except Exception as e:
            raise AuthenticationError(
                f"Failed to create GCP API client: {str(e)}"
            ) from e
