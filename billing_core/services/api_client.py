"""HTTP client for the business backend API."""
import logging
from typing import Any, Dict, Optional

import requests

from billing_core.auth import AuthContext
from billing_core.exceptions import ApiError, ChannelError, NotFoundError, SubmitFailed
from billing_core.models.document_kind import rules_for

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://invoice-swift-backend-production.up.railway.app"
NETWORK_ERROR_MESSAGE = "Network error. Please try again."


def _error_message(response: requests.Response) -> Optional[str]:
    """`message` field of a JSON error body, if there is one."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get('message'):
        return str(data['message'])
    return None


class BackendClient:
    """Client for the document, analytics and stream endpoints."""

    def __init__(
        self,
        auth: AuthContext,
        base_url: Optional[str] = None,
        timeout: float = 10,
        stream_timeout: float = 10,
        http: Optional[requests.Session] = None
    ):
        """
        Initialize backend client.

        Args:
            auth: Credentials injected by the caller
            base_url: API root; defaults to the production backend
            timeout: Seconds to wait on regular requests
            stream_timeout: Seconds to wait for the push channel to connect
            http: Session to reuse (tests pass a fake one)
        """
        self.auth = auth
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip('/')
        self.timeout = timeout
        self.stream_timeout = stream_timeout
        self.http = http or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    # -- raw calls ------------------------------------------------------

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """GET with auth headers. Transport errors propagate as requests exceptions."""
        return self.http.get(
            self.url(path), params=params, headers=self.auth.headers, timeout=self.timeout
        )

    def post(self, path: str, payload: Dict[str, Any]) -> requests.Response:
        """POST a JSON body with auth headers."""
        return self.http.post(
            self.url(path), json=payload, headers=self.auth.headers, timeout=self.timeout
        )

    # -- documents ------------------------------------------------------

    def create_document(self, kind, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a document from a serialized draft.

        Returns:
            Backend success payload (assigned id/number, message)

        Raises:
            SubmitFailed: non-2xx response (server message verbatim when present)
                or the backend could not be reached
        """
        rules = rules_for(kind)
        logger.info(f"[API] Creating {rules.label} with {len(payload.get('items', []))} items")

        try:
            response = self.post(rules.endpoint, payload)
        except requests.RequestException as e:
            logger.error(f"[API] Network error creating {rules.label}: {e}")
            raise SubmitFailed(NETWORK_ERROR_MESSAGE)

        if not response.ok:
            message = _error_message(response) or (
                f"Failed to create {rules.label} (Status: {response.status_code})"
            )
            logger.error(f"[API] {rules.label} rejected ({response.status_code}): {message}")
            raise SubmitFailed(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {'data': data}

        logger.info(f"[API] {rules.label} created: {data.get('_id') or data.get('id')}")
        return data

    def fetch_document(self, kind, document_id: str) -> Dict[str, Any]:
        """
        Fetch one stored document for editing.

        Raises:
            NotFoundError: backend returned 404
            ApiError: any other failure
        """
        rules = rules_for(kind)
        try:
            response = self.get(f"{rules.endpoint}/{document_id}")
        except requests.RequestException as e:
            logger.error(f"[API] Network error fetching {rules.label} {document_id}: {e}")
            raise ApiError(NETWORK_ERROR_MESSAGE, status_code=503)

        if response.status_code == 404:
            raise NotFoundError(f"{rules.label.capitalize()} {document_id} not found")
        if not response.ok:
            raise ApiError(
                _error_message(response) or f"Failed to load {rules.label} (Status: {response.status_code})",
                status_code=response.status_code
            )
        return response.json()

    # -- push channel ---------------------------------------------------

    def open_stream(self, path: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """
        Open a Server-Sent Events stream.

        The token travels as a query parameter; the caller owns the
        returned response and must close it.

        Raises:
            ChannelError: connection failed or non-2xx status
        """
        query = dict(params or {})
        query.update(self.auth.channel_params)

        try:
            response = self.http.get(
                self.url(path),
                params=query,
                headers={'Accept': 'text/event-stream'},
                stream=True,
                timeout=(self.stream_timeout, None)
            )
        except requests.RequestException as e:
            logger.warning(f"[SSE] Could not open {path}: {e}")
            raise ChannelError(f"Could not open live updates: {e}")

        if not response.ok:
            response.close()
            logger.warning(f"[SSE] {path} answered {response.status_code}")
            raise ChannelError(f"Live updates unavailable (Status: {response.status_code})")

        return response
