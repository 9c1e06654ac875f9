"""
PostgREST store adapter (Supabase-compatible).

Issues ``DELETE {base_url}/rest/v1/{entity}?{column}=neq.{sentinel}`` with
the service-role key. Errors carry the server's message verbatim and are
never retried here.
"""

import logging

import httpx

from scoped_purge.core.exceptions import ConfigurationError
from scoped_purge.engine.predicates import DeletePredicate
from scoped_purge.stores.base import StoreError

logger = logging.getLogger(__name__)


class PostgRESTStore:
    """Deletes rows through a PostgREST HTTP endpoint."""

    kind = "postgrest"
    REST_PREFIX = "/rest/v1"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """
        Initialize the store.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Service-role key (bypasses row level security)
            timeout_seconds: Per-request timeout
            client: Optional preconfigured httpx client
        """
        if not base_url:
            raise ConfigurationError("PostgREST base URL is required", env_var="PURGE_STORE_URL")
        if not api_key:
            raise ConfigurationError("PostgREST API key is required", env_var="PURGE_STORE_KEY")

        self._base_url = base_url.rstrip("/")
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Prefer": "return=minimal,count=exact",
        }
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def _url(self, entity_name: str) -> str:
        return f"{self._base_url}{self.REST_PREFIX}/{entity_name}"

    def delete(self, entity_name: str, predicate: DeletePredicate) -> int | None:
        """Send the filtered DELETE and return the reported row count, if any."""
        try:
            response = self._client.delete(
                self._url(entity_name),
                params=predicate.to_query_params(),
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise StoreError(f"{type(e).__name__}: {e}", entity_name=entity_name) from e

        if response.is_error:
            message, code = _error_message(response)
            raise StoreError(
                message,
                entity_name=entity_name,
                status_code=response.status_code,
                code=code,
            )

        count = _parse_content_range(response.headers.get("content-range"))
        logger.debug(f"DELETE {entity_name} -> {response.status_code} ({count} rows)")
        return count

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()


def _error_message(response: httpx.Response) -> tuple[str, str | None]:
    """Extract PostgREST's error message and code from a failed response."""
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return text or f"HTTP {response.status_code}", None

    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or f"HTTP {response.status_code}"
        return str(message), body.get("code")
    return f"HTTP {response.status_code}", None


def _parse_content_range(value: str | None) -> int | None:
    """Parse the total from a ``Content-Range: */12`` style header."""
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None
