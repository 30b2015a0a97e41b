"""Docker Hub sample source.

Reads the public ``pull_count`` of a repository from the Docker Hub v2 API.
No authentication is needed for public repositories.
"""

from typing import Any

import httpx

from pullhistory.core.errors import FetchError

DOCKERHUB_API_URL = "https://hub.docker.com/v2/repositories/"
DEFAULT_TIMEOUT = 30.0


# @tra: Adapter.DockerHub.ImplementsSampleSourcePort
class DockerHubSource:
    """Docker Hub implementation of SampleSourcePort.

    Use as an async context manager so the underlying HTTP client is closed:

        async with DockerHubSource() as source:
            count = await source.fetch_count("falcosecurity/falco")

    Args:
        base_url: API base URL, ending with a slash.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str = DOCKERHUB_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "DockerHubSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    def url_for(self, name: str) -> str:
        """Return the repository endpoint for an image name."""
        return f"{self._base_url}{name.strip('/')}/"

    async def fetch_count(self, name: str) -> int:
        """Fetch the repository's current pull count.

        Raises:
            FetchError: On transport errors, non-2xx responses, invalid JSON
                or a missing/non-integer pull_count.
        """
        try:
            response = await self._client.get(self.url_for(name))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(name, str(e) or type(e).__name__) from e

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(name, "invalid JSON response") from e

        pulls = data.get("pull_count") if isinstance(data, dict) else None
        if isinstance(pulls, bool) or not isinstance(pulls, int) or pulls < 0:
            raise FetchError(name, f"no valid pull_count in response: {pulls!r}")
        return pulls
