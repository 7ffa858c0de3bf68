"""Chart rendering service client.

Submits a chart request URL to the rendering service and returns or saves the
image it responds with.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx

from ..exceptions import ChartRenderError

logger = logging.getLogger(__name__)

URLTypes = Union[str, httpx.URL]


class ChartServiceClient:
    """HTTP client for the chart rendering service.

    Parameters
    ----------
    timeout: float
        Request timeout in seconds.
    client: Optional[httpx.AsyncClient]
        Optional preconfigured client; one is created per request otherwise.
    """

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None) -> None:
        self._timeout = timeout
        self._client = client

    def inject_http_client_for_testing(self, client: Any) -> None:
        """Replace underlying HTTP client (testing only)."""
        self._client = client

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)

    async def fetch(self, url: URLTypes) -> bytes:
        """Request the chart and return the raw image bytes.

        Raises
        ------
        ChartRenderError
            On transport errors or non-2xx responses.
        """
        logger.debug("chart_service.fetch", extra={"url_length": len(str(url))})
        try:
            if self._client is not None:
                resp = await self._client.get(url)
            else:
                async with self._make_client() as client:
                    resp = await client.get(url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "chart_service.status_error",
                extra={"status": exc.response.status_code},
            )
            raise ChartRenderError(
                f"Chart service returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ChartRenderError(f"Chart service request failed: {exc}") from exc

        logger.info("chart_service.fetched", extra={"bytes": len(resp.content)})
        return resp.content

    async def save(self, url: URLTypes, path: Union[str, Path]) -> Path:
        """Stream the chart image into ``path``, creating or truncating it.

        A partially written file is removed before the error is raised.

        Returns
        -------
        Path
            The path written.

        Raises
        ------
        ChartRenderError
            On transport errors, non-2xx responses or file system errors.
        """
        target = Path(path)
        state = {"opened": False}
        try:
            if self._client is not None:
                written = await self._stream_to(self._client, url, target, state)
            else:
                async with self._make_client() as client:
                    written = await self._stream_to(client, url, target, state)
        except (httpx.HTTPError, OSError) as exc:
            if state["opened"]:
                target.unlink(missing_ok=True)
            logger.error(
                "chart_service.save_failed",
                extra={"path": str(target), "error": str(exc)},
            )
            if isinstance(exc, httpx.HTTPStatusError):
                raise ChartRenderError(
                    f"Chart service returned HTTP {exc.response.status_code}"
                ) from exc
            raise ChartRenderError(f"Could not save chart to {target}: {exc}") from exc

        logger.info("chart_service.saved", extra={"path": str(target), "bytes": written})
        return target

    @staticmethod
    async def _stream_to(
        client: httpx.AsyncClient, url: URLTypes, target: Path, state: Dict[str, bool]
    ) -> int:
        written = 0
        async with client.stream("GET", url) as resp:
            resp.raise_for_status()
            # an existing file is only touched once the service answered 2xx
            with target.open("wb") as fh:
                state["opened"] = True
                async for chunk in resp.aiter_bytes():
                    fh.write(chunk)
                    written += len(chunk)
        return written
