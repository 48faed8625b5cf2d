# SPDX-License-Identifier: MPL-2.0
# Copyright (c) 2025 Daniel Schmidt
"""Chrome Web Store download of CRX containers.

A single GET is issued with httpx, following redirects. The whole exchange,
response headers and body, runs under one deadline; when it expires the
in-flight request is cancelled and a DOWNLOAD_TIMEOUT failure is raised,
distinct from the DOWNLOAD_FAILED used for transport and HTTP errors.
"""

import asyncio
import logging
import re

import httpx

from crx_extract.core.constants import (
    CRX_ACCEPT_FORMAT,
    CRX_DOWNLOAD_URL_BASE,
    CRX_PRODUCT_VERSION,
    DOWNLOAD_USER_AGENT,
    EXTENSION_ID_PATTERN,
)
from crx_extract.core.errors import ExtractorError, FailureReason
from crx_extract.core.header import has_container_magic

logger = logging.getLogger(__name__)

_EXTENSION_ID_FULL = re.compile(rf"^{EXTENSION_ID_PATTERN}$")


def build_download_url(extension_id: str) -> httpx.URL:
    """Build the deterministic Web Store download URL for an extension id."""
    return httpx.URL(
        CRX_DOWNLOAD_URL_BASE,
        params={
            "response": "redirect",
            "prodversion": CRX_PRODUCT_VERSION,
            "acceptformat": CRX_ACCEPT_FORMAT,
            "x": f"id={extension_id}&installsource=ondemand&uc",
        },
    )


class ExtensionDownloader:
    """Downloads CRX files from the Chrome Web Store."""

    def __init__(
        self,
        timeout_ms: int,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the downloader.

        Args:
            timeout_ms: Deadline for the complete download, in milliseconds.
            transport: Optional httpx transport, mainly for tests.
        """
        self.timeout_ms = timeout_ms
        self.transport = transport

    async def _fetch(self, url: httpx.URL) -> httpx.Response:
        async with httpx.AsyncClient(
            transport=self.transport,
            follow_redirects=True,
            timeout=self.timeout_ms / 1000,
            headers={"User-Agent": DOWNLOAD_USER_AGENT},
        ) as client:
            async with client.stream("GET", url) as response:
                self._check_response(response)
                await response.aread()
                return response

    @staticmethod
    def _check_response(response: httpx.Response) -> None:
        if not response.is_success:
            raise ExtractorError(
                FailureReason.DOWNLOAD_FAILED,
                f"Download failed: {response.status_code} {response.reason_phrase}",
            )

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type.lower():
            raise ExtractorError(
                FailureReason.DOWNLOAD_FAILED,
                "Received HTML instead of a CRX file. The extension might be unlisted.",
            )

    async def download(self, extension_id: str) -> bytes:
        """Download the CRX container of an extension.

        Args:
            extension_id: 32-character Web Store id.

        Returns:
            The raw container bytes, verified to start with the CRX magic.

        Raises:
            ExtractorError: MALFORMED_INPUT for a bad id or non-CRX body,
                DOWNLOAD_TIMEOUT when the deadline expires, DOWNLOAD_FAILED
                for transport errors, non-2xx statuses or HTML responses.
        """
        if not _EXTENSION_ID_FULL.match(extension_id):
            raise ExtractorError(
                FailureReason.MALFORMED_INPUT,
                f"Invalid extension ID format: {extension_id}",
            )

        logger.info(f"Fetching extension with ID: {extension_id}")
        url = build_download_url(extension_id)
        logger.debug(f"Download URL constructed: {url}")

        try:
            response = await asyncio.wait_for(
                self._fetch(url), timeout=self.timeout_ms / 1000
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ExtractorError(
                FailureReason.DOWNLOAD_TIMEOUT,
                f"Download timed out after {self.timeout_ms}ms",
            ) from e
        except httpx.HTTPError as e:
            raise ExtractorError(
                FailureReason.DOWNLOAD_FAILED, f"Download failed: {e}"
            ) from e

        data = response.content
        logger.info(f"Downloaded {len(data) / 1024 / 1024:.2f} MB")

        if not has_container_magic(data):
            raise ExtractorError(
                FailureReason.MALFORMED_INPUT,
                "Downloaded file is not a valid CRX file",
            )
        return data
