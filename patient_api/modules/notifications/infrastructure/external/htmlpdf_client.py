# 📄 File: patient_api/modules/notifications/infrastructure/external/htmlpdf_client.py
# 🧭 Purpose (Layman Explanation):
# Turns the consultation document web page into a printable PDF using an online conversion service.
# 🧪 Purpose (Technical Summary):
# aiohttp client for the HTML to PDF API: A4 portrait, fixed margins, background printing.
# Non-2xx responses, timeouts and transport errors raise ExternalServiceError so callers can
# fall back to an HTML email.
# 🔗 Dependencies:
# aiohttp, patient_api.shared.config.settings
# 🔄 Connected Modules / Calls From:
# Document service (generate-pdf-document)

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientError, ClientTimeout

from patient_api.shared.config.settings import get_settings
from patient_api.shared.core.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

PDF_OPTIONS: Dict[str, Any] = {
    "css": "",
    "format": "A4",
    "orientation": "portrait",
    "margin": {
        "top": "20mm",
        "bottom": "20mm",
        "left": "15mm",
        "right": "15mm",
    },
    "printBackground": True,
    "scale": 0.8,
}


class HtmlPdfClient:
    """Client for the HTML to PDF conversion API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.HTMLPDF_API_KEY
        self.api_url = api_url or settings.HTMLPDF_API_URL
        self.timeout = timeout or settings.HTMLPDF_TIMEOUT_SECONDS

    async def render(self, html: str) -> bytes:
        """
        Convert an HTML document to PDF.

        Raises:
            ConfigurationError: If no API key is configured
            ExternalServiceError: If the API fails or does not answer in time
        """
        if not self.api_key:
            raise ConfigurationError("HTMLPDF_API_KEY not configured", setting="HTMLPDF_API_KEY")

        payload = {"html": html, **PDF_OPTIONS}
        headers = {"Content-Type": "application/json", "X-API-KEY": self.api_key}

        try:
            async with aiohttp.ClientSession(timeout=ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.api_url, json=payload, headers=headers) as response:
                    if response.status >= 400:
                        body = await response.text()
                        logger.error(f"PDF API request failed: {response.status} {response.reason}")
                        raise ExternalServiceError(
                            f"PDF API error: {response.status} {response.reason}",
                            service="htmlpdf",
                            service_response=body[:500],
                        )
                    pdf = await response.read()
        except (ClientError, asyncio.TimeoutError) as e:
            logger.error(f"PDF API request failed: {e}")
            raise ExternalServiceError(f"PDF API request failed: {e}", service="htmlpdf")

        logger.info(f"PDF generated successfully ({len(pdf)} bytes)")
        return pdf


def get_pdf_client() -> HtmlPdfClient:
    """FastAPI dependency returning the PDF client."""
    return HtmlPdfClient()
