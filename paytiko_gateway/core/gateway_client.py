import json
from typing import Any, Dict, Optional

import httpx

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.exceptions import TransportError
from paytiko_gateway.core.logging import get_logger, redact_headers


class PaytikoApiClient:
    """Authenticated JSON client for the Paytiko core API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize gateway client.

        Args:
            settings: Application settings (core URL, merchant secret, HTTP options)
            transport: Optional httpx transport, used by tests to fake the gateway
        """
        self.base_url = settings.PAYTIKO_CORE_URL.rstrip("/")
        self.timeout = httpx.Timeout(
            settings.PAYTIKO_HTTP_TIMEOUT,
            connect=settings.PAYTIKO_HTTP_CONNECT_TIMEOUT,
        )
        self.verify = settings.PAYTIKO_HTTP_VERIFY_SSL
        self.transport = transport
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Merchant-Secret": settings.PAYTIKO_MERCHANT_SECRET_KEY,
            "User-Agent": f"{settings.APP_NAME}/{settings.VERSION}",
        }
        self.logger = get_logger(self.__class__.__name__, enabled=settings.PAYTIKO_LOGGING_ENABLED)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return await self._request("GET", path, params=params)

    async def post(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return await self._request("POST", path, json=payload, params=params)

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """
        Send a request and decode the JSON body.

        Raises:
            TransportError: on network failure or any non-2xx status; the
                decoded error body, if any, is attached as ``error_data``.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        self.logger.debug(
            "Sending gateway request",
            method=method,
            url=url,
            headers=redact_headers(self.headers),
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify,
                transport=self.transport,
            ) as client:
                response = await client.request(method, url, headers=self.headers, **kwargs)
        except httpx.HTTPError as e:
            self.logger.error("Gateway request failed", method=method, url=url, error=str(e))
            raise TransportError(str(e) or e.__class__.__name__) from e

        body = self._decode(response)

        if not response.is_success:
            self.logger.error(
                "Gateway returned error status",
                method=method,
                url=url,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            raise TransportError(
                f"Gateway returned HTTP {response.status_code}",
                status_code=response.status_code,
                error_data=body or None,
            )

        self.logger.info(
            "Gateway request completed",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        return body

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            return {}
        return data if isinstance(data, dict) else {"data": data}
