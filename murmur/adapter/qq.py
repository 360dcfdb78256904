"""QQ profile API client."""

from typing import Any

import httpx
import logfire

from murmur.adapter.error import ProviderError
from murmur.domain.service.comment_service import QQProfile, QQProfileClient


class HttpQQProfileClient(QQProfileClient):
    """Looks up QQ nicknames through a bearer-authenticated HTTP API.

    Responses use a ``{code, msg, data}`` envelope where ``data`` is an
    error string on failure and ``{qq, nick, email, avatar}`` on success.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    async def fetch_profile(
        self, api_url: str, api_key: str, qq_number: str, referer: str = ""
    ) -> QQProfile:
        """Look up a QQ account.

        Args:
            api_url: Profile API endpoint
            api_key: Bearer token for the API
            qq_number: QQ number to look up
            referer: Sent as Referer (the API whitelists callers by it)

        Returns:
            The nickname and the avatar reported by the API

        Raises:
            ProviderError: If the API call fails or reports an error
        """
        headers = {"Authorization": f"Bearer {api_key}"}
        if referer:
            headers["Referer"] = referer

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(
                    api_url,
                    params={"qq": qq_number},
                    headers=headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("QQ profile HTTP error", error=str(e))
            raise ProviderError(f"HTTP error calling QQ profile API: {e}")

        if response.status_code != 200:
            logfire.error(
                "QQ profile request failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise ProviderError(f"QQ profile API returned {response.status_code}")

        try:
            body: dict[str, Any] = response.json()
        except ValueError:
            logfire.error("QQ profile response is not JSON", body=response.text)
            raise ProviderError("QQ profile response could not be parsed")

        code = body.get("code")
        data = body.get("data")
        if code != 200:
            logfire.error("QQ profile API reported an error", response=body)
            message = body.get("msg", "")
            if isinstance(data, str) and data:
                raise ProviderError(f"QQ profile API error: {message} - {data}")
            raise ProviderError(f"QQ profile API error: {message}")

        if not isinstance(data, dict):
            raise ProviderError("QQ profile API returned no profile")

        logfire.debug("QQ profile fetched", qq_number=qq_number)
        return QQProfile(
            nickname=data.get("nick", ""),
            avatar=data.get("avatar", ""),
        )
