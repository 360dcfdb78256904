"""AI content classification API client.

The API answers ``GET {api_url}?msg=<content>`` with an envelope::

    {"code": 200, "msg": "...", "request_id": "...",
     "data": {"is_violation": true, "risk_level": "高",
              "categories": [...], "keywords": [...], "explanation": "..."}}
"""

import httpx
import logfire
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from murmur.adapter.error import ProviderError
from murmur.domain.service.moderation_service import ContentClassifier, ContentVerdict


class _ClassifierEnvelope(BaseModel):
    code: int
    msg: str = ""
    data: ContentVerdict = ContentVerdict()
    request_id: str = ""


class HttpContentClassifier(ContentClassifier):
    """Calls the classification API over HTTP."""

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize classifier client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional transport (tests pass ``httpx.MockTransport``)
        """
        self.timeout = timeout
        self.transport = transport

    async def classify(
        self, api_url: str, content: str, referer: str
    ) -> ContentVerdict:
        """Classify ``content``.

        Raises:
            ProviderError: Non-200 HTTP status, ``code != 200`` envelope, or an
                undecodable body
        """
        headers = {"Referer": referer} if referer else {}
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(
                    api_url,
                    params={"msg": content},
                    headers=headers,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            logfire.error("AI classifier HTTP error", error=str(e))
            raise ProviderError(f"HTTP error calling classifier: {e}")

        if response.status_code != 200:
            logfire.error(
                "AI classifier request failed",
                status_code=response.status_code,
                error=response.text,
            )
            raise ProviderError(f"Classifier returned {response.status_code}")

        try:
            envelope = _ClassifierEnvelope.model_validate_json(response.content)
        except SchemaError as e:
            logfire.error("AI classifier response unreadable", error=str(e))
            raise ProviderError("Classifier response could not be parsed")

        if envelope.code != 200:
            logfire.error(
                "AI classifier reported an error", code=envelope.code, msg=envelope.msg
            )
            raise ProviderError(f"Classifier error {envelope.code}: {envelope.msg}")

        logfire.debug(
            "AI classifier verdict",
            is_violation=envelope.data.is_violation,
            risk_level=envelope.data.risk_level,
            request_id=envelope.request_id,
        )
        return envelope.data
