"""OpenAI completions driver used as the expiry oracle."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..products.products_errors import OracleUnavailableError
from .providers_base import ExpiryOracle

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    'Provide the estimated expiry period (in days) for the grocery product "{name}". '
    "Only provide the number of days."
)


@dataclass(slots=True)
class OpenAIExpiryOracle(ExpiryOracle):
    """Ask a completions model for the shelf life of a product.

    The call is made once; retry policy belongs to callers.
    """

    api_key: str
    api_url: str = "https://api.openai.com/v1/completions"
    model: str = "gpt-3.5-turbo-instruct"
    max_tokens: int = 10
    temperature: float = 0.5
    timeout_seconds: float = 15.0
    log: logging.Logger = field(default_factory=lambda: logger)

    async def estimate(self, product_name: str) -> str:
        if not self.api_key:
            raise OracleUnavailableError("ORACLE_API_KEY is not set")

        body = {
            "model": self.model,
            "prompt": PROMPT_TEMPLATE.format(name=product_name),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        self.log.info("oracle.request.start", extra={"product_name": product_name})
        try:
            response = await self._post(self.api_url, headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise OracleUnavailableError(
                f"Oracle did not answer within {self.timeout_seconds}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise OracleUnavailableError(f"Oracle HTTP error: {exc}") from exc

        if response.status_code != 200:
            detail = _extract_error(response)
            self.log.warning(
                "oracle.response.error status=%s detail=%s",
                response.status_code,
                detail,
                extra={"product_name": product_name, "status_code": response.status_code},
            )
            raise OracleUnavailableError(
                f"Oracle request failed (status={response.status_code}): {detail}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise OracleUnavailableError("Oracle response is not valid JSON") from exc

        text = _first_choice_text(data)
        if not text:
            raise OracleUnavailableError("Oracle response does not contain any text")

        self.log.info(
            "oracle.request.success", extra={"product_name": product_name, "expiry_info": text}
        )
        return text

    async def _post(
        self, url: str, *, headers: dict[str, str], json: dict[str, Any]
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await client.post(url, headers=headers, json=json)


def _first_choice_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    text = choices[0].get("text")
    if not isinstance(text, str):
        return ""
    return text.strip()


def _extract_error(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error.get("type") or error)
    return str(error or data)[:200]
