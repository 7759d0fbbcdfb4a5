from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional
from .settings import settings

logger = logging.getLogger(__name__)


class GenerationError(Exception):
	"""A failed exchange with the generation endpoint.

	``message`` is the human-readable reason, taken verbatim from the API error
	body when one is present.
	"""

	def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
		super().__init__(message)
		self.message = message
		self.status_code = status_code


class AnthropicClient:
	def __init__(
		self,
		api_key: str,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		max_tokens: Optional[int] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		if not api_key:
			raise ValueError("An API key is required")
		self._api_key = api_key
		self.base_url = base_url or settings.anthropic_base_url
		self.model = model or settings.anthropic_model
		self.max_tokens = max_tokens or settings.anthropic_max_tokens
		self._client = httpx.AsyncClient(timeout=settings.generator_timeout_seconds, transport=transport)

	async def generate(self, prompt: str) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"max_tokens": self.max_tokens,
			"messages": [{"role": "user", "content": prompt}],
		}
		headers = {
			"x-api-key": self._api_key,
			"anthropic-version": settings.anthropic_version,
			"content-type": "application/json",
		}
		try:
			r = await self._client.post(self.base_url, headers=headers, json=payload)
		except httpx.RequestError as net_err:
			raise GenerationError(f"Network error: {net_err}") from net_err
		if r.is_error:
			raise GenerationError(_error_message(r), status_code=r.status_code)
		try:
			data = r.json()
			text = data["content"][0]["text"]
		except Exception as err:
			raise GenerationError(f"Unexpected response from generator: {r.text[:200]}") from err
		if not isinstance(text, str):
			raise GenerationError(f"Unexpected response from generator: {r.text[:200]}")
		return text

	async def aclose(self) -> None:
		await self._client.aclose()


def _error_message(r: httpx.Response) -> str:
	try:
		data = r.json()
	except ValueError:
		return "API request failed"
	error = data.get("error") if isinstance(data, dict) else None
	if isinstance(error, dict) and error.get("message"):
		return str(error["message"])
	return "API request failed"
