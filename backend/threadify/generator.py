from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from .anthropic_client import AnthropicClient
from .prompts import build_explanation_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
	source_text: str
	understood_text: str
	format: str
	detail: str


class Generator(Protocol):
	async def generate(self, request: GenerationRequest, credential: str) -> str: ...


class ExplanationGenerator:
	"""Builds the tutoring prompt and performs one Messages API exchange per call."""

	def __init__(self, *, model: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
		self.model = model
		self._transport = transport

	async def generate(self, request: GenerationRequest, credential: str) -> str:
		prompt = build_explanation_prompt(request.source_text, request.understood_text, request.format, request.detail)
		client = AnthropicClient(credential, model=self.model, transport=self._transport)
		try:
			logger.info("Requesting %s/%s explanation (prompt %d chars)", request.format, request.detail, len(prompt))
			return await client.generate(prompt)
		finally:
			await client.aclose()
