"""
Speech capture
==============

The flow controller only sees a narrow capability: ``start()``, ``stop()`` and
``subscribe(on_fragment, on_error)``. Fragments are ``(text, is_final)`` pairs
delivered in arrival order; errors carry a platform-defined reason string.

Two implementations are provided:

- ``RelayedSpeechCapture``: the browser's own recognizer does the listening and
  the page relays every fragment (and any error reason) to the service.
- ``CloudSpeechCapture``: the page uploads recorded audio chunks and the service
  transcribes them with Google Cloud Speech-to-Text. Every recognized result is
  delivered as a final fragment.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional, Protocol

from google.cloud import speech_v1p1beta1 as speech
from google.api_core.exceptions import GoogleAPIError

logger = logging.getLogger(__name__)

FragmentHandler = Callable[[str, bool], None]
ErrorHandler = Callable[[str], None]


class SpeechCapture(Protocol):
	active: bool

	def start(self) -> None: ...

	def stop(self) -> None: ...

	def subscribe(self, on_fragment: FragmentHandler, on_error: ErrorHandler) -> None: ...


class RelayedSpeechCapture:
	def __init__(self) -> None:
		self.active = False
		self._fragment_handlers: List[FragmentHandler] = []
		self._error_handlers: List[ErrorHandler] = []

	def subscribe(self, on_fragment: FragmentHandler, on_error: ErrorHandler) -> None:
		self._fragment_handlers.append(on_fragment)
		self._error_handlers.append(on_error)

	def start(self) -> None:
		self.active = True

	def stop(self) -> None:
		self.active = False

	def push(self, text: str, is_final: bool) -> bool:
		"""Deliver one fragment to subscribers. Fragments arriving while stopped are dropped."""
		if not self.active:
			return False
		for handler in list(self._fragment_handlers):
			handler(text, is_final)
		return True

	def fail(self, reason: str) -> None:
		self.active = False
		logger.warning("Speech capture failed: %s", reason)
		for handler in list(self._error_handlers):
			handler(reason)


class CloudSpeechCapture(RelayedSpeechCapture):
	def __init__(self, language_code: str = "en-US", *, client_factory: Optional[Callable[[], Any]] = None) -> None:
		super().__init__()
		self.language_code = language_code
		self._client_factory = client_factory or speech.SpeechClient

	async def transcribe(self, audio_content: bytes) -> int:
		"""Recognize one recorded chunk; returns the number of fragments delivered."""
		if not self.active:
			return 0
		if not audio_content:
			self.fail("Empty audio payload received.")
			return 0
		try:
			client = self._client_factory()
		except Exception as e:
			self.fail(f"Speech recognition unavailable: {e}")
			return 0

		audio = speech.RecognitionAudio(content=audio_content)
		config = speech.RecognitionConfig(
			language_code=self.language_code,
			model="default",
			enable_automatic_punctuation=True,
		)
		try:
			response = await asyncio.to_thread(client.recognize, config=config, audio=audio)
		except GoogleAPIError as e:
			self.fail(f"Speech recognition API error: {e}")
			return 0

		delivered = 0
		for result in response.results:
			if not result.alternatives:
				continue
			transcript = result.alternatives[0].transcript.strip()
			if transcript and self.push(transcript, True):
				delivered += 1
		return delivered
