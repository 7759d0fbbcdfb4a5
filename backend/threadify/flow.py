"""
Session Flow Controller
=======================

One learning interaction moves through five steps::

	input -> explain -> preferences -> explanation -> saved
	  ^                                      |          |
	  +--------------------------------------+----------+

The controller owns the live ``Session``, the caller-supplied credential, the
saved library and (optionally) a speech capture service. Validation problems,
a missing credential, capture errors and generation failures are reported
through ``Session.error_message`` and never move the session forward. Triggers
fired from a step that does not accept them raise ``InvalidTransition``.

Generation is the only suspension point. ``Session.loading`` guarantees at most
one request in flight per session; a response that arrives after the session
was replaced (start over, save) is dropped.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import SecretStr

from .anthropic_client import GenerationError
from .generator import GenerationRequest, Generator
from .prompts import DETAILS, FORMATS
from .rendering import RenderedExplanation, parse_explanation, strip_markup
from .settings import settings
from .speech import SpeechCapture

logger = logging.getLogger(__name__)

SOURCE_REQUIRED = "Please paste a paragraph first"
UNDERSTANDING_REQUIRED = "Please tell me what you understood"
CREDENTIAL_REQUIRED = "Please enter your Claude API key"
SPEECH_UNSUPPORTED = "Speech recognition is not available"
EMPTY_EXPLANATION = "The generator returned an empty explanation"


class Step(str, Enum):
	INPUT = "input"
	EXPLAIN = "explain"
	PREFERENCES = "preferences"
	EXPLANATION = "explanation"
	SAVED = "saved"


class FlowError(Exception):
	pass


class InvalidTransition(FlowError):
	def __init__(self, trigger: str, step: Step) -> None:
		super().__init__(f"Cannot {trigger} while in step '{step.value}'")
		self.trigger = trigger
		self.step = step


class GenerationInProgress(FlowError):
	def __init__(self) -> None:
		super().__init__("An explanation is already being generated")


class UnknownExplanation(FlowError):
	def __init__(self, explanation_id: int) -> None:
		super().__init__(f"Saved explanation {explanation_id} not found")
		self.explanation_id = explanation_id


@dataclass
class Preferences:
	format: Optional[str] = None
	detail: Optional[str] = None

	@property
	def complete(self) -> bool:
		return self.format is not None and self.detail is not None


@dataclass
class Session:
	step: Step = Step.INPUT
	source_text: str = ""
	understood_text: str = ""
	preferences: Preferences = field(default_factory=Preferences)
	explanation: Optional[RenderedExplanation] = None
	rating: int = 0
	is_recording: bool = False
	loading: bool = False
	error_message: str = ""

	@property
	def generated_explanation(self) -> str:
		return self.explanation.html if self.explanation else ""


@dataclass(frozen=True)
class SavedExplanation:
	id: int
	excerpt: str
	understood_text: str
	generated_explanation: str
	rating: int
	created_at: datetime


class SavedLibrary:
	"""Insertion-ordered, process-lifetime collection of saved explanations."""

	def __init__(self, excerpt_length: Optional[int] = None) -> None:
		self.excerpt_length = excerpt_length or settings.excerpt_length
		self._entries: Dict[int, SavedExplanation] = {}
		self._ids = itertools.count(1)

	def _excerpt(self, source: str) -> str:
		if len(source) <= self.excerpt_length:
			return source
		return source[: self.excerpt_length] + "..."

	def add(self, session: Session) -> SavedExplanation:
		entry = SavedExplanation(
			id=next(self._ids),
			excerpt=self._excerpt(session.source_text),
			understood_text=session.understood_text,
			generated_explanation=session.generated_explanation,
			rating=session.rating,
			created_at=datetime.now(timezone.utc),
		)
		self._entries[entry.id] = entry
		return entry

	def get(self, explanation_id: int) -> SavedExplanation:
		try:
			return self._entries[explanation_id]
		except KeyError:
			raise UnknownExplanation(explanation_id) from None

	def delete(self, explanation_id: int) -> SavedExplanation:
		try:
			return self._entries.pop(explanation_id)
		except KeyError:
			raise UnknownExplanation(explanation_id) from None

	def list(self) -> List[SavedExplanation]:
		return list(self._entries.values())

	def __len__(self) -> int:
		return len(self._entries)


class FlowController:
	def __init__(
		self,
		generator: Generator,
		*,
		capture: Optional[SpeechCapture] = None,
		library: Optional[SavedLibrary] = None,
	) -> None:
		self.session = Session()
		self.library = library if library is not None else SavedLibrary()
		self.credential_prompt = False
		self._generator = generator
		self._credential: Optional[SecretStr] = None
		self._capture = capture
		if capture is not None:
			capture.subscribe(self._on_fragment, self._on_capture_error)

	# ---- credential ----

	@property
	def credential_configured(self) -> bool:
		return self._credential is not None

	@property
	def capture(self) -> Optional[SpeechCapture]:
		return self._capture

	@property
	def speech_available(self) -> bool:
		return self._capture is not None

	def set_credential(self, api_key: str) -> None:
		key = (api_key or "").strip()
		if not key:
			self.clear_credential()
			return
		self._credential = SecretStr(key)
		self.credential_prompt = False

	def clear_credential(self) -> None:
		self._credential = None

	def close(self) -> None:
		"""Stop capture and forget the credential; the controller is not reused afterwards."""
		self._stop_capture()
		self.clear_credential()
		self.credential_prompt = False
		logger.info("Workspace closed")

	# ---- transitions ----

	def _require(self, trigger: str, *steps: Step) -> Session:
		if self.session.step not in steps:
			raise InvalidTransition(trigger, self.session.step)
		return self.session

	def _move(self, step: Step) -> None:
		logger.debug("Session step %s -> %s", self.session.step.value, step.value)
		self.session.step = step

	def _reset(self) -> None:
		self._stop_capture()
		self.session = Session()

	def submit_source(self, text: Optional[str] = None) -> Session:
		session = self._require("submit source text", Step.INPUT)
		if text is not None:
			session.source_text = text
		if not session.source_text.strip():
			session.error_message = SOURCE_REQUIRED
			return session
		session.error_message = ""
		self._move(Step.EXPLAIN)
		return session

	def back(self) -> Session:
		session = self._require("go back", Step.EXPLAIN)
		self.stop_recording()
		session.error_message = ""
		self._move(Step.INPUT)
		return session

	def update_understanding(self, text: str) -> Session:
		session = self._require("edit understanding", Step.EXPLAIN)
		session.understood_text = text
		return session

	def submit_understanding(self, text: Optional[str] = None) -> Session:
		session = self._require("submit understanding", Step.EXPLAIN)
		if text is not None:
			session.understood_text = text
		if not session.understood_text.strip():
			session.error_message = UNDERSTANDING_REQUIRED
			return session
		self.stop_recording()
		session.error_message = ""
		self._move(Step.PREFERENCES)
		return session

	async def choose(self, *, format: Optional[str] = None, detail: Optional[str] = None) -> Session:
		"""Record a preference choice; generate once both format and detail are set."""
		session = self._require("choose preferences", Step.PREFERENCES)
		if session.loading:
			raise GenerationInProgress()
		if format is not None and format not in FORMATS:
			raise ValueError(f"format must be one of {list(FORMATS)}")
		if detail is not None and detail not in DETAILS:
			raise ValueError(f"detail must be one of {list(DETAILS)}")
		if format is not None:
			session.preferences.format = format
		if detail is not None:
			session.preferences.detail = detail
		session.error_message = ""
		if not session.preferences.complete:
			return session
		if self._credential is None:
			session.error_message = CREDENTIAL_REQUIRED
			self.credential_prompt = True
			return session

		request = GenerationRequest(
			source_text=session.source_text,
			understood_text=session.understood_text,
			format=session.preferences.format,
			detail=session.preferences.detail,
		)
		session.loading = True
		failure: Optional[str] = None
		text = ""
		try:
			text = await self._generator.generate(request, self._credential.get_secret_value())
		except GenerationError as err:
			failure = err.message
		finally:
			session.loading = False

		if self.session is not session:
			logger.info("Discarding explanation for a session that was replaced")
			return self.session

		rendered = parse_explanation(text) if failure is None else None
		if failure is None and not rendered:
			failure = EMPTY_EXPLANATION
		if failure is not None:
			logger.warning("Explanation generation failed: %s", failure)
			session.error_message = failure
			return session

		session.explanation = rendered
		logger.info("Explanation generated (%d chars)", len(text))
		self._move(Step.EXPLANATION)
		return session

	def rate(self, rating: int) -> Session:
		session = self._require("rate the explanation", Step.EXPLANATION)
		if not 0 <= rating <= 5:
			raise ValueError("rating must be between 0 and 5")
		session.rating = rating
		return session

	def save(self) -> SavedExplanation:
		self._require("save", Step.EXPLANATION)
		entry = self.library.add(self.session)
		self._reset()
		self._move(Step.SAVED)
		return entry

	def start_over(self) -> Session:
		self._require("start over", Step.EXPLANATION)
		self._reset()
		return self.session

	def continue_(self) -> Session:
		self._require("continue", Step.SAVED)
		self._move(Step.INPUT)
		return self.session

	def delete_saved(self, explanation_id: int) -> SavedExplanation:
		return self.library.delete(explanation_id)

	def copy_text(self) -> str:
		self._require("copy the explanation", Step.EXPLANATION)
		return strip_markup(self.session.generated_explanation)

	# ---- speech capture ----

	def start_recording(self) -> Session:
		session = self._require("start recording", Step.EXPLAIN)
		if session.is_recording:
			return session
		if self._capture is None:
			session.error_message = SPEECH_UNSUPPORTED
			return session
		session.error_message = ""
		session.is_recording = True
		self._capture.start()
		return session

	def stop_recording(self) -> Session:
		self._stop_capture()
		return self.session

	def _stop_capture(self) -> None:
		if self._capture is not None:
			self._capture.stop()
		self.session.is_recording = False

	def _on_fragment(self, text: str, is_final: bool) -> None:
		session = self.session
		if not session.is_recording or not is_final:
			return
		session.understood_text += text + " "

	def _on_capture_error(self, reason: str) -> None:
		self._stop_capture()
		self.session.error_message = reason
