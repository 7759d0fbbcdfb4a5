"""Shared fixtures for threadify tests."""

from typing import List, Optional, Tuple

import pytest

from threadify.flow import FlowController, Step
from threadify.generator import GenerationRequest
from threadify.speech import RelayedSpeechCapture

SOURCE = "Photosynthesis converts light into sugar."
UNDERSTOOD = "plants eat sunlight"


class FakeGenerator:
	"""Records every call and answers with canned text or a canned error."""

	def __init__(self, text: str = "**Photosynthesis** turns light into chemical energy.", error: Optional[Exception] = None) -> None:
		self.text = text
		self.error = error
		self.calls: List[Tuple[GenerationRequest, str]] = []

	async def generate(self, request: GenerationRequest, credential: str) -> str:
		self.calls.append((request, credential))
		if self.error is not None:
			raise self.error
		return self.text


@pytest.fixture
def generator():
	return FakeGenerator()


@pytest.fixture
def capture():
	return RelayedSpeechCapture()


@pytest.fixture
def controller(generator, capture):
	return FlowController(generator, capture=capture)


@pytest.fixture
def at_preferences(controller):
	"""Controller moved to the preferences step with a credential configured."""
	controller.submit_source(SOURCE)
	controller.submit_understanding(UNDERSTOOD)
	controller.set_credential("sk-ant-test")
	assert controller.session.step == Step.PREFERENCES
	return controller
