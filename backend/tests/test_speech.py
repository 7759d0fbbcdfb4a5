"""Tests for the speech capture implementations."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import GoogleAPIError

from threadify.flow import FlowController, Step
from threadify.speech import CloudSpeechCapture, RelayedSpeechCapture

from conftest import SOURCE, FakeGenerator


def _response(*transcripts):
	results = [SimpleNamespace(alternatives=[SimpleNamespace(transcript=t)] if t is not None else []) for t in transcripts]
	return SimpleNamespace(results=results)


class TestRelayedSpeechCapture:
	def test_push_reaches_every_subscriber(self):
		capture = RelayedSpeechCapture()
		received_a, received_b = [], []
		capture.subscribe(lambda text, final: received_a.append((text, final)), lambda reason: None)
		capture.subscribe(lambda text, final: received_b.append((text, final)), lambda reason: None)
		capture.start()

		assert capture.push("hello", False) is True

		assert received_a == [("hello", False)]
		assert received_b == [("hello", False)]

	def test_push_while_stopped_is_dropped(self):
		capture = RelayedSpeechCapture()
		received = []
		capture.subscribe(lambda text, final: received.append(text), lambda reason: None)

		assert capture.push("hello", True) is False
		assert received == []

	def test_fail_stops_and_notifies(self):
		capture = RelayedSpeechCapture()
		reasons = []
		capture.subscribe(lambda text, final: None, reasons.append)
		capture.start()

		capture.fail("network")

		assert capture.active is False
		assert reasons == ["network"]


class TestCloudSpeechCapture:
	@pytest.fixture
	def recognizer(self):
		client = MagicMock()
		client.recognize.return_value = _response(" plants eat sunlight ", None, "")
		return client

	@pytest.fixture
	def controller(self, recognizer):
		capture = CloudSpeechCapture(client_factory=lambda: recognizer)
		controller = FlowController(FakeGenerator(), capture=capture)
		controller.submit_source(SOURCE)
		return controller

	@pytest.mark.asyncio
	async def test_results_become_final_fragments(self, controller, recognizer):
		controller.start_recording()

		delivered = await controller.capture.transcribe(b"\x00\x01")

		assert delivered == 1
		assert controller.session.understood_text == "plants eat sunlight "
		kwargs = recognizer.recognize.call_args.kwargs
		assert kwargs["config"].language_code == "en-US"
		assert kwargs["audio"].content == b"\x00\x01"

	@pytest.mark.asyncio
	async def test_not_recording_skips_recognition(self, controller, recognizer):
		delivered = await controller.capture.transcribe(b"\x00\x01")

		assert delivered == 0
		recognizer.recognize.assert_not_called()

	@pytest.mark.asyncio
	async def test_api_error_is_a_capture_error(self, controller, recognizer):
		recognizer.recognize.side_effect = GoogleAPIError("quota exceeded")
		controller.start_recording()

		await controller.capture.transcribe(b"\x00\x01")

		assert controller.session.is_recording is False
		assert "quota exceeded" in controller.session.error_message
		assert controller.session.step == Step.EXPLAIN

	@pytest.mark.asyncio
	async def test_client_construction_failure(self):
		def broken():
			raise RuntimeError("no credentials")

		capture = CloudSpeechCapture(client_factory=broken)
		controller = FlowController(FakeGenerator(), capture=capture)
		controller.submit_source(SOURCE)
		controller.start_recording()

		await capture.transcribe(b"\x00\x01")

		assert controller.session.is_recording is False
		assert "no credentials" in controller.session.error_message

	@pytest.mark.asyncio
	async def test_empty_audio(self, controller, recognizer):
		controller.start_recording()

		await controller.capture.transcribe(b"")

		assert controller.session.error_message == "Empty audio payload received."
		recognizer.recognize.assert_not_called()
