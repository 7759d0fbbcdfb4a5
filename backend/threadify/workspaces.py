from __future__ import annotations
import uuid
from typing import Dict

from fastapi import HTTPException

from .flow import FlowController
from .generator import ExplanationGenerator, Generator
from .settings import settings
from .speech import CloudSpeechCapture, RelayedSpeechCapture

# One controller per browser page, process lifetime only
_workspaces: Dict[str, FlowController] = {}


def get_generator() -> Generator:
	return ExplanationGenerator()


def create_workspace(generator: Generator) -> str:
	if settings.cloud_speech_enabled:
		capture = CloudSpeechCapture(language_code=settings.speech_language)
	else:
		capture = RelayedSpeechCapture()
	workspace_id = uuid.uuid4().hex
	_workspaces[workspace_id] = FlowController(generator, capture=capture)
	return workspace_id


def get_workspace(session_id: str) -> FlowController:
	controller = _workspaces.get(session_id)
	if controller is None:
		raise HTTPException(status_code=404, detail="Session not found or expired")
	return controller


def clear_workspaces() -> None:
	_workspaces.clear()


def close_workspace(session_id: str) -> None:
	controller = _workspaces.pop(session_id, None)
	if controller is None:
		raise HTTPException(status_code=404, detail="Session not found or expired")
	controller.close()
