from __future__ import annotations
import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..flow import FlowController, FlowError
from ..speech import CloudSpeechCapture, RelayedSpeechCapture
from ..workspaces import get_workspace
from .session import SessionView, conflict, session_view


router = APIRouter(prefix="/speech", tags=["speech"])


class FragmentRequest(BaseModel):
	text: str
	is_final: bool = False


class CaptureErrorRequest(BaseModel):
	reason: str = Field(min_length=1)


class AudioRequest(BaseModel):
	audio_base64: str


def _relay(controller: FlowController) -> RelayedSpeechCapture:
	capture = controller.capture
	if not isinstance(capture, RelayedSpeechCapture):
		raise HTTPException(status_code=400, detail="Speech capture is not available for this session")
	return capture


@router.post("/{session_id}/start", response_model=SessionView)
async def start_recording(session_id: str, controller: FlowController = Depends(get_workspace)):
	try:
		controller.start_recording()
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.post("/{session_id}/stop", response_model=SessionView)
async def stop_recording(session_id: str, controller: FlowController = Depends(get_workspace)):
	controller.stop_recording()
	return session_view(session_id, controller)


@router.post("/{session_id}/fragment", response_model=SessionView)
async def transcript_fragment(session_id: str, req: FragmentRequest, controller: FlowController = Depends(get_workspace)):
	# Fragments relayed after capture stopped are dropped by the capture itself
	_relay(controller).push(req.text, req.is_final)
	return session_view(session_id, controller)


@router.post("/{session_id}/error", response_model=SessionView)
async def capture_error(session_id: str, req: CaptureErrorRequest, controller: FlowController = Depends(get_workspace)):
	_relay(controller).fail(req.reason)
	return session_view(session_id, controller)


@router.post("/{session_id}/audio", response_model=SessionView)
async def transcribe_audio(session_id: str, req: AudioRequest, controller: FlowController = Depends(get_workspace)):
	capture = controller.capture
	if not isinstance(capture, CloudSpeechCapture):
		raise HTTPException(status_code=400, detail="Server-side dictation is disabled")
	try:
		audio_content = base64.b64decode(req.audio_base64, validate=True)
	except (binascii.Error, ValueError):
		raise HTTPException(status_code=400, detail="audio_base64 is not valid base64")
	await capture.transcribe(audio_content)
	return session_view(session_id, controller)
