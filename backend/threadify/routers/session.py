from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..flow import FlowController, FlowError, SavedExplanation, Step
from ..generator import Generator
from ..workspaces import close_workspace, create_workspace, get_generator, get_workspace


router = APIRouter(prefix="/session", tags=["session"])


class PreferencesView(BaseModel):
	format: Optional[str] = None
	detail: Optional[str] = None


class SessionView(BaseModel):
	session_id: str
	step: Step
	source_text: str
	understood_text: str
	preferences: PreferencesView
	# Escaped text with <strong>/<br /> only
	generated_explanation: str
	rating: int
	is_recording: bool
	loading: bool
	error_message: str
	credential_configured: bool
	credential_prompt: bool
	speech_available: bool
	saved_count: int


class SavedExplanationView(BaseModel):
	id: int
	excerpt: str
	understood_text: str
	generated_explanation: str
	rating: int
	created_at: datetime


class SaveResponse(BaseModel):
	saved: SavedExplanationView
	session: SessionView


class SourceRequest(BaseModel):
	text: str


class UnderstandingRequest(BaseModel):
	# Omitted on submit when the text was built up by dictation
	text: Optional[str] = None


class PreferencesRequest(BaseModel):
	format: Optional[Literal["narrative", "structured"]] = None
	detail: Optional[Literal["brief", "detailed"]] = None


class RatingRequest(BaseModel):
	rating: int = Field(ge=0, le=5)


class CredentialRequest(BaseModel):
	api_key: str


class PlainTextResponse(BaseModel):
	text: str


def session_view(session_id: str, controller: FlowController) -> SessionView:
	session = controller.session
	return SessionView(
		session_id=session_id,
		step=session.step,
		source_text=session.source_text,
		understood_text=session.understood_text,
		preferences=PreferencesView(format=session.preferences.format, detail=session.preferences.detail),
		generated_explanation=session.generated_explanation,
		rating=session.rating,
		is_recording=session.is_recording,
		loading=session.loading,
		error_message=session.error_message,
		credential_configured=controller.credential_configured,
		credential_prompt=controller.credential_prompt,
		speech_available=controller.speech_available,
		saved_count=len(controller.library),
	)


def saved_view(entry: SavedExplanation) -> SavedExplanationView:
	return SavedExplanationView(
		id=entry.id,
		excerpt=entry.excerpt,
		understood_text=entry.understood_text,
		generated_explanation=entry.generated_explanation,
		rating=entry.rating,
		created_at=entry.created_at,
	)


def conflict(err: FlowError) -> HTTPException:
	return HTTPException(status_code=409, detail=str(err))


@router.post("", response_model=SessionView, status_code=201)
async def create_session(generator: Generator = Depends(get_generator)):
	session_id = create_workspace(generator)
	return session_view(session_id, get_workspace(session_id))


@router.get("/{session_id}", response_model=SessionView)
async def read_session(session_id: str, controller: FlowController = Depends(get_workspace)):
	return session_view(session_id, controller)


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str):
	# Drops the workspace together with its credential and saved explanations
	close_workspace(session_id)


@router.post("/{session_id}/source", response_model=SessionView)
async def submit_source(session_id: str, req: SourceRequest, controller: FlowController = Depends(get_workspace)):
	try:
		controller.submit_source(req.text)
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.post("/{session_id}/back", response_model=SessionView)
async def back(session_id: str, controller: FlowController = Depends(get_workspace)):
	try:
		controller.back()
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.put("/{session_id}/understanding", response_model=SessionView)
async def edit_understanding(session_id: str, req: UnderstandingRequest, controller: FlowController = Depends(get_workspace)):
	try:
		controller.update_understanding(req.text or "")
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.post("/{session_id}/understanding", response_model=SessionView)
async def submit_understanding(session_id: str, req: UnderstandingRequest, controller: FlowController = Depends(get_workspace)):
	try:
		controller.submit_understanding(req.text)
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.post("/{session_id}/preferences", response_model=SessionView)
async def choose_preferences(session_id: str, req: PreferencesRequest, controller: FlowController = Depends(get_workspace)):
	"""Record a format and/or detail choice.

	Once both are set this awaits the generator; failures come back in
	``error_message`` with the session still on the preferences step.
	"""
	if req.format is None and req.detail is None:
		raise HTTPException(status_code=400, detail="format or detail is required")
	try:
		await controller.choose(format=req.format, detail=req.detail)
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.post("/{session_id}/rating", response_model=SessionView)
async def rate(session_id: str, req: RatingRequest, controller: FlowController = Depends(get_workspace)):
	try:
		controller.rate(req.rating)
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.post("/{session_id}/save", response_model=SaveResponse)
async def save(session_id: str, controller: FlowController = Depends(get_workspace)):
	try:
		entry = controller.save()
	except FlowError as e:
		raise conflict(e)
	return SaveResponse(saved=saved_view(entry), session=session_view(session_id, controller))


@router.post("/{session_id}/start-over", response_model=SessionView)
async def start_over(session_id: str, controller: FlowController = Depends(get_workspace)):
	try:
		controller.start_over()
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.post("/{session_id}/continue", response_model=SessionView)
async def continue_learning(session_id: str, controller: FlowController = Depends(get_workspace)):
	try:
		controller.continue_()
	except FlowError as e:
		raise conflict(e)
	return session_view(session_id, controller)


@router.put("/{session_id}/credential", response_model=SessionView)
async def set_credential(session_id: str, req: CredentialRequest, controller: FlowController = Depends(get_workspace)):
	# The key is kept in memory only and never echoed back
	controller.set_credential(req.api_key)
	return session_view(session_id, controller)


@router.delete("/{session_id}/credential", response_model=SessionView)
async def clear_credential(session_id: str, controller: FlowController = Depends(get_workspace)):
	controller.clear_credential()
	return session_view(session_id, controller)


@router.get("/{session_id}/explanation/plain", response_model=PlainTextResponse)
async def explanation_plain_text(session_id: str, controller: FlowController = Depends(get_workspace)):
	try:
		text = controller.copy_text()
	except FlowError as e:
		raise conflict(e)
	return PlainTextResponse(text=text)
