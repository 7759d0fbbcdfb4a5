from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..flow import FlowController, UnknownExplanation
from ..workspaces import get_workspace
from .session import SavedExplanationView, saved_view


router = APIRouter(prefix="/saved", tags=["saved"])


@router.get("/{session_id}", response_model=List[SavedExplanationView])
async def list_saved(session_id: str, controller: FlowController = Depends(get_workspace)):
	return [saved_view(entry) for entry in controller.library.list()]


@router.delete("/{session_id}/{explanation_id}")
async def delete_saved(session_id: str, explanation_id: int, controller: FlowController = Depends(get_workspace)):
	try:
		controller.delete_saved(explanation_id)
	except UnknownExplanation as e:
		raise HTTPException(status_code=404, detail=str(e))
	return {"ok": True, "remaining": len(controller.library)}
