from typing import Annotated
from fastapi import APIRouter, Depends

from task_wizard.application.api.dependencies import get_session_controller
from task_wizard.application.api.schema.chat import SessionPayload, SessionResetResponse
from task_wizard.domain.session.session_controller import SessionController

router = APIRouter(prefix="/api/session", tags=["session"])


@router.get("/{session_id}", response_model=SessionPayload, response_model_by_alias=True)
async def get_session(
    session_id: str,
    controller: Annotated[SessionController, Depends(get_session_controller)]
):
    record = await controller.get_session(session_id)
    return SessionPayload(
        session_id=session_id,
        current_step=record.current_step,
        step_complete=record.step_complete,
        task_data=record.task_data,
    )


@router.delete("/{session_id}", response_model=SessionResetResponse, response_model_by_alias=True)
async def reset_session(
    session_id: str,
    controller: Annotated[SessionController, Depends(get_session_controller)]
):
    deleted = await controller.reset_session(session_id)
    return SessionResetResponse(session_id=session_id, deleted=deleted)
