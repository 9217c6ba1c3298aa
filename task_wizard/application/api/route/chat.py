from typing import Annotated
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
import structlog

from task_wizard.application.api.dependencies import get_session_controller
from task_wizard.application.api.schema.chat import ChatRequest, TurnResponse, ErrorResponse
from task_wizard.domain.session.session_controller import SessionController
from task_wizard.domain.session.session_id import SESSION_ID_HEADER

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


# Turn endpoint consumed by the conversation driver
@router.post("/chat")
async def chat_endpoint(
    request: Request,
    controller: Annotated[SessionController, Depends(get_session_controller)]
):
    try:
        payload = ChatRequest.model_validate(await request.json())
        turn = await controller.handle_turn(
            payload.messages,
            header_session_id=request.headers.get(SESSION_ID_HEADER)
        )
    except Exception as e:
        logger.error("Error in chat route", error=str(e), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message=f"Error processing chat request: {str(e) or 'Unknown error'}").model_dump()
        )

    logger.info(
        "Turn ready",
        session_id=turn.session_id,
        current_step=turn.session.current_step,
        tools=list(turn.tools.keys())
    )

    response = TurnResponse(
        session_id=turn.session_id,
        current_step=turn.session.current_step,
        step_complete=turn.session.step_complete,
        task_data=turn.session.task_data,
        system=turn.system_prompt,
        tools=turn.tool_schemas(),
        selected_task=turn.selected_task,
    )
    return JSONResponse(
        content=response.model_dump(by_alias=True, mode="json"),
        headers={SESSION_ID_HEADER: turn.session_id}
    )
