from fastapi import Request

from task_wizard.domain.session.session_controller import SessionController


def get_session_controller(request: Request) -> SessionController:
    return request.app.state.session_controller
