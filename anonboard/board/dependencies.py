"""FastAPI dependencies for the board.

Provides dependency injection for:
- Board service
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .exceptions import BoardError
from .service import BoardService


async def get_board_service(request: Request) -> BoardService:
    """Get board service from app state.

    Raises:
        HTTPException(503): If the service was not initialized at startup
    """
    app_state = request.app.state
    if not getattr(app_state, "board_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Board service not available",
        )
    return app_state.board_service


BoardServiceDep = Annotated[BoardService, Depends(get_board_service)]


def handle_board_error(error: BoardError) -> HTTPException:
    """Convert board errors to HTTP exceptions.

    Args:
        error: Board error

    Returns:
        HTTPException with appropriate status code
    """
    status_map = {
        "unauthenticated": status.HTTP_401_UNAUTHORIZED,
        "forbidden": status.HTTP_403_FORBIDDEN,
        "not_found": status.HTTP_404_NOT_FOUND,
        "validation_failed": status.HTTP_422_UNPROCESSABLE_ENTITY,
        "store_unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return HTTPException(
        status_code=status_code,
        detail=error.message,
        headers=headers,
    )
