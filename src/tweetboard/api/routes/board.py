"""Board status and manual sync endpoints."""

from fastapi import APIRouter

from tweetboard.api.dependencies import ServiceDep
from tweetboard.api.models import (
    APIResponse,
    BoardResponse,
    ColumnResponse,
    SetupResponse,
    SyncResponse,
    board_to_response,
)
from tweetboard.board import NotFoundError

router = APIRouter(prefix="/board", tags=["board"])


@router.get("", response_model=APIResponse[BoardResponse])
async def get_board(service: ServiceDep) -> APIResponse[BoardResponse]:
    """Get the board with its columns and cards."""
    return APIResponse(data=board_to_response(service.board.snapshot()))


@router.get("/columns/{name}", response_model=APIResponse[ColumnResponse])
async def get_column(name: str, service: ServiceDep) -> APIResponse[ColumnResponse]:
    """Get one column by logical name."""
    for column in service.board.snapshot()["columns"]:
        if column.name == name:
            return APIResponse(data=ColumnResponse.model_validate(column))
    raise NotFoundError(f"Column '{name}' is not on the board")


@router.post("/sync", response_model=APIResponse[SyncResponse])
async def sync_board(service: ServiceDep) -> APIResponse[SyncResponse]:
    """Poll the issue tracker and resync the board now."""
    result = await service.sync_once()
    return APIResponse(data=SyncResponse(**result))


@router.post("/setup", response_model=APIResponse[SetupResponse])
async def setup_board(service: ServiceDep) -> APIResponse[SetupResponse]:
    """Run board setup again, e.g. after it failed at startup."""
    ready = await service.board.setup()
    return APIResponse(
        data=SetupResponse(ready=ready, missing_columns=service.board.unresolved_columns())
    )
