"""Routes shared by administrators and authors."""

from typing import Annotated

from fastapi import APIRouter, Depends

from newsroom.routes.dependencies import get_any_principal
from newsroom.schemas.auth import Account, AdminPrincipal, UserPrincipal
from newsroom.schemas.error import ApiResponse, ErrorResponse
from newsroom.services.accounts import principal_to_account

router = APIRouter(prefix="/account", tags=["Account"])


@router.get(
    "/me",
    response_model=ApiResponse[Account],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def get_current_account(
    principal: Annotated[AdminPrincipal | UserPrincipal, Depends(get_any_principal)],
) -> ApiResponse[Account]:
    return ApiResponse(data=principal_to_account(principal))
