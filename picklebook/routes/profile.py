"""Profile route: partial update of the signed-in user's profile."""

from fastapi import APIRouter, Depends

from picklebook.core.dependencies import get_current_user, get_mock_api
from picklebook.schemas import ProfileUpdate, UserOut
from picklebook.services.mock_api import MockApi

router = APIRouter(prefix="/profile", tags=["profile"])


@router.patch("", response_model=UserOut)
async def update_profile(
    body: ProfileUpdate,
    user: UserOut = Depends(get_current_user),
    mock_api: MockApi = Depends(get_mock_api),
):
    # Only fields present in the request body are applied
    return await mock_api.update_profile(user.email, body.model_dump(exclude_unset=True))
