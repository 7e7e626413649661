"""FastAPI dependencies for injection into route handlers.

The mock engine and cache are built once in the app lifespan and hung off
app.state; handlers reach them through these dependencies.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from picklebook.schemas import UserOut
from picklebook.services.cache import CacheService
from picklebook.services.errors import NotFoundError
from picklebook.services.mock_api import MockApi, parse_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_mock_api(request: Request) -> MockApi:
    return request.app.state.mock_api


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    mock_api: MockApi = Depends(get_mock_api),
) -> UserOut:
    """Resolve the user from a `token-{userId}-{timestamp}` bearer token."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    user_id = parse_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    try:
        return await mock_api.get_user_by_id(user_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found") from None
