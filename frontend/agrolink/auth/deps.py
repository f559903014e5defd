"""FastAPI dependencies for authentication.

The service never decodes tokens itself: the backend owns users and roles.
It only insists that a bearer token is present and forwards it on every
backend call.

Dependencies:
  get_access_token    → bearer token from the Authorization header (or 401)
  get_backend_client  → BackendClient bound to that token
"""

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from agrolink.clients.backend import BackendClient, get_http_client

bearer_scheme = HTTPBearer(auto_error=False)


async def get_access_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_backend_client(
    token: str = Depends(get_access_token),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> BackendClient:
    return BackendClient(http, token=token)
