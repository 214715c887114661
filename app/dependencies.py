import uuid

from fastapi import Header, HTTPException, Response, Security, status
from fastapi.security import APIKeyHeader

from app.config import settings
from app.services.cache import QueryCache, query_cache

# Declares the X-API-Key header in OpenAPI schema
api_key_scheme = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(api_key: str = Security(api_key_scheme)) -> str:
    """FastAPI dependency that validates the X-API-Key header on operator endpoints."""
    if not api_key or api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
    return api_key


def get_query_cache() -> QueryCache:
    """FastAPI dependency returning the shared aggregation cache."""
    return query_cache


async def get_request_id(
    response: Response,
    x_request_id: str | None = Header(default=None),
) -> uuid.UUID:
    """Request ID from the X-Request-ID header, or a fresh uuid4 if missing or invalid.

    The ID is echoed back in the response's X-Request-ID header.
    """
    try:
        request_id = uuid.UUID(x_request_id) if x_request_id else uuid.uuid4()
    except ValueError:
        request_id = uuid.uuid4()
    response.headers["X-Request-ID"] = str(request_id)
    return request_id
