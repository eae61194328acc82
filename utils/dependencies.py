from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.requests import Request
import redis.asyncio as redis
import structlog
from config import settings
from services.storage import MemStorage

logger = structlog.get_logger(__name__)


# --- Store Access ---
def get_storage(app) -> MemStorage:
    """Get the entity store attached to the app"""
    storage = getattr(app.state, "storage", None)
    if storage is None:
        raise RuntimeError("Entity store not initialized")
    return storage


# --- Security Dependencies ---
security = HTTPBearer(auto_error=False)

async def verify_api_key(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Verify API key for mutating endpoints"""
    if not settings.api_key:
        return True  # No API key configured

    if not credentials or credentials.credentials != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return True

# --- Redis Setup ---
redis_client = None

async def get_redis():
    """Get Redis client, or None when rate limiting is not configured"""
    global redis_client
    if not settings.redis_url:
        return None
    if redis_client is None:
        try:
            redis_client = redis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
            await redis_client.ping()
        except Exception as e:
            logger.warning("Redis connection failed, rate limiting disabled", error=str(e))
            redis_client = None
    return redis_client

async def close_redis():
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None

# --- Rate Limiting ---
async def rate_limit(request: Request):
    """Rate limiting based on client IP"""
    redis_conn = await get_redis()
    if redis_conn:
        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{client_ip}"

        current_requests = await redis_conn.get(key)
        if current_requests is None:
            await redis_conn.setex(key, settings.rate_limit_window, 1)
        elif int(current_requests) >= settings.rate_limit_requests:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded"
            )
        else:
            await redis_conn.incr(key)
    return True
