from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from shared.config.settings import RATE_LIMIT_STORAGE_URI
from .jwt_handler import verify_access_token


def user_id_or_ip(request: Request) -> str:
    """
    Rate limit bucket for a request.

    Authenticated callers share one bucket per user id, whichever address
    they come from. Anonymous or badly authenticated requests fall back to
    the client address.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"

    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        payload = verify_access_token(token)
        if payload and payload.get("sub"):
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=user_id_or_ip, storage_uri=RATE_LIMIT_STORAGE_URI)
