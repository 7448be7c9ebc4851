"""
Token Revocation System using Redis.

Implements token blacklisting to immediately invalidate JWT tokens
when users log out or are deactivated by an admin.
"""

import logging
from backend.app.core.redis_client import get_redis
from backend.app.core.config import settings

logger = logging.getLogger("eparcel")

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


def _token_ttl() -> int:
    # Tokens expire on their own after this window
    return settings.access_token_expire_minutes * 60


async def revoke_token(token: str, user_id: str) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        redis = await get_redis()
        await redis.set(f"{TOKEN_BLACKLIST_PREFIX}{token}", str(user_id), ex=_token_ttl())
        return True
    except Exception as e:
        logger.error("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """Check if a token has been revoked."""
    try:
        redis = await get_redis()
        return await redis.exists(f"{TOKEN_BLACKLIST_PREFIX}{token}") > 0
    except Exception as e:
        # Fail open: the database active-flag check still runs afterwards
        logger.warning("Error checking token revocation: %s", e)
        return False


async def revoke_all_user_tokens(user_id: str) -> bool:
    """
    Revoke all active tokens for a user.

    Called when an admin deactivates an account to terminate its sessions.
    """
    try:
        redis = await get_redis()
        await redis.set(f"{USER_TOKENS_PREFIX}{user_id}:revoked", "1", ex=_token_ttl())
        return True
    except Exception as e:
        logger.error("Error revoking all tokens for user %s: %s", user_id, e)
        return False


async def are_user_tokens_revoked(user_id: str) -> bool:
    """Check if all tokens for a user have been revoked."""
    try:
        redis = await get_redis()
        return await redis.exists(f"{USER_TOKENS_PREFIX}{user_id}:revoked") > 0
    except Exception as e:
        logger.warning("Error checking user token revocation: %s", e)
        return False


async def clear_user_token_revocation(user_id: str) -> bool:
    """
    Clear the global token revocation flag for a user.

    Called when a deactivated user is re-activated.
    """
    try:
        redis = await get_redis()
        await redis.delete(f"{USER_TOKENS_PREFIX}{user_id}:revoked")
        return True
    except Exception as e:
        logger.error("Error clearing token revocation for user %s: %s", user_id, e)
        return False
