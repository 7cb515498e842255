from __future__ import annotations

import logging
import re
from typing import Any

import jwt

from backend.config import get_settings
from backend.realtime.errors import AuthenticationFailure, DependencyUnavailable
from backend.services.token_denylist import TokenDenylist
from backend.utils.time_utils import now_epoch

logger = logging.getLogger(__name__)

USER_ID_PATTERN = re.compile(r"[0-9]+")


class TokenVerifier:
    def __init__(
        self,
        denylist: TokenDenylist | None = None,
        secret: str | None = None,
        algorithm: str | None = None,
    ):
        settings = get_settings()
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.denylist = denylist

    def _decode(self, token: str | None) -> tuple[dict[str, Any], int]:
        if not token:
            raise AuthenticationFailure("Missing authentication token")
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationFailure("Authentication token expired") from exc
        except jwt.PyJWTError as exc:
            raise AuthenticationFailure() from exc
        user_id = claims.get("userId")
        if isinstance(user_id, bool):
            raise AuthenticationFailure()
        if isinstance(user_id, int):
            return claims, user_id
        if isinstance(user_id, str) and USER_ID_PATTERN.fullmatch(user_id):
            return claims, int(user_id)
        raise AuthenticationFailure()

    async def verify(self, token: str | None) -> int:
        """Return the user id carried by ``token`` or raise ``AuthenticationFailure``.

        The denylist lookup is best effort: when Redis is unreachable the
        token is accepted on its signature alone.
        """
        _, user_id = self._decode(token)

        if self.denylist is not None:
            try:
                revoked = await self.denylist.contains(token)
            except DependencyUnavailable:
                logger.warning("Token denylist unreachable, skipping revocation check for user %s", user_id)
                revoked = False
            if revoked:
                raise AuthenticationFailure("Token has been revoked")
        return user_id

    async def revoke(self, token: str | None) -> int:
        """Deny ``token`` until it expires. Returns the owning user id."""
        claims, user_id = self._decode(token)
        if self.denylist is None:
            raise DependencyUnavailable("Token denylist not configured")
        expires_at = claims.get("exp")
        ttl = int(expires_at) - now_epoch() if expires_at else 7 * 24 * 3600
        await self.denylist.revoke(token, ttl)
        return user_id
