from functools import lru_cache

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.config import get_settings
from backend.realtime.errors import AuthenticationFailure
from backend.services.meeting_store import MeetingStore
from backend.services.repository import MeetingRepository
from backend.services.s3_storage import AttachmentStorage
from backend.services.token_denylist import TokenDenylist
from backend.services.token_verifier import TokenVerifier

bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_denylist() -> TokenDenylist:
    return TokenDenylist()


@lru_cache
def get_verifier() -> TokenVerifier:
    return TokenVerifier(denylist=get_denylist())


@lru_cache
def get_store() -> MeetingStore:
    return MeetingStore(MeetingRepository(get_settings().data_dir / "meetings.json"))


@lru_cache
def get_storage() -> AttachmentStorage:
    return AttachmentStorage()


def bearer_token(credentials: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Missing authentication token")
    return credentials.credentials


async def current_user_id(
    token: str = Depends(bearer_token),
    verifier: TokenVerifier = Depends(get_verifier),
) -> int:
    try:
        return await verifier.verify(token)
    except AuthenticationFailure as exc:
        raise HTTPException(status_code=401, detail=exc.message) from exc
