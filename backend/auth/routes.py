from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import bearer_token, get_verifier
from backend.realtime.errors import AuthenticationFailure, DependencyUnavailable
from backend.services.token_verifier import TokenVerifier

router = APIRouter()


@router.post("/logout")
async def logout(token: str = Depends(bearer_token), verifier: TokenVerifier = Depends(get_verifier)):
    try:
        await verifier.revoke(token)
    except AuthenticationFailure as exc:
        raise HTTPException(status_code=401, detail=exc.message) from exc
    except DependencyUnavailable as exc:
        raise HTTPException(status_code=503, detail=exc.message) from exc
    return {"success": True, "message": "Logged out"}
