import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.auth.routes import router as auth_router
from backend.config import get_settings
from backend.dependencies import get_store, get_verifier
from backend.files.routes import router as files_router
from backend.realtime.server import RealtimeServer

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

api = FastAPI(title="Meeting Notes API")

api.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api.include_router(auth_router, prefix="/api/auth", tags=["auth"])
api.include_router(files_router, prefix="/api/files", tags=["files"])


@api.get("/health")
def health_check():
    return {"status": "ok"}


realtime = RealtimeServer(
    get_store(),
    get_verifier(),
    cors_allowed_origins=[str(origin).rstrip("/") for origin in settings.cors_origins],
)

# Socket.IO sits in front of FastAPI and forwards everything outside its path.
app = realtime.asgi_app(other_asgi_app=api, socketio_path=settings.socketio_path)
