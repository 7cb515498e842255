from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from backend.dependencies import current_user_id, get_storage
from backend.realtime.errors import AuthorizationFailure
from backend.services.s3_storage import AttachmentStorage

from .controller import FilesController

router = APIRouter()


def get_controller(storage: AttachmentStorage = Depends(get_storage)) -> FilesController:
    return FilesController(storage)


@router.post("")
async def upload_file(
    file: UploadFile | None = File(None),
    user_id: int = Depends(current_user_id),
    controller: FilesController = Depends(get_controller),
):
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    body = await file.read()
    return await asyncio.to_thread(controller.upload, user_id, file.filename or "file", body, file.content_type)


@router.get("/{key:path}/url")
def get_file_url(
    key: str,
    user_id: int = Depends(current_user_id),
    controller: FilesController = Depends(get_controller),
):
    try:
        return controller.file_url(user_id, key)
    except AuthorizationFailure as exc:
        raise HTTPException(status_code=403, detail=exc.message) from exc


@router.delete("/{key:path}")
def delete_file(
    key: str,
    user_id: int = Depends(current_user_id),
    controller: FilesController = Depends(get_controller),
):
    try:
        return controller.delete(user_id, key)
    except AuthorizationFailure as exc:
        raise HTTPException(status_code=403, detail=exc.message) from exc
