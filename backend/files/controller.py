from backend.realtime.errors import AuthorizationFailure
from backend.services.s3_storage import AttachmentStorage


class FilesController:
    def __init__(self, storage: AttachmentStorage):
        self.storage = storage

    def upload(self, user_id: int, filename: str, body: bytes, content_type: str | None) -> dict:
        key = self.storage.upload_file(user_id, filename, body, content_type)
        return {"key": key, "url": self.storage.get_file_url(key), "size": len(body)}

    def file_url(self, user_id: int, key: str) -> dict:
        self._check_owner(user_id, key)
        return {"key": key, "url": self.storage.get_file_url(key)}

    def delete(self, user_id: int, key: str) -> dict:
        self._check_owner(user_id, key)
        self.storage.delete_file(key)
        return {"success": True}

    def _check_owner(self, user_id: int, key: str) -> None:
        if not self.storage.owns(user_id, key):
            raise AuthorizationFailure("Not allowed to access this file")
