from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


@dataclass
class Connection:
    sid: str
    user_id: int | None = None
    state: ConnectionState = ConnectionState.CONNECTING
    rooms: set[str] = field(default_factory=set)

    @property
    def is_authenticated(self) -> bool:
        return self.state is ConnectionState.AUTHENTICATED

    def authenticate(self, user_id: int) -> None:
        if self.user_id is not None:
            raise RuntimeError(f"Connection {self.sid} already authenticated")
        self.user_id = user_id
        self.state = ConnectionState.AUTHENTICATED

    def close(self) -> None:
        self.state = ConnectionState.CLOSED
