import time
from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    return now_utc().isoformat()


def now_epoch() -> int:
    return int(time.time())


def now_epoch_ms() -> int:
    return int(time.time() * 1000)
