"""Create a meeting in the local JSON store and print a session token for its owner."""
import argparse
import time

import jwt

from backend.config import get_settings
from backend.services.repository import MeetingRepository

parser = argparse.ArgumentParser()
parser.add_argument('--user-id', type=int, required=True)
parser.add_argument('--title', default='Untitled meeting')
parser.add_argument('--ttl', type=int, default=7 * 24 * 3600)
args = parser.parse_args()

settings = get_settings()
repository = MeetingRepository(settings.data_dir / 'meetings.json')
meeting = repository.create_meeting(user_id=args.user_id, title=args.title)

now = int(time.time())
token = jwt.encode(
    {'userId': str(args.user_id), 'iat': now, 'exp': now + args.ttl},
    settings.jwt_secret,
    algorithm=settings.jwt_algorithm,
)
print(f'meeting_id={meeting.meeting_id}')
print(f'token={token}')
