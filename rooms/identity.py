"""Per-client room identity kept in the Django session.

One host token and one remembered nickname per room per client, stored under
``moyeora_host_<room_id>`` and ``moyeora_nickname_<room_id>``. Whoever holds
the room's host token is its host; nothing else is checked.
"""

import hmac
from typing import Iterable, Optional

from .constants import HOST_TOKEN_KEY_PREFIX, NICKNAME_KEY_PREFIX


def host_token_key(room_id) -> str:
    return f"{HOST_TOKEN_KEY_PREFIX}{room_id}"


def nickname_key(room_id) -> str:
    return f"{NICKNAME_KEY_PREFIX}{room_id}"


def remember_host_token(session, room_id, token) -> None:
    session[host_token_key(room_id)] = str(token)


def host_token_for(session, room_id) -> Optional[str]:
    value = session.get(host_token_key(room_id))
    return value if isinstance(value, str) else None


def token_matches(room, token: Optional[str]) -> bool:
    if not token:
        return False
    return hmac.compare_digest(str(token), str(room.host_token))


def is_host(session, room) -> bool:
    return token_matches(room, host_token_for(session, room.id))


def claim_host(session, room, token: Optional[str]) -> bool:
    """Store a presented token when it matches the room's current one."""
    if not token_matches(room, token):
        return False
    remember_host_token(session, room.id, token)
    return True


def remember_nickname(session, room_id, nickname: str) -> None:
    session[nickname_key(room_id)] = nickname


def remembered_nickname(session, room_id) -> Optional[str]:
    value = session.get(nickname_key(room_id))
    return value if isinstance(value, str) and value else None


def current_participant(session, room, participants: Iterable):
    nickname = remembered_nickname(session, room.id)
    if not nickname:
        return None
    return next((person for person in participants if person.nickname == nickname), None)
