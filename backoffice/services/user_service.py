from __future__ import annotations

import logging
import uuid

from backoffice.schemas import User, UserIn
from backoffice.security.passwords import hash_password, verify_password
from backoffice.services.state_service import AppState

logger = logging.getLogger(__name__)


def normalize_username(value: str) -> str:
    return value.strip().lower()


def find_user(state: AppState, user_id: str) -> User | None:
    for user in state.users:
        if user.id == user_id:
            return user
    return None


def find_user_by_username(state: AppState, username: str) -> User | None:
    normalized = normalize_username(username)
    for user in state.users:
        if normalize_username(user.username) == normalized:
            return user
    return None


def authenticate(state: AppState, username: str, password: str) -> User | None:
    user = find_user_by_username(state, username)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def add_user(state: AppState, payload: UserIn) -> User:
    username = payload.username.strip()
    if not username:
        raise ValueError('Username cannot be empty')
    if find_user_by_username(state, username) is not None:
        raise ValueError('Username already exists')

    user = User(
        id=uuid.uuid4().hex,
        username=username,
        password_hash=hash_password(payload.password),
        name=payload.name.strip(),
        role=payload.role,
    )
    state.users.append(user)
    logger.info('Added user %s with role %s', user.username, user.role.value)
    return user


def delete_user(state: AppState, user_id: str, *, acting_user_id: str) -> None:
    if user_id == acting_user_id:
        raise ValueError('You cannot delete your own account')
    remaining = [user for user in state.users if user.id != user_id]
    if len(remaining) == len(state.users):
        raise ValueError('User not found')
    state.users = remaining
    logger.info('Deleted user %s', user_id)
