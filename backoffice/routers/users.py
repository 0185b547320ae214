from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.auth import Principal, View, require_view
from backoffice.db import get_db
from backoffice.dependencies import commit_state
from backoffice.schemas import UserIn, UserOut
from backoffice.services.state_service import load_state
from backoffice.services.storage_service import USERS_KEY
from backoffice.services.user_service import add_user, delete_user, find_user

router = APIRouter(prefix='/users', tags=['users'])
admin_access = require_view(View.USERS)


@router.get('', response_model=list[UserOut])
def list_users(principal: Principal = Depends(admin_access), db: Session = Depends(get_db)):
    state = load_state(db)
    db.commit()
    return state.users


@router.post('', response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserIn, principal: Principal = Depends(admin_access), db: Session = Depends(get_db)):
    state = load_state(db)
    try:
        user = add_user(state, payload)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    commit_state(db, state, USERS_KEY)
    return user


@router.delete('/{user_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_user(user_id: str, principal: Principal = Depends(admin_access), db: Session = Depends(get_db)):
    state = load_state(db)
    if find_user(state, user_id) is None:
        raise HTTPException(status_code=404, detail='User not found')
    try:
        delete_user(state, user_id, acting_user_id=principal.id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    commit_state(db, state, USERS_KEY)
