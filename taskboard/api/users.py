import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, func, select

from taskboard.database import get_session
from taskboard.models import Task, User
from taskboard.schemas import UserCreate, UserSummary, UserUpdate
from taskboard.security import get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    query = select(User).where(User.email == email)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    return db.exec(query).first() is not None


def _duplicate_email(email: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=f"Email {email} is already registered.",
    )


def _summary(db: Session, user: User) -> UserSummary:
    count = db.exec(select(func.count(col(Task.id))).where(Task.owner_id == user.id)).one()
    return UserSummary(id=user.id, name=user.name, email=user.email, task_count=count)


@router.get("", response_model=List[UserSummary])
def list_users(db: Session = Depends(get_session)):
    """
    Lists users with the number of tasks each owns. Password hashes are
    never part of the result.
    """
    query = (
        select(User, func.count(col(Task.id)))
        .outerjoin(Task, Task.owner_id == User.id)
        .group_by(col(User.id))
        .order_by(col(User.id))
    )
    return [
        UserSummary(id=user.id, name=user.name, email=user.email, task_count=count)
        for user, count in db.exec(query).all()
    ]


@router.get("/{user_id}", response_model=UserSummary)
def get_user(user_id: int, db: Session = Depends(get_session)):
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return _summary(db, user)


@router.post("", response_model=UserSummary, status_code=status.HTTP_201_CREATED)
def create_user(user_in: UserCreate, response: Response, db: Session = Depends(get_session)):
    """
    Registers a user. The password is hashed before it is stored.
    """
    if _email_taken(db, user_in.email):
        logger.info("Rejected duplicate email: %s", user_in.email)
        raise _duplicate_email(user_in.email)

    db_user = User(
        name=user_in.name,
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another signup for the same address
        db.rollback()
        raise _duplicate_email(user_in.email)
    db.refresh(db_user)
    logger.info("User registered: %s with id %s", db_user.email, db_user.id)

    response.headers["Location"] = f"{router.prefix}/{db_user.id}"
    return UserSummary(id=db_user.id, name=db_user.name, email=db_user.email, task_count=0)


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_user(user_id: int, user_in: UserUpdate, db: Session = Depends(get_session)):
    """
    Updates a profile. Fields left out are unchanged; so is the password when
    it is omitted or empty.
    """
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if user_in.email is not None and _email_taken(db, user_in.email, exclude_id=user_id):
        raise _duplicate_email(user_in.email)

    if user_in.name is not None:
        user.name = user_in.name
    if user_in.email is not None:
        user.email = user_in.email
    if user_in.password:
        user.hashed_password = get_password_hash(user_in.password)

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another user claimed the address between the check and the commit
        db.rollback()
        raise _duplicate_email(user_in.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_session)):
    """
    Deletes a user together with every task it owns.
    """
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    db.delete(user)
    db.commit()
    logger.info("Deleted user %s and its tasks", user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
