import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user
from app.core.errors import Conflict, NotFound
from app.database import get_db
from app.models.collections import Collection
from app.models.users import User
from app.schemas.collections import CollectionPublic
from app.schemas.users import DesignerProfile, UserPrivate, UserPublic, UserUpdate
from app.utils.lookups import apply_partial_update

router = APIRouter(tags=["users"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DESIGNER_ROLE = "designer"


def designer_profile(db: Session, designer: User) -> DesignerProfile:
    collections = db.query(Collection).filter(Collection.designer_id == designer.id).order_by(Collection.id).all()
    return DesignerProfile(
        designer=UserPublic.model_validate(designer),
        collections=[CollectionPublic.model_validate(c) for c in collections],
    )


@router.get("/userinfo", response_model=UserPrivate)
def get_user_info(current_user: User = Depends(get_current_user)):
    """Profile of the signed-in user"""
    return current_user


@router.put("/userinfo", response_model=UserPrivate)
def update_user_info(
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update the signed-in user's profile; only provided fields change"""
    changes = user_update.model_dump(exclude_unset=True)

    new_username = changes.get("username")
    if new_username and new_username != current_user.username:
        taken = db.query(User).filter(User.username == new_username).first()
        if taken:
            raise Conflict("Username already taken")

    apply_partial_update(current_user, changes)
    db.commit()
    db.refresh(current_user)
    logger.info(f"Updated profile for user {current_user.id}: {sorted(changes)}")
    return current_user


@router.get("/designers", response_model=List[UserPublic])
def get_all_designers(db: Session = Depends(get_db)):
    return db.query(User).filter(User.role == DESIGNER_ROLE).order_by(User.id).all()


@router.get("/public/designers/username/{username}", response_model=DesignerProfile)
def get_designer_by_username(username: str, db: Session = Depends(get_db)):
    designer = db.query(User).filter(User.username == username, User.role == DESIGNER_ROLE).first()
    if not designer:
        raise NotFound(f"Designer {username} not found")
    return designer_profile(db, designer)


@router.get("/public/designers/{designer_id}", response_model=DesignerProfile)
def get_designer_by_id(designer_id: int, db: Session = Depends(get_db)):
    designer = db.query(User).filter(User.id == designer_id, User.role == DESIGNER_ROLE).first()
    if not designer:
        raise NotFound(f"Designer with ID {designer_id} not found")
    return designer_profile(db, designer)
