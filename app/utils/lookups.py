import logging
from typing import Type, TypeVar

from sqlalchemy.orm import Session

from app.core.errors import Forbidden, NotFound
from app.models.collections import Collection
from app.models.products import Product
from app.models.users import User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


def get_or_404(db: Session, model: Type[ModelT], object_id: int, label: str) -> ModelT:
    """Load a row by primary key or raise NotFound"""
    instance = db.get(model, object_id)
    if instance is None:
        logger.warning(f"{label} with ID {object_id} not found")
        raise NotFound(f"{label} with ID {object_id} not found")
    return instance


def ensure_collection_owner(collection: Collection, user: User) -> Collection:
    if collection.designer_id != user.id:
        logger.warning(f"User {user.id} refused access to collection {collection.id}")
        raise Forbidden("You do not own this collection")
    return collection


def get_owned_collection(db: Session, collection_id: int, user: User) -> Collection:
    return ensure_collection_owner(get_or_404(db, Collection, collection_id, "Collection"), user)


def get_owned_product(db: Session, product_id: int, user: User) -> Product:
    """Products are owned through their collection's designer"""
    product = get_or_404(db, Product, product_id, "Product")
    ensure_collection_owner(product.collection, user)
    return product


def apply_partial_update(instance, changes: dict) -> None:
    for field, value in changes.items():
        setattr(instance, field, value)
