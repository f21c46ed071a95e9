import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user, require_role
from app.core.errors import Conflict, NotFound
from app.database import get_db
from app.models.collections import Collection
from app.models.users import User
from app.schemas.collections import CollectionCreate, CollectionPublic, CollectionResponse, CollectionUpdate
from app.utils.lookups import apply_partial_update, get_or_404, get_owned_collection

router = APIRouter(tags=["collections"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def ensure_address_free(db: Session, address: str, exclude_id: int = None) -> None:
    query = db.query(Collection).filter(Collection.collection_address == address)
    if exclude_id is not None:
        query = query.filter(Collection.id != exclude_id)
    if query.first():
        raise Conflict("A collection with this address already exists")


@router.post("/collections", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
def create_collection(
    collection_data: CollectionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_role(["designer"])),
):
    """Create a collection owned by the signed-in designer"""
    logger.info(f"Creating collection '{collection_data.name}' for designer {current_user.id}")
    if collection_data.collection_address:
        ensure_address_free(db, collection_data.collection_address)

    db_collection = Collection(**collection_data.model_dump(), designer_id=current_user.id)
    db.add(db_collection)
    db.commit()
    db.refresh(db_collection)

    logger.info(f"Collection created: {db_collection.name} (ID: {db_collection.id})")
    return db_collection


@router.get("/collections", response_model=List[CollectionResponse])
def get_collections(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Collections owned by the signed-in user"""
    return (
        db.query(Collection)
        .filter(Collection.designer_id == current_user.id)
        .order_by(Collection.id)
        .all()
    )


@router.get("/collections/by-designer/{designer_id}", response_model=List[CollectionPublic])
def get_collection_by_designer_id(designer_id: int, db: Session = Depends(get_db)):
    get_or_404(db, User, designer_id, "Designer")
    return db.query(Collection).filter(Collection.designer_id == designer_id).order_by(Collection.id).all()


@router.get("/collections/{collection_id}", response_model=CollectionResponse)
def get_collection(
    collection_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_owned_collection(db, collection_id, current_user)


@router.put("/collections/{collection_id}", response_model=CollectionResponse)
def update_collection(
    collection_id: int,
    collection_update: CollectionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partially update a collection. Only its designer may edit it."""
    db_collection = get_owned_collection(db, collection_id, current_user)
    changes = collection_update.model_dump(exclude_unset=True)

    if changes.get("collection_address"):
        ensure_address_free(db, changes["collection_address"], exclude_id=collection_id)

    apply_partial_update(db_collection, changes)
    db.commit()
    db.refresh(db_collection)
    logger.info(f"Collection {collection_id} updated: {sorted(changes)}")
    return db_collection


@router.delete("/collections/{collection_id}", status_code=status.HTTP_200_OK)
def delete_collection(
    collection_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a collection together with its products, sizes and listings"""
    db_collection = get_owned_collection(db, collection_id, current_user)
    product_count = len(db_collection.products)

    db.delete(db_collection)
    db.commit()
    logger.info(f"Collection {collection_id} deleted with {product_count} products")
    return {"collection_id": collection_id, "detail": "deleted successfully"}


@router.get("/public/collections", response_model=List[CollectionPublic])
def get_all_collections(db: Session = Depends(get_db)):
    return db.query(Collection).order_by(Collection.id).all()


@router.get("/public/collections/address/{address}", response_model=CollectionPublic)
def get_collection_by_address(address: str, db: Session = Depends(get_db)):
    collection = db.query(Collection).filter(Collection.collection_address == address).first()
    if not collection:
        logger.warning(f"Collection with address {address} not found")
        raise NotFound(f"Collection with address {address} not found")
    return collection


@router.get("/public/collections/{collection_id}", response_model=CollectionPublic)
def get_collection_by_id(collection_id: int, db: Session = Depends(get_db)):
    return get_or_404(db, Collection, collection_id, "Collection")
