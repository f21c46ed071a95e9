import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user
from app.database import get_db
from app.models.products import Product
from app.models.sizes import Size
from app.models.users import User
from app.schemas.sizes import SizeCreate, SizeResponse, SizeUpdate
from app.utils.lookups import apply_partial_update, ensure_collection_owner, get_or_404, get_owned_product

router = APIRouter(tags=["sizes"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_owned_size(db: Session, size_id: int, user: User) -> Size:
    size = get_or_404(db, Size, size_id, "Size")
    ensure_collection_owner(size.product.collection, user)
    return size


@router.post("/sizes", response_model=SizeResponse, status_code=status.HTTP_201_CREATED)
def add_size(
    size: SizeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    get_owned_product(db, size.product_id, current_user)
    db_size = Size(**size.model_dump())
    db.add(db_size)
    db.commit()
    db.refresh(db_size)
    logger.info(f"Size {db_size.label} (ID: {db_size.id}) added to product {db_size.product_id}")
    return db_size


@router.get("/sizes/{size_id}", response_model=SizeResponse)
def get_size(size_id: int, db: Session = Depends(get_db)):
    return get_or_404(db, Size, size_id, "Size")


@router.put("/sizes/{size_id}", response_model=SizeResponse)
def update_size(
    size_id: int,
    size_update: SizeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db_size = get_owned_size(db, size_id, current_user)
    apply_partial_update(db_size, size_update.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(db_size)
    return db_size


@router.delete("/sizes/{size_id}", status_code=status.HTTP_200_OK)
def delete_size(
    size_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db_size = get_owned_size(db, size_id, current_user)
    db.delete(db_size)
    db.commit()
    logger.info(f"Size {size_id} deleted")
    return {"size_id": size_id, "detail": "deleted successfully"}


@router.get("/products/{product_id}/sizes", response_model=List[SizeResponse])
def get_product_size(product_id: int, db: Session = Depends(get_db)):
    get_or_404(db, Product, product_id, "Product")
    return db.query(Size).filter(Size.product_id == product_id).order_by(Size.id).all()
