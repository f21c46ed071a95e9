import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user
from app.database import get_db
from app.models.collections import Collection
from app.models.products import Product
from app.models.sizes import Size
from app.models.users import User
from app.schemas.products import ListProductRequest, ProductCreate, ProductPublic, ProductResponse, ProductUpdate
from app.utils.lookups import apply_partial_update, get_or_404, get_owned_collection, get_owned_product

router = APIRouter(tags=["products"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Add a product to one of the caller's collections.

    Sizes given inline are created in the same transaction as the product.

    Raises:
        NotFound: If the collection does not exist
        Forbidden: If the caller does not own the collection
    """
    get_owned_collection(db, product.collection_id, current_user)

    data = product.model_dump(exclude={"sizes"})
    db_product = Product(**data)
    db_product.sizes = [Size(**size.model_dump()) for size in product.sizes]
    db.add(db_product)
    db.commit()
    db.refresh(db_product)

    logger.info(
        f"Product created: {db_product.name} (ID: {db_product.id}) in collection {db_product.collection_id} "
        f"with {len(db_product.sizes)} sizes"
    )
    return db_product


# Registered before /products/{product_id} so "listed" is not read as an id
@router.get("/products/listed", response_model=List[ProductResponse])
def get_listed_product(db: Session = Depends(get_db)):
    """Products currently offered for sale"""
    return db.query(Product).filter(Product.is_listed.is_(True)).order_by(Product.id).all()


@router.post("/products/list", response_model=ProductResponse)
def list_product(
    request: ListProductRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark one of the caller's products as listed at the given SOL price"""
    db_product = get_owned_product(db, request.product_id, current_user)
    db_product.is_listed = True
    db_product.listing_price = request.price
    db.commit()
    db.refresh(db_product)
    logger.info(f"Product {db_product.id} listed at {request.price} SOL")
    return db_product


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product_by_id(product_id: int, db: Session = Depends(get_db)):
    return get_or_404(db, Product, product_id, "Product")


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_update: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db_product = get_owned_product(db, product_id, current_user)
    changes = product_update.model_dump(exclude_unset=True)
    apply_partial_update(db_product, changes)
    db.commit()
    db.refresh(db_product)
    logger.info(f"Product {product_id} updated: {sorted(changes)}")
    return db_product


@router.delete("/products/{product_id}", status_code=status.HTTP_200_OK)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a product along with its sizes and listings"""
    db_product = get_owned_product(db, product_id, current_user)
    db.delete(db_product)
    db.commit()
    logger.info(f"Product {product_id} deleted")
    return {"product_id": product_id, "detail": "deleted successfully"}


@router.get("/collections/{collection_id}/products", response_model=List[ProductResponse])
def get_collection_products(
    collection_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """All products in one of the caller's collections, including listing state"""
    get_owned_collection(db, collection_id, current_user)
    return db.query(Product).filter(Product.collection_id == collection_id).order_by(Product.id).all()


@router.get("/public/collections/{collection_id}/products", response_model=List[ProductPublic])
def get_products_by_collection_id(collection_id: int, db: Session = Depends(get_db)):
    get_or_404(db, Collection, collection_id, "Collection")
    return db.query(Product).filter(Product.collection_id == collection_id).order_by(Product.id).all()
