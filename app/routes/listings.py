import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user
from app.database import get_db
from app.models.listings import Listing
from app.models.users import User
from app.schemas.listings import ListingCreate, ListingResponse
from app.services.solana import lamports_to_sol
from app.utils.lookups import get_owned_product

router = APIRouter(tags=["listings"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@router.post("/listings", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
def create_listing(
    listing: ListingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Record a marketplace listing for one of the caller's products.

    The product is marked as listed at the listing price converted to SOL.
    """
    db_product = get_owned_product(db, listing.product_id, current_user)

    db_listing = Listing(**listing.model_dump(), is_active=True)
    db_product.is_listed = True
    db_product.listing_price = lamports_to_sol(listing.price)
    db.add(db_listing)
    db.commit()
    db.refresh(db_listing)

    logger.info(f"Listing {db_listing.id} created for product {db_product.id} at {listing.price} lamports")
    return db_listing
