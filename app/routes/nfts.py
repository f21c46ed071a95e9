import logging
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user
from app.core.errors import Conflict
from app.database import get_db
from app.models.collections import Collection
from app.models.nfts import NFT
from app.models.users import User
from app.schemas.nfts import NFTCreate, NFTResponse
from app.utils.lookups import get_or_404

router = APIRouter(tags=["nfts"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@router.post("/saveNFT", response_model=NFTResponse, status_code=status.HTTP_201_CREATED)
def create_nft(
    nft: NFTCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Store the metadata of a freshly minted NFT"""
    if nft.collection_id is not None:
        get_or_404(db, Collection, nft.collection_id, "Collection")

    if db.query(NFT).filter(NFT.mint == nft.mint).first():
        raise Conflict(f"NFT with mint {nft.mint} already saved")

    db_nft = NFT(**nft.model_dump())
    db.add(db_nft)
    db.commit()
    db.refresh(db_nft)
    logger.info(f"NFT saved: {db_nft.name} (mint: {db_nft.mint}) by user {current_user.id}")
    return db_nft


@router.get("/nfts", response_model=List[NFTResponse])
def get_all_nfts(db: Session = Depends(get_db)):
    return db.query(NFT).order_by(NFT.id).all()
