from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func

from app.database import Base


class NFT(Base):
    """
    Off-chain mirror of a minted NFT's metadata.
    The chain remains the source of truth; this row is not kept in sync.
    """
    __tablename__ = "nfts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    mint = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    symbol = Column(String(20), nullable=True)
    uri = Column(String(500), nullable=True)
    image = Column(String(500), nullable=True)
    group = Column(String(64), index=True, nullable=True)
    owner = Column(String(64), index=True, nullable=True)
    collection_id = Column(Integer, ForeignKey('collections.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
