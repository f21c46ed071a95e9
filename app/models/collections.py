from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Collection(Base):
    """
    A designer's clothing collection.
    Optionally mirrored on-chain at collection_address.
    """
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), index=True, nullable=False)
    description = Column(String(1000), nullable=True)
    image = Column(String(500), nullable=True)
    collection_address = Column(String(64), unique=True, index=True, nullable=True)
    designer_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    designer = relationship("User", back_populates="collections")
    # Deleting a collection removes its products, and through them sizes and listings
    products = relationship("Product", back_populates="collection", cascade="all, delete-orphan")
