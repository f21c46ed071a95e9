from sqlalchemy import Boolean, Column, Integer, Float, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    collection_id = Column(Integer, ForeignKey('collections.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(100), index=True, nullable=False)
    description = Column(String(1000), nullable=True)
    price = Column(Float, nullable=False, default=0)
    image = Column(String(500), nullable=True)
    is_listed = Column(Boolean, nullable=False, default=False, index=True)
    listing_price = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    collection = relationship("Collection", back_populates="products")
    sizes = relationship("Size", back_populates="product", cascade="all, delete-orphan")
    listings = relationship("Listing", back_populates="product", cascade="all, delete-orphan")
