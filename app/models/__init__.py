# package marker for app.models

# Import all models to ensure relationships are properly initialized
from app.models.users import User
from app.models.collections import Collection
from app.models.products import Product
from app.models.sizes import Size
from app.models.nfts import NFT
from app.models.listings import Listing

__all__ = [
    "User",
    "Collection",
    "Product",
    "Size",
    "NFT",
    "Listing",
]
