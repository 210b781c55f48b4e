from pydantic import BaseModel
from typing import Optional, List, Union
from datetime import datetime


# --- Catalog: metal / stone / product types ---

class CatalogTypeBase(BaseModel):
    name: str
    description: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    color: Optional[str] = None


class MetalTypeCreate(CatalogTypeBase):
    price_modifier: float = 0.0  # percent markup


class MetalTypeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price_modifier: Optional[float] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    color: Optional[str] = None


class MetalType(MetalTypeCreate):
    id: int
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class StoneTypeCreate(CatalogTypeBase):
    price_modifier: float = 0.0  # INR per carat
    image_url: Optional[str] = None


class StoneTypeUpdate(MetalTypeUpdate):
    image_url: Optional[str] = None


class StoneType(StoneTypeCreate):
    id: int
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class ProductTypeCreate(CatalogTypeBase):
    icon: Optional[str] = None


class ProductTypeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class ProductType(ProductTypeCreate):
    id: int
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Products ---

class ProductBase(BaseModel):
    name: str
    description: str
    base_price: int
    image_url: str
    additional_images: List[str] = []
    details: Optional[str] = None
    dimensions: Optional[str] = None
    is_new: bool = False
    is_bestseller: bool = False
    is_featured: bool = False
    category: Optional[str] = None
    product_type_id: Optional[int] = None
    metal_type: Optional[str] = None
    metal_weight: float = 0.0
    main_stone_type: Optional[str] = None
    main_stone_weight: float = 0.0
    secondary_stone_type: Optional[str] = None
    secondary_stone_weight: float = 0.0
    other_stone_type: Optional[str] = None
    other_stone_weight: float = 0.0
    calculated_price_usd: Optional[float] = None
    calculated_price_inr: Optional[float] = None
    ai_inputs: Optional[dict] = None


class ProductCreate(ProductBase):
    recalculate_price: bool = False  # fill calculated prices from composition


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[int] = None
    image_url: Optional[str] = None
    additional_images: Optional[List[str]] = None
    details: Optional[str] = None
    dimensions: Optional[str] = None
    is_new: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    is_featured: Optional[bool] = None
    category: Optional[str] = None
    product_type_id: Optional[int] = None
    metal_type: Optional[str] = None
    metal_weight: Optional[float] = None
    main_stone_type: Optional[str] = None
    main_stone_weight: Optional[float] = None
    secondary_stone_type: Optional[str] = None
    secondary_stone_weight: Optional[float] = None
    other_stone_type: Optional[str] = None
    other_stone_weight: Optional[float] = None
    calculated_price_usd: Optional[float] = None
    calculated_price_inr: Optional[float] = None
    ai_inputs: Optional[dict] = None
    recalculate_price: bool = False


class Product(ProductBase):
    id: int
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Pricing ---

class GemInput(BaseModel):
    name: str = ""
    carats: Optional[float] = None
    stone_type_id: Optional[int] = None


class PriceCalculationRequest(BaseModel):
    metal_type_id: Optional[int] = None
    metal_type: str = ""
    metal_weight: float = 5.0
    gems: List[GemInput] = []
    product_type: str = "Necklace"


class CustomizationSelection(BaseModel):
    """Any slot left as None keeps the product's original component."""
    metal_type_id: Optional[Union[int, str]] = None
    main_stone_id: Optional[Union[int, str]] = None
    secondary_stone_id: Optional[Union[int, str]] = None
    other_stone_id: Optional[Union[int, str]] = None


# --- Inspiration gallery ---

class InspirationBase(BaseModel):
    title: str
    description: str
    image_url: str
    category: str
    tags: List[str] = []
    featured: bool = False


class InspirationCreate(InspirationBase):
    pass


class InspirationUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None


class Inspiration(InspirationBase):
    id: int
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True
