from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base


# --- Workflow states ---
# Stored as VARCHAR, not enum, so new states don't require a migration.

CUSTOMIZATION_STATUSES = [
    "new",
    "reviewing",
    "quoted",
    "accepted",
    "declined",
    "completed",
]

DESIGN_REQUEST_STATUSES = [
    "pending_acceptance",
    "initial_estimate_requested",
    "initial_estimate_provided",
    "design_fee_paid",
    "design_started",
    "design_in_progress",
    "design_ready_for_review",
    "design_approved",
    "final_estimate_provided",
]

PAYMENT_STATUSES = ["pending", "advance_paid", "full_paid"]
ORDER_STATUSES = ["new", "processing", "shipped", "delivered", "cancelled"]
SUPPORTED_CURRENCIES = ["USD", "INR"]


# --- Accounts ---

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    email = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, default="customer")  # 'customer' | 'admin'
    created_at = Column(DateTime, default=datetime.utcnow)

    auth_tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user")
    design_requests = relationship("DesignRequest", back_populates="user")
    customization_requests = relationship("CustomizationRequest", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class AuthToken(Base):
    """JWT refresh token storage — access tokens are stateless."""
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    token_hash = Column(String, nullable=False)
    token_type = Column(String, default="refresh")
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="auth_tokens")


# --- Catalog ---

class MetalType(Base):
    """price_modifier is a percentage markup: 18 means +18%."""
    __tablename__ = "metal_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price_modifier = Column(Float, nullable=False, default=1.0)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    color = Column(String, nullable=True)  # hex color for UI display
    created_at = Column(DateTime, default=datetime.utcnow)


class StoneType(Base):
    """price_modifier is a price per carat in INR."""
    __tablename__ = "stone_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price_modifier = Column(Float, nullable=False, default=1.0)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    color = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class ProductType(Base):
    __tablename__ = "product_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    icon = Column(String, nullable=True)
    color = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    products = relationship("Product", back_populates="product_type")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    base_price = Column(Integer, nullable=False)  # INR
    calculated_price_usd = Column(Float, nullable=True)
    calculated_price_inr = Column(Float, nullable=True)
    image_url = Column(String, nullable=False)
    additional_images = Column(JSON, default=list)
    details = Column(Text, nullable=True)
    dimensions = Column(String, nullable=True)
    is_new = Column(Boolean, default=False)
    is_bestseller = Column(Boolean, default=False)
    is_featured = Column(Boolean, default=False)
    category = Column(String, nullable=True)  # Legacy free-text category
    product_type_id = Column(Integer, ForeignKey("product_types.id"), nullable=True)

    # Original priced composition — names match catalog rows case-insensitively
    metal_type = Column(String, nullable=True)
    metal_weight = Column(Float, default=0.0)  # grams
    main_stone_type = Column(String, nullable=True)
    main_stone_weight = Column(Float, default=0.0)  # carats
    secondary_stone_type = Column(String, nullable=True)
    secondary_stone_weight = Column(Float, default=0.0)
    other_stone_type = Column(String, nullable=True)
    other_stone_weight = Column(Float, default=0.0)

    ai_inputs = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    product_type = relationship("ProductType", back_populates="products")


# --- Customer requests ---

class CustomizationRequest(Base):
    """Customer asks to change metal/stones on an existing catalog product."""
    __tablename__ = "customization_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    customization_details = Column(Text, nullable=True)
    preferred_budget = Column(String, nullable=True)
    timeline = Column(String, nullable=True)
    selection_json = Column(JSON, nullable=True)  # {metal_type_id, main_stone_id, ...}
    estimated_price = Column(Integer, nullable=True)
    estimate_json = Column(JSON, nullable=True)  # PriceEstimate snapshot
    quoted_price = Column(Integer, nullable=True)
    admin_notes = Column(Text, nullable=True)
    status = Column(String, default="new")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="customization_requests")
    product = relationship("Product")


class DesignRequest(Base):
    """Custom design intake — from-scratch pieces, CAD workflow."""
    __tablename__ = "design_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    country = Column(String, nullable=True)
    metal_type = Column(String, nullable=False)
    primary_stones = Column(JSON, default=list)
    notes = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    image_urls = Column(JSON, default=list)
    status = Column(String, default="pending_acceptance")
    consultation_fee_paid = Column(Boolean, nullable=False, default=False)
    initial_estimate = Column(Integer, nullable=True)
    final_estimate = Column(Integer, nullable=True)
    iterations_count = Column(Integer, nullable=False, default=0)
    cad_image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="design_requests")
    comments = relationship(
        "DesignRequestComment",
        back_populates="design_request",
        cascade="all, delete-orphan",
        order_by="DesignRequestComment.created_at",
    )


class DesignRequestComment(Base):
    __tablename__ = "design_request_comments"

    id = Column(Integer, primary_key=True, index=True)
    design_request_id = Column(Integer, ForeignKey("design_requests.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_by = Column(String, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    image_urls = Column(JSON, default=list)
    created_at = Column(DateTime, default=datetime.utcnow)

    design_request = relationship("DesignRequest", back_populates="comments")


# --- Orders ---

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    shipping_address = Column(JSON, nullable=True)
    special_instructions = Column(Text, nullable=True)
    currency = Column(String, default="USD")
    total_amount = Column(Integer, nullable=False)
    advance_amount = Column(Integer, nullable=False)
    balance_amount = Column(Integer, nullable=False)
    payment_status = Column(String, default="pending")
    order_status = Column(String, default="new")
    payment_method = Column(String, nullable=True)
    payment_id = Column(String, nullable=True)  # PayPal order id
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    metal_type_id = Column(Integer, nullable=True)
    stone_type_id = Column(Integer, nullable=True)
    price = Column(Integer, nullable=False)
    currency = Column(String, default="USD")
    is_custom_design = Column(Boolean, default=False)
    design_request_id = Column(Integer, ForeignKey("design_requests.id"), nullable=True)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")


# --- Content ---

class InspirationItem(Base):
    __tablename__ = "inspiration_gallery"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String, nullable=False)
    category = Column(String, nullable=False)  # 'rings' | 'necklaces' | 'earrings' | ...
    tags = Column(JSON, default=list)
    featured = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
