from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./storefront.db"
    SECRET_KEY: str = "dev-secret-key"
    STORE_NAME: str = "Luster Legacy"
    STORE_EMAIL: str = "info@lusterlegacy.com"

    # Pricing
    EXCHANGE_RATE_INR_PER_USD: float = 83.8488  # stone per-carat prices are stored in INR
    USD_TO_INR_RATE: float = 83.0
    GOLD_24K_PRICE_PER_GRAM_INR: float = 7500.0
    OVERHEAD_PCT: float = 25.0
    METAL_SHARE_OF_PRICE: float = 0.6

    # Orders / checkout
    ADVANCE_PAYMENT_PCT: float = 50.0
    SHIPPING_USD: int = 30
    SHIPPING_INR: int = 1500
    CONSULTATION_FEE_USD: int = 150

    # PayPal
    PAYPAL_CLIENT_ID: str = ""
    PAYPAL_CLIENT_SECRET: str = ""
    PAYPAL_MODE: str = "sandbox"  # 'sandbox' | 'live'

    # AI content generation
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Auth
    JWT_SECRET: str = ""  # REQUIRED in production — fail loudly if missing at auth time
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRE_MINUTES: int = 15
    JWT_REFRESH_EXPIRE_DAYS: int = 30
    ADMIN_USERNAME: str = ""  # bootstrap admin created at startup when set
    ADMIN_PASSWORD: str = ""
    ADMIN_EMAIL: str = ""

    # Cloudflare R2 — optional, uploads fall back to local disk
    UPLOAD_DIR: str = "uploads"
    CLOUDFLARE_R2_ACCOUNT_ID: str = ""
    CLOUDFLARE_R2_ACCESS_KEY_ID: str = ""
    CLOUDFLARE_R2_SECRET_ACCESS_KEY: str = ""
    CLOUDFLARE_R2_BUCKET: str = "storefront-uploads"

    class Config:
        env_file = ".env"


settings = Settings()
