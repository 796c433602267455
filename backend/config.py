# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./database_bookshop.db"

    # Bearer tokens are issued by the CMS auth layer with the same secret
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Signing key for the cart cookie (min. 32 characters)
    CART_ENCRYPTION_SECRET: str = "dev-cart-secret-change-me-0123456789"
    CART_COOKIE_SECURE: bool = False

    SQUARE_ACCESS_TOKEN: str = ""
    SQUARE_ENVIRONMENT: str = "sandbox"
    SQUARE_API_VERSION: str = "2024-10-17"
    # Seconds; a timeout counts as a failed verification, never retried
    PAYMENT_GATEWAY_TIMEOUT: float = 10.0

    STOCK_RETRY_ATTEMPTS: int = 3
    PRICE_DRIFT_THRESHOLD: float = 0.10
    # Leave new orders PENDING for manual confirmation unless enabled
    ORDER_AUTO_COMPLETE: bool = False

    CHECKOUT_RATE_LIMIT: int = 10
    CHECKOUT_RATE_WINDOW_SECONDS: int = 60
    # Inquiries are taken while ordering is off
    INQUIRY_RATE_LIMIT: int = 3
    INQUIRY_RATE_WINDOW_SECONDS: int = 600

    FRONTEND_URL: str = "http://localhost:3000"

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()
