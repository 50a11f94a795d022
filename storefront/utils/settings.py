# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")
PRODUCT_FEED_URL = os.getenv("PRODUCT_FEED_URL", "https://fakestoreapi.com")
PRODUCT_FEED_TIMEOUT = int(os.getenv("PRODUCT_FEED_TIMEOUT", 5))
# inline | celery | off
CATALOG_SYNC_MODE = os.getenv("CATALOG_SYNC_MODE", "inline")
# local | redis
CART_LOCK_BACKEND = os.getenv("CART_LOCK_BACKEND", "local")
CART_LOCK_TTL_SECONDS = int(os.getenv("CART_LOCK_TTL_SECONDS", 30))
CART_LOCK_WAIT_SECONDS = float(os.getenv("CART_LOCK_WAIT_SECONDS", 10))
DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "mock123")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
