# storefront/services/product_client.py
import requests

from storefront.utils.retry import http_retry
from storefront.utils.settings import PRODUCT_FEED_URL, PRODUCT_FEED_TIMEOUT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """Client for the external product feed (fakestoreapi.com compatible)."""

    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        self.base_url = (base_url or PRODUCT_FEED_URL).rstrip("/")
        self.timeout = timeout or PRODUCT_FEED_TIMEOUT

    @http_retry()
    def fetch_products(self) -> list[dict]:
        url = f"{self.base_url}/products"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    @http_retry()
    def fetch_product(self, product_id: int) -> dict:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()
