# storefront/tasks/catalog_sync.py
from pydantic import ValidationError as SchemaError
from requests import RequestException

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.domain.errors import PersistenceError
from storefront.services.catalog_service import CatalogService
from storefront.services.product_client import ProductClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def run_catalog_sync(session_factory=None, client: ProductClient | None = None) -> int:
    """
    Fetch the product feed and merge it into the catalog.
    Failures are logged and swallowed: the service keeps running with
    whatever catalog it already has. Returns the number of inserted products.
    """
    session_factory = session_factory or SessionLocal
    client = client or ProductClient()

    try:
        feed = client.fetch_products()
    except RequestException as e:
        logger.error(f"Error fetching product feed, catalog may be incomplete: {e}")
        return 0

    db = session_factory()
    try:
        return CatalogService(db).sync_from_source(feed)
    except (SchemaError, PersistenceError) as e:
        logger.error(f"Error syncing catalog, catalog may be incomplete: {e}")
        return 0
    finally:
        db.close()


@celery_app.task(name="storefront.tasks.catalog_sync.sync_catalog_task")
def sync_catalog_task():
    logger.info("Catalog sync task started")
    inserted = run_catalog_sync()
    return {"inserted": inserted}
