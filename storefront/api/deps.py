# storefront/api/deps.py
from functools import lru_cache

from storefront.services.lock_service import build_lock_service


@lru_cache(maxsize=1)
def get_lock_service():
    #one lock service per process, every request has to share it
    return build_lock_service()
