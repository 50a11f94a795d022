# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base class for errors raised by the storefront services."""


class ValidationError(StorefrontError):
    """Malformed customer input, the caller has to correct it before retrying."""


class EmptyCartError(StorefrontError):
    """Checkout attempted on a cart with no lines."""


class NotFoundError(StorefrontError):
    """The targeted row does not exist."""


class PersistenceError(StorefrontError):
    """
    Storage (or lock) failure. The transaction has been rolled back,
    so the operation is safe to retry.
    """
