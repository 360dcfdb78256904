"""Infrastructure providers."""

# Import bases
from .cache import CacheProvider
from .external import ExternalProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .cache import ProdCacheProvider  # noqa: F401
from .external import ProdExternalProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "CacheProvider",
    "ExternalProvider",
    "PersistenceProvider",
    "ProdCacheProvider",
    "ProdExternalProvider",
    "ProdPersistenceProvider",
]
