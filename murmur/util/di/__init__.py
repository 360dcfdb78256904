"""Dependency injection module."""

from typing import Type

from murmur.util.di.application import ProdApplicationProvider
from murmur.util.di.base import Component, ProviderBase
from murmur.util.di.core import ProdConfigProvider
from murmur.util.di.domain import ProdDomainProvider
from murmur.util.di.infrastructure import (
    CacheProvider,
    ExternalProvider,
    PersistenceProvider,
    ProdCacheProvider,
    ProdExternalProvider,
    ProdPersistenceProvider,
)
from murmur.util.di.render import ProdRenderProvider

# Resolution order matters only for overrides; later providers win
PROVIDERS: list[Type[ProviderBase]] = [
    # Always real
    ProdConfigProvider,
    ProdDomainProvider,
    ProdRenderProvider,
    ProdApplicationProvider,
    # Swapped for in-memory fakes by build_test_container
    PersistenceProvider,
    CacheProvider,
    ExternalProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Get appropriate provider class.

    Concrete providers have no subclasses and are used as-is. Mockable
    components are resolved to the subclass whose ``__is_mock__`` flag
    matches ``use_mock``.

    Args:
        base: Provider base class
        use_mock: Whether to use mock implementation

    Returns:
        Provider class (not instantiated)

    Raises:
        ValueError: If requested implementation not found
    """
    subclasses = base.__subclasses__()

    if not subclasses:
        return base

    impl = next(
        (c for c in subclasses if getattr(c, "__is_mock__", False) == use_mock),
        None,
    )

    if not impl:
        kind = "mock" if use_mock else "production"
        component_name = getattr(base, "__mock_component__", base.__name__)
        raise ValueError(f"No {kind} implementation for {component_name}")

    return impl


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    # Core providers
    "ProdApplicationProvider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdRenderProvider",
    # Infrastructure base classes
    "CacheProvider",
    "ExternalProvider",
    "PersistenceProvider",
    # Infrastructure implementations
    "ProdCacheProvider",
    "ProdExternalProvider",
    "ProdPersistenceProvider",
]
