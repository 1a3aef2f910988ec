# infrastructure/web/store_registry.py
# Centralized store instances — single source of truth.
# All controllers (links, files, scheduler) MUST obtain stores from here.
# Thread-safe: (re)configuration is guarded by a Lock.

from threading import Lock
from typing import Optional, Tuple

from infrastructure.link.memory_token_table import MemoryTokenTable
from infrastructure.storage.local_disk_medium import LocalDiskMedium
from infrastructure.storage.reconciler import ResourceExistenceReconciler
from shortener.config import Settings, load_settings
from shortener.stores import LinkStore, ResourceStore
from shortener.tokens import TokenGenerator

_settings: Optional[Settings] = None
_link_store: Optional[LinkStore] = None
_resource_store: Optional[ResourceStore] = None
_lock: Lock = Lock()


def build_stores(settings: Settings) -> Tuple[LinkStore, ResourceStore]:
    """Create a fresh, empty pair of stores wired from *settings*."""
    generator = TokenGenerator(min_length=settings.min_token_length)

    def table(name: str) -> MemoryTokenTable:
        return MemoryTokenTable(
            generator=generator,
            default_ttl_seconds=settings.default_ttl_seconds,
            max_attempts=settings.max_generation_attempts,
            max_length=settings.max_token_length,
            name=name,
        )

    reconciler = ResourceExistenceReconciler(
        LocalDiskMedium(settings.upload_dir),
        timeout_seconds=settings.reconcile_timeout_seconds,
    )
    link_store = LinkStore(table("links"), public_base_url=settings.public_base_url)
    resource_store = ResourceStore(
        reconciler, table("files"), public_base_url=settings.public_base_url
    )
    return link_store, resource_store


def _install_unlocked(settings: Settings) -> Optional[ResourceStore]:
    """Swap in fresh stores and return the replaced resource store. Caller holds _lock."""
    global _settings, _link_store, _resource_store
    previous = _resource_store
    _link_store, _resource_store = build_stores(settings)
    _settings = settings
    return previous


def configure(settings: Optional[Settings] = None) -> Settings:
    """Replace the current stores with empty ones built from *settings*."""
    settings = settings or load_settings()
    with _lock:
        previous = _install_unlocked(settings)
    if previous is not None:
        previous.reconciler.shutdown(wait=False)
    return settings


def _current() -> Tuple[Settings, LinkStore, ResourceStore]:
    """Current instances, configured from the environment on first use."""
    with _lock:
        if _link_store is None:
            _install_unlocked(load_settings())
        return _settings, _link_store, _resource_store


def get_settings() -> Settings:
    return _current()[0]


def get_link_store() -> LinkStore:
    return _current()[1]


def get_resource_store() -> ResourceStore:
    return _current()[2]
