"""
Object wiring from settings.

The serving layer (API app, CLI) calls these builders once and owns the resulting objects;
nothing here is cached at module level.
"""

from __future__ import annotations

import logging

from poiproxy.candidates.base import CandidateSource
from poiproxy.candidates.catalog import CatalogCandidateSource
from poiproxy.candidates.synthetic import SyntheticCandidateSource
from poiproxy.catalog.remote import RemoteCatalogStore
from poiproxy.catalog.store import CatalogStore, JsonFileCatalogStore
from poiproxy.config.settings import Settings
from poiproxy.core.env import resolve_project_path
from poiproxy.privacy.encryption import EncryptionProvider, build_encryption_provider
from poiproxy.privacy.obfuscation import LocationObfuscator
from poiproxy.search.orchestrator import ProximitySearch

logger = logging.getLogger(__name__)


def build_catalog_store(settings: Settings, *, encryption: EncryptionProvider | None = None) -> CatalogStore:
    if settings.catalog.backend == "remote":
        return RemoteCatalogStore.from_settings(settings.catalog)
    encryption = encryption or build_encryption_provider(settings.encryption)
    return JsonFileCatalogStore(resolve_project_path(settings.catalog.path), encryption=encryption)


def build_candidate_source(settings: Settings, *, store: CatalogStore | None = None) -> CandidateSource:
    if settings.candidates.source == "catalog":
        store = store or build_catalog_store(settings)
        return CatalogCandidateSource(store, timeout_seconds=settings.catalog.lookup_timeout_seconds)
    return SyntheticCandidateSource.from_settings(settings.candidates.synthetic)


def build_search(settings: Settings, *, store: CatalogStore | None = None) -> ProximitySearch:
    source = build_candidate_source(settings, store=store)
    obfuscator = LocationObfuscator.from_settings(settings.privacy)
    if source.name == "synthetic":
        logger.warning("Candidate source is synthetic: results are generated demo data, not real places.")
    return ProximitySearch(obfuscator=obfuscator, source=source)
