from __future__ import annotations

from abc import ABC, abstractmethod

from livetrack.domain.models import RouteCatalog


class IRouteCatalogRepository(ABC):
    """Port for loading the static route catalog (routes + scheduled fleet)."""

    @abstractmethod
    def load_catalog(self) -> RouteCatalog:
        raise NotImplementedError
