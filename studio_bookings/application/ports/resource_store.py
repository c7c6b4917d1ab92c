from __future__ import annotations

from abc import ABC, abstractmethod

from studio_bookings.domain.entities.resource import Resource


class ResourceStorePort(ABC):
    @abstractmethod
    def get_resource(self, resource_id: str) -> Resource | None:
        """Get resource by id. Returns None if not found."""
        raise NotImplementedError

    @abstractmethod
    def save_resource(self, resource: Resource) -> None:
        """Create or replace a resource."""
        raise NotImplementedError
