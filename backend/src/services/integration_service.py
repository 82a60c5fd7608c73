"""External integration records."""

from __future__ import annotations

import logging
from typing import List

from ..models.integration import Integration, IntegrationCreate, IntegrationUpdate
from .database import DatabaseService
from .repository import UserScopedTable

logger = logging.getLogger(__name__)


class IntegrationService:
    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()
        self.table = UserScopedTable(
            self._db, "external_integrations", label="Integration"
        )

    def list_integrations(self, user_id: str) -> List[Integration]:
        return [Integration(**row) for row in self.table.list(user_id)]

    def get_integration(self, user_id: str, integration_id: str) -> Integration:
        return Integration(**self.table.get(user_id, integration_id))

    def create_integration(self, user_id: str, data: IntegrationCreate) -> Integration:
        return Integration(**self.table.insert(user_id, data.model_dump()))

    def update_integration(
        self, user_id: str, integration_id: str, data: IntegrationUpdate
    ) -> Integration:
        changes = data.model_dump(exclude_unset=True)
        return Integration(**self.table.update(user_id, integration_id, changes))

    def delete_integration(self, user_id: str, integration_id: str) -> None:
        self.table.delete(user_id, integration_id)

    def toggle_integration(self, user_id: str, integration_id: str) -> Integration:
        current = self.table.get(user_id, integration_id)
        updated = self.table.update(
            user_id, integration_id, {"active": not current["active"]}
        )
        logger.info(
            "Toggled integration",
            extra={"user_id": user_id, "id": integration_id, "active": updated["active"]},
        )
        return Integration(**updated)


_integration_service: IntegrationService | None = None


def get_integration_service() -> IntegrationService:
    """Get or create the integration service singleton."""
    global _integration_service
    if _integration_service is None:
        _integration_service = IntegrationService()
    return _integration_service


__all__ = ["IntegrationService", "get_integration_service"]
