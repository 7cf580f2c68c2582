from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select

from app.models.crm_settings import CRMSettings
from app.repositories.base import BaseRepository


class CRMSettingsRepository(BaseRepository):
    """Per-organization automation settings (one row per organization)."""

    async def get(self, organization_id: UUID) -> Optional[CRMSettings]:
        result = await self._db.execute(
            select(CRMSettings).where(CRMSettings.organization_id == organization_id)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self, organization_id: UUID, values: Dict[str, Any]
    ) -> CRMSettings:
        """Apply *values* to the organization's row, creating it if needed.

        Columns missing from *values* keep their stored value, or the
        server default on insert.
        """
        row = await self.get(organization_id)
        if row is None:
            return await self.add(CRMSettings(organization_id=organization_id, **values))

        for field, value in values.items():
            setattr(row, field, value)
        await self._db.flush()
        await self._db.refresh(row)
        return row

    async def organizations_with_auto_disabled(self) -> List[UUID]:
        """Organizations whose settings switch the automatic sweep off."""
        result = await self._db.execute(
            select(CRMSettings.organization_id).where(
                CRMSettings.enable_auto_temperature.is_(False)
            )
        )
        return list(result.scalars().all())
