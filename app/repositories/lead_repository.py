from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from app.core.constants import TERMINAL_TEMPERATURES
from app.models.lead import Lead
from app.repositories.base import BaseRepository


class LeadRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``leads`` table."""

    async def get(self, organization_id: UUID, lead_id: UUID) -> Optional[Lead]:
        """Return a single lead scoped to the organization, or ``None``."""
        result = await self._db.execute(
            select(Lead).where(
                Lead.organization_id == organization_id, Lead.id == lead_id
            )
        )
        return result.scalar_one_or_none()

    async def list_for_sweep(self, organization_id: UUID) -> List[Lead]:
        """Leads the automatic transitions may still move.

        Terminal temperatures (``perdido``) are excluded at the query
        level; rows are locked with ``SKIP LOCKED`` so that two sweeps
        running concurrently never process the same lead twice.
        """
        result = await self._db.execute(
            select(Lead)
            .where(
                Lead.organization_id == organization_id,
                Lead.temperature.notin_(TERMINAL_TEMPERATURES),
            )
            .order_by(Lead.created_at.asc())
            .with_for_update(skip_locked=True)
        )
        return list(result.scalars().all())
