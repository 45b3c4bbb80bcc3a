from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from contracts_api.models.workflow_session import WorkflowSession


class WorkflowRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, workflow_id: str) -> Optional[WorkflowSession]:
        return await self.db.get(WorkflowSession, workflow_id)

    async def put(self, session: WorkflowSession) -> WorkflowSession:
        self.db.add(session)
        await self.db.flush()
        return session
