"""
Approval workflow for settings changes.

One generic workflow serves every settings domain:

    submit -> pending -> approved (settings applied)
                      -> rejected (settings untouched)

- Roles with can_bypass_approval (Super Admin) write settings directly.
- Roles with can_request_changes (Admin, HR) create a pending request.
- Only one request per domain may be pending at a time.
- Approval applies the proposal only if the live settings are still at
  the version the proposal was made against.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import ChangeRequest, RequestStatus, SettingsDomain
from src.services.errors import ConflictError, NotFoundError, PermissionDeniedError
from src.services.roles import capabilities_for
from src.services.sales import get_for_update
from src.services.settings_store import SETTINGS_SCHEMAS, load_settings, write_settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class SubmitResult(Generic[T]):
    """Outcome of a submit: either applied directly or queued as a request."""

    applied: bool
    settings: T
    request: Optional[ChangeRequest] = None
    version: Optional[int] = None


class ChangeRequestWorkflow(Generic[T]):
    """Request/approve/reject pipeline for one settings domain."""

    def __init__(self, domain: SettingsDomain, schema: Type[T]):
        self.domain = domain
        self.schema = schema

    def __repr__(self) -> str:
        return f"<ChangeRequestWorkflow(domain={self.domain.value})>"

    def proposed(self, request: ChangeRequest) -> T:
        return self.schema.model_validate(request.new_settings)

    def snapshot(self, request: ChangeRequest) -> T:
        return self.schema.model_validate(request.current_settings)

    async def get_pending(self, db: AsyncSession) -> Optional[ChangeRequest]:
        result = await db.execute(
            select(ChangeRequest).where(
                ChangeRequest.domain == self.domain,
                ChangeRequest.status == RequestStatus.PENDING,
            )
        )
        return result.scalar_one_or_none()

    async def submit(
        self,
        db: AsyncSession,
        actor,
        new_settings: T,
        expected_version: Optional[int] = None,
    ) -> SubmitResult[T]:
        """
        Propose new settings on behalf of actor.

        Raises:
            PermissionDeniedError: actor may neither write nor request changes
            ConflictError: a request for this domain is already pending, or
                expected_version is stale on a direct write
        """
        capabilities = capabilities_for(actor.role)

        if capabilities.can_bypass_approval:
            version = await write_settings(db, self.domain, new_settings, expected_version)
            logger.info(f"{actor.role.value} {actor.id} updated {self.domain.value} settings directly")
            return SubmitResult(applied=True, settings=new_settings, version=version)

        if not capabilities.can_request_changes:
            raise PermissionDeniedError(
                f"You do not have permission to change {self.domain.value} settings."
            )

        pending = await self.get_pending(db)
        if pending is not None:
            raise ConflictError(
                f"A {self.domain.value} change request (#{pending.id}) is already awaiting approval."
            )

        current, version = await load_settings(db, self.domain)
        request = ChangeRequest(
            domain=self.domain,
            pending_domain=self.domain.value,
            requested_by_id=actor.id,
            request_date=datetime.now(timezone.utc),
            current_settings=current.model_dump(mode="json"),
            new_settings=new_settings.model_dump(mode="json"),
            base_version=version,
            status=RequestStatus.PENDING,
        )
        db.add(request)
        try:
            await db.flush()
        except IntegrityError as exc:
            # Another submitter won the race for the pending slot
            raise ConflictError(
                f"A {self.domain.value} change request is already awaiting approval."
            ) from exc

        logger.info(f"Change request {request.id} submitted for {self.domain.value} by user {actor.id}")
        return SubmitResult(applied=False, settings=current, request=request, version=version)

    async def _lock_pending(self, db: AsyncSession, actor, request_id: int) -> ChangeRequest:
        if not capabilities_for(actor.role).can_resolve_changes:
            raise PermissionDeniedError("Only a Super Admin can resolve change requests.")

        request = await get_for_update(db, ChangeRequest, request_id, "Change request")
        if request.domain != self.domain:
            raise NotFoundError("Change request not found.")
        if request.status != RequestStatus.PENDING:
            raise ConflictError("Change request has already been processed.")
        return request

    def _close(self, request: ChangeRequest, actor, status: RequestStatus) -> None:
        request.status = status
        request.pending_domain = None
        request.resolved_by_id = actor.id
        request.resolved_date = datetime.now(timezone.utc)

    async def approve(self, db: AsyncSession, actor, request_id: int) -> ChangeRequest:
        """Apply the proposal and close the request in one transaction."""
        request = await self._lock_pending(db, actor, request_id)
        await write_settings(
            db,
            self.domain,
            self.proposed(request),
            expected_version=request.base_version,
        )
        self._close(request, actor, RequestStatus.APPROVED)
        await db.flush()
        logger.info(f"Change request {request.id} ({self.domain.value}) approved by user {actor.id}")
        return request

    async def reject(self, db: AsyncSession, actor, request_id: int) -> ChangeRequest:
        """Close the request without touching the live settings."""
        request = await self._lock_pending(db, actor, request_id)
        self._close(request, actor, RequestStatus.REJECTED)
        await db.flush()
        logger.info(f"Change request {request.id} ({self.domain.value}) rejected by user {actor.id}")
        return request


WORKFLOWS: Dict[SettingsDomain, ChangeRequestWorkflow] = {
    domain: ChangeRequestWorkflow(domain, schema)
    for domain, schema in SETTINGS_SCHEMAS.items()
}


def get_workflow(domain: SettingsDomain) -> ChangeRequestWorkflow:
    return WORKFLOWS[SettingsDomain(domain)]


async def get_request(db: AsyncSession, request_id: int) -> ChangeRequest:
    request = await db.get(ChangeRequest, request_id)
    if request is None:
        raise NotFoundError("Change request not found.")
    return request


async def list_requests(
    db: AsyncSession,
    status: Optional[RequestStatus] = None,
    domain: Optional[SettingsDomain] = None,
) -> List[ChangeRequest]:
    """Change requests, newest first."""
    query = select(ChangeRequest)
    if status is not None:
        query = query.where(ChangeRequest.status == status)
    if domain is not None:
        query = query.where(ChangeRequest.domain == domain)
    result = await db.execute(query.order_by(ChangeRequest.request_date.desc(), ChangeRequest.id.desc()))
    return list(result.scalars().all())
