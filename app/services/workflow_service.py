"""
Workflow Service
Multi-step business workflows composed from gateway operations

Each workflow is a fixed sequence of independent gateway calls. Steps that
must succeed together run inside a Saga, which undoes the completed steps
in reverse order when a later one fails. Notifications and audit entries
are best effort and never undo the steps before them.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status

from app.config import settings
from app.schemas.common import Role, Organization, NotificationType
from app.schemas.user import User, RoleChangeResponse
from app.schemas.workshop import Workshop, Participant, JoinWorkshopResponse
from app.schemas.announcement import Announcement
from app.schemas.award import AwardOutcome, BulkAwardReport, RevokeAwardsResponse
from app.services.activity_log_service import ActivityLogService
from app.services.award_service import award_service
from app.services.notification_service import notification_service
from app.services.profile_service import profile_service
from app.services.result import ErrorKind, GatewayResult, describe_error
from app.services.workshop_service import workshop_service, SESSION_FULL

logger = logging.getLogger(__name__)


class SagaStepFailed(Exception):
    def __init__(self, step: str, result: GatewayResult):
        self.step = step
        self.result = result
        if result.is_error:
            message = f"{step} failed: {result.error.message}"
        else:
            message = f"{step} failed: no row was written"
        super().__init__(message)


class Saga:
    """Ordered steps with compensating actions"""

    def __init__(self, name: str):
        self.name = name
        self.completed: List[str] = []
        self.compensated: List[str] = []
        self._compensations: List[Tuple[str, Callable[[], Awaitable[GatewayResult]]]] = []

    async def run(
        self,
        step: str,
        action: Callable[[], Awaitable[GatewayResult]],
        compensate: Optional[Callable[[Any], Awaitable[GatewayResult]]] = None
    ) -> GatewayResult:
        """Run one step; anything but OK raises SagaStepFailed"""
        result = await action()
        if not result.is_ok:
            raise SagaStepFailed(step, result)
        self.completed.append(step)
        if compensate is not None:
            data = result.data
            self._compensations.append((step, lambda: compensate(data)))
        return result

    async def rollback(self) -> bool:
        """Compensate completed steps in reverse order; False if any compensation failed"""
        clean = True
        for step, compensation in reversed(self._compensations):
            result = await compensation()
            if result.is_error:
                clean = False
                logger.error("Saga %s could not compensate %s: %s", self.name, step, result.error.message)
            else:
                self.compensated.append(step)
        self._compensations.clear()
        return clean


@dataclass(frozen=True)
class RoleTransition:
    role: Role
    officer_org: Optional[Organization]
    title: str
    message: str
    type: NotificationType


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_expired(workshop: Workshop, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return _utc(workshop.date) < _utc(now)


def can_manage_organization(user: User, organization: Organization) -> bool:
    """ADMIN manages everything, an OFFICER only their own organization"""
    if user.role == Role.ADMIN:
        return True
    return user.role == Role.OFFICER and user.officer_org == organization


def can_edit_announcement(user: User, announcement: Announcement) -> bool:
    return can_manage_organization(user, announcement.organization) or announcement.author_id == user.id


def ensure_can_manage(user: User, organization: Organization, what: str = "manage workshops") -> None:
    if can_manage_organization(user, organization):
        return
    if user.role == Role.OFFICER and user.officer_org:
        detail = f"You can only {what} for {user.officer_org.value}"
    else:
        detail = "Not authorized. Admin or officer access required."
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def plan_promotion(user: User) -> Optional[RoleTransition]:
    """MEMBER -> OFFICER (GENERAL), OFFICER -> ADMIN; None when already ADMIN"""
    if user.role == Role.MEMBER:
        role, org = Role.OFFICER, Organization.GENERAL
    elif user.role == Role.OFFICER:
        role, org = Role.ADMIN, user.officer_org
    else:
        return None
    suffix = f" for {org.value}" if org else ""
    return RoleTransition(
        role=role,
        officer_org=org,
        title="Role Upgrade!",
        message=f"You have been promoted to {role.value}{suffix}.",
        type=NotificationType.SUCCESS,
    )


def plan_demotion(user: User) -> Optional[RoleTransition]:
    """ADMIN -> OFFICER (keeps org, else GENERAL), OFFICER -> MEMBER; None when already MEMBER"""
    if user.role == Role.ADMIN:
        role, org = Role.OFFICER, user.officer_org or Organization.GENERAL
    elif user.role == Role.OFFICER:
        role, org = Role.MEMBER, None
    else:
        return None
    return RoleTransition(
        role=role,
        officer_org=org,
        title="Role Change",
        message=f"Your role has been updated to {role.value}.",
        type=NotificationType.WARNING,
    )


class WorkflowService:
    """Multi-step workflows"""

    @staticmethod
    async def _notify(user_id: UUID, title: str, message: str, type: NotificationType) -> bool:
        result = await notification_service.send_notification(user_id, title, message, type)
        if not result.is_ok:
            logger.warning("Notification %r to %s was not delivered", title, user_id)
        return result.is_ok

    @staticmethod
    async def join_workshop(workshop: Workshop, user: User, now: Optional[datetime] = None) -> JoinWorkshopResponse:
        """
        Register a user for a workshop and confirm by notification

        All checks run before any write: not expired, not already
        registered, seat limit not reached.
        """
        if is_expired(workshop, now):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This workshop has already ended and is no longer accepting registrations."
            )

        if any(p.id == user.id for p in workshop.participants):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You are already registered for this session!"
            )

        if workshop.limit and len(workshop.participants) >= workshop.limit:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=SESSION_FULL
            )

        result = await workshop_service.add_participant(workshop.id, user.id)
        if result.is_error and result.error.kind == ErrorKind.CAPACITY:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=SESSION_FULL
            )
        if result.is_error and result.error.kind == ErrorKind.CONFLICT:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="You are already registered for this session!"
            )
        result.unwrap("Registration was not recorded")

        notified = await WorkflowService._notify(
            user.id,
            "Registered!",
            f'You\'ve joined "{workshop.title}". See you there!',
            NotificationType.SUCCESS
        )

        return JoinWorkshopResponse(
            status="success",
            message="Successfully registered!",
            workshop_id=workshop.id,
            notified=notified
        )

    @staticmethod
    async def remove_participant(actor: User, workshop: Workshop, user_id: UUID) -> dict:
        workshop_service_result = await workshop_service.remove_participant(workshop.id, user_id)
        workshop_service_result.unwrap("Participant not found")

        notified = await WorkflowService._notify(
            user_id,
            "Session Update",
            "You have been removed from a workshop session.",
            NotificationType.WARNING
        )
        await ActivityLogService.log_activity(
            actor.id, "remove_participant", "workshop", workshop.id, {"user_id": str(user_id)}
        )
        return {"status": "success", "message": "Participant removed", "notified": notified}

    @staticmethod
    async def issue_awards(
        workshop: Workshop,
        participant: Participant,
        actor: Optional[User] = None,
        issued_at: Optional[datetime] = None
    ) -> AwardOutcome:
        """
        Issue the badge and certificate of a workshop to one participant

        Keyed by (participant, workshop): awards already held are not
        inserted again. If the certificate cannot be written, the badge
        written in this run is deleted.
        """
        issued_at = issued_at or datetime.now(timezone.utc)
        outcome = AwardOutcome(user_id=participant.id, participant_name=participant.name, status="failed")

        existing = await award_service.find_awards(participant.id, workshop.id)
        if not existing.is_ok:
            outcome.error = existing.error.message if existing.is_error else "Could not check existing awards"
            return outcome

        has_badge = bool(existing.data.badges)
        has_certificate = bool(existing.data.certificates)
        if has_badge and has_certificate:
            outcome.status = "already_issued"
            return outcome

        saga = Saga("issue_awards")
        try:
            if not has_badge:
                await saga.run(
                    "badge",
                    lambda: award_service.issue_badge(participant.id, workshop, issued_at),
                    compensate=lambda badge: award_service.delete_badge(badge.id)
                )
            if not has_certificate:
                await saga.run(
                    "certificate",
                    lambda: award_service.issue_certificate(participant.id, participant.name, workshop, issued_at),
                    compensate=lambda certificate: award_service.delete_certificate(certificate.id)
                )
        except SagaStepFailed as failure:
            clean = await saga.rollback()
            outcome.completed_steps = list(saga.completed)
            outcome.compensated_steps = list(saga.compensated)
            outcome.error = str(failure)
            if saga.completed and clean:
                outcome.status = "rolled_back"
            elif not clean:
                outcome.error += " (compensation incomplete)"
            logger.warning("Awards for %s in workshop %s not issued: %s", participant.id, workshop.id, outcome.error)
            return outcome

        outcome.completed_steps = list(saga.completed)
        outcome.notified = await WorkflowService._notify(
            participant.id,
            "Awards Granted!",
            f"Congratulations! You've received a badge and certificate for {workshop.title}.",
            NotificationType.SUCCESS
        )
        await ActivityLogService.log_activity(
            actor.id if actor else None,
            "issue_awards",
            "workshop",
            workshop.id,
            {"user_id": str(participant.id), "steps": outcome.completed_steps}
        )
        outcome.status = "issued"
        return outcome

    @staticmethod
    async def bulk_issue_awards(
        workshop: Workshop,
        participant_ids: Iterable[UUID],
        actor: Optional[User] = None,
        concurrency: Optional[int] = None
    ) -> BulkAwardReport:
        """
        Run one issue-awards saga per selected participant

        At most `concurrency` sagas are in flight. One participant's
        failure never blocks the others, and every outcome is reported.
        """
        limit = max(1, concurrency or settings.BULK_AWARD_CONCURRENCY)
        semaphore = asyncio.Semaphore(limit)
        participants = {p.id: p for p in workshop.participants}
        issued_at = datetime.now(timezone.utc)

        async def run_one(participant_id: UUID) -> AwardOutcome:
            participant = participants.get(participant_id)
            if participant is None:
                return AwardOutcome(
                    user_id=participant_id,
                    status="skipped",
                    error="Not a participant of this workshop"
                )
            async with semaphore:
                try:
                    return await WorkflowService.issue_awards(workshop, participant, actor, issued_at)
                except Exception as e:
                    logger.exception("Award issuance crashed for %s", participant_id)
                    return AwardOutcome(
                        user_id=participant_id,
                        participant_name=participant.name,
                        status="failed",
                        error=describe_error(e)
                    )

        selected = list(dict.fromkeys(participant_ids))
        outcomes = list(await asyncio.gather(*(run_one(pid) for pid in selected)))

        def count(state: str) -> int:
            return sum(1 for o in outcomes if o.status == state)

        return BulkAwardReport(
            workshop_id=workshop.id,
            attempted=len(outcomes),
            issued=count("issued"),
            already_issued=count("already_issued"),
            failed=count("failed") + count("rolled_back"),
            skipped=count("skipped"),
            outcomes=outcomes
        )

    @staticmethod
    async def revoke_awards(actor: User, workshop: Workshop, user_id: UUID) -> RevokeAwardsResponse:
        """Delete the badge and certificate a user holds for a workshop"""
        removed = (await award_service.revoke_awards(user_id, workshop.id)).unwrap("No awards found")
        await ActivityLogService.log_activity(
            actor.id, "revoke_awards", "workshop", workshop.id, {"user_id": str(user_id), **removed}
        )
        return RevokeAwardsResponse(user_id=user_id, workshop_id=workshop.id, **removed)

    @staticmethod
    async def _apply_role_transition(
        actor: User,
        target: User,
        transition: RoleTransition,
        action: str
    ) -> RoleChangeResponse:
        updated = target.model_copy(update={"role": transition.role, "officer_org": transition.officer_org})
        (await profile_service.save_user(updated)).unwrap("User not found")

        notified = await WorkflowService._notify(target.id, transition.title, transition.message, transition.type)
        await ActivityLogService.log_activity(
            actor.id,
            action,
            "profile",
            target.id,
            {
                "from_role": target.role.value,
                "to_role": transition.role.value,
                "officer_org": transition.officer_org.value if transition.officer_org else None
            }
        )
        return RoleChangeResponse(
            changed=True,
            message=f"{target.name} is now {transition.role.value}.",
            user_id=target.id,
            role=transition.role,
            officer_org=transition.officer_org,
            notified=notified
        )

    @staticmethod
    async def promote_user(actor: User, target: User) -> RoleChangeResponse:
        transition = plan_promotion(target)
        if transition is None:
            return RoleChangeResponse(
                changed=False,
                message="User is already an Admin.",
                user_id=target.id,
                role=target.role,
                officer_org=target.officer_org
            )
        return await WorkflowService._apply_role_transition(actor, target, transition, "promote_user")

    @staticmethod
    async def demote_user(actor: User, target: User) -> RoleChangeResponse:
        transition = plan_demotion(target)
        if transition is None:
            return RoleChangeResponse(
                changed=False,
                message="User is already at the lowest role.",
                user_id=target.id,
                role=target.role,
                officer_org=target.officer_org
            )
        return await WorkflowService._apply_role_transition(actor, target, transition, "demote_user")

    @staticmethod
    async def update_officer_org(actor: User, target: User, organization: Organization) -> User:
        """Move an officer to another organization"""
        if target.role != Role.OFFICER:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only officers can be assigned an organization."
            )
        updated = target.model_copy(update={"officer_org": organization})
        (await profile_service.save_user(updated)).unwrap("User not found")
        await ActivityLogService.log_activity(
            actor.id, "update_officer_org", "profile", target.id, {"officer_org": organization.value}
        )
        return updated


workflow_service = WorkflowService()
