"""Tests for multi-step workflows."""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException

from app.schemas.award import AwardSet, Badge, Certificate
from app.schemas.common import Role, Organization, NotificationType
from app.services.result import ErrorKind, GatewayResult
from app.services.workflow_service import (
    Saga,
    SagaStepFailed,
    workflow_service,
    plan_promotion,
    plan_demotion,
    can_manage_organization,
    can_edit_announcement,
    ensure_can_manage,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def badge_for(user_id, workshop):
    return Badge(id=uuid.uuid4(), title=f"{workshop.title} Graduate", organization=workshop.organization,
                 workshop_id=workshop.id, workshop_title=workshop.title, issued_at=NOW)


def certificate_for(user_id, workshop):
    return Certificate(id=uuid.uuid4(), title=f"Certificate of Completion - {workshop.title}",
                       organization=workshop.organization, workshop_id=workshop.id,
                       workshop_title=workshop.title, issued_at=NOW)


@pytest.fixture
def services():
    """Patch every gateway the workflows talk to"""
    with patch("app.services.workflow_service.workshop_service") as workshops, \
            patch("app.services.workflow_service.award_service") as awards, \
            patch("app.services.workflow_service.notification_service") as notifications, \
            patch("app.services.workflow_service.profile_service") as profiles, \
            patch("app.services.workflow_service.ActivityLogService") as activity:
        workshops.add_participant = AsyncMock(return_value=GatewayResult.ok({"id": uuid.uuid4()}))
        workshops.remove_participant = AsyncMock(return_value=GatewayResult.ok(uuid.uuid4()))

        awards.find_awards = AsyncMock(return_value=GatewayResult.ok(AwardSet()))
        awards.issue_badge = AsyncMock(
            side_effect=lambda user_id, workshop, issued_at: GatewayResult.ok(badge_for(user_id, workshop))
        )
        awards.issue_certificate = AsyncMock(
            side_effect=lambda user_id, name, workshop, issued_at: GatewayResult.ok(certificate_for(user_id, workshop))
        )
        awards.delete_badge = AsyncMock(return_value=GatewayResult.ok(uuid.uuid4()))
        awards.delete_certificate = AsyncMock(return_value=GatewayResult.ok(uuid.uuid4()))
        awards.revoke_awards = AsyncMock(
            return_value=GatewayResult.ok({"badges_removed": 1, "certificates_removed": 1})
        )

        notifications.send_notification = AsyncMock(return_value=GatewayResult.ok(object()))
        profiles.save_user = AsyncMock(return_value=GatewayResult.ok({"id": uuid.uuid4()}))
        activity.log_activity = AsyncMock(return_value=None)

        yield SimpleNamespace(
            workshops=workshops,
            awards=awards,
            notifications=notifications,
            profiles=profiles,
            activity=activity,
        )


class TestSaga:
    @pytest.mark.asyncio
    async def test_rollback_runs_in_reverse_order(self):
        calls = []

        def compensation(name):
            async def undo(data):
                calls.append((name, data))
                return GatewayResult.ok(name)
            return undo

        async def ok(value):
            return GatewayResult.ok(value)

        saga = Saga("test")
        await saga.run("first", lambda: ok(1), compensation("first"))
        await saga.run("second", lambda: ok(2), compensation("second"))

        assert await saga.rollback() is True
        assert calls == [("second", 2), ("first", 1)]
        assert saga.compensated == ["second", "first"]

    @pytest.mark.asyncio
    async def test_empty_result_fails_step(self):
        async def empty():
            return GatewayResult.empty()

        saga = Saga("test")
        with pytest.raises(SagaStepFailed):
            await saga.run("insert", empty)
        assert saga.completed == []


class TestJoinWorkshop:
    @pytest.mark.asyncio
    async def test_expired_workshop_rejected_before_any_write(self, services, make_workshop, make_user):
        workshop = make_workshop(date=NOW - timedelta(days=1))

        with pytest.raises(HTTPException) as exc:
            await workflow_service.join_workshop(workshop, make_user(), now=NOW)

        assert exc.value.status_code == 400
        services.workshops.add_participant.assert_not_awaited()
        services.notifications.send_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_already_registered_is_rejected(self, services, make_workshop, make_user, make_participant):
        user = make_user()
        participant = make_participant().model_copy(update={"id": user.id})
        workshop = make_workshop(participants=[participant])

        with pytest.raises(HTTPException) as exc:
            await workflow_service.join_workshop(workshop, user, now=NOW)

        assert exc.value.status_code == 409
        services.workshops.add_participant.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_full_workshop_is_rejected(self, services, make_workshop, make_user, make_participant):
        workshop = make_workshop(limit=1, participants=[make_participant()])

        with pytest.raises(HTTPException) as exc:
            await workflow_service.join_workshop(workshop, make_user(), now=NOW)

        assert exc.value.detail == "This session is full."
        services.workshops.add_participant.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_limit_is_unlimited(self, services, make_workshop, make_user, make_participant):
        workshop = make_workshop(limit=0, participants=[make_participant() for _ in range(50)])
        response = await workflow_service.join_workshop(workshop, make_user(), now=NOW)
        assert response.status == "success"

    @pytest.mark.asyncio
    async def test_racing_duplicate_maps_to_already_registered(self, services, make_workshop, make_user):
        services.workshops.add_participant.return_value = GatewayResult.failure(
            ErrorKind.CONFLICT, "duplicate key", "workshops.add_participant"
        )

        with pytest.raises(HTTPException) as exc:
            await workflow_service.join_workshop(make_workshop(), make_user(), now=NOW)

        assert exc.value.status_code == 409
        assert exc.value.detail == "You are already registered for this session!"
        services.notifications.send_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_seat_taken_meanwhile_maps_to_full(self, services, make_workshop, make_user):
        services.workshops.add_participant.return_value = GatewayResult.failure(
            ErrorKind.CAPACITY, "This session is full.", "workshops.add_participant"
        )

        with pytest.raises(HTTPException) as exc:
            await workflow_service.join_workshop(make_workshop(limit=1), make_user(), now=NOW)

        assert exc.value.status_code == 409
        assert exc.value.detail == "This session is full."
        services.notifications.send_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_join_sends_confirmation(self, services, make_workshop, make_user):
        user = make_user()
        workshop = make_workshop(title="Intro to Git")

        response = await workflow_service.join_workshop(workshop, user, now=NOW)

        assert response.notified is True
        services.workshops.add_participant.assert_awaited_once_with(workshop.id, user.id)
        services.notifications.send_notification.assert_awaited_once_with(
            user.id, "Registered!", 'You\'ve joined "Intro to Git". See you there!', NotificationType.SUCCESS
        )

    @pytest.mark.asyncio
    async def test_failed_notification_keeps_registration(self, services, make_workshop, make_user):
        services.notifications.send_notification.return_value = GatewayResult.failure(
            ErrorKind.BACKEND, "timeout", "notifications.send"
        )

        response = await workflow_service.join_workshop(make_workshop(), make_user(), now=NOW)

        assert response.status == "success"
        assert response.notified is False
        services.workshops.remove_participant.assert_not_awaited()


class TestIssueAwards:
    @pytest.mark.asyncio
    async def test_issues_badge_then_certificate(self, services, make_workshop, make_participant):
        participant = make_participant()
        workshop = make_workshop(participants=[participant])

        outcome = await workflow_service.issue_awards(workshop, participant, issued_at=NOW)

        assert outcome.status == "issued"
        assert outcome.completed_steps == ["badge", "certificate"]
        assert outcome.notified is True
        services.activity.log_activity.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_certificate_failure_compensates_badge(self, services, make_workshop, make_participant):
        participant = make_participant()
        workshop = make_workshop(participants=[participant])
        issued = []

        def issue_badge(user_id, workshop, issued_at):
            badge = badge_for(user_id, workshop)
            issued.append(badge)
            return GatewayResult.ok(badge)

        services.awards.issue_badge.side_effect = issue_badge
        services.awards.issue_certificate.side_effect = None
        services.awards.issue_certificate.return_value = GatewayResult.failure(
            ErrorKind.BACKEND, "insert failed", "awards.issue_certificate"
        )

        outcome = await workflow_service.issue_awards(workshop, participant, issued_at=NOW)

        assert outcome.status == "rolled_back"
        assert outcome.completed_steps == ["badge"]
        assert outcome.compensated_steps == ["badge"]
        services.awards.delete_badge.assert_awaited_once_with(issued[0].id)
        services.notifications.send_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_compensation_is_reported(self, services, make_workshop, make_participant):
        participant = make_participant()
        services.awards.issue_certificate.side_effect = None
        services.awards.issue_certificate.return_value = GatewayResult.failure(
            ErrorKind.BACKEND, "insert failed", "awards.issue_certificate"
        )
        services.awards.delete_badge.return_value = GatewayResult.failure(
            ErrorKind.BACKEND, "delete failed", "awards.delete_badge"
        )

        outcome = await workflow_service.issue_awards(make_workshop(), participant, issued_at=NOW)

        assert outcome.status == "failed"
        assert outcome.compensated_steps == []
        assert "compensation incomplete" in outcome.error

    @pytest.mark.asyncio
    async def test_existing_awards_are_not_issued_again(self, services, make_workshop, make_participant):
        participant = make_participant()
        workshop = make_workshop()
        services.awards.find_awards.return_value = GatewayResult.ok(AwardSet(
            badges=[badge_for(participant.id, workshop)],
            certificates=[certificate_for(participant.id, workshop)],
        ))

        outcome = await workflow_service.issue_awards(workshop, participant, issued_at=NOW)

        assert outcome.status == "already_issued"
        services.awards.issue_badge.assert_not_awaited()
        services.awards.issue_certificate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retry_only_issues_missing_award(self, services, make_workshop, make_participant):
        participant = make_participant()
        workshop = make_workshop()
        services.awards.find_awards.return_value = GatewayResult.ok(
            AwardSet(badges=[badge_for(participant.id, workshop)])
        )

        outcome = await workflow_service.issue_awards(workshop, participant, issued_at=NOW)

        assert outcome.status == "issued"
        assert outcome.completed_steps == ["certificate"]
        services.awards.issue_badge.assert_not_awaited()


class TestBulkIssueAwards:
    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_others(self, services, make_workshop, make_participant):
        participants = [make_participant(name=f"Student {i}") for i in range(4)]
        workshop = make_workshop(participants=participants)
        broken = participants[1].id

        def issue_badge(user_id, workshop, issued_at):
            if user_id == broken:
                raise RuntimeError("driver crashed")
            return GatewayResult.ok(badge_for(user_id, workshop))

        services.awards.issue_badge.side_effect = issue_badge

        report = await workflow_service.bulk_issue_awards(workshop, [p.id for p in participants])

        assert report.attempted == 4
        assert report.issued == 3
        assert report.failed == 1
        assert services.awards.find_awards.await_count == 4
        failed = [o for o in report.outcomes if o.status == "failed"]
        assert failed[0].user_id == broken
        assert "driver crashed" in failed[0].error

    @pytest.mark.asyncio
    async def test_non_participants_are_skipped(self, services, make_workshop, make_participant):
        participant = make_participant()
        workshop = make_workshop(participants=[participant])

        report = await workflow_service.bulk_issue_awards(workshop, [participant.id, uuid.uuid4()])

        assert report.attempted == 2
        assert report.issued == 1
        assert report.skipped == 1

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, services, make_workshop, make_participant):
        participants = [make_participant(name=f"Student {i}") for i in range(6)]
        workshop = make_workshop(participants=participants)
        in_flight = 0
        peak = 0

        async def find_awards(user_id, workshop_id):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return GatewayResult.ok(AwardSet())

        services.awards.find_awards.side_effect = find_awards

        report = await workflow_service.bulk_issue_awards(workshop, [p.id for p in participants], concurrency=2)

        assert report.issued == 6
        assert peak <= 2


class TestRoleTransitions:
    def test_promotion_chain(self, make_user):
        member = plan_promotion(make_user(role=Role.MEMBER))
        assert (member.role, member.officer_org) == (Role.OFFICER, Organization.GENERAL)
        assert member.message == "You have been promoted to OFFICER for GENERAL."

        officer = plan_promotion(make_user(role=Role.OFFICER, officer_org=Organization.TCC))
        assert (officer.role, officer.officer_org) == (Role.ADMIN, Organization.TCC)

        assert plan_promotion(make_user(role=Role.ADMIN)) is None

    def test_demotion_chain(self, make_user):
        admin = plan_demotion(make_user(role=Role.ADMIN))
        assert (admin.role, admin.officer_org) == (Role.OFFICER, Organization.GENERAL)

        scoped_admin = plan_demotion(make_user(role=Role.ADMIN, officer_org=Organization.ICSO))
        assert scoped_admin.officer_org == Organization.ICSO

        officer = plan_demotion(make_user(role=Role.OFFICER, officer_org=Organization.CES))
        assert (officer.role, officer.officer_org) == (Role.MEMBER, None)
        assert officer.type == NotificationType.WARNING

        assert plan_demotion(make_user(role=Role.MEMBER)) is None

    @pytest.mark.asyncio
    async def test_promote_saves_notifies_and_logs(self, services, make_user):
        admin = make_user(role=Role.ADMIN, name="Root Admin")
        target = make_user(role=Role.MEMBER)

        response = await workflow_service.promote_user(admin, target)

        assert response.changed is True
        assert response.role == Role.OFFICER
        saved = services.profiles.save_user.await_args.args[0]
        assert (saved.role, saved.officer_org) == (Role.OFFICER, Organization.GENERAL)
        services.notifications.send_notification.assert_awaited_once()
        assert services.activity.log_activity.await_args.args[1] == "promote_user"

    @pytest.mark.asyncio
    async def test_promote_admin_is_noop(self, services, make_user):
        response = await workflow_service.promote_user(make_user(role=Role.ADMIN), make_user(role=Role.ADMIN))

        assert response.changed is False
        assert response.message == "User is already an Admin."
        services.profiles.save_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_demote_member_is_noop(self, services, make_user):
        response = await workflow_service.demote_user(make_user(role=Role.ADMIN), make_user(role=Role.MEMBER))

        assert response.message == "User is already at the lowest role."
        services.notifications.send_notification.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_officer_org_only_for_officers(self, services, make_user):
        with pytest.raises(HTTPException) as exc:
            await workflow_service.update_officer_org(
                make_user(role=Role.ADMIN), make_user(role=Role.MEMBER), Organization.TCC
            )
        assert exc.value.status_code == 400


class TestParticipantAndAwardRemoval:
    @pytest.mark.asyncio
    async def test_remove_participant_notifies(self, services, make_user, make_workshop):
        admin = make_user(role=Role.ADMIN)
        user_id = uuid.uuid4()

        result = await workflow_service.remove_participant(admin, make_workshop(), user_id)

        assert result["notified"] is True
        args = services.notifications.send_notification.await_args.args
        assert args[:3] == (user_id, "Session Update", "You have been removed from a workshop session.")

    @pytest.mark.asyncio
    async def test_revoke_uses_workshop_id(self, services, make_user, make_workshop):
        workshop = make_workshop()
        user_id = uuid.uuid4()

        response = await workflow_service.revoke_awards(make_user(role=Role.ADMIN), workshop, user_id)

        services.awards.revoke_awards.assert_awaited_once_with(user_id, workshop.id)
        assert response.badges_removed == 1


class TestPermissions:
    def test_admin_manages_everything(self, make_user):
        admin = make_user(role=Role.ADMIN)
        assert all(can_manage_organization(admin, org) for org in Organization)

    def test_officer_manages_own_organization_only(self, make_user):
        officer = make_user(role=Role.OFFICER, officer_org=Organization.TCC)
        assert can_manage_organization(officer, Organization.TCC)
        assert not can_manage_organization(officer, Organization.CES)

    def test_officer_error_names_their_organization(self, make_user):
        officer = make_user(role=Role.OFFICER, officer_org=Organization.TCC)
        with pytest.raises(HTTPException) as exc:
            ensure_can_manage(officer, Organization.CES, "post updates")
        assert exc.value.status_code == 403
        assert exc.value.detail == "You can only post updates for TCC"

    def test_author_can_edit_own_announcement(self, make_user):
        from app.schemas.announcement import Announcement

        member = make_user()
        post = Announcement(id=uuid.uuid4(), title="Hi", content="Hello", organization=Organization.CES,
                            author_id=member.id, created_at=NOW)
        assert can_edit_announcement(member, post)
        assert not can_edit_announcement(make_user(name="Someone Else"), post)
