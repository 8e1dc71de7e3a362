"""
Analytics Service
Pure aggregation over already-loaded entity lists
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from app.config import settings
from app.schemas.analytics import (
    OrganizationEngagement,
    PlatformAnalytics,
    TrendPoint,
    AttendanceTrend,
    OrganizationStats,
)
from app.schemas.announcement import Announcement
from app.schemas.common import Organization, ORGANIZATIONS
from app.schemas.user import User
from app.schemas.workshop import Workshop

WORKSHOP_WEIGHT = 5
ANNOUNCEMENT_WEIGHT = 2
PARTICIPANT_WEIGHT = 1

TREND_WIDTH = 600
TREND_HEIGHT = 200
TREND_PADDING = 40
TREND_WINDOW = 8
TREND_MIN_MAX = 5


def engagement_score(workshops: int, announcements: int, participants: int) -> int:
    return (
        WORKSHOP_WEIGHT * workshops
        + ANNOUNCEMENT_WEIGHT * announcements
        + PARTICIPANT_WEIGHT * participants
    )


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _round(value: float) -> float:
    return round(value, 2)


class AnalyticsService:
    """Derived statistics for dashboards"""

    @staticmethod
    def organization_engagement(
        workshops: Sequence[Workshop],
        announcements: Sequence[Announcement]
    ) -> List[OrganizationEngagement]:
        """One entry per organization, in enumeration order"""
        result = []
        for org in ORGANIZATIONS:
            org_workshops = [w for w in workshops if w.organization == org]
            workshop_count = len(org_workshops)
            announcement_count = sum(1 for a in announcements if a.organization == org)
            participant_count = sum(len(w.participants) for w in org_workshops)
            result.append(OrganizationEngagement(
                name=org,
                workshops=workshop_count,
                announcements=announcement_count,
                participants=participant_count,
                score=engagement_score(workshop_count, announcement_count, participant_count)
            ))
        return result

    @staticmethod
    def rank_organizations(per_org: Sequence[OrganizationEngagement]) -> List[OrganizationEngagement]:
        # sorted() is stable: ties keep enumeration order
        return sorted(per_org, key=lambda entry: entry.score, reverse=True)

    @staticmethod
    def total_awards(users: Sequence[User]) -> int:
        return sum(len(u.badges) + len(u.certificates) for u in users)

    @staticmethod
    def new_members(users: Sequence[User], now: Optional[datetime] = None, days: Optional[int] = None) -> int:
        """Users created within the trailing window ending at `now`"""
        now = _utc(now or datetime.now(timezone.utc))
        window = timedelta(days=days if days is not None else settings.NEW_MEMBER_WINDOW_DAYS)
        cutoff = now - window
        return sum(1 for u in users if _utc(u.created_at) > cutoff)

    @staticmethod
    def platform_analytics(
        workshops: Sequence[Workshop],
        announcements: Sequence[Announcement],
        users: Sequence[User],
        now: Optional[datetime] = None
    ) -> PlatformAnalytics:
        per_org = AnalyticsService.organization_engagement(workshops, announcements)
        ranking = AnalyticsService.rank_organizations(per_org)
        return PlatformAnalytics(
            per_org=per_org,
            ranking=ranking,
            most_active=ranking[0] if ranking else None,
            total_awards=AnalyticsService.total_awards(users),
            new_members=AnalyticsService.new_members(users, now)
        )

    @staticmethod
    def attendance_trend(
        workshops: Sequence[Workshop],
        organization: Optional[Organization] = None
    ) -> Optional[AttendanceTrend]:
        """
        Attendance of the last eight workshops as chart geometry

        Points live in a 600x200 box with 40 padding. The vertical scale
        never drops below 5 so small counts are not stretched to the top.
        Returns None when fewer than two workshops qualify.
        """
        selected = [w for w in workshops if organization is None or w.organization == organization]
        selected = sorted(selected, key=lambda w: _utc(w.date))[-TREND_WINDOW:]
        if len(selected) < 2:
            return None

        counts = [len(w.participants) for w in selected]
        max_attendance = max(counts + [TREND_MIN_MAX])
        inner_width = TREND_WIDTH - 2 * TREND_PADDING
        inner_height = TREND_HEIGHT - 2 * TREND_PADDING
        step = inner_width / (len(selected) - 1)

        points = []
        for i, (workshop, count) in enumerate(zip(selected, counts)):
            points.append(TrendPoint(
                x=_round(TREND_PADDING + i * step),
                y=_round(TREND_HEIGHT - TREND_PADDING - (count / max_attendance) * inner_height),
                title=workshop.title,
                count=count,
                org=workshop.organization
            ))

        path_data = " ".join(
            f"{'M' if i == 0 else 'L'} {p.x} {p.y}" for i, p in enumerate(points)
        )
        baseline = TREND_HEIGHT - TREND_PADDING
        area_path = f"{path_data} L {points[-1].x} {baseline} L {points[0].x} {baseline} Z"

        return AttendanceTrend(
            points=points,
            path_data=path_data,
            area_path=area_path,
            width=TREND_WIDTH,
            height=TREND_HEIGHT,
            padding=TREND_PADDING,
            max_attendance=max_attendance
        )

    @staticmethod
    def organization_stats(
        organization: Organization,
        workshops: Sequence[Workshop],
        announcements: Sequence[Announcement]
    ) -> OrganizationStats:
        """Figures shown on an organization's hub page"""
        org_workshops = [w for w in workshops if w.organization == organization]
        participant_total = sum(len(w.participants) for w in org_workshops)
        avg = round(participant_total / len(org_workshops), 1) if org_workshops else 0.0
        return OrganizationStats(
            organization=organization,
            workshop_count=len(org_workshops),
            post_count=sum(1 for a in announcements if a.organization == organization),
            participant_total=participant_total,
            avg_attendance=avg
        )

    @staticmethod
    def search_users(users: Sequence[User], query: str) -> List[User]:
        """Case-insensitive substring match on name or email"""
        needle = (query or "").strip().lower()
        if not needle:
            return list(users)
        return [u for u in users if needle in u.name.lower() or needle in u.email.lower()]


# Create singleton instance
analytics_service = AnalyticsService()
