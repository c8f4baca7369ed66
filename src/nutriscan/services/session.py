"""Per-user session context: profile, cached targets and the daily log."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from nutriscan.domain.errors import ProfileNotFoundError
from nutriscan.domain.nutrients import DailyLog, LoggedNutrients, NutritionGoals
from nutriscan.domain.profile import HealthProfile
from nutriscan.services.aggregation import NutrientProgress, empty_log, fold, progress
from nutriscan.services.goals import ensure_goals, rederive_goals, validate_profile

_logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for health profiles and their cached targets."""

    def get_profile(self, user_id: UUID) -> HealthProfile | None:
        """Return the stored profile, if present."""

    def save_profile(self, user_id: UUID, profile: HealthProfile) -> None:
        """Insert or replace the stored profile."""

    def delete_profile(self, user_id: UUID) -> None:
        """Remove the stored profile."""


def _utc_today() -> date:
    return datetime.now(tz=UTC).date()


@dataclass
class SessionContext:
    """In-memory state for one signed-in user."""

    user_id: UUID
    profile: HealthProfile
    day: date
    daily_log: DailyLog = field(default_factory=empty_log)
    previous_logs: list[DailyLog] = field(default_factory=list)


@dataclass
class SessionService:
    """Owns session contexts and applies folds one at a time per user."""

    repository: ProfileRepository
    today: Callable[[], date] = _utc_today
    _sessions: dict[UUID, SessionContext] = field(default_factory=dict, repr=False)
    _locks: dict[UUID, asyncio.Lock] = field(default_factory=dict, repr=False)

    def complete_onboarding(self, user_id: UUID, profile: HealthProfile) -> HealthProfile:
        """Store a new profile, deriving targets if it carries none."""
        validate_profile(profile)
        stored = ensure_goals(profile)
        self.repository.save_profile(user_id, stored)
        self._sessions[user_id] = SessionContext(
            user_id=user_id, profile=stored, day=self.today()
        )
        _logger.info("Onboarding completed: user_id=%s", user_id)
        return stored

    def update_profile(self, user_id: UUID, profile: HealthProfile) -> HealthProfile:
        """Store an edited profile and re-derive its targets."""
        stored = rederive_goals(profile)
        self.repository.save_profile(user_id, stored)
        context = self._sessions.get(user_id)
        if context is None:
            self._sessions[user_id] = SessionContext(
                user_id=user_id, profile=stored, day=self.today()
            )
        else:
            context.profile = stored
        _logger.info("Profile updated and targets re-derived: user_id=%s", user_id)
        return stored

    def get_profile(self, user_id: UUID) -> HealthProfile:
        """Return the user's profile with targets attached."""
        return self._context(user_id).profile

    def get_goals(self, user_id: UUID) -> NutritionGoals:
        """Return the user's cached daily targets."""
        goals = self.get_profile(user_id).nutrition_goals
        if goals is None:
            raise ProfileNotFoundError(f"No targets for user {user_id}")
        return goals

    def get_log(self, user_id: UUID) -> DailyLog:
        """Return today's cumulative consumption."""
        return self._context(user_id).daily_log

    def get_progress(self, user_id: UUID) -> list[NutrientProgress]:
        """Return consumption against each daily target."""
        context = self._context(user_id)
        return progress(self.get_goals(user_id), context.daily_log)

    async def log_record(self, user_id: UUID, record: LoggedNutrients) -> DailyLog:
        """Fold one record into the user's daily log."""
        async with self._lock(user_id):
            context = self._context(user_id)
            context.previous_logs.append(context.daily_log)
            context.daily_log = fold(context.daily_log, record)
            _logger.info(
                "Logged nutrients: user_id=%s calories=%s",
                user_id,
                record.macros.get("calories"),
            )
            return context.daily_log

    async def undo_last(self, user_id: UUID) -> DailyLog:
        """Revert the most recent fold of the day, if any."""
        async with self._lock(user_id):
            context = self._context(user_id)
            if context.previous_logs:
                context.daily_log = context.previous_logs.pop()
                _logger.info("Undid last log entry: user_id=%s", user_id)
            return context.daily_log

    async def reset_day(self, user_id: UUID) -> DailyLog:
        """Start the day over with an all-zero log."""
        async with self._lock(user_id):
            context = self._context(user_id)
            self._start_day(context, self.today())
            _logger.info("Daily log reset: user_id=%s", user_id)
            return context.daily_log

    def logout(self, user_id: UUID) -> None:
        """Forget the session and the stored profile."""
        self._sessions.pop(user_id, None)
        self._locks.pop(user_id, None)
        self.repository.delete_profile(user_id)
        _logger.info("Logged out: user_id=%s", user_id)

    def _context(self, user_id: UUID) -> SessionContext:
        today = self.today()
        context = self._sessions.get(user_id)
        if context is None:
            profile = self.repository.get_profile(user_id)
            if profile is None:
                raise ProfileNotFoundError(f"No profile for user {user_id}")
            if profile.nutrition_goals is None:
                profile = ensure_goals(profile)
                self.repository.save_profile(user_id, profile)
            context = SessionContext(user_id=user_id, profile=profile, day=today)
            self._sessions[user_id] = context
        elif context.day != today:
            self._start_day(context, today)
        return context

    def _lock(self, user_id: UUID) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    @staticmethod
    def _start_day(context: SessionContext, day: date) -> None:
        context.day = day
        context.daily_log = empty_log()
        context.previous_logs.clear()
