"""Interval, due date and memorisation factor calculations for card reviews."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum


MIN_MEMORISATION_FACTOR = 1300.0
HARD_INTERVAL_COEFFICIENT = 1.2
SECONDS_IN_HOUR = 3600
HOURS_IN_DAY = 24.0
LATEST_DUE = datetime.max.replace(tzinfo=timezone.utc)
EARLIEST_DUE = datetime.min.replace(tzinfo=timezone.utc)


class RevisionOutcome(str, Enum):
    """The reviewer's self-reported recall quality for one presentation."""

    FAIL = "fail"
    HARD = "hard"
    PASS = "pass"
    EASY = "easy"


FACTOR_ADJUSTMENTS = {
    RevisionOutcome.FAIL: -200.0,
    RevisionOutcome.HARD: -150.0,
    RevisionOutcome.PASS: 0.0,
    RevisionOutcome.EASY: 150.0,
}


@dataclass(frozen=True, slots=True)
class IntervalCoefficients:
    """Per-deck tuning applied to every interval calculation."""

    pass_coef: float = 1.0
    easy_coef: float = 1.3
    fail_coef: float = 0.0


@dataclass(frozen=True, slots=True)
class SchedulingState:
    """When a card is next due and how well it is remembered."""

    due: datetime
    interval: float = 0.0
    memorisation_factor: float = MIN_MEMORISATION_FACTOR

    @classmethod
    def default(cls, now: datetime | None = None) -> SchedulingState:
        """Return the scheduling state given to a card that was never reviewed."""
        if now is None:
            now = datetime.now(timezone.utc)
        return cls(due=now)


@dataclass(frozen=True, slots=True)
class PossibleIntervals:
    """Candidate intervals, in days, for each revision outcome."""

    fail: float
    hard: float
    pass_: float
    easy: float

    def for_outcome(self, outcome: RevisionOutcome) -> float:
        if outcome is RevisionOutcome.FAIL:
            return self.fail
        if outcome is RevisionOutcome.HARD:
            return self.hard
        if outcome is RevisionOutcome.PASS:
            return self.pass_
        return self.easy


def calculate_days_overdue(due: datetime, now: datetime | None = None) -> float:
    """Return how late a review is, quantised to whole hours and expressed in days.

    Hours are truncated toward zero, so a review taken before the due date
    yields a negative value.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    hours = int((now - due).total_seconds() / SECONDS_IN_HOUR)
    return hours / HOURS_IN_DAY


def calculate_possible_intervals(
    state: SchedulingState,
    coefficients: IntervalCoefficients,
    *,
    now: datetime | None = None,
) -> PossibleIntervals:
    """Compute the fail, hard, pass and easy intervals for a scheduling state.

    Hard, pass and easy form a strictly increasing ladder because each one
    falls back to the previous interval plus one day. The fail interval has
    no such floor and depends only on ``fail_coef``.
    """
    days_overdue = calculate_days_overdue(state.due, now)
    interval = state.interval
    factor_coef = state.memorisation_factor * 0.001
    pass_coef = coefficients.pass_coef

    fail_interval = interval * coefficients.fail_coef
    hard_interval = max(
        interval + 1.0,
        HARD_INTERVAL_COEFFICIENT * (interval + days_overdue * 0.25) * pass_coef,
    )
    pass_interval = max(
        hard_interval + 1.0,
        (interval + days_overdue * 0.5) * factor_coef * pass_coef,
    )
    easy_interval = max(
        pass_interval + 1.0,
        (interval + days_overdue) * factor_coef * pass_coef * coefficients.easy_coef,
    )
    return PossibleIntervals(
        fail=fail_interval,
        hard=hard_interval,
        pass_=pass_interval,
        easy=easy_interval,
    )


def calculate_memorisation_factor(current: float, outcome: RevisionOutcome) -> float:
    """Adjust the memorisation factor for an outcome, never dropping below the floor."""
    return max(MIN_MEMORISATION_FACTOR, current + FACTOR_ADJUSTMENTS[outcome])


def shift_due(due: datetime, days: float) -> datetime:
    """Move ``due`` by ``days``, saturating at the representable range."""
    try:
        return due + timedelta(days=days)
    except OverflowError:
        return LATEST_DUE if days > 0 else EARLIEST_DUE


def transform(
    state: SchedulingState,
    outcome: RevisionOutcome,
    coefficients: IntervalCoefficients,
    *,
    now: datetime | None = None,
) -> SchedulingState:
    """Return the scheduling state that follows a review with the given outcome.

    The new due date is counted from the previous due date rather than from
    ``now`` so early or late reviews do not shift the schedule. Due dates
    beyond what ``datetime`` can represent are pinned to :data:`LATEST_DUE`.
    """
    intervals = calculate_possible_intervals(state, coefficients, now=now)
    new_interval = intervals.for_outcome(outcome)
    return SchedulingState(
        due=shift_due(state.due, new_interval),
        interval=new_interval,
        memorisation_factor=calculate_memorisation_factor(state.memorisation_factor, outcome),
    )
