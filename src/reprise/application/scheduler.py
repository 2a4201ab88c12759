"""
Interval scheduler.

A fixed-ratio multiplier scheme with hard floor/ceiling clamps and a full
reset on failure. There is no ease factor and no streak counter: the only
state carried between gradings is the interval itself.

This is a pure computation module with no I/O.
"""

import math
from datetime import datetime, timedelta

from reprise.application.config import SchedulingConfig
from reprise.application.utils.clock import as_utc, utcnow
from reprise.domain.models import ReviewOutcome, ReviewState


def next_interval(
    prior: ReviewState | None, outcome: ReviewOutcome, config: SchedulingConfig
) -> int:
    """
    Compute the interval in days after grading.

    - First grading: initial_interval, whatever the outcome.
    - OK: floor(prior * ok_multiplier), clamped to [min_interval, max_interval].
    - MAYBE: floor(prior * maybe_multiplier), floored at min_interval (no ceiling).
    - NG: ng_interval, ignoring the prior interval.
    """
    if prior is None:
        return config.initial_interval

    if outcome is ReviewOutcome.OK:
        grown = math.floor(prior.interval_days * config.ok_multiplier)
        return max(min(grown, config.max_interval), config.min_interval)

    if outcome is ReviewOutcome.MAYBE:
        shrunk = math.floor(prior.interval_days * config.maybe_multiplier)
        return max(shrunk, config.min_interval)

    if outcome is ReviewOutcome.NG:
        return config.ng_interval

    raise ValueError(f"Unknown review outcome: {outcome!r}")


def compute_next_state(
    prior: ReviewState | None,
    outcome: ReviewOutcome,
    config: SchedulingConfig,
    now: datetime | None = None,
    item_id: str | None = None,
) -> ReviewState:
    """
    Turn a prior review state and an outcome into the next review state.

    Args:
        prior: The item's current state, or None if it was never graded.
        outcome: The grading result.
        config: Validated scheduling parameters.
        now: Reference time (defaults to the current UTC time).
        item_id: Required when prior is None.

    Returns:
        The new state. due_at is now + interval days, by elapsed time.
    """
    outcome = ReviewOutcome.parse(outcome)

    if item_id is None:
        if prior is None:
            raise ValueError("item_id is required when there is no prior review state")
        item_id = prior.item_id

    now = utcnow() if now is None else as_utc(now)

    interval = next_interval(prior, outcome, config)

    return ReviewState(
        item_id=item_id,
        due_at=now + timedelta(days=interval),
        interval_days=interval,
        last_outcome=outcome,
    )
