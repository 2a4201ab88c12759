from datetime import datetime, timedelta, timezone

import pytest

from reprise.application.config import SchedulingConfig
from reprise.application.scheduler import compute_next_state, next_interval
from reprise.domain.models import ReviewOutcome, ReviewState

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)

DEFAULTS = SchedulingConfig()


def state(interval: int, outcome: ReviewOutcome = ReviewOutcome.OK) -> ReviewState:
    return ReviewState(
        item_id="x", due_at=NOW, interval_days=interval, last_outcome=outcome
    )


# ---------- First grading ----------


@pytest.mark.parametrize("outcome", list(ReviewOutcome))
def test_first_grading_uses_initial_interval(outcome):
    config = SchedulingConfig(initial_interval=4)
    result = compute_next_state(None, outcome, config, now=NOW, item_id="x")
    assert result.interval_days == 4
    assert result.last_outcome is outcome


def test_first_grading_requires_item_id():
    with pytest.raises(ValueError, match="item_id"):
        compute_next_state(None, ReviewOutcome.OK, DEFAULTS, now=NOW)


def test_never_reviewed_then_ok_twice():
    first = compute_next_state(None, ReviewOutcome.OK, DEFAULTS, now=NOW, item_id="X")
    assert first == ReviewState(
        item_id="X",
        due_at=NOW + timedelta(days=1),
        interval_days=1,
        last_outcome=ReviewOutcome.OK,
    )

    # floor(1 * 1.5) == 1: small intervals grow slowly
    second = compute_next_state(first, ReviewOutcome.OK, DEFAULTS, now=NOW + timedelta(days=1))
    assert second.interval_days == 1
    assert second.item_id == "X"


# ---------- OK ----------


def test_ok_grows_until_pinned_at_max():
    config = SchedulingConfig(ok_multiplier=2.0, max_interval=40)
    current = state(2)
    seen = [current.interval_days]
    for _ in range(10):
        current = compute_next_state(current, ReviewOutcome.OK, config, now=NOW)
        seen.append(current.interval_days)

    assert seen[:6] == [2, 4, 8, 16, 32, 40]
    assert all(v == 40 for v in seen[5:])


def test_ok_is_strictly_increasing_below_max():
    config = SchedulingConfig(ok_multiplier=1.5, max_interval=365)
    interval = 2
    while interval < 365:
        grown = next_interval(state(interval), ReviewOutcome.OK, config)
        assert grown > interval
        interval = grown
    assert next_interval(state(365), ReviewOutcome.OK, config) == 365


def test_ok_respects_min_interval():
    config = SchedulingConfig(min_interval=5)
    assert next_interval(state(2), ReviewOutcome.OK, config) == 5


# ---------- NG ----------


@pytest.mark.parametrize("prior", [1, 20, 300])
def test_ng_resets_to_ng_interval(prior):
    config = SchedulingConfig(ng_interval=2, max_interval=365)
    assert next_interval(state(prior), ReviewOutcome.NG, config) == 2


def test_ng_full_reset_scenario():
    result = compute_next_state(state(20), ReviewOutcome.NG, DEFAULTS, now=NOW)
    assert result.interval_days == 1
    assert result.due_at == NOW + timedelta(days=1)
    assert result.last_outcome is ReviewOutcome.NG


# ---------- MAYBE ----------


@pytest.mark.parametrize("prior", [1, 2, 3])
def test_maybe_never_drops_below_min(prior):
    config = SchedulingConfig(min_interval=2)
    assert next_interval(state(prior), ReviewOutcome.MAYBE, config) >= 2


def test_maybe_halves_interval():
    assert next_interval(state(20), ReviewOutcome.MAYBE, DEFAULTS) == 10


def test_maybe_has_no_ceiling():
    # A prior interval above max_interval stays above it after MAYBE.
    config = SchedulingConfig(maybe_multiplier=1.0, max_interval=30)
    assert next_interval(state(100), ReviewOutcome.MAYBE, config) == 100


# ---------- Misc ----------


def test_outcome_accepts_names():
    result = compute_next_state(state(4), "ng", DEFAULTS, now=NOW)
    assert result.last_outcome is ReviewOutcome.NG


def test_unknown_outcome_rejected():
    with pytest.raises(ValueError, match="Unknown review outcome"):
        compute_next_state(state(4), "EASY", DEFAULTS, now=NOW)


def test_naive_now_treated_as_utc():
    naive = datetime(2024, 3, 10, 12, 0)
    result = compute_next_state(state(4), ReviewOutcome.OK, DEFAULTS, now=naive)
    assert result.due_at == NOW + timedelta(days=6)
    assert result.due_at.tzinfo is not None
