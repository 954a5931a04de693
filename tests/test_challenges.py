"""Unit tests for challenge generation, progress and lifecycle.

2026-10-14 is a Wednesday; 2026-10-19 is the following Monday.
"""

import random
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from liftquest.core.challenges import (
    CHALLENGE_COUNTERS,
    DAILY_CHALLENGE_TEMPLATES,
    WEEKLY_CHALLENGE_TEMPLATES,
    calculate_challenge_points,
    calculate_completion_xp,
    generate_daily_challenges,
    generate_weekly_challenges,
    get_completed_count,
    get_time_remaining,
    next_monday,
    redraw_challenges,
    refresh_challenges,
    should_refresh_challenges,
    template_from_dict,
    update_challenge_progress,
)
from liftquest.core.config import XP_ALL_DAILIES_COMPLETE
from liftquest.core.models import (
    Challenge,
    ChallengeCounters,
    ChallengeTemplate,
    ClockSkew,
    InvalidChallengeTemplate,
)

NOW = datetime(2026, 10, 14, 10, 0)
START = datetime(2026, 10, 14, 0, 0)
MIDNIGHT = datetime(2026, 10, 15, 0, 0)


def _challenge(
    id: str = "daily-sets-15",
    target: int = 15,
    type: str = "daily",
    end: datetime = MIDNIGHT,
    **kwargs,
) -> Challenge:
    return Challenge(
        id=id,
        type=type,
        category="volume",
        title=id,
        description="",
        icon="",
        target=target,
        start_date=START,
        end_date=end,
        points=kwargs.pop("points", 15),
        xp=kwargs.pop("xp", 75),
        **kwargs,
    )


class TestTemplates:
    def test_bundled_templates(self):
        assert len(DAILY_CHALLENGE_TEMPLATES) == 5
        assert len(WEEKLY_CHALLENGE_TEMPLATES) == 6
        assert "daily-cardio" in {t.id for t in DAILY_CHALLENGE_TEMPLATES}

    def test_every_template_has_a_counter(self):
        for t in [*DAILY_CHALLENGE_TEMPLATES, *WEEKLY_CHALLENGE_TEMPLATES]:
            assert t.id in CHALLENGE_COUNTERS
            assert hasattr(ChallengeCounters(), CHALLENGE_COUNTERS[t.id])

    def test_non_positive_target_rejected(self):
        with pytest.raises(InvalidChallengeTemplate):
            ChallengeTemplate(id="x", category="volume", title="x", description="", icon="", target=0, points=1)

    def test_bad_category_rejected(self):
        with pytest.raises(InvalidChallengeTemplate):
            template_from_dict({"id": "x", "category": "cooking", "title": "x", "target": 1})

    def test_missing_xp_uses_default(self):
        t = template_from_dict({"id": "x", "category": "volume", "title": "x", "target": 3}, default_xp=42)
        assert t.xp == 42

    def test_end_before_start_rejected(self):
        with pytest.raises(ClockSkew):
            _challenge(end=START - timedelta(seconds=1))


class TestGeneration:
    def test_daily_shape(self):
        for seed in range(20):
            daily = generate_daily_challenges(rng=random.Random(seed), now=NOW)
            assert len(daily) == 3
            assert len({c.id for c in daily}) == 3
            assert all(c.type == "daily" for c in daily)
            assert all(c.status == "active" and c.current == 0 and c.progress == 0 for c in daily)
            assert all(c.start_date == NOW and c.end_date == MIDNIGHT for c in daily)

    def test_weekly_shape(self):
        weekly = generate_weekly_challenges(rng=random.Random(3), now=NOW)
        assert len(weekly) == 2
        assert len({c.id for c in weekly}) == 2
        assert all(c.type == "weekly" for c in weekly)
        assert all(c.end_date == datetime(2026, 10, 19) for c in weekly)

    def test_seeded_rng_is_deterministic(self):
        a = generate_daily_challenges(rng=random.Random(7), now=NOW)
        b = generate_daily_challenges(rng=random.Random(7), now=NOW)
        assert [c.id for c in a] == [c.id for c in b]

    def test_small_template_pool(self):
        only = [DAILY_CHALLENGE_TEMPLATES[0]]
        assert len(generate_daily_challenges(rng=random.Random(1), now=NOW, templates=only)) == 1

    def test_next_monday(self):
        assert next_monday(datetime(2026, 10, 18, 22, 0)) == datetime(2026, 10, 19)  # Sunday
        assert next_monday(datetime(2026, 10, 19, 9, 0)) == datetime(2026, 10, 26)  # Monday


class TestProgress:
    def test_partial_progress(self):
        [c] = update_challenge_progress([_challenge()], ChallengeCounters(sets_today=6), now=NOW)
        assert c.current == 6
        assert c.progress == pytest.approx(40.0)
        assert c.status == "active"
        assert c.completed_at is None

    def test_completion_is_stamped_once(self):
        [done] = update_challenge_progress([_challenge()], ChallengeCounters(sets_today=15), now=NOW)
        assert done.progress == 100
        assert done.status == "completed"
        assert done.completed_at == NOW

        later = NOW + timedelta(hours=2)
        [again] = update_challenge_progress([done], ChallengeCounters(sets_today=20), now=later)
        assert again.progress == 100
        assert again.status == "completed"
        assert again.completed_at == NOW
        assert again.current == 20

    def test_target_change_does_not_regress_completion(self):
        [done] = update_challenge_progress([_challenge()], ChallengeCounters(sets_today=15), now=NOW)
        raised = replace(done, target=30)
        [again] = update_challenge_progress([raised], ChallengeCounters(sets_today=20), now=NOW)
        assert again.status == "completed"
        assert again.completed_at == NOW
        assert again.progress == 100

    def test_expiry_is_terminal(self):
        after = MIDNIGHT + timedelta(minutes=1)
        [expired] = update_challenge_progress([_challenge()], ChallengeCounters(sets_today=3), now=after)
        assert expired.status == "expired"

        [still] = update_challenge_progress([expired], ChallengeCounters(sets_today=50), now=after)
        assert still == expired

    def test_reaching_target_wins_over_expiry(self):
        after = MIDNIGHT + timedelta(minutes=1)
        [c] = update_challenge_progress([_challenge()], ChallengeCounters(sets_today=15), now=after)
        assert c.status == "completed"

    def test_boolean_counter(self):
        [c] = update_challenge_progress(
            [_challenge(id="daily-pr", target=1)], ChallengeCounters(pr_today=True), now=NOW
        )
        assert c.status == "completed"

    def test_unmapped_id_passes_through(self):
        [c] = update_challenge_progress(
            [_challenge(id="mystery", target=5, current=2)], ChallengeCounters(sets_today=9), now=NOW
        )
        assert c.current == 2
        assert c.progress == pytest.approx(40.0)

    def test_input_not_mutated(self):
        original = _challenge()
        update_challenge_progress([original], ChallengeCounters(sets_today=15), now=NOW)
        assert original.status == "active"
        assert original.current == 0


class TestRefresh:
    def test_should_refresh(self):
        assert should_refresh_challenges([_challenge()], now=MIDNIGHT + timedelta(seconds=1))
        assert not should_refresh_challenges([_challenge()], now=NOW)
        assert not should_refresh_challenges([], now=NOW)

    def test_empty_board_is_filled(self):
        board = refresh_challenges([], rng=random.Random(1), now=NOW)
        assert [c.type for c in board].count("daily") == 3
        assert [c.type for c in board].count("weekly") == 2

    def test_only_expired_batch_is_replaced(self):
        weekly = generate_weekly_challenges(rng=random.Random(2), now=NOW)
        old_daily = [_challenge(id="daily-workout", target=1)]
        tomorrow = NOW + timedelta(days=1)

        board = refresh_challenges(old_daily + weekly, rng=random.Random(2), now=tomorrow)

        dailies = [c for c in board if c.type == "daily"]
        assert len(dailies) == 3
        assert all(c.start_date == tomorrow for c in dailies)
        assert [c for c in board if c.type == "weekly"] == weekly


def _done(id: str, target: int, xp: int) -> Challenge:
    return _challenge(
        id=id, target=target, xp=xp, current=target, progress=100.0,
        status="completed", completed_at=START,
    )


class TestRedraw:
    def _board(self, *dailies):
        return [*dailies, *generate_weekly_challenges(rng=random.Random(2), now=NOW)]

    def test_completed_challenges_are_kept(self):
        board = self._board(
            _done("daily-workout", 1, 50),
            _done("daily-pr", 1, 100),
            _challenge(id="daily-sets-15", target=15, current=3),
        )
        counters = ChallengeCounters(workouts_today=1, pr_today=True, sets_today=3, exercises_today=5)

        redrawn = redraw_challenges(board, counters, rng=random.Random(0), now=NOW)

        dailies = [c for c in redrawn if c.type == "daily"]
        assert [c.id for c in dailies] == ["daily-workout", "daily-pr", "daily-cardio"]
        assert dailies[:2] == board[:2]
        assert (dailies[2].start_date, dailies[2].end_date) == (NOW, MIDNIGHT)

        after = update_challenge_progress(redrawn, counters, now=NOW)
        assert calculate_completion_xp(redrawn, after) == 0

    def test_repeated_redraws_pay_nothing(self):
        board = self._board(
            _done("daily-workout", 1, 50),
            _done("daily-sets-15", 15, 75),
            _done("daily-pr", 1, 100),
        )
        counters = ChallengeCounters(workouts_today=1, pr_today=True, sets_today=15, exercises_today=5)
        rng = random.Random(3)

        for _ in range(5):
            redrawn = redraw_challenges(board, counters, rng=rng, now=NOW)
            after = update_challenge_progress(redrawn, counters, now=NOW)
            assert calculate_completion_xp(redrawn, after) == 0
            assert [c for c in after if c.type == "daily"] == board[:3]
            board = after

    def test_satisfied_templates_are_not_drawn(self):
        board = self._board(
            _challenge(id="daily-sets-15", target=15, current=3),
            _challenge(id="daily-exercises-5", target=5, current=2),
            _challenge(id="daily-cardio", target=30),
        )
        # The only templates left off the board are already satisfied
        counters = ChallengeCounters(workouts_today=1, pr_today=True, sets_today=3, exercises_today=2)

        redrawn = redraw_challenges(board, counters, rng=random.Random(0), now=NOW)

        assert [c for c in redrawn if c.type == "daily"] == board[:3]
        after = update_challenge_progress(redrawn, counters, now=NOW)
        assert calculate_completion_xp(redrawn, after) == 0

    def test_unfinished_weekly_batch_is_swapped(self):
        board = self._board(_challenge(id="daily-workout", target=1))
        old_weekly = {c.id for c in board if c.type == "weekly"}

        redrawn = redraw_challenges(board, ChallengeCounters(), rng=random.Random(4), now=NOW)

        weekly = [c for c in redrawn if c.type == "weekly"]
        assert len(weekly) == 2
        assert not old_weekly & {c.id for c in weekly}
        assert all(c.end_date == next_monday(NOW) for c in weekly)

    def test_closed_batch_is_regenerated(self):
        tomorrow = NOW + timedelta(days=1)
        board = self._board(_done("daily-workout", 1, 50))

        redrawn = redraw_challenges(board, ChallengeCounters(), rng=random.Random(5), now=tomorrow)

        dailies = [c for c in redrawn if c.type == "daily"]
        assert len(dailies) == 3
        assert all(c.start_date == tomorrow for c in dailies)


class TestAggregates:
    def test_counts_and_points(self):
        board = [
            _challenge(status="completed", completed_at=NOW, points=10),
            _challenge(id="daily-pr", target=1, points=20),
            _challenge(id="weekly-sets-50", type="weekly", target=50, status="completed",
                       completed_at=NOW, points=40, end=datetime(2026, 10, 19)),
        ]
        assert get_completed_count(board) == {"daily": 1, "weekly": 1}
        assert calculate_challenge_points(board) == 50

    def test_completion_xp_with_all_dailies_bonus(self):
        before = [
            _challenge(id="daily-workout", target=1, xp=50),
            _challenge(id="daily-sets-15", target=15, xp=75),
            _challenge(id="daily-exercises-5", target=5, xp=60),
        ]
        counters = ChallengeCounters(workouts_today=1, sets_today=15, exercises_today=5)
        after = update_challenge_progress(before, counters, now=NOW)
        assert calculate_completion_xp(before, after) == 50 + 75 + 60 + XP_ALL_DAILIES_COMPLETE

        # Nothing new the second time around
        assert calculate_completion_xp(after, update_challenge_progress(after, counters, now=NOW)) == 0

    def test_completion_xp_partial(self):
        before = [_challenge(id="daily-workout", target=1, xp=50), _challenge(xp=75)]
        after = update_challenge_progress(before, ChallengeCounters(workouts_today=1), now=NOW)
        assert calculate_completion_xp(before, after) == 50


class TestTimeRemaining:
    def test_hours_and_minutes(self):
        assert get_time_remaining(datetime(2026, 10, 14, 15, 12), now=NOW) == "5h 12m"

    def test_days_and_hours(self):
        assert get_time_remaining(datetime(2026, 10, 16, 13, 30), now=NOW) == "2d 3h"

    def test_expired(self):
        assert get_time_remaining(NOW, now=NOW) == "Expired"
        assert get_time_remaining(NOW - timedelta(hours=1), now=NOW) == "Expired"
