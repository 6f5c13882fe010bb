"""Tests for UserData reconciliation.

Verifies:
- Rows are grouped by (user_id, custom_data_key)
- The survivor of a colliding group is picked by date, then play count,
  then lowest item id, regardless of input order
- Already-detached rows compete for their slot but are never re-pointed
- The plan never leaves two rows for the same user/key on the placeholder
"""

from datetime import UTC, datetime, timedelta
from itertools import permutations
from uuid import UUID, uuid4

import pytest

from medialib.db.models import PLACEHOLDER_ID
from medialib.services.user_data_reconcile import (
    ReconcilePlan,
    UserDataRow,
    reconcile_user_data,
    select_survivor,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _row(
    user_id: UUID,
    key: str = "default",
    item_id: UUID | None = None,
    play_count: int = 0,
    last_played_date: datetime | None = None,
) -> UserDataRow:
    return UserDataRow(
        id=uuid4(),
        user_id=user_id,
        item_id=item_id or uuid4(),
        custom_data_key=key,
        play_count=play_count,
        last_played_date=last_played_date,
    )


def _assert_no_collisions(plan: ReconcilePlan, detached: list[UserDataRow] = ()) -> None:
    removed = set(plan.duplicate_ids)
    slots = [row.group_key for row in plan.survivors]
    slots += [row.group_key for row in detached if row.id not in removed]
    assert len(slots) == len(set(slots))


class TestEmptyAndSingleRows:
    def test_empty_input_yields_empty_plan(self):
        plan = reconcile_user_data([])

        assert plan.is_empty
        assert plan.survivors == ()
        assert plan.duplicates == ()

    def test_single_row_is_survivor(self):
        row = _row(uuid4())

        plan = reconcile_user_data([row])

        assert plan.survivors == (row,)
        assert plan.duplicates == ()

    def test_rows_already_on_placeholder_are_ignored(self):
        user_id = uuid4()
        detached = _row(user_id, item_id=PLACEHOLDER_ID, play_count=10)

        plan = reconcile_user_data([detached])

        assert plan.is_empty

    def test_same_row_passed_twice_is_not_its_own_duplicate(self):
        row = _row(uuid4())

        plan = reconcile_user_data([row, row])

        assert plan.survivors == (row,)
        assert plan.duplicates == ()


class TestNonCollidingRows:
    def test_different_keys_for_same_user_all_survive(self):
        user_id = uuid4()
        rows = [_row(user_id, "key1", play_count=1), _row(user_id, "key2", play_count=2)]

        plan = reconcile_user_data(rows)

        assert {r.custom_data_key for r in plan.survivors} == {"key1", "key2"}
        assert plan.duplicates == ()

    def test_same_key_for_different_users_all_survive(self):
        rows = [_row(uuid4()), _row(uuid4()), _row(uuid4())]

        plan = reconcile_user_data(rows)

        assert len(plan.survivors) == 3
        assert plan.duplicates == ()


class TestSurvivorSelection:
    def test_later_last_played_date_wins(self):
        user_id = uuid4()
        older = _row(user_id, play_count=1, last_played_date=NOW - timedelta(days=2))
        newer = _row(user_id, play_count=3, last_played_date=NOW - timedelta(days=1))

        plan = reconcile_user_data([older, newer])

        assert plan.survivors == (newer,)
        assert plan.duplicates == (older,)

    def test_later_date_wins_over_higher_play_count(self):
        user_id = uuid4()
        busy_but_old = _row(user_id, play_count=50, last_played_date=NOW - timedelta(days=30))
        recent = _row(user_id, play_count=1, last_played_date=NOW)

        plan = reconcile_user_data([busy_but_old, recent])

        assert plan.survivors == (recent,)

    def test_winner_is_independent_of_input_order(self):
        user_id = uuid4()
        rows = [
            _row(user_id, play_count=1, last_played_date=NOW - timedelta(days=3)),
            _row(user_id, play_count=7, last_played_date=NOW - timedelta(hours=1)),
            _row(user_id, play_count=2, last_played_date=NOW - timedelta(days=1)),
            _row(user_id, play_count=9),
        ]

        plans = [reconcile_user_data(list(order)) for order in permutations(rows)]

        assert {plan.survivors for plan in plans} == {(rows[1],)}
        assert {plan.duplicates for plan in plans} == {plans[0].duplicates}

    def test_missing_date_ranks_oldest(self):
        user_id = uuid4()
        never_played = _row(user_id, play_count=100, last_played_date=None)
        played_once = _row(user_id, play_count=1, last_played_date=NOW - timedelta(days=365))

        assert select_survivor([never_played, played_once]) is played_once

    def test_equal_dates_fall_back_to_play_count(self):
        user_id = uuid4()
        low = _row(user_id, play_count=1, last_played_date=NOW)
        high = _row(user_id, play_count=4, last_played_date=NOW)

        assert select_survivor([low, high]) is high
        assert select_survivor([high, low]) is high

    def test_full_tie_falls_back_to_lowest_item_id(self):
        user_id = uuid4()
        low_id = UUID("10000000-0000-0000-0000-000000000000")
        high_id = UUID("f0000000-0000-0000-0000-000000000000")
        first = _row(user_id, item_id=high_id, play_count=2, last_played_date=NOW)
        second = _row(user_id, item_id=low_id, play_count=2, last_played_date=NOW)

        plan = reconcile_user_data([first, second])

        assert plan.survivors == (second,)
        assert plan.duplicates == (first,)

    def test_naive_and_aware_dates_compare_as_utc(self):
        user_id = uuid4()
        naive_newer = _row(user_id, last_played_date=datetime(2026, 10, 19, 11, 0))
        aware_older = _row(user_id, last_played_date=datetime(2026, 10, 19, 10, 0, tzinfo=UTC))

        assert select_survivor([aware_older, naive_newer]) is naive_newer

    def test_select_survivor_rejects_empty_group(self):
        with pytest.raises(ValueError):
            select_survivor([])


class TestDetachedCompetitors:
    def test_incoming_row_with_newer_history_replaces_detached_row(self):
        user_id = uuid4()
        stale = _row(user_id, item_id=PLACEHOLDER_ID, last_played_date=NOW - timedelta(days=10))
        incoming = _row(user_id, last_played_date=NOW)

        plan = reconcile_user_data([incoming], detached=[stale])

        assert plan.survivors == (incoming,)
        assert plan.duplicates == (stale,)
        assert plan.retained == ()
        _assert_no_collisions(plan, [stale])

    def test_detached_row_with_newer_history_is_kept_in_place(self):
        user_id = uuid4()
        kept = _row(user_id, item_id=PLACEHOLDER_ID, last_played_date=NOW)
        incoming = _row(user_id, last_played_date=NOW - timedelta(days=1))

        plan = reconcile_user_data([incoming], detached=[kept])

        assert plan.survivors == ()
        assert plan.duplicates == (incoming,)
        assert plan.retained == (kept,)
        _assert_no_collisions(plan, [kept])

    def test_detached_rows_for_other_slots_are_not_touched(self):
        user_id = uuid4()
        other_slot = _row(user_id, "other", item_id=PLACEHOLDER_ID, last_played_date=NOW)
        incoming = _row(user_id, "default")

        plan = reconcile_user_data([incoming], detached=[other_slot])

        assert plan.survivors == (incoming,)
        assert plan.duplicates == ()
        assert plan.retained == ()

    def test_detached_rows_alone_yield_empty_plan(self):
        detached = [_row(uuid4(), item_id=PLACEHOLDER_ID)]

        assert reconcile_user_data([], detached=detached).is_empty


class TestPlanShape:
    def test_survivors_and_duplicates_are_disjoint_and_cover_input(self):
        users = [uuid4(), uuid4()]
        rows = [
            _row(users[0], "default", play_count=n, last_played_date=NOW - timedelta(days=n))
            for n in range(4)
        ] + [_row(users[1], key) for key in ("a", "b")]

        plan = reconcile_user_data(rows)

        survivor_ids = set(plan.survivor_ids)
        duplicate_ids = set(plan.duplicate_ids)
        assert survivor_ids.isdisjoint(duplicate_ids)
        assert survivor_ids | duplicate_ids == {row.id for row in rows}
        assert len(plan.survivors) == 3
        assert len(plan.duplicates) == 3
        _assert_no_collisions(plan)
