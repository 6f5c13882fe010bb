"""Tests for re-attaching detached UserData to a re-added item."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from medialib.db.models import PLACEHOLDER_ID
from medialib.errors import ApiErrorCode, InvalidArgumentError, NotFoundError
from medialib.services.items import delete_items, reattach_user_data
from tests.factories import (
    create_test_item,
    create_test_user,
    create_test_user_data,
    user_data_for_user,
)

NOW = datetime.now(UTC)


class TestReattachUserData:
    def test_detached_rows_move_to_new_item_and_lose_retention_date(self, session_factory):
        with session_factory() as s:
            user_id = create_test_user(s)
            old_item = create_test_item(s, "Movie")
            create_test_user_data(
                s, user_id, old_item, "tmdb-603", play_count=2, playback_position_ticks=700
            )

        with session_factory() as db:
            delete_items(db, [old_item])

        with session_factory() as s:
            new_item = create_test_item(s, "Movie (re-scanned)")

        with session_factory() as db:
            result = reattach_user_data(db, new_item, ["tmdb-603"])

        assert result.item_id == new_item
        assert result.reattached_user_data_count == 1

        with session_factory() as v:
            (row,) = user_data_for_user(v, user_id)
            assert row.item_id == new_item
            assert row.retention_date is None
            assert row.play_count == 2
            assert row.playback_position_ticks == 700

    def test_only_matching_keys_are_reattached(self, session_factory):
        with session_factory() as s:
            user_id = create_test_user(s)
            create_test_user_data(
                s, user_id, PLACEHOLDER_ID, "wanted", retention_date=NOW - timedelta(days=1)
            )
            create_test_user_data(
                s, user_id, PLACEHOLDER_ID, "other", retention_date=NOW - timedelta(days=1)
            )
            item_id = create_test_item(s)

        with session_factory() as db:
            result = reattach_user_data(db, item_id, ["wanted", ""])

        assert result.reattached_user_data_count == 1
        with session_factory() as v:
            rows = {r.custom_data_key: r for r in user_data_for_user(v, user_id)}
            assert rows["wanted"].item_id == item_id
            assert rows["other"].item_id == PLACEHOLDER_ID

    def test_existing_row_on_target_item_is_not_overwritten(self, session_factory):
        with session_factory() as s:
            user_id = create_test_user(s)
            item_id = create_test_item(s)
            create_test_user_data(s, user_id, item_id, "key", play_count=1)
            create_test_user_data(
                s, user_id, PLACEHOLDER_ID, "key", play_count=8, retention_date=NOW
            )

        with session_factory() as db:
            result = reattach_user_data(db, item_id, ["key"])

        assert result.reattached_user_data_count == 0
        with session_factory() as v:
            rows = {r.item_id: r for r in user_data_for_user(v, user_id)}
            assert rows[item_id].play_count == 1
            assert rows[PLACEHOLDER_ID].play_count == 8

    def test_placeholder_target_is_rejected(self, db_session):
        with pytest.raises(InvalidArgumentError) as exc_info:
            reattach_user_data(db_session, PLACEHOLDER_ID, ["key"])

        assert exc_info.value.code == ApiErrorCode.E_PLACEHOLDER_FORBIDDEN

    def test_empty_keys_are_rejected(self, db_session):
        with pytest.raises(InvalidArgumentError):
            reattach_user_data(db_session, uuid4(), ["", ""])

    def test_unknown_item_is_not_found(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            reattach_user_data(db_session, uuid4(), ["key"])

        assert exc_info.value.code == ApiErrorCode.E_ITEM_NOT_FOUND
        assert exc_info.value.status_code == 404
