"""Tests for placeholder item bootstrap."""

from sqlalchemy import delete, func, select

from medialib.db.models import PLACEHOLDER_ID, PLACEHOLDER_TYPE, Item
from medialib.services.bootstrap import ensure_placeholder_item


def _placeholder_count(session) -> int:
    return session.scalar(select(func.count()).select_from(Item).where(Item.id == PLACEHOLDER_ID))


class TestEnsurePlaceholderItem:
    def test_creates_placeholder_when_missing(self, session_factory):
        with session_factory() as s:
            s.execute(delete(Item).where(Item.id == PLACEHOLDER_ID))
            s.commit()
            assert _placeholder_count(s) == 0

        with session_factory() as db:
            assert ensure_placeholder_item(db) == PLACEHOLDER_ID

        with session_factory() as v:
            placeholder = v.get(Item, PLACEHOLDER_ID)
            assert placeholder is not None
            assert placeholder.type == PLACEHOLDER_TYPE

    def test_is_idempotent(self, session_factory):
        with session_factory() as db:
            ensure_placeholder_item(db)
            ensure_placeholder_item(db)

        with session_factory() as v:
            assert _placeholder_count(v) == 1

    def test_lost_insert_race_resolves_to_existing_row(self, session_factory, monkeypatch):
        """The racing process inserted the row between our check and insert."""
        from medialib.services import bootstrap

        answers = iter([False, True])
        monkeypatch.setattr(bootstrap, "_placeholder_exists", lambda db: next(answers))

        with session_factory() as db:
            assert ensure_placeholder_item(db) == PLACEHOLDER_ID

        with session_factory() as v:
            assert _placeholder_count(v) == 1
