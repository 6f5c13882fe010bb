"""UserData reconciliation for item deletion.

When several items are deleted together, their UserData rows are re-pointed
at the placeholder item. Two rows for the same (user_id, custom_data_key)
would then collide on uq_user_data_user_item_key, so each such group keeps
exactly one survivor and the rest are discarded.

Survivor order (first difference wins):
1. latest last_played_date (a missing date ranks oldest)
2. highest play_count
3. lowest item_id

This module is pure: it performs no I/O and its outcome does not depend on
the order of its input.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from medialib.db.models import PLACEHOLDER_ID


@dataclass(frozen=True)
class UserDataRow:
    """The columns of a user_data row that reconciliation looks at."""

    id: UUID
    user_id: UUID
    item_id: UUID
    custom_data_key: str
    play_count: int = 0
    last_played_date: datetime | None = None

    @property
    def group_key(self) -> tuple[UUID, str]:
        return (self.user_id, self.custom_data_key)

    @property
    def is_detached(self) -> bool:
        return self.item_id == PLACEHOLDER_ID


@dataclass(frozen=True)
class ReconcilePlan:
    """Result of reconciling the UserData of items being deleted.

    Attributes:
        survivors: Rows to re-point at the placeholder and stamp with a
            retention date.
        duplicates: Rows to delete. May include rows that were already
            detached when an incoming row carries more recent history.
        retained: Already detached rows that won their group. They stay on
            the placeholder; their retention date is restamped because the
            slot absorbed a newer deletion.
    """

    survivors: tuple[UserDataRow, ...] = field(default_factory=tuple)
    duplicates: tuple[UserDataRow, ...] = field(default_factory=tuple)
    retained: tuple[UserDataRow, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.survivors and not self.duplicates

    @property
    def survivor_ids(self) -> list[UUID]:
        return [row.id for row in self.survivors]

    @property
    def duplicate_ids(self) -> list[UUID]:
        return [row.id for row in self.duplicates]

    @property
    def retained_ids(self) -> list[UUID]:
        return [row.id for row in self.retained]


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def survivor_rank(row: UserDataRow) -> tuple[float, int, UUID]:
    """Sort key under which the preferred survivor of a group comes first."""
    if row.last_played_date is None:
        played_at = float("-inf")
    else:
        played_at = _as_utc(row.last_played_date).timestamp()
    return (-played_at, -row.play_count, row.item_id)


def select_survivor(group: Iterable[UserDataRow]) -> UserDataRow:
    """Pick the row carrying the most recent / most active history.

    Raises:
        ValueError: If the group is empty.
    """
    ranked = sorted(group, key=survivor_rank)
    if not ranked:
        raise ValueError("cannot select a survivor from an empty group")
    return ranked[0]


def reconcile_user_data(
    rows: Iterable[UserDataRow],
    detached: Iterable[UserDataRow] = (),
) -> ReconcilePlan:
    """Build a conflict-free detach plan for the UserData of deleted items.

    Args:
        rows: UserData rows attached to the items being deleted. Rows already
            pointing at the placeholder are ignored.
        detached: Rows already attached to the placeholder. They compete for
            survival in their (user_id, custom_data_key) group but are never
            re-pointed. If one loses, it is deleted so the winner can take
            its slot; if it wins, it is listed in `retained` so its
            retention window restarts with this deletion.

    Returns:
        A plan whose survivors can all be re-pointed at the placeholder
        without colliding with each other or with any remaining detached row.
    """
    groups: dict[tuple[UUID, str], list[UserDataRow]] = defaultdict(list)
    seen: set[UUID] = set()
    for row in rows:
        if row.is_detached or row.id in seen:
            continue
        seen.add(row.id)
        groups[row.group_key].append(row)

    if not groups:
        return ReconcilePlan()

    for row in detached:
        if row.is_detached and row.id not in seen and row.group_key in groups:
            seen.add(row.id)
            groups[row.group_key].append(row)

    survivors: list[UserDataRow] = []
    duplicates: list[UserDataRow] = []
    retained: list[UserDataRow] = []

    for group in groups.values():
        survivor = select_survivor(group)
        if survivor.is_detached:
            retained.append(survivor)
        else:
            survivors.append(survivor)
        duplicates.extend(row for row in group if row is not survivor)

    survivors.sort(key=lambda r: (r.user_id, r.custom_data_key))
    retained.sort(key=lambda r: (r.user_id, r.custom_data_key))
    duplicates.sort(key=lambda r: (r.user_id, r.custom_data_key, r.item_id))

    return ReconcilePlan(
        survivors=tuple(survivors),
        duplicates=tuple(duplicates),
        retained=tuple(retained),
    )
