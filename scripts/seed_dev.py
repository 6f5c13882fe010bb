#!/usr/bin/env python
"""Seed development database with demo media library data.

Seeds one user and two episodes of the same show, both carrying UserData under
the same custom data key, so that deleting both items exercises the collision
merge onto the placeholder item.

Constraints:
- Refuses to run in staging or prod (MEDIALIB_ENV check)
- Idempotent: rows with the fixed demo ids are only inserted when missing
- Never runs automatically (manual invocation only)

Usage:
    cd python && DATABASE_URL=... python ../scripts/seed_dev.py
"""

import os
import sys
from datetime import UTC, datetime, timedelta
from uuid import UUID

DEMO_USER_ID = UUID("5eed0000-0000-0000-0000-000000000001")
DEMO_ITEM_IDS = (
    UUID("5eed0000-0000-0000-0000-0000000000a1"),
    UUID("5eed0000-0000-0000-0000-0000000000a2"),
)
DEMO_USER_DATA_IDS = (
    UUID("5eed0000-0000-0000-0000-0000000000d1"),
    UUID("5eed0000-0000-0000-0000-0000000000d2"),
)
DEMO_CUSTOM_DATA_KEY = "tvdb-episode-81189-1"


def main():
    # 1. Environment check (hard fail in staging/prod)
    medialib_env = os.getenv("MEDIALIB_ENV", "local")
    if medialib_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in MEDIALIB_ENV={medialib_env}")
        sys.exit(1)

    # 2. Check DATABASE_URL
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from medialib.db.engine import create_db_engine
    from medialib.db.models import Item, User, UserData
    from medialib.db.session import create_session_factory
    from medialib.services.bootstrap import ensure_placeholder_item

    session_factory = create_session_factory(create_db_engine(database_url))
    now = datetime.now(UTC)

    with session_factory() as db:
        # 3. Placeholder first, so the seeded items can be deleted right away
        ensure_placeholder_item(db)

        # 4. Idempotent seeding
        created = []
        if db.get(User, DEMO_USER_ID) is None:
            db.add(User(id=DEMO_USER_ID, username="demo"))
            created.append(f"user {DEMO_USER_ID}")

        for n, item_id in enumerate(DEMO_ITEM_IDS, start=1):
            if db.get(Item, item_id) is None:
                db.add(Item(id=item_id, type="Episode", name=f"Pilot (copy {n})"))
                created.append(f"item {item_id}")
        db.flush()

        for n, (user_data_id, item_id) in enumerate(
            zip(DEMO_USER_DATA_IDS, DEMO_ITEM_IDS, strict=True), start=1
        ):
            if db.get(UserData, user_data_id) is None:
                db.add(
                    UserData(
                        id=user_data_id,
                        user_id=DEMO_USER_ID,
                        item_id=item_id,
                        custom_data_key=DEMO_CUSTOM_DATA_KEY,
                        play_count=n,
                        last_played_date=now - timedelta(days=3 - n),
                    )
                )
                created.append(f"user_data {user_data_id}")

        db.commit()

    # 5. Report
    db_display = database_url.split("@")[1] if "@" in database_url else database_url
    print(f"Database: {db_display}")
    print(f"MEDIALIB_ENV: {medialib_env}")
    print()
    if created:
        for label in created:
            print(f"✓ Created: {label}")
    else:
        print("• Exists: all demo rows")
    print()
    print("Delete both items to see their UserData merged onto the placeholder:")
    print(f"  POST /items/delete {{\"item_ids\": [\"{DEMO_ITEM_IDS[0]}\", \"{DEMO_ITEM_IDS[1]}\"]}}")


if __name__ == "__main__":
    main()
