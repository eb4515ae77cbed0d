"""Composite keys, save-on-conflict and generated accessor source."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "rqlobj").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rqlobj import DBU, MappedObject, generate_source, open_sqlite, schema_for


@dataclass
class Membership:
    group_id: int = field(default=0, metadata={"sql": "group_id", "key": True})
    user_id: int = field(default=0, metadata={"sql": "user_id", "key": True})
    role: str = field(default="", metadata={"sql": "role"})


def main() -> None:
    with open_sqlite() as db:
        dbu = DBU(db)
        member = MappedObject(Membership(group_id=1, user_id=2, role="member"))
        print(member.sql_create())
        dbu.write(member.sql_create())

        dbu.add(member)
        member.obj.role = "admin"
        dbu.save(member)

        loaded = Membership(group_id=1, user_id=2)
        dbu.load_self(MappedObject(loaded))
        print("Loaded:", loaded)

    # Same accessors as `rqlobj-gen` would write for this record.
    print(generate_source([schema_for(Membership)], imports={"models": ["Membership"]}))


if __name__ == "__main__":
    main()
