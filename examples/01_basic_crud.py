"""Basic CRUD example for the rqlobj DBU runtime."""

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

from rqlobj import DBU, MappedList, MappedObject, NoRowsError, configure_logging, open_sqlite


@dataclass
class Item:
    name: str = field(default="", metadata={"sql": "name"})
    kind: int = field(default=0, metadata={"sql": "kind"})
    # Integer identity: the store assigns it on insert.
    id: int = field(default=0, metadata={"sql": "id,key", "table": "t"})


def main() -> None:
    configure_logging(level="DEBUG")
    db = open_sqlite()
    dbu = DBU(db, debug=True)

    try:
        # 1) Create the table from field metadata.
        item = MappedObject(Item(name="abc", kind=23))
        dbu.write(item.sql_create())

        # 2) Insert; the identity is written back.
        dbu.add(item)
        print("Inserted:", item.obj)

        # 3) Reload by key.
        loaded = Item(id=item.obj.id)
        dbu.load_self(MappedObject(loaded))
        print("Loaded:", loaded)

        # 4) Update and list.
        item.obj.kind = 99
        print("Updated row count:", dbu.update(item))
        rows = MappedList(Item)
        dbu.list(rows)
        print("All items:", rows)

        # 5) Delete; reloading now fails.
        dbu.delete(item)
        try:
            dbu.load_self(MappedObject(Item(id=item.obj.id)))
        except NoRowsError as exc:
            print("After delete:", exc)
    finally:
        db.close()


if __name__ == "__main__":
    main()
