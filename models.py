# models.py
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class PartEntry:
    name: str
    serial_number: str
    # None only for rows stored before prices were recorded
    price: Optional[float] = 0.0


@dataclass
class Record:
    id: str
    vin_number: str
    client_name: str
    parts: list = field(default_factory=list)
    license_plate: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total_price(self) -> float:
        return sum(part.price or 0.0 for part in self.parts)


def parts_to_columns(parts):
    """Split parts into the three parallel lists stored by the database."""
    names = [p.name for p in parts]
    serials = [p.serial_number for p in parts]
    prices = [None if p.price is None else float(p.price) for p in parts]
    return names, serials, prices


def _load_list(value):
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    try:
        loaded = json.loads(value)
    except (TypeError, ValueError):
        return []
    return loaded if isinstance(loaded, list) else []


def _to_price(value):
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parts_from_columns(names, serials, prices):
    """Zip the stored parallel lists back into PartEntry objects.

    Lists of unequal length are truncated to the shortest one. A missing
    price column means no prices were recorded for any part.
    """
    names = _load_list(names)
    serials = _load_list(serials)
    prices = [None] * len(names) if prices is None else _load_list(prices)
    return [
        PartEntry(str(name), str(serial), _to_price(price))
        for name, serial, price in zip(names, serials, prices)
    ]


def parse_timestamp(value):
    """Parse a stored timestamp into local time.

    SQLite's CURRENT_TIMESTAMP is UTC without an offset, so naive values are
    read as UTC.
    """
    if not value:
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone()


def record_from_row(row):
    """Build a Record from a ``sqlite3.Row`` of the records table."""
    keys = row.keys()
    return Record(
        id=row["id"],
        vin_number=row["vin_number"],
        client_name=row["client_name"],
        parts=parts_from_columns(
            row["parts_bought"],
            row["part_serial_numbers"],
            row["part_prices"] if "part_prices" in keys else None,
        ),
        license_plate=row["license_plate"] if "license_plate" in keys else None,
        notes=row["notes"] if "notes" in keys else None,
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]) if "updated_at" in keys else None,
    )
