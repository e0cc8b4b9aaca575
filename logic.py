# logic.py
"""Record operations against the store.

Every function returns either its result or one of the failures from
``errors`` (DuplicateVin, NotFound, StoreFailure). Field validation happens
before the store is touched and raises ValidationFailure.

append_part and remove_part read the record, change the part lists and write
them back in two statements. Two sessions editing the same record at the same
time can overwrite each other (last write wins).
"""
import json
import logging
import sqlite3

import pandas as pd

from db_utils import get_db_connection_ctx
from errors import DuplicateVin, NotFound, StoreFailure, ValidationFailure
from models import parts_from_columns, parts_to_columns, record_from_row
from security import (
    PLATE_MAX_LENGTH,
    VIN_MAX_LENGTH,
    normalize_plate,
    normalize_vin,
    sanitize_input,
    validate_plate,
    validate_vin,
)

logger = logging.getLogger(__name__)


def _store_failure(action, error):
    logger.error("Database error during %s: %s", action, error)
    return StoreFailure(f"Database error: {error}")


VIN_CONFLICT_MESSAGE = "UNIQUE constraint failed: records.vin_number"


def _is_vin_conflict(error):
    return isinstance(error, sqlite3.IntegrityError) and VIN_CONFLICT_MESSAGE in str(error)


def _encode(values):
    return json.dumps(values, ensure_ascii=False)


def _fetch_record(conn, record_id):
    row = conn.execute("SELECT * FROM records WHERE id = ?", (record_id,)).fetchone()
    return record_from_row(row) if row else None


def validate_record_fields(vin_number, client_name, license_plate=None):
    """Check the non-part fields of a record form, first failure wins."""
    vin = normalize_vin(vin_number)
    if not vin:
        raise ValidationFailure("VIN number is required")
    if not validate_vin(vin):
        raise ValidationFailure(f"VIN number must be at most {VIN_MAX_LENGTH} characters")
    if not sanitize_input(client_name):
        raise ValidationFailure("Client name is required")
    if not validate_plate(license_plate):
        raise ValidationFailure(f"License plate must be at most {PLATE_MAX_LENGTH} characters")


def _normalize_fields(vin_number, client_name, license_plate, notes):
    return (
        normalize_vin(vin_number),
        sanitize_input(client_name),
        normalize_plate(license_plate),
        sanitize_input(notes) or None,
    )


def create_record(vin_number, client_name, parts, license_plate=None, notes=None):
    """Insert a new record and return it with its store-assigned id and created_at."""
    validate_record_fields(vin_number, client_name, license_plate)
    if not parts:
        raise ValidationFailure("At least one part is required")

    vin, name, plate, notes = _normalize_fields(vin_number, client_name, license_plate, notes)
    names, serials, prices = parts_to_columns(parts)

    try:
        with get_db_connection_ctx() as conn:
            cursor = conn.execute(
                "INSERT INTO records (vin_number, license_plate, client_name, notes, parts_bought, part_serial_numbers, part_prices) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (vin, plate, name, notes, _encode(names), _encode(serials), _encode(prices)),
            )
            row = conn.execute("SELECT * FROM records WHERE rowid = ?", (cursor.lastrowid,)).fetchone()
            conn.commit()
    except sqlite3.IntegrityError as e:
        if _is_vin_conflict(e):
            logger.info("Rejected duplicate VIN %s", vin)
            return DuplicateVin(vin)
        return _store_failure("record creation", e)
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("record creation", e)

    record = record_from_row(row)
    logger.info("Created record %s for VIN %s with %d parts", record.id, vin, len(parts))
    return record


def get_record(record_id):
    """Fetch one record by id."""
    try:
        with get_db_connection_ctx() as conn:
            record = _fetch_record(conn, record_id)
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("record lookup", e)
    if record is None:
        return NotFound("Record no longer exists")
    return record


def find_by_vin(vin):
    """Exact, case-insensitive VIN lookup. Returns a Record or NotFound."""
    clean_vin = normalize_vin(vin)
    if not clean_vin:
        return NotFound("No record found for an empty VIN")
    try:
        with get_db_connection_ctx() as conn:
            row = conn.execute("SELECT * FROM records WHERE vin_number = ?", (clean_vin,)).fetchone()
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("VIN search", e)

    if row is None:
        logger.info("No record found for VIN %s", clean_vin)
        return NotFound(f"No record found for VIN {clean_vin}")
    return record_from_row(row)


def find_by_plate(plate):
    """Case-insensitive pattern match on the license plate.

    Returns a non-empty list of Records or NotFound. ``%`` and ``_`` in the
    query act as wildcards.
    """
    clean_plate = normalize_plate(plate)
    if not clean_plate:
        return NotFound("No records found for an empty license plate")
    try:
        with get_db_connection_ctx() as conn:
            rows = conn.execute(
                "SELECT * FROM records WHERE license_plate LIKE ? ORDER BY created_at DESC",
                (clean_plate,),
            ).fetchall()
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("license plate search", e)

    if not rows:
        logger.info("No records found for license plate %s", clean_plate)
        return NotFound(f"No records found for license plate {clean_plate}")
    return [record_from_row(row) for row in rows]


def update_record(record_id, vin_number, client_name, parts, license_plate=None, notes=None):
    """Replace every editable field of a record. Returns the updated Record."""
    validate_record_fields(vin_number, client_name, license_plate)

    vin, name, plate, notes = _normalize_fields(vin_number, client_name, license_plate, notes)
    names, serials, prices = parts_to_columns(parts)

    try:
        with get_db_connection_ctx() as conn:
            cursor = conn.execute(
                "UPDATE records SET vin_number = ?, license_plate = ?, client_name = ?, notes = ?, "
                "parts_bought = ?, part_serial_numbers = ?, part_prices = ?, updated_at = CURRENT_TIMESTAMP "
                "WHERE id = ?",
                (vin, plate, name, notes, _encode(names), _encode(serials), _encode(prices), record_id),
            )
            if cursor.rowcount == 0:
                return NotFound("Record no longer exists")
            record = _fetch_record(conn, record_id)
            conn.commit()
    except sqlite3.IntegrityError as e:
        if _is_vin_conflict(e):
            logger.info("Rejected duplicate VIN %s on update of %s", vin, record_id)
            return DuplicateVin(vin)
        return _store_failure("record update", e)
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("record update", e)

    logger.info("Updated record %s (VIN %s, %d parts)", record_id, vin, len(parts))
    return record


def _rewrite_parts(conn, record_id, parts):
    names, serials, prices = parts_to_columns(parts)
    conn.execute(
        "UPDATE records SET parts_bought = ?, part_serial_numbers = ?, part_prices = ?, "
        "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (_encode(names), _encode(serials), _encode(prices), record_id),
    )


def _read_parts(conn, record_id):
    row = conn.execute(
        "SELECT parts_bought, part_serial_numbers, part_prices FROM records WHERE id = ?",
        (record_id,),
    ).fetchone()
    if row is None:
        return None
    return parts_from_columns(row['parts_bought'], row['part_serial_numbers'], row['part_prices'])


def append_part(record_id, part):
    """Add one part to the end of a record's part lists."""
    try:
        with get_db_connection_ctx() as conn:
            parts = _read_parts(conn, record_id)
            if parts is None:
                return NotFound("Record no longer exists")
            parts.append(part)
            _rewrite_parts(conn, record_id, parts)
            record = _fetch_record(conn, record_id)
            conn.commit()
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("part addition", e)

    logger.info("Added part %s (%s) to record %s", part.name, part.serial_number, record_id)
    return record


def remove_part(record_id, index):
    """Remove the part at ``index`` from all three part lists."""
    try:
        with get_db_connection_ctx() as conn:
            parts = _read_parts(conn, record_id)
            if parts is None:
                return NotFound("Record no longer exists")
            if not 0 <= index < len(parts):
                logger.info("Part index %s out of range for record %s", index, record_id)
                return NotFound(f"Part {index + 1} no longer exists on this record")
            removed = parts.pop(index)
            _rewrite_parts(conn, record_id, parts)
            record = _fetch_record(conn, record_id)
            conn.commit()
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("part removal", e)

    logger.info("Removed part %s (%s) from record %s", removed.name, removed.serial_number, record_id)
    return record


def delete_record(record_id):
    """Hard-delete a record. A missing id yields NotFound."""
    try:
        with get_db_connection_ctx() as conn:
            cursor = conn.execute("DELETE FROM records WHERE id = ?", (record_id,))
            conn.commit()
    except (sqlite3.Error, ConnectionError) as e:
        return _store_failure("record deletion", e)

    if cursor.rowcount == 0:
        logger.info("Delete requested for missing record %s", record_id)
        return NotFound("Record no longer exists")
    logger.info("Deleted record %s", record_id)
    return True


def records_to_frame(records):
    """Summary table of records for display."""
    return pd.DataFrame(
        [
            {
                'VIN': r.vin_number,
                'License plate': r.license_plate or 'N/A',
                'Client': r.client_name,
                'Parts': len(r.parts),
                'Total (RON)': round(r.total_price, 2),
                'Created': r.created_at.strftime('%d.%m.%Y') if r.created_at else '',
            }
            for r in records
        ],
        columns=['VIN', 'License plate', 'Client', 'Parts', 'Total (RON)', 'Created'],
    )
