# parts_editor.py
"""Working copy of the parts list behind the add, edit and add-part forms.

Rows are kept as one list of drafts, so a row's name, serial number and price
are always added and removed together. The three parallel lists the store
expects are derived from it on demand.
"""
from dataclasses import dataclass

from errors import ValidationFailure
from models import PartEntry
from security import parse_price, sanitize_input

FLOW_CREATE = 'create'
FLOW_EDIT = 'edit'

FIELDS = ('name', 'serial_number', 'price')

_FIELD_LABELS = {
    'name': 'Name',
    'serial_number': 'Serial number',
}


@dataclass
class PartDraft:
    row_id: int
    name: str = ''
    serial_number: str = ''
    price: str = '0'


def _format_price_text(price):
    if price is None:
        return ''
    return f"{price:g}" if float(price).is_integer() else str(price)


class PartsEditor:
    def __init__(self, flow=FLOW_CREATE):
        if flow not in (FLOW_CREATE, FLOW_EDIT):
            raise ValueError(f"Unknown editor flow: {flow}")
        self.flow = flow
        self._rows = []
        self._next_id = 0
        if flow == FLOW_CREATE:
            self.add_row()

    @classmethod
    def from_parts(cls, parts, flow=FLOW_EDIT):
        """Seed an editor with the parts of an existing record."""
        editor = cls(flow)
        editor._rows = []
        for part in parts:
            editor._append(part.name, part.serial_number, _format_price_text(part.price))
        if not editor._rows and flow == FLOW_CREATE:
            editor.add_row()
        return editor

    @property
    def allows_empty(self):
        return self.flow == FLOW_EDIT

    @property
    def rows(self):
        return tuple(self._rows)

    @property
    def names(self):
        return [row.name for row in self._rows]

    @property
    def serial_numbers(self):
        return [row.serial_number for row in self._rows]

    @property
    def prices(self):
        return [row.price for row in self._rows]

    def __len__(self):
        return len(self._rows)

    def _append(self, name, serial_number, price):
        row = PartDraft(self._next_id, name, serial_number, price)
        self._next_id += 1
        self._rows.append(row)
        return row

    def add_row(self):
        return self._append('', '', '0')

    def remove_row(self, index):
        if not 0 <= index < len(self._rows):
            raise IndexError(f"Part row {index} does not exist")
        if len(self._rows) == 1 and not self.allows_empty:
            raise ValidationFailure("At least one part is required")
        del self._rows[index]

    def update_field(self, index, field, value):
        if field not in FIELDS:
            raise KeyError(field)
        if not 0 <= index < len(self._rows):
            raise IndexError(f"Part row {index} does not exist")
        setattr(self._rows[index], field, '' if value is None else str(value))

    def reset(self):
        self._rows = []
        if self.flow == FLOW_CREATE:
            self.add_row()

    def to_part_entries(self):
        """Normalized parts for submission.

        Rows with a blank name or serial number are dropped. A kept row with
        a price that is not a non-negative number raises ValidationFailure.
        """
        entries = []
        for position, row in enumerate(self._rows, start=1):
            name = sanitize_input(row.name)
            serial = sanitize_input(row.serial_number)
            if not name or not serial:
                continue
            price = parse_price(row.price)
            if price is None:
                raise ValidationFailure(
                    f"Part {position}: Price must be a valid non-negative number"
                )
            entries.append(PartEntry(name, serial, price))
        return entries

    def _first_incomplete_row(self):
        for position, row in enumerate(self._rows, start=1):
            name = sanitize_input(row.name)
            serial = sanitize_input(row.serial_number)
            if bool(name) != bool(serial):
                missing = 'serial_number' if name else 'name'
                return position, missing
        return None

    def validate(self):
        """Return the parts to submit or raise the first ValidationFailure."""
        entries = self.to_part_entries()
        if not entries:
            incomplete = self._first_incomplete_row()
            if incomplete:
                position, missing = incomplete
                raise ValidationFailure(f"Part {position}: {_FIELD_LABELS[missing]} is required")
            if not self.allows_empty:
                raise ValidationFailure("At least one part is required")
        return entries
