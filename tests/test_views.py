import unittest
from datetime import datetime, timezone
from unittest import mock

import streamlit as st
from streamlit.testing.v1 import AppTest

from models import PartEntry, Record
from parts_editor import PartsEditor
from views import add_record, record_card

VIN = "1HGCM82633A004352"


def _record(updated_at=None):
    return Record(
        id="r1",
        vin_number=VIN,
        client_name="Ion Popescu",
        parts=[PartEntry("Brake Pad", "SN1", 120.5)],
        created_at=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        updated_at=updated_at,
    )


def _add_record_page():
    from views.add_record import render_add_record_view

    render_add_record_view()


def _record_card_page():
    from datetime import datetime, timezone

    from models import PartEntry, Record
    from views.record_card import render_record_card

    record = Record(
        id="r1",
        vin_number="1HGCM82633A004352",
        client_name="Ion Popescu",
        parts=[PartEntry("Brake Pad", "SN1", 120.5)],
        created_at=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
    )
    render_record_card(record, lambda: None)


class TestAddRecordSaving(unittest.TestCase):
    def test_store_call_runs_with_form_disabled(self):
        saving_during_call = []

        def fake_create(vin, client_name, parts, license_plate=None, notes=None):
            saving_during_call.append(st.session_state.get(add_record.SAVING_KEY))
            return Record(id="r1", vin_number=VIN, client_name=client_name, parts=parts)

        editor = PartsEditor()
        editor.update_field(0, 'name', "Filtru")
        editor.update_field(0, 'serial_number', "F-1")
        editor.update_field(0, 'price', "10")

        at = AppTest.from_function(_add_record_page)
        at.session_state[add_record.EDITOR_KEY] = editor
        at.run()
        self.assertFalse(at.button(key="add_record_save").disabled)
        at.text_input(key="add_vin").input(VIN)
        at.text_input(key="add_client").input("Ion Popescu")

        with mock.patch.object(add_record, 'create_record', side_effect=fake_create) as create:
            at.button(key="add_record_save").click().run()

        create.assert_called_once()
        self.assertEqual(saving_during_call, [True])
        self.assertFalse(at.button(key="add_record_save").disabled)
        self.assertEqual(at.session_state["flash"], ('success', "Client adaugat cu succes"))


class TestRecordCardWrites(unittest.TestCase):
    def test_delete_runs_once_with_panel_disabled(self):
        pending_during_call = []

        def fake_delete(record_id):
            pending_during_call.append(record_card.write_pending(record_id, 'delete'))
            return True

        at = AppTest.from_function(_record_card_page)
        at.run()
        at.button(key="delete_r1").click().run()
        self.assertFalse(at.button(key="del_confirm_r1").disabled)

        with mock.patch.object(record_card, 'delete_record', side_effect=fake_delete) as delete:
            at.button(key="del_confirm_r1").click().run()

        delete.assert_called_once_with("r1")
        self.assertEqual(pending_during_call, [True])
        self.assertEqual(at.session_state["flash"], ('success', "Record deleted"))
        self.assertFalse(at.button(key="edit_r1").disabled)


class TestReportCache(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.object(record_card.st, 'session_state', {})
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_changed_record_drops_prepared_report(self):
        first = _record(updated_at=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))
        with mock.patch.object(record_card, 'generate_record_pdf', return_value=b"%PDF-old"):
            record_card.prepare_report(first)
        self.assertEqual(record_card.cached_report(first)[0], b"%PDF-old")

        edited = _record(updated_at=datetime(2024, 3, 1, 9, 5, tzinfo=timezone.utc))
        self.assertIsNone(record_card.cached_report(edited))

    def test_forget_report(self):
        record = _record()
        with mock.patch.object(record_card, 'generate_record_pdf', return_value=b"%PDF-1"):
            data, file_name = record_card.prepare_report(record)
        self.assertEqual(data, b"%PDF-1")
        self.assertTrue(file_name.startswith(f"Focus_Part_{VIN}_"))

        record_card.forget_report(record.id)
        self.assertIsNone(record_card.cached_report(record))


if __name__ == '__main__':
    unittest.main()
