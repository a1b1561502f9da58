# tests/test_editor.py
from __future__ import annotations

import asyncio

from conftest import ART, BIOLOGY, MATH, FakeService
from core.editor import EditMode, StudentEditController
from core.policy import STUDENTS, Redirect

RECORD = {
    "id": 7,
    "firstName": "Grace",
    "lastName": "Hopper",
    "emailId": "grace@navy.mil",
    "phoneNumber": "5551234567",
    "classes": [
        {"id": 1, "name": "Math", "description": "Algebra and geometry"},
        {"id": 3, "name": "biology", "description": "Cells"},
    ],
}


def _service(**records) -> FakeService:
    return FakeService(classes=[MATH, ART, BIOLOGY], records={7: RECORD, **records})


def _fill(ctrl: StudentEditController, **overrides) -> None:
    values = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "emailId": "ada@example.com",
        "phoneNumber": "5550001111",
    }
    values.update(overrides)
    for name, value in values.items():
        ctrl.on_change(name, value)


def test_new_form_loads_classes_only():
    service = _service()
    ctrl = StudentEditController(service)
    assert ctrl.mode == EditMode.NEW
    asyncio.run(ctrl.load())
    assert service.ops() == ["list_classes"]
    assert ctrl.classes == [MATH, ART, BIOLOGY]
    assert ctrl.can_submit


def test_empty_last_name_blocks_submit_without_request():
    service = _service()
    ctrl = StudentEditController(service)
    asyncio.run(ctrl.load())
    _fill(ctrl, lastName="")
    calls_before = list(service.calls)

    assert asyncio.run(ctrl.submit()) is None
    assert ctrl.errors["lastName"] == "Last Name is required"
    assert service.calls == calls_before


def test_edit_form_preselects_embedded_classes():
    service = _service()
    ctrl = StudentEditController(service, student_id=7)
    assert ctrl.mode == EditMode.EDITING
    asyncio.run(ctrl.load())
    assert sorted(service.ops()) == ["get_student", "list_classes"]
    assert ctrl.draft.class_ids == [1, 3]
    assert ctrl.selected_classes() == [MATH, BIOLOGY]
    assert ctrl.draft.first_name == "Grace"
    assert ctrl.can_submit


def test_edit_form_accepts_bare_class_ids():
    record = {k: v for k, v in RECORD.items() if k != "classes"}
    record["classIds"] = [2]
    service = _service()
    service.records[7] = record
    ctrl = StudentEditController(service, student_id=7)
    asyncio.run(ctrl.load())
    assert ctrl.draft.class_ids == [2]


def test_student_and_classes_are_fetched_concurrently():
    started = []
    both_started = asyncio.Event()

    class Slow(FakeService):
        async def list_classes(self):
            started.append("classes")
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            return await super().list_classes()

        async def get_student(self, student_id):
            started.append("student")
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            return await super().get_student(student_id)

    service = Slow(classes=[MATH], records={7: RECORD})
    ctrl = StudentEditController(service, student_id=7)
    asyncio.run(ctrl.load())
    assert ctrl.loaded
    assert sorted(started) == ["classes", "student"]


def test_failed_student_load_disables_submit():
    service = _service()
    service.fail("get_student", "Student not found")
    ctrl = StudentEditController(service, student_id=7)
    asyncio.run(ctrl.load())
    assert ctrl.load_error == "Student not found"
    assert not ctrl.can_submit
    _fill(ctrl)
    assert asyncio.run(ctrl.submit()) is None
    assert "update_student" not in service.ops()


def test_failed_class_load_keeps_form_usable():
    service = _service()
    service.fail("list_classes")
    ctrl = StudentEditController(service)
    asyncio.run(ctrl.load())
    assert ctrl.classes_error == "Failed to load classes"
    assert ctrl.classes == []
    assert ctrl.can_submit


def test_create_submits_draft_and_redirects():
    service = _service()
    ctrl = StudentEditController(service)
    asyncio.run(ctrl.load())
    _fill(ctrl, phoneNumber="555-000-1111")
    ctrl.set_class_ids(["2", 3])
    redirect = asyncio.run(ctrl.submit())
    assert redirect == Redirect(STUDENTS, replace=False)
    op, payload = service.calls[-1]
    assert op == "create_student"
    assert payload == {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "emailId": "ada@example.com",
        "phoneNumber": "5550001111",
        "classIds": [2, 3],
    }


def test_update_uses_student_id():
    service = _service()
    ctrl = StudentEditController(service, student_id=7)
    asyncio.run(ctrl.load())
    ctrl.on_change("firstName", "Amazing Grace")
    assert asyncio.run(ctrl.submit()) is not None
    op, student_id, payload = service.calls[-1]
    assert (op, student_id) == ("update_student", 7)
    assert payload["firstName"] == "Amazing Grace"
    assert payload["classIds"] == [1, 3]


def test_failed_submit_keeps_draft():
    service = _service()
    service.fail("create_student", "Email already registered")
    ctrl = StudentEditController(service)
    asyncio.run(ctrl.load())
    _fill(ctrl)
    assert asyncio.run(ctrl.submit()) is None
    assert ctrl.submit_error == "Email already registered"
    assert ctrl.draft.first_name == "Ada"
    assert ctrl.draft.email_id == "ada@example.com"
    assert not ctrl.submitting


def test_phone_input_is_coerced_on_entry():
    ctrl = StudentEditController(_service())
    assert ctrl.on_change("phoneNumber", "12a3456789") == "123456789"
    assert ctrl.draft.phone_number == "123456789"
    assert ctrl.on_change("phoneNumber", "12345678901") == "1234567890"
    assert "phoneNumber" not in ctrl.errors


def test_field_error_clears_as_soon_as_field_is_fixed():
    ctrl = StudentEditController(_service())
    asyncio.run(ctrl.submit())
    assert "emailId" in ctrl.errors
    ctrl.on_change("emailId", "bob@x")
    assert ctrl.errors["emailId"] == "Enter a valid email address"
    ctrl.on_change("emailId", "bob@x.com")
    assert "emailId" not in ctrl.errors
    assert "firstName" in ctrl.errors


def test_late_load_after_unmount_is_ignored():
    service = _service()
    ctrl = StudentEditController(service, student_id=7)
    ctrl.unmount()
    asyncio.run(ctrl.load())
    assert not ctrl.loaded
    assert ctrl.draft.first_name == ""


def test_embedded_empty_class_list_wins_over_class_ids():
    record = dict(RECORD, classes=[], classIds=[2])
    service = _service()
    service.records[7] = record
    ctrl = StudentEditController(service, student_id=7)
    asyncio.run(ctrl.load())
    assert ctrl.draft.class_ids == []
    assert ctrl.selected_classes() == []


def test_unreadable_student_record_fails_the_load():
    record = dict(RECORD, classes=None, classIds=["two"])
    service = _service()
    service.records[7] = record
    ctrl = StudentEditController(service, student_id=7)
    asyncio.run(ctrl.load())
    assert ctrl.load_error == "Failed to load student"
    assert not ctrl.loaded
    assert not ctrl.can_submit
    assert ctrl.classes == [MATH, ART, BIOLOGY]
