# core/editor.py
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Iterable, List, Optional

from core.api import CollectionService
from core.errors import ServiceError, error_message
from core.models import SchoolClass, StudentDraft
from core.policy import STUDENTS, Redirect
from core.validation import STUDENT_FIELDS, FormValidator, coerce_phone

log = logging.getLogger(__name__)


class EditMode(str, Enum):
    NEW = "new"
    EDITING = "editing"


class StudentEditController:
    """Create-or-edit form for one student.

    Owns the draft and its error set for as long as the form is mounted. A
    failed load makes the form unusable; a failed submit keeps the draft.
    """

    def __init__(self, service: CollectionService, student_id: Optional[int] = None):
        self.service = service
        self.student_id = student_id
        self.mode = EditMode.EDITING if student_id is not None else EditMode.NEW

        self.draft = StudentDraft()
        self.validator = FormValidator(STUDENT_FIELDS)
        self.classes: List[SchoolClass] = []

        self.loaded = False
        self.loading = False
        self.submitting = False
        self.load_error: Optional[str] = None
        self.classes_error: Optional[str] = None
        self.submit_error: Optional[str] = None
        self.mounted = True

    @property
    def errors(self):
        return self.validator.errors

    @property
    def can_submit(self) -> bool:
        if self.submitting or self.loading:
            return False
        if self.mode == EditMode.EDITING:
            return self.loaded and self.load_error is None
        return True

    def unmount(self) -> None:
        self.mounted = False

    async def load(self) -> None:
        """Fetch the class list, and in edit mode the student, side by side."""
        self.loading = True
        self.load_error = None
        self.classes_error = None
        tasks = [self.service.list_classes()]
        if self.mode == EditMode.EDITING:
            tasks.append(self.service.get_student(self.student_id))
        try:
            results = await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            self.loading = False
        if not self.mounted:
            log.debug("Form for student %s closed before load finished", self.student_id)
            return

        classes = results[0]
        if isinstance(classes, Exception):
            self.classes_error = error_message(classes, "Failed to load classes")
            _log_failure("Loading classes for student form failed", classes)
        elif isinstance(classes, BaseException):
            raise classes
        else:
            self.classes = list(classes)

        if self.mode == EditMode.EDITING:
            record = results[1]
            if not isinstance(record, BaseException):
                try:
                    self.draft = StudentDraft.from_payload(record)
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    record = e
            if isinstance(record, Exception):
                self.load_error = error_message(record, "Failed to load student")
                _log_failure(f"Loading student {self.student_id} failed", record)
                return
            if isinstance(record, BaseException):
                raise record
        self.loaded = True

    def on_change(self, name: str, value: str) -> str:
        """Apply one field edit and re-check just that field. Returns the stored value."""
        if name == "phoneNumber":
            value = coerce_phone(value)
        self.draft.set(name, value)
        self.validator.on_change(name, value)
        return value

    def set_class_ids(self, ids: Iterable[int]) -> None:
        self.draft.class_ids = [int(i) for i in ids]

    def selected_classes(self) -> List[SchoolClass]:
        by_id = {c.id: c for c in self.classes}
        return [by_id[i] for i in self.draft.class_ids if i in by_id]

    async def submit(self) -> Optional[Redirect]:
        """Validate everything, then create or update.

        Returns the redirect to the students table on success, None otherwise.
        """
        self.submit_error = None
        if not self.can_submit:
            return None
        if not self.validator.on_submit(self.draft.text_fields()):
            log.debug("Student form blocked by %d field error(s)", len(self.errors))
            return None

        self.submitting = True
        try:
            if self.mode == EditMode.EDITING:
                await self.service.update_student(self.student_id, self.draft)
            else:
                await self.service.create_student(self.draft)
        except ServiceError as e:
            if self.mounted:
                self.submit_error = error_message(e, "Failed to save student")
            log.warning("Saving student %s failed: %s", self.student_id or "(new)", e)
            return None
        finally:
            self.submitting = False

        log.info("Saved student %s", self.student_id or "(new)")
        return Redirect(STUDENTS, replace=False)


def _log_failure(what: str, exc: BaseException) -> None:
    if isinstance(exc, ServiceError):
        log.warning("%s: %s", what, exc)
    else:
        log.error(what, exc_info=exc)
