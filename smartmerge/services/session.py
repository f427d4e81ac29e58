from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from smartmerge.core.errors import MergeError, SessionStateError, ValidationError
from smartmerge.core.logging import configure_logging
from smartmerge.models import AppState
from smartmerge.services.collection import IncomingFile, OrderedFileCollection, PendingFile
from smartmerge.services.naming_service import (
    DEFAULT_FILENAME,
    FALLBACK_FILENAME,
    FilenameSuggester,
    Suggested,
    build_context,
)
from smartmerge.services.pdf_service import MERGE_FAILED, PDFService
from smartmerge.storage.local import LocalStorage

logger = configure_logging()

MIN_FILES_TO_MERGE = 2
NOT_ENOUGH_FILES = "يرجى اختيار ملفين PDF على الأقل للدمج."

EDITABLE_STATES = (AppState.idle, AppState.selected)


@dataclass
class MergeOutcome:
    content: bytes
    page_count: int
    suggested_name: str = DEFAULT_FILENAME
    suggested: bool = False
    download_path: Optional[Path] = None

    def to_card(self) -> dict:
        card: dict = {
            "filename": self.suggested_name,
            "page_count": self.page_count,
            "size_bytes": len(self.content),
            "suggested": self.suggested,
        }
        if self.download_path is not None:
            card["download_url"] = f"/downloads/{self.download_path.name}"
        return card


class MergeSession:
    """
    حالة جلسة الدمج الوحيدة: قائمة الملفات المختارة، المرحلة الحالية، ونتيجة آخر دمج.

    المراحل: idle -> selected -> merging -> finished، مع failed التي تعود إلى
    selected بعد إقرار المستخدم. لا يُسمح بتعديل القائمة إلا في idle أو selected.
    """

    def __init__(
        self,
        pdf_service: PDFService | None = None,
        suggester: FilenameSuggester | None = None,
        storage: LocalStorage | None = None,
    ) -> None:
        self.pdf_service = pdf_service or PDFService()
        self.suggester = suggester or FilenameSuggester()
        self.storage = storage or LocalStorage()
        self.collection = OrderedFileCollection()
        self.state = AppState.idle
        self.outcome: Optional[MergeOutcome] = None

    # ------------------------------------------------------------------
    # تعديل القائمة
    # ------------------------------------------------------------------
    def add_files(self, files: Iterable[IncomingFile]) -> List[PendingFile]:
        self._require(EDITABLE_STATES, "إضافة ملفات")
        added = self.collection.add(files)
        self.state = AppState.selected
        logger.info("تمت إضافة %s ملف إلى قائمة الدمج.", len(added))
        return added

    def remove_file(self, file_id: str) -> bool:
        self._require(EDITABLE_STATES, "حذف ملف")
        removed = self.collection.remove(file_id)
        if not len(self.collection):
            self.state = AppState.idle
        return removed

    def move_file(self, index: int, direction: str) -> bool:
        self._require((AppState.selected,), "إعادة الترتيب")
        return self.collection.move_adjacent(index, direction)

    @property
    def can_merge(self) -> bool:
        return self.state == AppState.selected and len(self.collection) >= MIN_FILES_TO_MERGE

    # ------------------------------------------------------------------
    # الدمج
    # ------------------------------------------------------------------
    def merge(self, output_filename: Optional[str] = None) -> MergeOutcome:
        if len(self.collection) < MIN_FILES_TO_MERGE:
            raise ValidationError(NOT_ENOUGH_FILES)
        self._require((AppState.selected,), "الدمج")

        self.state = AppState.merging
        self._release_outcome()
        logger.info("بدء دمج %s ملفات.", len(self.collection))

        try:
            content = self.pdf_service.merge(self.collection.contents())
            outcome = MergeOutcome(content=content, page_count=self.pdf_service.page_count(content))
        except MergeError as exc:
            self.state = AppState.failed
            logger.warning("فشل الدمج (الملف رقم %s).", (exc.source_index or 0) + 1)
            raise
        except Exception as exc:
            self.state = AppState.failed
            logger.exception("خطأ غير متوقع أثناء الدمج")
            raise MergeError(MERGE_FAILED) from exc

        if output_filename and output_filename.strip():
            outcome.suggested_name = output_filename.strip()
        else:
            outcome.suggested_name, outcome.suggested = self._suggest_name()

        try:
            outcome.download_path = self._publish(outcome)
        except OSError as exc:
            self.state = AppState.failed
            logger.exception("تعذر حفظ الملف المدمج للتنزيل")
            raise MergeError(MERGE_FAILED) from exc

        # الاسم المعروض هو الاسم الفعلي للملف بعد التنظيف
        outcome.suggested_name = outcome.download_path.name
        self.outcome = outcome
        self.state = AppState.finished
        logger.info("تم دمج الملفات في ملف واحد: %s (%s صفحة)", outcome.suggested_name, outcome.page_count)
        return outcome

    def acknowledge(self) -> None:
        self._require((AppState.failed,), "إقرار الخطأ")
        self.state = AppState.selected

    def reset(self) -> None:
        if self.state == AppState.merging:
            raise SessionStateError("لا يمكن إعادة البدء أثناء الدمج.")
        self.collection.clear()
        self._release_outcome()
        self.state = AppState.idle

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "files": [entry.to_card() for entry in self.collection],
            "can_merge": self.can_merge,
            "result": self.outcome.to_card() if self.outcome else None,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _suggest_name(self) -> tuple[str, bool]:
        first = self.collection.first()
        if first is None:
            return FALLBACK_FILENAME, False
        context = build_context(first, self.pdf_service)
        result = self.suggester.suggest(context)
        if isinstance(result, Suggested):
            return result.name, True
        return FALLBACK_FILENAME, False

    def _publish(self, outcome: MergeOutcome) -> Path:
        try:
            return self.storage.publish(outcome.content, outcome.suggested_name, fallback=FALLBACK_FILENAME)
        except OSError as exc:
            if outcome.suggested_name == FALLBACK_FILENAME:
                raise
            logger.warning("تعذر الحفظ باسم %r، سيُستخدم الاسم الافتراضي: %s", outcome.suggested_name, exc)
        outcome.suggested_name = FALLBACK_FILENAME
        outcome.suggested = False
        return self.storage.publish(outcome.content, FALLBACK_FILENAME, fallback=FALLBACK_FILENAME)

    def _release_outcome(self) -> None:
        if self.outcome is not None:
            self.storage.release(self.outcome.download_path)
            self.outcome = None

    def _require(self, allowed: tuple, action: str) -> None:
        if self.state not in allowed:
            raise SessionStateError(f"لا يمكن تنفيذ {action} في المرحلة الحالية ({self.state.value}).")
