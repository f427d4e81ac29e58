from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Sequence

from pypdf import PdfReader, PdfWriter

from smartmerge.core.errors import MergeError, ValidationError
from smartmerge.core.logging import configure_logging

logger = configure_logging()

MERGE_FAILED = "حدث خطأ أثناء دمج الملفات. يرجى المحاولة مرة أخرى."


@dataclass(frozen=True)
class DocumentMetadata:
    title: str = ""
    author: str = ""
    subject: str = ""


class PDFService:
    """خدمات أساسية للتعامل مع ملفات PDF في الذاكرة (دمج، عدّ الصفحات، قراءة البيانات الوصفية)."""

    # ------------------------------------------------------------------
    # دمج ملفات PDF
    # ------------------------------------------------------------------
    def merge(self, buffers: Sequence[bytes]) -> bytes:
        """
        دمج الملفات بالترتيب المعطى في ملف واحد.

        تُنسخ صفحات كل ملف بترتيبها الأصلي دون إعادة ترميز. أي فشل في قراءة
        أحد المصادر أو في كتابة الناتج يوقف العملية كلها برفع MergeError.
        """
        if len(buffers) < 2:
            raise ValidationError("يجب اختيار ملفين على الأقل لإتمام الدمج.")

        writer = PdfWriter()
        for index, data in enumerate(buffers):
            reader = self._open(data, index)
            try:
                for page in reader.pages:
                    writer.add_page(page)
            except Exception as exc:
                logger.exception("فشل نسخ صفحات الملف رقم %s", index + 1)
                raise MergeError(MERGE_FAILED, source_index=index) from exc

        return self._write_writer(writer)

    # ------------------------------------------------------------------
    # معلومات عن ملف واحد
    # ------------------------------------------------------------------
    def page_count(self, data: bytes) -> int:
        reader = self._open(data)
        try:
            return len(reader.pages)
        except Exception as exc:
            raise MergeError(MERGE_FAILED) from exc

    def read_metadata(self, data: bytes) -> DocumentMetadata:
        reader = PdfReader(BytesIO(data))
        info = reader.metadata
        if info is None:
            return DocumentMetadata()
        return DocumentMetadata(
            title=str(info.title or ""),
            author=str(info.author or ""),
            subject=str(info.subject or ""),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _open(data: bytes, index: int | None = None) -> PdfReader:
        try:
            reader = PdfReader(BytesIO(data))
        except Exception as exc:
            logger.warning("تعذرت قراءة الملف رقم %s: %s", (index or 0) + 1, exc)
            raise MergeError(MERGE_FAILED, source_index=index) from exc

        if reader.is_encrypted:
            logger.warning("الملف رقم %s محمي بكلمة مرور ولا يمكن دمجه.", (index or 0) + 1)
            raise MergeError(MERGE_FAILED, source_index=index)
        return reader

    @staticmethod
    def _write_writer(writer: PdfWriter) -> bytes:
        buffer = BytesIO()
        try:
            writer.write(buffer)
        except Exception as exc:
            logger.exception("فشل إنشاء الملف المدمج")
            raise MergeError(MERGE_FAILED) from exc
        return buffer.getvalue()
