from typing import Optional


class SmartMergeError(Exception):
    """الأصل المشترك لأخطاء خدمة الدمج."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SmartMergeError):
    """اختيار غير صالح: لا توجد ملفات PDF أو عدد الملفات أقل من المطلوب."""


class MergeError(SmartMergeError):
    """فشل قراءة أحد الملفات المصدر أو كتابة الملف الناتج."""

    def __init__(self, message: str, source_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.source_index = source_index


class SuggestionError(SmartMergeError):
    """فشل اقتراح اسم الملف. لا يصل إلى المستخدم أبدًا."""


class SessionStateError(SmartMergeError):
    """عملية غير مسموحة في الحالة الحالية للجلسة."""
