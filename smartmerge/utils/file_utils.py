import re
from pathlib import PurePath
from typing import Optional

PDF_MEDIA_TYPE = "application/pdf"

# حد أقل من 255 بايت ليتسع للاحقة التمييز عند تكرار الاسم
MAX_NAME_BYTES = 200

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+", re.UNICODE)


def is_pdf_media_type(content_type: Optional[str]) -> bool:
    """التحقق من أن نوع الوسائط المعلن هو PDF (مع تجاهل المعاملات مثل charset)."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type == PDF_MEDIA_TYPE


def safe_filename(name: str, fallback: str, max_bytes: int = MAX_NAME_BYTES) -> str:
    """
    تنظيف اسم الملف قبل حفظه في مجلد التنزيلات.
    يُزال أي مسار ويستبدل كل محرف غير آمن بشرطة سفلية، ثم يُقص الاسم
    إلى max_bytes بترميز UTF-8 مع الإبقاء على الامتداد.
    """
    base = PurePath((name or "").replace("\\", "/")).name.strip()
    base = _UNSAFE_CHARS.sub("_", base).strip("._")
    if not base:
        return fallback
    if len(base.encode("utf-8")) <= max_bytes:
        return base

    suffix = PurePath(base).suffix
    if len(suffix) > 16:
        suffix = ""
    stem = base[: len(base) - len(suffix)] if suffix else base
    budget = max_bytes - len(suffix.encode("utf-8"))
    stem = stem.encode("utf-8")[:budget].decode("utf-8", "ignore").rstrip("._-")
    return f"{stem}{suffix}" if stem else fallback
