from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from mistralai import Mistral

from smartmerge.core.config import get_settings
from smartmerge.core.errors import SuggestionError
from smartmerge.core.logging import configure_logging
from smartmerge.services.collection import PendingFile
from smartmerge.services.pdf_service import PDFService

logger = configure_logging()

DEFAULT_FILENAME = "merged.pdf"
FALLBACK_FILENAME = "merged-document.pdf"

PROMPT_TEMPLATE = (
    'I am merging PDF files. Based on this metadata from the first file: "{context}", '
    "suggest a short, professional filename ending in .pdf. Do not include spaces, "
    "use hyphens or underscores. Return ONLY the filename."
)


@dataclass(frozen=True)
class Suggested:
    name: str


@dataclass(frozen=True)
class Unavailable:
    reason: str


SuggestionResult = Union[Suggested, Unavailable]


def sanitize_suggestion(text: str) -> str:
    return text.strip().replace("`", "")


def build_context(first_file: PendingFile, pdf_service: PDFService | None = None) -> str:
    """بناء سطر وصفي من البيانات الوصفية للملف الأول، مع الاكتفاء بالاسم عند الفشل."""
    service = pdf_service or PDFService()
    try:
        metadata = service.read_metadata(first_file.content)
    except Exception as exc:
        logger.warning("تعذرت قراءة البيانات الوصفية للملف %s: %s", first_file.filename, exc)
        return f"Filename: {first_file.filename}"

    return (
        f"Title: {metadata.title}, Author: {metadata.author}, "
        f"Subject: {metadata.subject}, Filename: {first_file.filename}"
    )


class FilenameSuggester:
    """اقتراح اسم للملف المدمج عبر نموذج Mistral النصي، دون أن يفشل أبدًا أمام المستخدم."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Any = None,
    ) -> None:
        settings = get_settings()
        self.api_key: Optional[str] = (api_key or settings.mistral_api_key or "").strip() or None
        self.model = model or settings.mistral_model
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self._client is not None or self.api_key)

    def suggest(self, context: str) -> SuggestionResult:
        if not self.configured:
            logger.debug("لا يوجد مفتاح Mistral، سيُستخدم الاسم الافتراضي.")
            return Unavailable("not-configured")

        try:
            name = self._generate(context)
        except Exception as exc:
            logger.warning("فشل اقتراح اسم الملف، سيُستخدم الاسم الافتراضي: %s", exc)
            return Unavailable(str(exc) or exc.__class__.__name__)

        logger.info("تم اقتراح اسم للملف المدمج: %s", name)
        return Suggested(name)

    def suggest_filename(self, context: str) -> str:
        result = self.suggest(context)
        if isinstance(result, Suggested):
            return result.name
        return FALLBACK_FILENAME

    # ------------------------------------------------------------------
    def _get_client(self) -> Any:
        if self._client is None:
            self._client = Mistral(api_key=self.api_key)
            logger.info("تم تهيئة عميل Mistral لاقتراح الأسماء.")
        return self._client

    def _generate(self, context: str) -> str:
        response = self._get_client().chat.complete(
            model=self.model,
            messages=[{"role": "user", "content": PROMPT_TEMPLATE.format(context=context)}],
        )

        choices = getattr(response, "choices", None)
        if not choices:
            raise SuggestionError("empty response")

        content = getattr(choices[0].message, "content", None)
        if not isinstance(content, str):
            raise SuggestionError("malformed response")

        name = sanitize_suggestion(content)
        if not name:
            raise SuggestionError("empty suggestion")
        return name
