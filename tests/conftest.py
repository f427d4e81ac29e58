import os
import tempfile
from io import BytesIO
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

# تُضبط المسارات قبل استيراد الحزمة حتى لا تُكتب ملفات الاختبار داخل المستودع
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="smartmerge-tests-"))
os.environ["PUBLIC_DIR"] = str(_TEST_ROOT / "public")
os.environ.pop("MISTRAL_API_KEY", None)

from pypdf import PdfReader, PdfWriter  # noqa: E402
from reportlab.lib.pagesizes import letter  # noqa: E402
from reportlab.pdfgen import canvas  # noqa: E402

from smartmerge.services.naming_service import FilenameSuggester  # noqa: E402
from smartmerge.services.pdf_service import PDFService  # noqa: E402
from smartmerge.services.session import MergeSession  # noqa: E402
from smartmerge.storage.local import LocalStorage  # noqa: E402


def make_pdf(label: str, pages: int, **metadata: str) -> bytes:
    """ملف PDF بعدد صفحات محدد، كل صفحة تحمل نصًا مثل A-page-1."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    if "title" in metadata:
        c.setTitle(metadata["title"])
    if "author" in metadata:
        c.setAuthor(metadata["author"])
    if "subject" in metadata:
        c.setSubject(metadata["subject"])
    for number in range(1, pages + 1):
        c.drawString(72, 720, f"{label}-page-{number}")
        c.showPage()
    c.save()
    return buffer.getvalue()


def page_labels(data: bytes) -> list[str]:
    reader = PdfReader(BytesIO(data))
    return [page.extract_text().strip() for page in reader.pages]


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def pdf_a() -> bytes:
    return make_pdf("A", 2, title="Quarterly Report", author="Finance Team", subject="Q3 results")


@pytest.fixture
def pdf_b() -> bytes:
    return make_pdf("B", 3)


@pytest.fixture
def bare_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def encrypted_pdf(pdf_b) -> bytes:
    writer = PdfWriter()
    for page in PdfReader(BytesIO(pdf_b)).pages:
        writer.add_page(page)
    writer.encrypt(user_password="secret", algorithm="RC4-128")
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(download_root=tmp_path / "downloads")


@pytest.fixture
def mistral_client() -> Mock:
    client = Mock()
    client.chat.complete.return_value = chat_response(" `Quarterly-Report-Q3.pdf` \n")
    return client


@pytest.fixture
def offline_suggester() -> FilenameSuggester:
    return FilenameSuggester(api_key=None)


@pytest.fixture
def session(storage, offline_suggester) -> MergeSession:
    return MergeSession(pdf_service=PDFService(), suggester=offline_suggester, storage=storage)
