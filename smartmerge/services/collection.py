from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Set
from uuid import uuid4

from smartmerge.core.errors import ValidationError
from smartmerge.utils.file_utils import is_pdf_media_type

NO_PDF_SELECTED = "لم يتم اختيار أي ملف PDF صالح."

DIRECTIONS = ("up", "down")


@dataclass(frozen=True)
class IncomingFile:
    """ملف مختار من نافذة الاختيار أو من عملية السحب والإفلات."""

    filename: str
    content_type: Optional[str]
    content: bytes


@dataclass(frozen=True)
class PendingFile:
    file_id: str
    content: bytes
    filename: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    def to_card(self, preview: Optional[str] = None) -> dict:
        card: dict = {
            "file_id": self.file_id,
            "filename": self.filename,
            "size_bytes": self.size_bytes,
        }
        if preview:
            card["preview"] = preview
        return card


class OrderedFileCollection:
    """قائمة مرتبة بالملفات المختارة، ترتيبها هو ترتيب الدمج."""

    def __init__(self) -> None:
        self._files: List[PendingFile] = []
        self._issued_ids: Set[str] = set()

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[PendingFile]:
        return iter(list(self._files))

    @property
    def files(self) -> List[PendingFile]:
        return list(self._files)

    def _new_id(self) -> str:
        file_id = uuid4().hex
        while file_id in self._issued_ids:
            file_id = uuid4().hex
        self._issued_ids.add(file_id)
        return file_id

    def add(self, files: Iterable[IncomingFile]) -> List[PendingFile]:
        accepted = [item for item in files if is_pdf_media_type(item.content_type)]
        if not accepted:
            raise ValidationError(NO_PDF_SELECTED)

        added = [
            PendingFile(file_id=self._new_id(), content=bytes(item.content), filename=item.filename)
            for item in accepted
        ]
        self._files.extend(added)
        return added

    def remove(self, file_id: str) -> bool:
        for position, entry in enumerate(self._files):
            if entry.file_id == file_id:
                del self._files[position]
                return True
        return False

    def move_adjacent(self, index: int, direction: str) -> bool:
        """تبديل العنصر مع جاره. الحركة خارج الحدود لا تفعل شيئًا."""
        if direction not in DIRECTIONS:
            raise ValidationError(f"اتجاه غير معروف: {direction}")

        target = index - 1 if direction == "up" else index + 1
        if index < 0 or index >= len(self._files) or target < 0 or target >= len(self._files):
            return False

        self._files[index], self._files[target] = self._files[target], self._files[index]
        return True

    def get(self, file_id: str) -> Optional[PendingFile]:
        for entry in self._files:
            if entry.file_id == file_id:
                return entry
        return None

    def first(self) -> Optional[PendingFile]:
        return self._files[0] if self._files else None

    def contents(self) -> List[bytes]:
        return [entry.content for entry in self._files]

    def clear(self) -> None:
        self._files.clear()
