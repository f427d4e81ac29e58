from pathlib import Path
from typing import Optional
from uuid import uuid4

from smartmerge.core.config import get_settings
from smartmerge.utils.file_utils import safe_filename


class LocalStorage:
    """تخزين محلي للملفات الناتجة القابلة للتنزيل."""

    def __init__(self, download_root: Optional[Path] = None) -> None:
        settings = get_settings()
        self.download_root = Path(download_root or settings.public_dir / "downloads")
        self.download_root.mkdir(parents=True, exist_ok=True)

    def publish(self, data: bytes, filename: str, *, fallback: str = "merged.pdf") -> Path:
        """حفظ الملف الناتج باسم آمن في مجلد التنزيلات وإرجاع مساره."""
        name = safe_filename(filename, fallback)
        target = self.download_root / name
        if target.exists():
            target = self.download_root / f"{target.stem}-{uuid4().hex[:6]}{target.suffix}"
        target.write_bytes(data)
        return target

    def release(self, path: Optional[Path]) -> None:
        if path and path.exists():
            path.unlink(missing_ok=True)
