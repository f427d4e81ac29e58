from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """إعدادات التطبيق العامة مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Smart PDF Merge"
    app_version: str = "0.1.0"

    base_dir: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    public_dir: Optional[Path] = None

    mistral_api_key: Optional[str] = None
    mistral_model: str = "mistral-small-latest"

    # الحد الأقصى لحجم الملف الواحد المرفوع (50 ميغابايت)
    max_upload_bytes: int = 50 * 1024 * 1024

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    def configure_paths(self) -> None:
        """تهيئة المسارات الافتراضية وإنشاء المجلدات في حال غيابها."""
        self.public_dir = (self.public_dir or (self.base_dir / "public")).resolve()

        (self.public_dir / "downloads").mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
