from typing import Literal

from pydantic import BaseModel, Field


class MoveRequest(BaseModel):
    index: int = Field(..., description="موضع الملف الحالي في القائمة (يبدأ من 0).")
    direction: Literal["up", "down"] = Field(..., description="اتجاه النقل: up نحو البداية و down نحو النهاية.")


class MergeCommitRequest(BaseModel):
    output_filename: str | None = Field(
        default=None,
        description="اسم الملف الناتج (اختياري). عند غيابه يُقترح اسم تلقائيًا.",
    )
