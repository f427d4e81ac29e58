from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from smartmerge.core.config import get_settings
from smartmerge.core.errors import MergeError, SessionStateError, ValidationError
from smartmerge.core.logging import configure_logging
from smartmerge.models import MergeCommitRequest, MoveRequest
from smartmerge.services.collection import IncomingFile
from smartmerge.services.session import MergeSession
from smartmerge.utils.file_utils import is_pdf_media_type
from smartmerge.utils.pdf_preview import render_page_preview

router = APIRouter(prefix="/pdf/merge", tags=["PDF Merge"])

logger = configure_logging()


def get_session(request: Request) -> MergeSession:
    return request.app.state.session


def _bad_request(exc: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)


def _conflict(exc: SessionStateError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)


@router.get("/state", summary="حالة جلسة الدمج الحالية")
async def get_state(session: MergeSession = Depends(get_session)) -> dict:
    return {"status": "ok", **session.snapshot()}


@router.post("/files", summary="إضافة ملفات PDF إلى نهاية قائمة الدمج")
async def add_files(
    files: List[UploadFile] = File(...),
    session: MergeSession = Depends(get_session),
) -> dict:
    max_bytes = get_settings().max_upload_bytes
    incoming: List[IncomingFile] = []
    for upload in files:
        content = await upload.read()
        if is_pdf_media_type(upload.content_type) and len(content) > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"حجم الملف {upload.filename} يتجاوز الحد المسموح.",
            )
        incoming.append(IncomingFile(upload.filename or "document.pdf", upload.content_type, content))

    try:
        added = session.add_files(incoming)
    except ValidationError as exc:
        raise _bad_request(exc)
    except SessionStateError as exc:
        raise _conflict(exc)

    skipped = len(files) - len(added)
    if skipped:
        logger.info("تم تجاهل %s ملف ليس من نوع PDF.", skipped)

    return {
        "status": "ok",
        "added": [entry.to_card() for entry in added],
        **session.snapshot(),
    }


@router.delete("/files/{file_id}", summary="حذف ملف من قائمة الدمج")
async def remove_file(file_id: str, session: MergeSession = Depends(get_session)) -> dict:
    try:
        removed = session.remove_file(file_id)
    except SessionStateError as exc:
        raise _conflict(exc)
    return {"status": "ok", "removed": removed, **session.snapshot()}


@router.post("/move", summary="نقل ملف خطوة واحدة للأعلى أو للأسفل")
async def move_file(payload: MoveRequest, session: MergeSession = Depends(get_session)) -> dict:
    try:
        moved = session.move_file(payload.index, payload.direction)
    except ValidationError as exc:
        raise _bad_request(exc)
    except SessionStateError as exc:
        raise _conflict(exc)
    return {"status": "ok", "moved": moved, **session.snapshot()}


@router.get("/files/{file_id}/preview", summary="معاينة الصفحة الأولى لملف في القائمة")
async def preview_file(file_id: str, session: MergeSession = Depends(get_session)) -> dict:
    entry = session.collection.get(file_id)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="المعرف المطلوب غير موجود في قائمة الدمج.",
        )
    try:
        preview = render_page_preview(entry.content, page_number=1)
    except Exception:
        logger.warning("تعذرت معاينة الملف %s", entry.filename)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="تعذرت قراءة الملف لعرض المعاينة.",
        )
    return {"status": "ok", "file": entry.to_card(preview=preview)}


@router.post("/commit", summary="دمج الملفات بالترتيب الحالي وإرجاع ملف نهائي")
async def commit_merge(
    payload: MergeCommitRequest | None = None,
    session: MergeSession = Depends(get_session),
) -> dict:
    output_filename = payload.output_filename if payload else None
    try:
        outcome = session.merge(output_filename=output_filename)
    except ValidationError as exc:
        raise _bad_request(exc)
    except SessionStateError as exc:
        raise _conflict(exc)
    except MergeError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message)

    return {
        "status": "ok",
        "message": "تم دمج الملفات بنجاح.",
        "result": outcome.to_card(),
        "state": session.state.value,
    }


@router.post("/acknowledge", summary="العودة إلى قائمة الملفات بعد فشل الدمج")
async def acknowledge_failure(session: MergeSession = Depends(get_session)) -> dict:
    try:
        session.acknowledge()
    except SessionStateError as exc:
        raise _conflict(exc)
    return {"status": "ok", **session.snapshot()}


@router.post("/reset", summary="مسح القائمة والنتيجة والبدء من جديد")
async def reset_session(session: MergeSession = Depends(get_session)) -> dict:
    try:
        session.reset()
    except SessionStateError as exc:
        raise _conflict(exc)
    return {"status": "ok", **session.snapshot()}
