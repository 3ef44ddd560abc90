from __future__ import annotations

from fastapi import APIRouter, Depends, File, Request, UploadFile

from backend.errors import ValidationError

from .controller import UploadController

FIELD_NAME = "file"

router = APIRouter()


def get_controller(request: Request) -> UploadController:
    return request.app.state.upload_controller


@router.post("/upload")
async def upload_image(
    file: UploadFile | None = File(None),
    controller: UploadController = Depends(get_controller),
):
    if file is None:
        raise ValidationError("No file uploaded")
    controller.check(file.content_type, file.size or 0)
    # One byte past the limit is enough to tell an oversized upload apart.
    content = await file.read(controller.settings.upload_max_bytes + 1)
    return await controller.upload(FIELD_NAME, file.filename or FIELD_NAME, file.content_type, content)
