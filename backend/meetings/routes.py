from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from .controller import MeetingsController

router = APIRouter()


def get_controller(request: Request) -> MeetingsController:
    return request.app.state.meetings_controller


def as_fields(payload: Any) -> dict[str, Any]:
    # Anything other than a JSON object carries no fields.
    return payload if isinstance(payload, dict) else {}


@router.get("/meetings")
async def list_meetings(controller: MeetingsController = Depends(get_controller)):
    return await controller.list_meetings()


@router.post("/meetings")
async def create_meeting(
    payload: Any = Body(None),
    controller: MeetingsController = Depends(get_controller),
):
    return await controller.create_meeting(as_fields(payload))


@router.put("/meetings/{record_id}")
async def update_meeting(
    record_id: str,
    payload: Any = Body(None),
    controller: MeetingsController = Depends(get_controller),
):
    return await controller.update_meeting(record_id, as_fields(payload))


@router.delete("/meetings/{record_id}")
async def delete_meeting(record_id: str, controller: MeetingsController = Depends(get_controller)):
    return await controller.delete_meeting(record_id)
