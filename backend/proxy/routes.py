from fastapi import APIRouter, Depends, Request, Response

from backend.errors import ValidationError

from .controller import ImageProxyController

router = APIRouter()


def get_controller(request: Request) -> ImageProxyController:
    return request.app.state.proxy_controller


@router.get("/proxy-image")
async def proxy_image(url: str | None = None, controller: ImageProxyController = Depends(get_controller)):
    if not url:
        raise ValidationError("Missing image url parameter")
    content, content_type = await controller.fetch(url)
    return Response(content=content, media_type=content_type)
