"""
OpenAI Proxy API

Provides OpenAI-compatible API endpoints backed by the Anthropic upstream.
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from claude2openai.api.deps import ProxyServiceDep, UpstreamApiKey
from claude2openai.common.errors import AppError
from claude2openai.config import get_settings
from claude2openai.services.proxy_service import parse_chat_request

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Proxy - OpenAI"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@router.get("/v1/models")
async def list_models(service: ProxyServiceDep):
    """
    OpenAI Models API (List)

    Returns the allowlisted models.
    """
    return service.list_models().model_dump()


@router.post("/v1/chat/completions")
async def chat_completions(
    request: Request,
    api_key: UpstreamApiKey,
    service: ProxyServiceDep,
):
    """
    OpenAI Chat Completions API Proxy
    """
    try:
        chat_request = parse_chat_request(await request.body())

        if chat_request.stream:
            stream_gen, upstream_response = await service.process_request_stream(
                chat_request,
                api_key,
                is_disconnected=request.is_disconnected,
            )
            # Closes the upstream even when the stream is cancelled before its first read
            return StreamingResponse(
                stream_gen,
                media_type="text/event-stream",
                headers=STREAM_HEADERS,
                background=BackgroundTask(upstream_response.aclose),
            )

        response = await service.process_request(chat_request, api_key)
        return JSONResponse(content=response.model_dump())

    except AppError as e:
        return JSONResponse(
            content=e.to_dict(include_details=get_settings().DEBUG),
            status_code=e.status_code,
        )
    except Exception as e:
        # Unexpected errors return 500
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return JSONResponse(
            content={
                "error": {
                    "message": "Internal server error",
                    "type": "internal_error",
                    "code": "internal_error",
                }
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
