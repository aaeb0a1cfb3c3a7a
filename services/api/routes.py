from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from core.exceptions import MissingFileError
from core.materials import MaterialStore
from core.materials.gateway import UploadGateway
from services.api.schemas import ErrorMessage, MaterialOut, TopicNotFound, UploadResponse


router = APIRouter()


def get_store(request: Request) -> MaterialStore:
    return request.app.state.store


def get_gateway(request: Request) -> UploadGateway:
    return request.app.state.gateway


@router.get(
    "/material/{topic}",
    response_model=MaterialOut,
    response_model_by_alias=True,
    responses={404: {"model": TopicNotFound}},
    tags=["materials"],
)
async def get_material(
    topic: str,
    store: Annotated[MaterialStore, Depends(get_store)],
) -> MaterialOut:
    record = await run_in_threadpool(store.get, topic)
    return MaterialOut.from_record(record)


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorMessage}, 404: {"model": ErrorMessage}, 500: {"model": ErrorMessage}},
    tags=["materials"],
)
async def upload_material(
    gateway: Annotated[UploadGateway, Depends(get_gateway)],
    topic: Annotated[str | None, Form()] = None,
    file: Annotated[UploadFile | None, File(description="PDF document")] = None,
) -> UploadResponse:
    if file is None:
        raise MissingFileError()
    data = await file.read()
    result = await run_in_threadpool(gateway.upload, topic, file.filename, file.content_type, data)
    return UploadResponse(url=result.url)
