"""FastAPI router factory for document resource endpoints."""

# Route annotations are resource models and must be evaluated at runtime.

from bson import ObjectId
from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from app.api.contracts import ApiErrorResponse
from app.api.errors import ApiError, ApiErrorCode, first_error_message
from app.auth.middleware import AuthGuard
from app.documents.models import UploadedFile
from app.documents.service import DocumentService

UPLOAD_FIELD = "file"


def _checked_id(item_id: str) -> str:
    if not ObjectId.is_valid(item_id):
        raise ApiError(
            status_code=400,
            error_code=ApiErrorCode.VALIDATION_ERROR,
            message="Invalid id!",
        )
    return item_id


async def _read_upload(request: Request, fields_model):
    """Parse a multipart request into validated fields and the uploaded file."""
    form = await request.form()
    part = form.get(UPLOAD_FIELD)
    if not isinstance(part, UploadFile):
        raise ApiError(
            status_code=400,
            error_code=ApiErrorCode.VALIDATION_ERROR,
            message="File is required for upload",
        )
    values = {key: value for key, value in form.items() if isinstance(value, str)}
    try:
        fields = fields_model.model_validate(values)
    except ValidationError as exc:
        raise ApiError(
            status_code=400,
            error_code=ApiErrorCode.VALIDATION_ERROR,
            message=first_error_message(exc.errors()),
        ) from exc
    upload = UploadedFile(
        filename=part.filename or "",
        content_type=part.content_type or "",
        content=await part.read(),
    )
    return fields, upload


def create_documents_router(service: DocumentService, guard: AuthGuard) -> APIRouter:
    """Build list/read/create/update/delete routes for one resource."""
    definition = service.definition
    create_model = definition.create_model
    response_model = definition.response_model
    router = APIRouter(prefix=f"/api/{definition.name}", tags=[definition.name])
    admin_only = [Depends(guard.authenticate), Depends(guard.require_admin)]
    admin_errors = {
        400: {"model": ApiErrorResponse},
        401: {"model": ApiErrorResponse},
        403: {"model": ApiErrorResponse},
        404: {"model": ApiErrorResponse},
    }

    @router.get("", response_model=list[response_model])
    async def list_items():
        """List every item; public."""
        return await service.list_all()

    @router.post(
        "",
        status_code=201,
        response_model=response_model,
        dependencies=admin_only,
        responses=admin_errors,
    )
    async def create_item(data: create_model):
        """Create an item from a JSON body carrying ``fileUrl``."""
        return await service.create(data)

    @router.post(
        "/upload",
        status_code=201,
        response_model=response_model,
        dependencies=admin_only,
        responses={**admin_errors, 413: {"model": ApiErrorResponse}},
    )
    async def create_item_with_file(request: Request):
        """Create an item from multipart fields plus a PDF ``file`` part."""
        fields, upload = await _read_upload(request, definition.fields_model)
        return await service.create_with_file(fields, upload)

    @router.get(
        "/{item_id}",
        response_model=response_model,
        dependencies=admin_only,
        responses=admin_errors,
    )
    async def get_item(item_id: str):
        return await service.get_by_id(_checked_id(item_id))

    @router.put(
        "/upload/{item_id}",
        response_model=response_model,
        dependencies=admin_only,
        responses={**admin_errors, 413: {"model": ApiErrorResponse}},
    )
    async def update_item_with_file(item_id: str, request: Request):
        """Replace an item's fields and its stored PDF."""
        checked_id = _checked_id(item_id)
        fields, upload = await _read_upload(request, definition.fields_model)
        return await service.edit_with_file(checked_id, fields, upload)

    @router.put(
        "/{item_id}",
        response_model=response_model,
        dependencies=admin_only,
        responses=admin_errors,
    )
    async def update_item(item_id: str, data: create_model):
        return await service.edit(_checked_id(item_id), data)

    @router.delete(
        "/{item_id}",
        status_code=204,
        response_class=Response,
        dependencies=admin_only,
        responses=admin_errors,
    )
    async def delete_item(item_id: str) -> Response:
        """Delete an item and its stored PDF."""
        await service.remove(_checked_id(item_id))
        return Response(status_code=204)

    return router
