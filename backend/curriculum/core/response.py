import uuid
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", str(uuid.uuid4()))


def ok(request: Request, data):
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "data": jsonable_encoder(data),
            "request_id": _request_id(request),
        },
    )


def created(request: Request, data):
    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "data": jsonable_encoder(data),
            "request_id": _request_id(request),
        },
    )


def paginated(request: Request, rows: list, total: int, page: int, page_size: int):
    return ok(request, {"data": rows, "total": total, "page": page, "pageSize": page_size})


def err(request: Request, code: str, message: str, status_code: int = 400, details=None):
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message, "details": jsonable_encoder(details or {})},
            "request_id": _request_id(request),
        },
    )
