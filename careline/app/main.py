import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from careline.app.api.v1.router import router as v1_router
from careline.app.core.config import LOG_LEVEL
from careline.services.errors import ConflictError, ErrorKind, OrderingError

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.validation: 400,
    ErrorKind.not_found: 404,
    ErrorKind.permission: 403,
    ErrorKind.conflict: 409,
    ErrorKind.internal: 500,
}

app = FastAPI(title="Careline Orders", version="0.1.0")
app.include_router(v1_router, prefix="/v1")


@app.exception_handler(OrderingError)
async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    status_code = STATUS_BY_KIND[exc.kind]

    if exc.kind == ErrorKind.internal:
        # la cause est déjà loggée par l'unité de travail, jamais renvoyée
        return JSONResponse(status_code=status_code, content={"detail": "Internal server error", "kind": exc.kind.value})

    body = {"detail": exc.message, "kind": exc.kind.value, **exc.details}
    if isinstance(exc, ConflictError):
        body["reason"] = exc.reason.value
    logger.info("%s %s -> %s %s", request.method, request.url.path, status_code, exc.message)
    return JSONResponse(status_code=status_code, content=body)
