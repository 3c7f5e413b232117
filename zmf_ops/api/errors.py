"""Translation of domain errors into HTTP responses."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..core.observability import get_logger
from ..domain.shared.exceptions import (
    DomainError,
    ErrorType,
    MissingRequirementsError,
)

logger = get_logger(__name__)

_STATUS_BY_TYPE = {
    ErrorType.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorType.BUSINESS_RULE: status.HTTP_409_CONFLICT,
    ErrorType.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.PERSISTENCE: status.HTTP_502_BAD_GATEWAY,
    ErrorType.CONCURRENCY: status.HTTP_409_CONFLICT,
}


def status_for_error(error: DomainError) -> int:
    if isinstance(error, MissingRequirementsError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    return _STATUS_BY_TYPE.get(error.error_type, status.HTTP_400_BAD_REQUEST)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for_error(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Domain error",
        path=request.url.path,
        status_code=status_code,
        error_type=exc.error_type.value,
        error=exc.message,
    )
    return JSONResponse(status_code=status_code, content=exc.to_dict())
