"""Entry point for the vault API service."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from vault.config import VAULT_HOST, VAULT_PORT
from vault.exceptions import (
    AdmissionError,
    DecryptionError,
    EncryptionError,
    IntegrityError,
    InvalidAPIKeyError,
    InvalidCredentialsError,
    InvalidRecipientError,
    NotFoundError,
    StorageError,
    UnauthorizedAccessError,
    UserAlreadyExistsError,
    VaultException,
)
from vault.routes.auth_routes import router as auth_router
from vault.routes.file_routes import router as file_router
from vault.routes.share_routes import router as share_router
from vault.schemas.common import ErrorResponse
from vault.service_locator import get_services

logger = setup_logging('vault')

app = FastAPI(
    title="Secure File Vault",
    description="File vault with encrypted uploads, integrity checks and granular sharing",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()
    logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id
    return response


@app.on_event("startup")
async def startup_event():
    """
    Load the persisted collection on application startup.
    """
    logger.info("Vault service starting up...")
    services = get_services()
    logger.info(f"Vault ready with {len(services.collection)} records")


def _error_response(request: Request, exc: Exception, status_code: int, code: str, level: str = "warning"):
    request_id = getattr(request.state, 'request_id', 'unknown')
    getattr(logger, level)(
        f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=level == "error",
    )
    return JSONResponse(status_code=status_code, content=ErrorResponse(detail=str(exc), code=code).model_dump())


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND")


@app.exception_handler(UnauthorizedAccessError)
async def unauthorized_access_handler(request: Request, exc: UnauthorizedAccessError):
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN, "UNAUTHORIZED_ACCESS")


@app.exception_handler(InvalidRecipientError)
async def invalid_recipient_handler(request: Request, exc: InvalidRecipientError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_RECIPIENT")


@app.exception_handler(DecryptionError)
async def decryption_error_handler(request: Request, exc: DecryptionError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "DECRYPTION_FAILED")


@app.exception_handler(EncryptionError)
async def encryption_error_handler(request: Request, exc: EncryptionError):
    return _error_response(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY, "ENCRYPTION_FAILED", "error")


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    return _error_response(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY, "INTEGRITY_CHECK_FAILED", "error")


@app.exception_handler(AdmissionError)
async def admission_error_handler(request: Request, exc: AdmissionError):
    return _error_response(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY, "ADMISSION_FAILED")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return _error_response(request, exc, status.HTTP_503_SERVICE_UNAVAILABLE, "STORAGE_UNAVAILABLE", "error")


@app.exception_handler(UserAlreadyExistsError)
async def user_already_exists_handler(request: Request, exc: UserAlreadyExistsError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "USER_ALREADY_EXISTS")


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS")


@app.exception_handler(InvalidAPIKeyError)
async def invalid_api_key_handler(request: Request, exc: InvalidAPIKeyError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED, "INVALID_API_KEY")


@app.exception_handler(VaultException)
async def vault_exception_handler(request: Request, exc: VaultException):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "VAULT_ERROR", "error")


app.include_router(auth_router)
app.include_router(file_router)
app.include_router(share_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Secure File Vault API", "status": "running"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run("vault.main:app", host=VAULT_HOST, port=VAULT_PORT)


if __name__ == "__main__":
    main()
