"""
Judging error taxonomy.

Services raise subclasses of JudgingError; the handlers registered in
register_error_handlers render every error as

    {"error": "<kind>", "detail": <str | list | null>}

with the HTTP status carried by the error class.
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class JudgingError(Exception):
    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: Optional[Any] = None):
        super().__init__(detail if detail is not None else self.kind)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


# Authentication / authorization

class Unauthenticated(JudgingError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidCredentials(JudgingError):
    kind = "invalid_credentials"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(JudgingError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


# Input validation

class MissingFields(JudgingError):
    kind = "missing_fields"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidPhase(JudgingError):
    kind = "invalid_phase"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidType(JudgingError):
    kind = "invalid_type"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidUrl(JudgingError):
    kind = "invalid_url"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidWindow(JudgingError):
    kind = "invalid_window"
    status_code = status.HTTP_400_BAD_REQUEST


class FileTooLarge(JudgingError):
    kind = "file_too_large"
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class UnsupportedMediaType(JudgingError):
    kind = "unsupported_media_type"
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


# Referential

class JudgeNotFound(JudgingError):
    kind = "judge_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class TeamNotFound(JudgingError):
    kind = "team_not_found"
    status_code = status.HTTP_404_NOT_FOUND


class UserNotFound(JudgingError):
    kind = "user_not_found"
    status_code = status.HTTP_404_NOT_FOUND


# Business rules

class ConflictOfInterest(JudgingError):
    kind = "conflict_of_interest"
    status_code = status.HTTP_403_FORBIDDEN


class OutOfWindow(JudgingError):
    kind = "out_of_window"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, phase: str, detail: Optional[Any] = None):
        super().__init__(detail or f"Submissions for phase '{phase}' are closed")
        self.phase = phase

    def to_dict(self) -> dict:
        return {"error": self.kind, "phase": self.phase, "detail": self.detail}


class WrongTeam(JudgingError):
    kind = "wrong_team"
    status_code = status.HTTP_403_FORBIDDEN


# State conflicts

class Duplicate(JudgingError):
    kind = "duplicate"
    status_code = status.HTTP_409_CONFLICT


class EmailTaken(JudgingError):
    kind = "email_taken"
    status_code = status.HTTP_409_CONFLICT


# Infrastructure

class PersistenceFailure(JudgingError):
    kind = "persistence_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StorageUnavailable(JudgingError):
    kind = "storage_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def judging_error_handler(request: Request, exc: JudgingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.kind, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": MissingFields.kind, "detail": errors},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(JudgingError, judging_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
