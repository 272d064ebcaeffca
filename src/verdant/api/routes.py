"""HTTP functions. Each route runs one unit of work and always answers with
either a success envelope or the error envelope; nothing escapes as a bare
500 from the framework."""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from verdant.api.schemas import (
    ApproveBody,
    CreateContentBody,
    GenerateContentBody,
    OptimizeBody,
    ProgramBody,
    RejectBody,
)
from verdant.content.studio import AudioRequest, ImageRequest, TextRequest
from verdant.errors import InvalidParameter, VerdantError
from verdant.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1")

METHODS = ["GET", "POST"]


def get_services(request: Request) -> Services:
    return request.app.state.services


def error_response(code: str, error: VerdantError) -> JSONResponse:
    return JSONResponse({"error": {"code": code, **error.to_dict()}}, status_code=500)


def run(code: str, call: Callable[[], Any], *, legacy: bool = False) -> JSONResponse:
    """Execute ``call`` and wrap the result; ``legacy`` routes omit ``success``."""
    try:
        data = call()
    except ValidationError as exc:
        error: VerdantError = InvalidParameter(_validation_message(exc))
    except VerdantError as exc:
        error = exc
    except Exception as exc:
        logger.exception("Unhandled error in %s", code)
        error = VerdantError(str(exc) or exc.__class__.__name__)
    else:
        return JSONResponse({"data": data} if legacy else {"success": True, "data": data})

    logger.error("%s: %s", code, error.message)
    return error_response(code, error)


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def _action(request: Request, payload: dict | None, default: str | None) -> str | None:
    return request.query_params.get("action") or (payload or {}).get("action") or default


def _user_id(services: Services, authorization: str | None) -> str | None:
    if not authorization:
        return None
    token = authorization.removeprefix("Bearer ").strip()
    return services.store.resolve_user(token) if token else None


def _invalid_action(action: str | None) -> InvalidParameter:
    return InvalidParameter(f"Invalid action: {action}")


@router.api_route("/agent-task-orchestrator", methods=METHODS)
def agent_task_orchestrator(
    request: Request,
    payload: dict | None = Body(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        action = _action(request, payload, "execute")
        if action == "generate_content":
            body = GenerateContentBody.model_validate(payload or {})
            return services.orchestrator().generate_content(
                body.niche, body.content_type, body.run_seo_optimization
            )
        if action in ("status", "get_agent_status"):
            return services.orchestrator().status()
        if action == "trigger_weekly_content":
            return services.orchestrator().trigger_weekly_content()
        raise _invalid_action(action)

    return run("ORCHESTRATOR_ERROR", call)


@router.api_route("/content-creation-agent", methods=METHODS)
def content_creation_agent(
    request: Request,
    payload: dict | None = Body(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        action = _action(request, payload, "generate")
        if action != "generate":
            raise _invalid_action(action)
        body = CreateContentBody.model_validate(payload or {})
        created = services.content_agent().create_content(
            body.niche, body.content_type, body.approval_required
        )
        return created.to_dict()

    return run("CONTENT_CREATION_FAILED", call)


@router.api_route("/seo-optimization-agent", methods=METHODS)
def seo_optimization_agent(
    request: Request,
    payload: dict | None = Body(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        action = _action(request, payload, "optimize")
        if action != "optimize":
            raise _invalid_action(action)
        body = OptimizeBody.model_validate(payload or {})
        return services.seo_agent().optimize(body.content_id)

    return run("SEO_OPTIMIZATION_FAILED", call)


@router.api_route("/content-approval-system", methods=METHODS)
def content_approval_system(
    request: Request,
    payload: dict | None = Body(default=None),
    authorization: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        action = _action(request, payload, "list")
        approvals = services.approvals()
        if action in ("list", "get_pending_approvals"):
            return approvals.list_pending()
        if action in ("approve", "approve_content"):
            body = ApproveBody.model_validate(payload or {})
            return approvals.approve(
                body.workflow_id, _user_id(services, authorization), body.review_notes
            )
        if action in ("reject", "reject_content"):
            body = RejectBody.model_validate(payload or {})
            return approvals.reject(
                body.workflow_id, _user_id(services, authorization), body.rejection_reason
            )
        raise _invalid_action(action)

    return run("APPROVAL_SYSTEM_ERROR", call)


@router.api_route("/daily-content-generator", methods=METHODS)
def daily_content_generator(services: Services = Depends(get_services)) -> JSONResponse:
    return run(
        "DAILY_CONTENT_GENERATION_FAILED",
        lambda: services.daily_runner().run_daily().to_dict(),
    )


@router.api_route("/enhanced-text-generation", methods=METHODS)
def enhanced_text_generation(
    payload: dict | None = Body(default=None),
    authorization: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        body = TextRequest.model_validate(payload or {})
        return services.studio().generate_text(body, _user_id(services, authorization))

    return run("TEXT_GENERATION_FAILED", call, legacy=True)


@router.api_route("/multimodal-image-generation", methods=METHODS)
def multimodal_image_generation(
    payload: dict | None = Body(default=None),
    authorization: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        body = ImageRequest.model_validate(payload or {})
        return services.studio().generate_image(body, _user_id(services, authorization))

    return run("IMAGE_GENERATION_FAILED", call, legacy=True)


@router.api_route("/multimodal-audio-generation", methods=METHODS)
def multimodal_audio_generation(
    payload: dict | None = Body(default=None),
    authorization: str | None = Header(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        body = AudioRequest.model_validate(payload or {})
        return services.studio().generate_audio(body, _user_id(services, authorization))

    return run("AUDIO_GENERATION_FAILED", call, legacy=True)


@router.api_route("/awin-program-management", methods=METHODS)
def awin_program_management(
    request: Request,
    payload: dict | None = Body(default=None),
    services: Services = Depends(get_services),
) -> JSONResponse:
    def call():
        body = ProgramBody.model_validate(payload or {})
        action = _action(request, payload, "get_programs")
        catalog = services.programs()
        if action == "get_programs":
            return catalog.get_programs()
        if action in ("apply_to_program", "apply_program"):
            return catalog.apply(body.program_id)
        if action == "reject_program":
            return catalog.reject(body.program_id)
        raise _invalid_action(action)

    return run("AWIN_PROGRAM_ERROR", call)
