"""Interview API router.

Endpoints:
- POST /turns: Run one interview turn.
- GET /sections: Section list with canonical wording, for form mode.
"""

import structlog
from fastapi import APIRouter, Request

from resume_interview.agents.interviewer_graph import run_interview_turn
from resume_interview.agents.sections import (
    REQUIRED_FIRST_MESSAGES,
    SECTION_FALLBACK_QUESTIONS,
    SECTION_ORDER,
    SECTION_TRANSITION_MESSAGES,
    follow_up_limit,
)
from resume_interview.api.deps import InterviewProvider
from resume_interview.core.config import settings
from resume_interview.core.errors import ValidationError
from resume_interview.core.rate_limiting import limiter
from resume_interview.core.responses import DataResponse
from resume_interview.schemas.interview import SectionInfo, TurnRequest, TurnResponse

logger = structlog.get_logger()

router = APIRouter()


@router.post("/turns")
@limiter.limit(settings.rate_limit_turns)
async def submit_turn(
    request: Request,  # noqa: ARG001
    body: TurnRequest,
    provider: InterviewProvider,
) -> DataResponse[TurnResponse]:
    """Run one conversational turn of the résumé interview.

    Backend failures do not raise: the response carries success=False, a
    rephrase message and an error_code, and the session's error counter.

    Args:
        request: HTTP request (required by rate limiter).
        body: Turn request with history, draft and session.
        provider: Conversational backend (injected).

    Returns:
        DataResponse with the TurnResponse.

    Raises:
        ValidationError: If the echoed session disagrees with current_section.
    """
    if (
        body.session is not None
        and body.current_section is not None
        and "current_section" in body.model_fields_set
        and body.session.current_section != body.current_section
    ):
        logger.warning(
            "interview_session_mismatch",
            session_section=body.session.current_section.value,
            current_section=body.current_section.value,
        )
        raise ValidationError(
            message="current_section does not match the session snapshot.",
            details=[{"field": "current_section", "error": "SESSION_MISMATCH"}],
        )

    result = await run_interview_turn(
        body.to_turn_input(),
        provider=provider,
        threshold=settings.field_confidence_threshold,
        max_consecutive_errors=settings.max_consecutive_errors,
        max_history_messages=settings.max_history_messages,
    )
    return DataResponse(data=TurnResponse.from_result(result))


@router.get("/sections")
async def list_sections() -> DataResponse[list[SectionInfo]]:
    """List the interview sections in order with their canonical wording.

    Returns:
        DataResponse with one SectionInfo per section.
    """
    return DataResponse(
        data=[
            SectionInfo(
                section=section,
                gate_question=REQUIRED_FIRST_MESSAGES.get(section),
                transition_message=SECTION_TRANSITION_MESSAGES.get(section),
                follow_up_limit=follow_up_limit(section),
                fallback_question=SECTION_FALLBACK_QUESTIONS[section],
            )
            for section in SECTION_ORDER
        ]
    )
