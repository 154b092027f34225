from __future__ import annotations

from datetime import datetime, timezone

from .formatter import format_profile_response
from .models import (
    STATE_COMPLETED,
    STATE_FAILED,
    Artifact,
    DataPart,
    ProfileResponse,
    TaskId,
    TaskResult,
    TaskStatus,
    TextPart,
    make_agent_message,
)

ARTIFACT_NAME = "Customer Profile Data"
MISSING_IDEA_TEXT = "Please provide a business idea to generate customer profiles."


def timestamp() -> str:
    """Current UTC time as RFC 3339 with second precision."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_success(task_id: TaskId, profile_response: ProfileResponse) -> TaskResult:
    text = format_profile_response(profile_response)
    return TaskResult(
        id=task_id,
        status=TaskStatus(
            state=STATE_COMPLETED,
            timestamp=timestamp(),
            message=make_agent_message(text, task_id=str(task_id)),
        ),
        artifacts=[
            Artifact(
                name=ARTIFACT_NAME,
                parts=[
                    TextPart(text=text),
                    DataPart(data=profile_response.model_dump(mode="json")),
                ],
            )
        ],
    )


def build_failure(task_id: TaskId, message: str) -> TaskResult:
    return TaskResult(
        id=task_id,
        status=TaskStatus(
            state=STATE_FAILED,
            timestamp=timestamp(),
            message=make_agent_message(message, task_id=str(task_id)),
        ),
    )
