from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..models import ActivityEntity
from ..repositories import ActivityStore, get_store
from ..schemas import ActivityCreate, ActivityOut, ActivityUpdate, ErrorOut, MessageOut
from ..service import ActivityService

router = APIRouter(
    prefix="/api/activities",
    tags=["activities"],
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _get_service(store: ActivityStore = Depends(get_store)) -> ActivityService:
    """
    Dependency building the service around the configured store.
    """
    return ActivityService(store)


def _parse_payload(model: Type[ModelT], payload: Dict[str, Any], message: str) -> ModelT:
    """
    Validate a parsed JSON object against model, turning any failure into a
    ValidationError carrying the operation's static message.
    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(message) from e


def _request_body(model: Type[BaseModel]) -> Dict[str, Any]:
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=None,
    summary="List Activities",
    description="List the activities of one user in insertion order. userId defaults to 'default'.",
    responses={200: {"model": List[ActivityOut], "description": "Activities retrieved"}},
)
def list_activities(
    user_id: Optional[str] = Query(None, alias="userId", description="Owner of the activities"),
    service: ActivityService = Depends(_get_service),
) -> List[ActivityEntity]:
    """
    List activities for a user.
    """
    return service.list_activities(user_id)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=None,
    status_code=status.HTTP_201_CREATED,
    summary="Create Activity",
    description="Create an activity. title and start are required; end defaults to start.",
    responses={
        201: {"model": ActivityOut, "description": "Activity created"},
        400: {"model": ErrorOut, "description": "Missing fields or invalid body"},
        500: {"model": ErrorOut, "description": "Activity could not be saved"},
    },
    openapi_extra=_request_body(ActivityCreate),
)
def create_activity(
    payload: Dict[str, Any] = Body(...),
    service: ActivityService = Depends(_get_service),
) -> ActivityEntity:
    """
    Create a new activity.
    """
    data = _parse_payload(ActivityCreate, payload, "Title and start date are required")
    return service.create_activity(data)


# PUBLIC_INTERFACE
@router.put(
    "",
    response_model=None,
    summary="Replace Activity",
    description=(
        "Replace title, start, end, description and type of the activity matching (id, userId). "
        "Omitted optional fields are reset to their defaults; id, userId and created are kept."
    ),
    responses={
        200: {"model": ActivityOut, "description": "Activity updated"},
        400: {"model": ErrorOut, "description": "Missing fields or invalid body"},
        404: {"model": ErrorOut, "description": "Activity not found"},
        500: {"model": ErrorOut, "description": "Activity could not be saved"},
    },
    openapi_extra=_request_body(ActivityUpdate),
)
def update_activity(
    payload: Dict[str, Any] = Body(...),
    service: ActivityService = Depends(_get_service),
) -> ActivityEntity:
    """
    Full replace of an activity's mutable fields.
    """
    data = _parse_payload(ActivityUpdate, payload, "ID, title and start date are required")
    return service.update_activity(data)


# PUBLIC_INTERFACE
@router.delete(
    "",
    response_model=MessageOut,
    summary="Delete Activity",
    description="Delete the activity matching (id, userId). userId defaults to 'default'.",
    responses={
        200: {"description": "Activity deleted"},
        400: {"model": ErrorOut, "description": "Activity ID is required"},
        404: {"model": ErrorOut, "description": "Activity not found"},
        500: {"model": ErrorOut, "description": "Activity could not be saved"},
    },
)
def delete_activity(
    activity_id: Optional[str] = Query(None, alias="id", description="Identifier of the activity"),
    user_id: Optional[str] = Query(None, alias="userId", description="Owner of the activity"),
    service: ActivityService = Depends(_get_service),
) -> MessageOut:
    """
    Delete an activity. Returns a confirmation message.
    """
    service.delete_activity(activity_id, user_id)
    return MessageOut(message="Activity deleted successfully")
