from __future__ import annotations

from typing import List, Optional

import structlog

from .errors import NotFoundError, PersistenceError, ValidationError
from .models import ActivityEntity
from .repositories import ActivityStore
from .schemas import DEFAULT_USER_ID, ActivityCreate, ActivityUpdate
from .utils import new_activity_id, utc_timestamp

logger = structlog.get_logger(__name__)


def _find_index(activities: List[ActivityEntity], activity_id: str, user_id: Optional[str]) -> int:
    for i, activity in enumerate(activities):
        if "userId" in activity and activity.get("id") == activity_id and activity["userId"] == user_id:
            return i
    return -1


# PUBLIC_INTERFACE
class ActivityService:
    """
    List/create/update/delete semantics over an ActivityStore.

    Every operation re-reads the collection; mutations rewrite it in full
    inside the store's lock.
    """

    def __init__(self, store: ActivityStore) -> None:
        self._store = store

    def list_activities(self, user_id: Optional[str] = None) -> List[ActivityEntity]:
        """Return the activities owned by user_id ('default' when empty), in insertion order."""
        owner = user_id or DEFAULT_USER_ID
        return [a for a in self._store.load() if a.get("userId") == owner]

    def create_activity(self, data: ActivityCreate) -> ActivityEntity:
        entity: ActivityEntity = {
            "id": new_activity_id(),
            "title": data.title,
            "start": data.start,
            "end": data.end or data.start,
            "userId": data.user_id,
            "description": data.description,
            "type": data.type,
            "created": utc_timestamp(),
        }
        with self._store.locked():
            activities = self._store.load()
            activities.append(entity)
            try:
                self._store.save(activities)
            except PersistenceError as e:
                raise PersistenceError("Failed to save activity") from e

        logger.info("activity_created", activity_id=entity["id"], user_id=entity["userId"])
        return entity

    def update_activity(self, data: ActivityUpdate) -> ActivityEntity:
        """
        Replace title/start/end/description/type of the activity matching (id, userId).

        Raises:
            NotFoundError: no activity matches; nothing is written.
            PersistenceError: the collection could not be saved.
        """
        with self._store.locked():
            activities = self._store.load()
            index = _find_index(activities, data.id, data.user_id)
            if index == -1:
                raise NotFoundError()

            updated: ActivityEntity = {
                **activities[index],
                "title": data.title,
                "start": data.start,
                "end": data.end or data.start,
                "description": data.description,
                "type": data.type,
                "updated": utc_timestamp(),
            }
            activities[index] = updated
            try:
                self._store.save(activities)
            except PersistenceError as e:
                raise PersistenceError("Failed to update activity") from e

        logger.info("activity_updated", activity_id=data.id, user_id=data.user_id)
        return updated

    def delete_activity(self, activity_id: Optional[str], user_id: Optional[str] = None) -> None:
        """
        Remove the activity matching (activity_id, user_id).

        Raises:
            ValidationError: activity_id is missing.
            NotFoundError: no activity matches; nothing is written.
            PersistenceError: the collection could not be saved.
        """
        if not activity_id:
            raise ValidationError("Activity ID is required")
        owner = user_id or DEFAULT_USER_ID

        with self._store.locked():
            activities = self._store.load()
            index = _find_index(activities, activity_id, owner)
            if index == -1:
                raise NotFoundError()

            del activities[index]
            try:
                self._store.save(activities)
            except PersistenceError as e:
                raise PersistenceError("Failed to delete activity") from e

        logger.info("activity_deleted", activity_id=activity_id, user_id=owner)
