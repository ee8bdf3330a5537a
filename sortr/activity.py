"""Activity log: mirrors successful mutations into the ``activities`` table.

Routes take an observer from ``log_activity(...)`` and hand it the payload they
are about to return. The record is built right away, while the ORM objects are
still attached to the request session, and written by a background task after
the response has gone out. Failures are logged, never raised.
"""
import logging
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from fastapi import BackgroundTasks, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session, sessionmaker

from sortr.database import get_session_factory
from sortr.models.activity import Activity, ActivityAction, EntityType
from sortr.schemas.activity import ActivityCreate
from sortr.security import Identity, get_optional_identity

logger = logging.getLogger(__name__)

# (request, payload, body) -> value
Extractor = Callable[[Request, dict[str, Any] | None, dict[str, Any] | None], Any]


class ActivitySink(Protocol):
    def write(self, records: list[ActivityCreate]) -> None: ...


class SqlActivitySink:
    """Writes records through a session of its own, never the request's."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def write(self, records: list[ActivityCreate]) -> None:
        if not records:
            return
        with self._session_factory() as db:
            db.add_all([Activity(**record.model_dump()) for record in records])
            db.commit()


def get_activity_sink(session_factory: sessionmaker[Session] = Depends(get_session_factory)) -> ActivitySink:
    return SqlActivitySink(session_factory)


def _snapshot(value: Any) -> dict[str, Any] | None:
    if value is None:
        return None
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return value
    raise TypeError(f"Cannot record {type(value).__name__} in the activity log")


def _touched_fields(body: BaseModel | dict | None) -> dict[str, Any] | None:
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_unset=True)
    return dict(body)


def _path_id(request: Request) -> int | None:
    for value in request.path_params.values():
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None


def request_metadata(request: Request) -> dict[str, Any]:
    return {
        "ip": request.client.host if request.client else None,
        "userAgent": request.headers.get("user-agent"),
    }


class ActivityObserver:
    def __init__(
        self,
        *,
        entity_type: EntityType,
        action: ActivityAction,
        request: Request,
        background_tasks: BackgroundTasks,
        sink: ActivitySink,
        identity: Identity | None,
        entity_id: Extractor | None = None,
        entity_name: Extractor | None = None,
        changes: Extractor | None = None,
    ):
        self.entity_type = entity_type
        self.action = action
        self._request = request
        self._background_tasks = background_tasks
        self._sink = sink
        self._identity = identity
        self._entity_id = entity_id
        self._entity_name = entity_name
        self._changes = changes
        self._observed = False

    def observe(self, payload, body: BaseModel | dict | None = None, changes: dict[str, Any] | None = None):
        """Schedule the activity record for ``payload`` and return it unchanged.

        Only the first call on an observer records anything. ``changes`` overrides
        the route's extractor when the handler knows the diff itself.
        """
        if self._observed:
            return payload
        self._observed = True
        try:
            record = self.build_record(_snapshot(payload), _touched_fields(body), changes)
        except Exception:
            logger.exception("Failed to build %s/%s activity record", self.entity_type.value, self.action.value)
            return payload
        self._background_tasks.add_task(_write, self._sink, [record])
        return payload

    def build_record(
        self,
        payload: dict[str, Any] | None,
        body: dict[str, Any] | None,
        changes: dict[str, Any] | None = None,
    ) -> ActivityCreate:
        request = self._request

        if self._entity_id:
            entity_id = self._entity_id(request, payload, body)
        elif self.action == ActivityAction.create and payload and payload.get("id") is not None:
            entity_id = payload["id"]
        else:
            entity_id = _path_id(request)

        if self._entity_name:
            entity_name = self._entity_name(request, payload, body)
        elif payload and payload.get("name"):
            entity_name = payload["name"]
        elif body and body.get("name"):
            entity_name = body["name"]
        else:
            entity_name = None

        if changes is None:
            if self._changes:
                changes = self._changes(request, payload, body)
            elif self.action == ActivityAction.update and body is not None:
                changes = {"fields": list(body)}
            elif self.action == ActivityAction.delete and payload is not None:
                changes = {"deleted": payload}

        return ActivityCreate(
            user_id=self._identity.id if self._identity else None,
            action=self.action,
            entity_type=self.entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            changes=changes,
            request_meta=request_metadata(request),
        )


def log_activity(
    entity_type: EntityType,
    action: ActivityAction,
    *,
    entity_id: Extractor | None = None,
    entity_name: Extractor | None = None,
    changes: Extractor | None = None,
):
    """Dependency factory for an ``ActivityObserver`` bound to one route."""

    def dependency(
        request: Request,
        background_tasks: BackgroundTasks,
        identity: Identity | None = Depends(get_optional_identity),
        sink: ActivitySink = Depends(get_activity_sink),
    ) -> ActivityObserver:
        return ActivityObserver(
            entity_type=entity_type,
            action=action,
            request=request,
            background_tasks=background_tasks,
            sink=sink,
            identity=identity,
            entity_id=entity_id,
            entity_name=entity_name,
            changes=changes,
        )

    return dependency


def _write(sink: ActivitySink, records: list[ActivityCreate]) -> None:
    try:
        sink.write(records)
    except Exception:
        logger.exception("Failed to write %d activity record(s)", len(records))


def record_bulk(
    sink: ActivitySink,
    user_id: int | None,
    action: ActivityAction,
    entity_type: EntityType,
    entities: Iterable[Any],
) -> None:
    """One row per entity, written in a single batch. Entities need ``id`` and ``name``."""
    try:
        records = [
            ActivityCreate(
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=_attr(entity, "id"),
                entity_name=_attr(entity, "name"),
                request_meta={},
            )
            for entity in entities
        ]
    except Exception:
        logger.exception("Failed to build bulk %s/%s activity records", entity_type.value, action.value)
        return
    _write(sink, records)


def record_custom(sink: ActivitySink, record: ActivityCreate) -> None:
    _write(sink, [record])


def _attr(entity: Any, name: str) -> Any:
    if isinstance(entity, dict):
        return entity.get(name)
    return getattr(entity, name, None)
