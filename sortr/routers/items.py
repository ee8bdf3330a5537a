from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, Request, UploadFile
from sqlalchemy.orm import Session
from sortr.activity import ActivityObserver, ActivitySink, get_activity_sink, log_activity, record_custom, request_metadata
from sortr.config import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT, Settings, get_settings
from sortr.database import get_db
from sortr.models.activity import ActivityAction, EntityType
from sortr.schemas.activity import ActivityCreate
from sortr.schemas.item import ItemCreate, ItemUpdate, ItemMoveRequest, ItemResponse, ImagesResponse
from sortr.schemas.pagination import Page
from sortr.security import Identity, get_current_identity
import sortr.services.item_service as svc

router = APIRouter(prefix="/api/items", tags=["items"], dependencies=[Depends(get_current_identity)])


@router.get("", response_model=Page[ItemResponse])
def list_items(
    page: int = Query(1, ge=1),
    size: int = Query(DEFAULT_QUERY_LIMIT, ge=1, le=MAX_QUERY_LIMIT),
    search: str = Query(""),
    category: str = Query(""),
    box_id: int | None = Query(None, alias="boxId", ge=1),
    location_id: int | None = Query(None, alias="locationId", ge=1),
    orphaned: bool | None = Query(None),
    tag: str = Query(""),
    favorite: bool | None = Query(None, alias="isFavorite"),
    db: Session = Depends(get_db),
):
    return svc.get_items(
        db,
        page=page,
        size=size,
        search=search,
        category=category,
        box_id=box_id,
        location_id=location_id,
        orphaned=orphaned,
        tag=tag.strip(),
        favorite=favorite,
    )


@router.post("", response_model=ItemResponse, status_code=201)
def create_item(
    data: ItemCreate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.item, ActivityAction.create)),
):
    item = svc.create_item(db, data)
    return activity.observe(ItemResponse.model_validate(item), body=data)


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return svc.get_item(db, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: int,
    data: ItemUpdate,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.item, ActivityAction.update)),
):
    item = svc.update_item(db, item_id, data)
    return activity.observe(ItemResponse.model_validate(item), body=data)


@router.delete("/{item_id}", response_model=ItemResponse)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    activity: ActivityObserver = Depends(log_activity(EntityType.item, ActivityAction.delete)),
):
    return activity.observe(svc.delete_item(db, item_id, settings.UPLOAD_DIR))


@router.post("/{item_id}/move", response_model=ItemResponse)
def move_item(
    item_id: int,
    data: ItemMoveRequest,
    db: Session = Depends(get_db),
    activity: ActivityObserver = Depends(log_activity(EntityType.item, ActivityAction.move)),
):
    item, changes = svc.move_item(db, item_id, data)
    return activity.observe(ItemResponse.model_validate(item), body=data, changes=changes)


def _image_activity(request: Request, identity: Identity, action: ActivityAction, item, filenames: list[str]) -> ActivityCreate:
    return ActivityCreate(
        user_id=identity.id,
        action=action,
        entity_type=EntityType.item,
        entity_id=item.id,
        entity_name=item.name,
        changes={"images": filenames},
        request_meta=request_metadata(request),
    )


@router.post("/{item_id}/images", response_model=ImagesResponse)
def upload_images(
    item_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    images: list[UploadFile] = File(...),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    identity: Identity = Depends(get_current_identity),
    sink: ActivitySink = Depends(get_activity_sink),
):
    before = set(svc.get_item(db, item_id).images or [])
    item = svc.add_images(db, item_id, images, settings.UPLOAD_DIR)
    added = [f for f in item.images if f not in before]
    record = _image_activity(request, identity, ActivityAction.upload_image, item, added)
    background_tasks.add_task(record_custom, sink, record)
    return ImagesResponse(message="Images uploaded successfully", images=item.images)


@router.delete("/{item_id}/images/{filename}", response_model=ImagesResponse)
def delete_image(
    item_id: int,
    filename: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    identity: Identity = Depends(get_current_identity),
    sink: ActivitySink = Depends(get_activity_sink),
):
    item = svc.remove_image(db, item_id, filename, settings.UPLOAD_DIR)
    record = _image_activity(request, identity, ActivityAction.delete_image, item, [filename])
    background_tasks.add_task(record_custom, sink, record)
    return ImagesResponse(message="Image deleted successfully", images=item.images or [])
