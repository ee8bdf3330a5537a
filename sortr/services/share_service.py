from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, desc
from sortr.errors import Forbidden, NotFound
from sortr.models.box import Box
from sortr.models.item import Item
from sortr.models.location import Location
from sortr.models.notification import Notification, NotificationType
from sortr.models.share import Share, ResourceType
from sortr.schemas.share import ResourceRef, ShareCreate, ShareResponse
from sortr.security import Identity
from sortr.services.user_service import get_user

RESOURCE_MODELS = {
    ResourceType.item: Item,
    ResourceType.box: Box,
    ResourceType.location: Location,
}


def resolve_resource(db: Session, ref: ResourceRef) -> Item | Box | Location:
    resource = db.get(RESOURCE_MODELS[ref.kind], ref.id)
    if not resource:
        raise NotFound(f"{ref.kind.value.capitalize()} {ref.id} not found")
    return resource


def _with_resources(db: Session, shares: list[Share]) -> list[ShareResponse]:
    # one query per resource kind
    wanted: dict[ResourceType, set[int]] = {}
    for share in shares:
        wanted.setdefault(share.resource_type, set()).add(share.resource_id)
    found: dict[tuple[ResourceType, int], dict] = {}
    for kind, ids in wanted.items():
        model = RESOURCE_MODELS[kind]
        for resource in db.scalars(select(model).where(model.id.in_(ids))):
            found[(kind, resource.id)] = {"id": resource.id, "name": resource.name}
    responses = []
    for share in shares:
        response = ShareResponse.model_validate(share)
        response.resource = found.get((share.resource_type, share.resource_id))
        responses.append(response)
    return responses


def get_my_shares(db: Session, user_id: int) -> list[ShareResponse]:
    """Everything shared with ``user_id``, newest first."""
    shares = db.scalars(
        select(Share)
        .options(selectinload(Share.user), selectinload(Share.shared_by))
        .where(Share.user_id == user_id)
        .order_by(desc(Share.created_at), desc(Share.id))
    ).all()
    return _with_resources(db, shares)


def get_resource_shares(db: Session, ref: ResourceRef) -> list[Share]:
    return db.scalars(
        select(Share)
        .options(selectinload(Share.user), selectinload(Share.shared_by))
        .where(Share.resource_type == ref.kind, Share.resource_id == ref.id)
        .order_by(desc(Share.created_at), desc(Share.id))
    ).all()


def create_share(db: Session, data: ShareCreate, identity: Identity) -> Share:
    """Share a resource. Re-sharing the same resource updates the permission only."""
    get_user(db, data.user_id)
    ref = data.resource
    resolve_resource(db, ref)

    share = db.scalar(
        select(Share).where(
            Share.user_id == data.user_id,
            Share.resource_type == ref.kind,
            Share.resource_id == ref.id,
        )
    )
    if share:
        share.permission = data.permission
        share.shared_by_user_id = identity.id
    else:
        share = Share(
            user_id=data.user_id,
            shared_by_user_id=identity.id,
            resource_type=ref.kind,
            resource_id=ref.id,
            permission=data.permission,
        )
        db.add(share)
        db.add(Notification(
            user_id=data.user_id,
            type=NotificationType.share,
            message=f"{identity.username} shared a {ref.kind.value} with you",
            resource_type=ref.kind,
            resource_id=ref.id,
        ))
    db.commit()
    db.refresh(share)
    return share


def delete_share(db: Session, share_id: int, identity: Identity) -> ShareResponse:
    share = db.get(Share, share_id)
    if not share:
        raise NotFound(f"Share {share_id} not found")
    if share.shared_by_user_id != identity.id and not identity.is_admin:
        raise Forbidden("Not authorized to delete this share")
    snapshot = ShareResponse.model_validate(share)
    db.delete(share)
    db.commit()
    return snapshot
