from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sortr.database import get_db
from sortr.schemas.comment import CommentCreate, CommentUpdate, CommentResponse
from sortr.security import Identity, get_current_identity
import sortr.services.comment_service as svc

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("/item/{item_id}", response_model=list[CommentResponse], dependencies=[Depends(get_current_identity)])
def item_comments(item_id: int, db: Session = Depends(get_db)):
    return svc.get_item_comments(db, item_id)


@router.post("", response_model=CommentResponse, status_code=201)
def create_comment(data: CommentCreate, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return svc.create_comment(db, data, identity)


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: int,
    data: CommentUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return svc.update_comment(db, comment_id, data, identity)


@router.delete("/{comment_id}", response_model=CommentResponse)
def delete_comment(comment_id: int, db: Session = Depends(get_db), identity: Identity = Depends(get_current_identity)):
    return svc.delete_comment(db, comment_id, identity)
