from sortr.schemas.base import CamelModel


class ExpiryNotice(CamelModel):
    item_id: int
    message: str


class ExpiryCheckResult(CamelModel):
    message: str = "Notification check complete"
    items_checked: int
    notifications_created: int
    notifications: list[ExpiryNotice]
