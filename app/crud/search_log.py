from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.search_log import SearchLog
from app.schemas.activity import SearchLogCreate

class CRUDSearchLog(CRUDBase[SearchLog, SearchLogCreate, SearchLogCreate]):
    def count_by_user(self, db: Session, *, user_id: int) -> int:
        return db.query(func.count(SearchLog.id)).filter(SearchLog.user_id == user_id).scalar() or 0

search_log = CRUDSearchLog(SearchLog)
