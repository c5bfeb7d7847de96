from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from app.core.database import Base


class SearchLog(Base):
    __tablename__ = "search_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    query = Column(String, nullable=False)
    results_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False)
