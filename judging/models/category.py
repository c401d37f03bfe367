from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
import uuid
from judging.db.base import Base

class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    # Set once every judge has finished; rankings become read-only
    judging_completed_at = Column(DateTime, nullable=True)

    submissions = relationship("Submission", back_populates="category")
