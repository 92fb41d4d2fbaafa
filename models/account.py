from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class Account(BaseModel, Base):
    __tablename__ = "users"

    # Normalized email or phone number; never changes after signup
    identifier = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    sessions = relationship("RefreshSession", back_populates="account", passive_deletes=True)
    files = relationship("FileRecord", back_populates="owner", passive_deletes=True)
