from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel, utcnow


class FileRecord(BaseModel, Base):
    __tablename__ = "files"

    name = Column(String(255), nullable=False)
    extension = Column(String(32), nullable=False, default="")
    mime_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    # Handle understood by the payload storage, not a public URL
    path = Column(String(512), nullable=False)
    upload_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    owner = relationship("Account", back_populates="files")

    @property
    def download_name(self) -> str:
        return f"{self.name}.{self.extension}" if self.extension else self.name
