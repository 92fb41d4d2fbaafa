from models.base_model import Base
from models.account import Account
from models.refresh_session import RefreshSession
from models.file_record import FileRecord

__all__ = ["Base", "Account", "RefreshSession", "FileRecord"]
