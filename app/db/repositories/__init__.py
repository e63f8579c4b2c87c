from app.db.repositories.user_repository import UserRepository
from app.db.repositories.profile_repository import ProfileRepository
from app.db.repositories.document_repository import DocumentRepository
from app.db.repositories.comment_repository import CommentRepository

__all__ = [
    "UserRepository",
    "ProfileRepository",
    "DocumentRepository",
    "CommentRepository"
]
