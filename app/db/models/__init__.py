from app.db.models.user import User
from app.db.models.profile import Profile
from app.db.models.document import Document
from app.db.models.comment import Comment

__all__ = [
    "User",
    "Profile",
    "Document",
    "Comment"
]
