from app.domains.access.policies import (
    Action, Principal, ANONYMOUS, DocumentPolicy, StoragePolicy, CommentPolicy,
    tokens_match, ensure
)

__all__ = [
    "Action", "Principal", "ANONYMOUS",
    "DocumentPolicy", "StoragePolicy", "CommentPolicy",
    "tokens_match", "ensure"
]
