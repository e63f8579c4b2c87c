from app.domains.comments.entities import Comment
from app.domains.comments.formatting import format_comment_body, plain_text, sanitize_html, render_markup
from app.domains.comments.schemas import CommentCreate, CommentResponse, CommentListResponse
from app.domains.comments.services import CommentService

__all__ = [
    "Comment", "format_comment_body", "plain_text", "sanitize_html", "render_markup",
    "CommentCreate", "CommentResponse", "CommentListResponse", "CommentService"
]
