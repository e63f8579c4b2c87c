"""initial schema: users, profiles, documents, comments

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "profiles",
        sa.Column(
            "uuid", sa.Uuid(),
            sa.ForeignKey("users.uuid", ondelete="CASCADE"),
            primary_key=True
        ),
        sa.Column("display_name", sa.String(100), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "documents",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("storage_key", sa.String(512), nullable=False, unique=True),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.uuid"), nullable=False),
        sa.Column("share_token", sa.String(64), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_documents_owner_id", "documents", ["owner_id"])

    op.create_table(
        "comments",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column(
            "document_id", sa.Uuid(),
            sa.ForeignKey("documents.uuid", ondelete="CASCADE"),
            nullable=False
        ),
        sa.Column("author_id", sa.Uuid(), sa.ForeignKey("users.uuid"), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_comments_document_id", "comments", ["document_id"])


def downgrade():
    op.drop_index("ix_comments_document_id", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_documents_owner_id", table_name="documents")
    op.drop_table("documents")
    op.drop_table("profiles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
