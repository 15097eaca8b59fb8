"""initial_review_schema

Create `users`, `submissions` and `reviews` tables for the submission review
workflow.

Revision ID: 5b7e2c91d0a4
Revises:
Create Date: 2026-10-19 09:30:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5b7e2c91d0a4"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("email", sa.String(length=200), nullable=False),
            sa.Column("password_hash", sa.String(length=256), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False, comment="contributor | reviewer"),
            sa.Column("phone", sa.String(length=40), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("role IN ('contributor', 'reviewer')", name="ck_users_role"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)

    if "submissions" not in existing_tables:
        op.create_table(
            "submissions",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("title", sa.String(length=255), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("category", sa.String(length=100), nullable=False),
            sa.Column("content_ref", sa.String(length=500), nullable=True),
            sa.Column("contributor_id", sa.Integer(), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("resubmission_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("original_submission_id", sa.String(length=36), nullable=True),
            sa.Column("chain_root_id", sa.String(length=36), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint(
                "status IN ('pending', 'approved', 'rejected')", name="ck_submissions_status"
            ),
            sa.CheckConstraint(
                "resubmission_count >= 0 AND resubmission_count <= 2",
                name="ck_submissions_resubmission_count",
            ),
            sa.ForeignKeyConstraint(["contributor_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(
                ["original_submission_id"], ["submissions.id"], ondelete="SET NULL"
            ),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_submissions_contributor_id", "submissions", ["contributor_id"])
        op.create_index("ix_submissions_chain_root_id", "submissions", ["chain_root_id"])
        op.create_index(
            "ix_submissions_contributor_status", "submissions", ["contributor_id", "status"]
        )
        op.create_index("ix_submissions_status_created", "submissions", ["status", "created_at"])

    if "reviews" not in existing_tables:
        op.create_table(
            "reviews",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("submission_id", sa.String(length=36), nullable=False),
            sa.Column("reviewer_id", sa.Integer(), nullable=False),
            sa.Column("decision", sa.String(length=20), nullable=False, comment="approved | rejected"),
            sa.Column("feedback", sa.Text(), nullable=True),
            sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=False),
            sa.CheckConstraint("decision IN ('approved', 'rejected')", name="ck_reviews_decision"),
            sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["reviewer_id"], ["users.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_reviews_submission_id", "reviews", ["submission_id"])
        op.create_index("ix_reviews_reviewer_id", "reviews", ["reviewer_id"])
        op.create_index("ix_reviews_reviewer_decision", "reviews", ["reviewer_id", "decision"])
        op.create_index(
            "ix_reviews_submission_reviewed", "reviews", ["submission_id", "reviewed_at"]
        )


def downgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing_tables = set(inspector.get_table_names())

    if "reviews" in existing_tables:
        op.drop_index("ix_reviews_submission_reviewed", table_name="reviews")
        op.drop_index("ix_reviews_reviewer_decision", table_name="reviews")
        op.drop_index("ix_reviews_reviewer_id", table_name="reviews")
        op.drop_index("ix_reviews_submission_id", table_name="reviews")
        op.drop_table("reviews")

    if "submissions" in existing_tables:
        op.drop_index("ix_submissions_status_created", table_name="submissions")
        op.drop_index("ix_submissions_contributor_status", table_name="submissions")
        op.drop_index("ix_submissions_chain_root_id", table_name="submissions")
        op.drop_index("ix_submissions_contributor_id", table_name="submissions")
        op.drop_table("submissions")

    if "users" in existing_tables:
        op.drop_index("ix_users_email", table_name="users")
        op.drop_table("users")
