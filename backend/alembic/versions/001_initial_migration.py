"""Initial migration: create tutorial, booking, review tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Tutorial carries the derived rating aggregate (average_rating, total_reviews)
    op.create_table(
        "tutorial",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("tutor_name", sa.String(), nullable=False),
        sa.Column("language", sa.String(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("review", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_rating", sa.Float(), nullable=True),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tutorial_email", "tutorial", ["email"])
    op.create_index("ix_tutorial_language", "tutorial", ["language"])

    op.create_table(
        "booking",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tutorial_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("tutor_email", sa.String(), nullable=True),
        sa.Column("language", sa.String(), nullable=True),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tutorial_id"], ["tutorial.id"]),
    )
    op.create_index("ix_booking_tutorial_id", "booking", ["tutorial_id"])
    op.create_index("ix_booking_email", "booking", ["email"])

    op.create_table(
        "review",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tutor_id", sa.Integer(), nullable=False),
        sa.Column("reviewer_email", sa.String(), nullable=False),
        sa.Column("reviewer_name", sa.String(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("text", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tutor_id"], ["tutorial.id"]),
    )
    op.create_index("ix_review_tutor_id", "review", ["tutor_id"])
    op.create_index("ix_review_reviewer_email", "review", ["reviewer_email"])
    op.create_index("ix_review_created_at", "review", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_review_created_at", table_name="review")
    op.drop_index("ix_review_reviewer_email", table_name="review")
    op.drop_index("ix_review_tutor_id", table_name="review")
    op.drop_table("review")
    op.drop_index("ix_booking_email", table_name="booking")
    op.drop_index("ix_booking_tutorial_id", table_name="booking")
    op.drop_table("booking")
    op.drop_index("ix_tutorial_language", table_name="tutorial")
    op.drop_index("ix_tutorial_email", table_name="tutorial")
    op.drop_table("tutorial")
