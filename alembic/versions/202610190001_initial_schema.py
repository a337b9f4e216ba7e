"""Initial schema: users, credentials, verification requests

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610190001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum("user", "admin", name="user_role")
user_status_enum = sa.Enum("active", "suspended", name="user_status")
user_plan_enum = sa.Enum("free", "verified_pro", name="user_plan")
credential_status_enum = sa.Enum("pending", "verified", "rejected", name="credential_status")
request_status_enum = sa.Enum(
    "queued", "completed", "rejected", name="verification_request_status"
)

QUEUED_ONLY = sa.text("status = 'queued'")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def _credential_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "status",
            credential_status_enum,
            nullable=False,
            server_default="pending",
        ),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=128), nullable=True),
        sa.Column("role", user_role_enum, nullable=False, server_default="user"),
        sa.Column("status", user_status_enum, nullable=False, server_default="active"),
        sa.Column("plan", user_plan_enum, nullable=False, server_default="free"),
        sa.Column("trust_score", sa.Integer(), nullable=False, server_default="20"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "certifications",
        *_credential_columns(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("issuing_organization", sa.String(length=255), nullable=False),
        sa.Column("credential_number", sa.String(length=128), nullable=True),
        sa.Column("issue_date", sa.Date(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("document_url", sa.String(length=512), nullable=True),
    )
    op.create_table(
        "education",
        *_credential_columns(),
        sa.Column("institution", sa.String(length=255), nullable=False),
        sa.Column("degree", sa.String(length=255), nullable=False),
        sa.Column("field_of_study", sa.String(length=255), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
    )
    op.create_table(
        "work_experiences",
        *_credential_columns(),
        sa.Column("company", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("description", sa.Text(), nullable=True),
    )
    for table in ("certifications", "education", "work_experiences"):
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_status", table, ["status"])

    op.create_table(
        "verification_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "certification_id",
            sa.String(length=36),
            sa.ForeignKey("certifications.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "education_id",
            sa.String(length=36),
            sa.ForeignKey("education.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "work_experience_id",
            sa.String(length=36),
            sa.ForeignKey("work_experiences.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("status", request_status_enum, nullable=False, server_default="queued"),
        sa.Column(
            "assigned_admin_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(CASE WHEN certification_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN education_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN work_experience_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_verification_requests_single_credential",
        ),
    )
    op.create_index("ix_verification_requests_status", "verification_requests", ["status"])
    for column in ("certification_id", "education_id", "work_experience_id"):
        op.create_index(
            f"uq_queued_request_{column.removesuffix('_id')}",
            "verification_requests",
            [column],
            unique=True,
            postgresql_where=QUEUED_ONLY,
        )


def downgrade() -> None:
    for column in ("certification_id", "education_id", "work_experience_id"):
        op.drop_index(f"uq_queued_request_{column.removesuffix('_id')}", "verification_requests")
    op.drop_index("ix_verification_requests_status", "verification_requests")
    op.drop_table("verification_requests")

    for table in ("certifications", "education", "work_experiences"):
        op.drop_index(f"ix_{table}_status", table)
        op.drop_index(f"ix_{table}_user_id", table)
    op.drop_table("work_experiences")
    op.drop_table("education")
    op.drop_table("certifications")

    op.drop_index("ix_users_email", "users")
    op.drop_table("users")

    for enum in (
        request_status_enum,
        credential_status_enum,
        user_plan_enum,
        user_status_enum,
        user_role_enum,
    ):
        enum.drop(op.get_bind(), checkfirst=True)
