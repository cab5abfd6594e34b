"""initial schema: accounts, clients, projects, memberships, links, submissions, contacts

Revision ID: 4c1f2a7d9e30
Revises:
Create Date: 2026-10-19 18:40:12.104733

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1f2a7d9e30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


BigId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(length=160), nullable=False),
        sa.Column("handle", sa.String(length=60), nullable=True),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default=sa.text("'staff'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("email", name="uq_accounts_email"),
        sa.UniqueConstraint("handle", name="uq_accounts_handle"),
    )

    op.create_table(
        "clients",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=160), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("company", sa.String(length=160), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_clients"),
    )

    op.create_table(
        "projects",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("client_id", BigId, nullable=False),
        sa.Column("code", sa.String(length=60), nullable=False),
        sa.Column("tracking_id", sa.String(length=80), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=40), nullable=False),
        sa.Column("other_type", sa.String(length=80), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default=sa.text("'new'")),
        sa.Column("updated_by", BigId, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
        sa.ForeignKeyConstraint(
            ["client_id"], ["clients.id"], name="fk_projects_client_id_clients", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["updated_by"], ["accounts.id"], name="fk_projects_updated_by_accounts", ondelete="SET NULL"
        ),
        sa.UniqueConstraint("code", name="uq_projects_code"),
        sa.UniqueConstraint("tracking_id", name="uq_projects_tracking_id"),
    )
    op.create_index("ix_projects_client_id", "projects", ["client_id"])

    op.create_table(
        "project_memberships",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("project_id", BigId, nullable=False),
        sa.Column("account_id", BigId, nullable=False),
        sa.Column("can_edit", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("can_manage_payments", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_project_memberships"),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name="fk_project_memberships_project_id_projects", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["account_id"], ["accounts.id"], name="fk_project_memberships_account_id_accounts", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("project_id", "account_id", name="uq_project_memberships_project_account"),
    )
    op.create_index("ix_project_memberships_account", "project_memberships", ["account_id"])

    op.create_table(
        "candidates",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("position", sa.String(length=100), nullable=True),
        sa.Column("candidate_code", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_candidates"),
        sa.UniqueConstraint("candidate_code", name="uq_candidates_candidate_code"),
    )

    op.create_table(
        "token_links",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("token", sa.String(length=100), nullable=False),
        sa.Column("candidate_id", BigId, nullable=True),
        sa.Column("project_id", BigId, nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", BigId, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("upload_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("payment_kind", sa.String(length=20), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_token_links"),
        sa.ForeignKeyConstraint(
            ["candidate_id"], ["candidates.id"], name="fk_token_links_candidate_id_candidates", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name="fk_token_links_project_id_projects", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["created_by"], ["accounts.id"], name="fk_token_links_created_by_accounts", ondelete="SET NULL"
        ),
        sa.UniqueConstraint("token", name="uq_token_links_token"),
        sa.CheckConstraint(
            "(kind = 'onboarding' AND candidate_id IS NOT NULL AND project_id IS NULL)"
            " OR (kind = 'payment' AND project_id IS NOT NULL AND candidate_id IS NULL)",
            name="ck_token_links_owner_matches_kind",
        ),
    )
    op.create_index(
        "uq_token_links_active_onboarding",
        "token_links",
        ["candidate_id"],
        unique=True,
        postgresql_where=sa.text("kind = 'onboarding' AND active"),
        sqlite_where=sa.text("kind = 'onboarding' AND active"),
    )
    op.create_index("ix_token_links_candidate", "token_links", ["candidate_id"])
    op.create_index("ix_token_links_project", "token_links", ["project_id"])

    op.create_table(
        "submissions",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("link_id", BigId, nullable=True),
        sa.Column("candidate_id", BigId, nullable=True),
        sa.Column("project_id", BigId, nullable=True),
        sa.Column("client_id", BigId, nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("content_type", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("reference_id", sa.String(length=60), nullable=True),
        sa.Column("amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_kind", sa.String(length=20), nullable=True),
        sa.Column("payment_type", sa.String(length=40), nullable=True),
        sa.Column("payment_description", sa.Text(), nullable=True),
        sa.Column("client_name", sa.String(length=120), nullable=True),
        sa.Column("project_name", sa.String(length=200), nullable=True),
        sa.Column("project_code", sa.String(length=60), nullable=True),
        sa.Column("tracking_id", sa.String(length=80), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_submissions"),
        sa.ForeignKeyConstraint(
            ["link_id"], ["token_links.id"], name="fk_submissions_link_id_token_links", ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["candidate_id"], ["candidates.id"], name="fk_submissions_candidate_id_candidates", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name="fk_submissions_project_id_projects", ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["client_id"], ["clients.id"], name="fk_submissions_client_id_clients", ondelete="SET NULL"
        ),
        sa.UniqueConstraint("candidate_id", name="uq_submissions_candidate"),
        sa.UniqueConstraint("reference_id", name="uq_submissions_reference_id"),
    )
    op.create_index("ix_submissions_link", "submissions", ["link_id"])
    op.create_index("ix_submissions_kind_created", "submissions", ["kind", "created_at"])

    op.create_table(
        "contacts",
        sa.Column("id", BigId, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=160), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("subject", sa.String(length=80), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default=sa.text("'new'")),
        sa.Column("admin_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_contacts"),
    )
    op.create_index("ix_contacts_created_at", "contacts", ["created_at"])
    op.create_index("ix_contacts_status", "contacts", ["status"])
    op.create_index("ix_contacts_email", "contacts", ["email"])


def downgrade() -> None:
    op.drop_index("ix_contacts_email", table_name="contacts")
    op.drop_index("ix_contacts_status", table_name="contacts")
    op.drop_index("ix_contacts_created_at", table_name="contacts")
    op.drop_table("contacts")

    op.drop_index("ix_submissions_kind_created", table_name="submissions")
    op.drop_index("ix_submissions_link", table_name="submissions")
    op.drop_table("submissions")

    op.drop_index("ix_token_links_project", table_name="token_links")
    op.drop_index("ix_token_links_candidate", table_name="token_links")
    op.drop_index("uq_token_links_active_onboarding", table_name="token_links")
    op.drop_table("token_links")

    op.drop_table("candidates")

    op.drop_index("ix_project_memberships_account", table_name="project_memberships")
    op.drop_table("project_memberships")

    op.drop_index("ix_projects_client_id", table_name="projects")
    op.drop_table("projects")

    op.drop_table("clients")
    op.drop_table("accounts")
