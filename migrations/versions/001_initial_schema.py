"""Initial schema: directory tables, service requests, appointments, schedule locks.

Revision ID: 001_initial
Revises:
Create Date: 2025-07-14

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("profile", sa.String(), nullable=False, server_default="pleasure_boater"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_profile"), "users", ["profile"], unique=False)

    op.create_table(
        "ports",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ports_name"), "ports", ["name"], unique=False)

    op.create_table(
        "user_ports",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("port_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["port_id"], ["ports.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "port_id"),
    )
    op.create_index(op.f("ix_user_ports_port_id"), "user_ports", ["port_id"], unique=False)

    op.create_table(
        "service_categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "user_service_categories",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("service_category_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["service_category_id"], ["service_categories.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "service_category_id"),
    )
    op.create_index(
        op.f("ix_user_service_categories_service_category_id"),
        "user_service_categories",
        ["service_category_id"],
        unique=False,
    )

    op.create_table(
        "boats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("port_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["port_id"], ["ports.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_boats_owner_id"), "boats", ["owner_id"], unique=False)
    op.create_index(op.f("ix_boats_port_id"), "boats", ["port_id"], unique=False)

    op.create_table(
        "service_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("boat_id", sa.Integer(), nullable=False),
        sa.Column("service_category_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("urgency", sa.String(), nullable=False, server_default="normal"),
        sa.Column("status", sa.String(), nullable=False, server_default="submitted"),
        sa.Column("assigned_provider_id", sa.Integer(), nullable=True),
        sa.Column("forwarded_company_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["boat_id"], ["boats.id"]),
        sa.ForeignKeyConstraint(["service_category_id"], ["service_categories.id"]),
        sa.ForeignKeyConstraint(["assigned_provider_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["forwarded_company_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_service_requests_client_id"), "service_requests", ["client_id"], unique=False)
    op.create_index(op.f("ix_service_requests_boat_id"), "service_requests", ["boat_id"], unique=False)
    op.create_index(
        op.f("ix_service_requests_assigned_provider_id"), "service_requests", ["assigned_provider_id"], unique=False
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("boat_id", sa.Integer(), nullable=False),
        sa.Column("service_category_id", sa.Integer(), nullable=True),
        sa.Column("creator_id", sa.Integer(), nullable=False),
        sa.Column("invitee_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["provider_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["client_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["boat_id"], ["boats.id"]),
        sa.ForeignKeyConstraint(["service_category_id"], ["service_categories.id"]),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["invitee_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("duration_minutes IS NULL OR duration_minutes >= 0", name="ck_appointments_duration"),
    )
    op.create_index(op.f("ix_appointments_provider_id"), "appointments", ["provider_id"], unique=False)
    op.create_index(op.f("ix_appointments_appointment_date"), "appointments", ["appointment_date"], unique=False)
    op.create_index(op.f("ix_appointments_client_id"), "appointments", ["client_id"], unique=False)
    op.create_index(op.f("ix_appointments_creator_id"), "appointments", ["creator_id"], unique=False)
    op.create_index(op.f("ix_appointments_invitee_id"), "appointments", ["invitee_id"], unique=False)

    op.create_table(
        "schedule_locks",
        sa.Column("provider_id", sa.Integer(), nullable=False),
        sa.Column("lock_date", sa.Date(), nullable=False),
        sa.PrimaryKeyConstraint("provider_id", "lock_date"),
    )


def downgrade() -> None:
    op.drop_table("schedule_locks")
    op.drop_index(op.f("ix_appointments_invitee_id"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_creator_id"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_client_id"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_appointment_date"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_provider_id"), table_name="appointments")
    op.drop_table("appointments")
    op.drop_index(op.f("ix_service_requests_assigned_provider_id"), table_name="service_requests")
    op.drop_index(op.f("ix_service_requests_boat_id"), table_name="service_requests")
    op.drop_index(op.f("ix_service_requests_client_id"), table_name="service_requests")
    op.drop_table("service_requests")
    op.drop_index(op.f("ix_boats_port_id"), table_name="boats")
    op.drop_index(op.f("ix_boats_owner_id"), table_name="boats")
    op.drop_table("boats")
    op.drop_index(op.f("ix_user_service_categories_service_category_id"), table_name="user_service_categories")
    op.drop_table("user_service_categories")
    op.drop_table("service_categories")
    op.drop_index(op.f("ix_user_ports_port_id"), table_name="user_ports")
    op.drop_table("user_ports")
    op.drop_index(op.f("ix_ports_name"), table_name="ports")
    op.drop_table("ports")
    op.drop_index(op.f("ix_users_profile"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
