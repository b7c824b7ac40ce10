# migrations/versions/20261019_0001_initial.py
# Initial schema for the agency CRM tables
from alembic import op
import sqlalchemy as sa

# Revision identifiers, used by Alembic.
revision = "20261019_0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _id():
    # ids come from the global counter in id_sequence, never from the database
    return sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False)


def upgrade():
    op.create_table(
        "id_sequence",
        sa.Column("name", sa.String(32), primary_key=True),
        sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
    )

    # Users
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255)),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("avatar", sa.String(500)),
        sa.Column("title", sa.String(100)),
        sa.Column("is_verified", sa.Boolean()),
        sa.Column("verification_code", sa.String(16)),
        sa.UniqueConstraint("email", name="ux_users_email"),
    )

    # Agents (id shared with users.id)
    op.create_table(
        "agents",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("leads", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("client_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("conversion_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("commission_rate", sa.Float(), nullable=False, server_default="0.75"),
        sa.Column("location", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("languages", sa.JSON()),
        sa.Column("bio", sa.Text()),
        sa.Column("calendar_link", sa.String(500)),
        sa.Column("avatar", sa.String(500)),
        sa.Column("status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("join_date", sa.Date()),
        sa.Column("socials", sa.JSON()),
        sa.UniqueConstraint("slug", name="ux_agents_slug"),
    )

    # Clients and leads
    op.create_table(
        "clients",
        _id(),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("address", sa.String(500)),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(50)),
        sa.Column("status", sa.String(20), nullable=False, server_default="Lead"),
        sa.Column("join_date", sa.Date()),
        sa.Column("agent_id", sa.Integer()),
        sa.Column("dob", sa.String(20)),
        sa.Column("ssn", sa.String(20)),
        sa.Column("bank_name", sa.String(255)),
        sa.Column("account_number", sa.String(64)),
        sa.Column("routing_number", sa.String(64)),
        sa.Column("account_type", sa.String(20)),
        sa.Column("monthly_premium", sa.Float()),
        sa.Column("annual_premium", sa.Float()),
        sa.Column("height", sa.String(20)),
        sa.Column("weight", sa.Float()),
        sa.Column("birth_state", sa.String(50)),
        sa.Column("medications", sa.Text()),
    )
    op.create_index("ix_clients_agent_id", "clients", ["agent_id"])

    # Policies
    op.create_table(
        "policies",
        _id(),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("policy_number", sa.String(100), nullable=False),
        sa.Column("type", sa.String(100)),
        sa.Column("monthly_premium", sa.Float()),
        sa.Column("annual_premium", sa.Float()),
        sa.Column("start_date", sa.Date()),
        sa.Column("end_date", sa.Date()),
        sa.Column("status", sa.String(20), nullable=False, server_default="Active"),
        sa.Column("carrier", sa.String(255)),
    )
    op.create_index("ix_policies_client_id", "policies", ["client_id"])

    op.create_table(
        "interactions",
        _id(),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(20)),
        sa.Column("date", sa.Date()),
        sa.Column("summary", sa.Text()),
    )
    op.create_index("ix_interactions_client_id", "interactions", ["client_id"])

    op.create_table(
        "tasks",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("due_date", sa.Date()),
        sa.Column("completed", sa.Boolean()),
        sa.Column("client_id", sa.Integer()),
        sa.Column("agent_id", sa.Integer()),
    )

    # Messages
    op.create_table(
        "messages",
        _id(),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("receiver_id", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime()),
        sa.Column("edited", sa.Boolean()),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("source", sa.String(20), nullable=False, server_default="internal"),
        sa.Column("deleted_timestamp", sa.DateTime()),
        sa.Column("deleted_by", sa.Integer()),
        sa.Column("is_read", sa.Boolean()),
    )
    op.create_index("ix_messages_sender_id", "messages", ["sender_id"])
    op.create_index("ix_messages_receiver_id", "messages", ["receiver_id"])

    op.create_table(
        "licenses",
        _id(),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(50)),
        sa.Column("state", sa.String(10)),
        sa.Column("license_number", sa.String(100)),
        sa.Column("expiration_date", sa.Date()),
        sa.Column("file_name", sa.String(255)),
    )
    op.create_index("ix_licenses_agent_id", "licenses", ["agent_id"])

    # Notifications (policy_id is the renewal dedup key)
    op.create_table(
        "notifications",
        _id(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(30), nullable=False, server_default="general"),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("link", sa.String(255)),
        sa.Column("is_read", sa.Boolean()),
        sa.Column("timestamp", sa.DateTime()),
        sa.Column("policy_id", sa.Integer()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "calendar_notes",
        _id(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date()),
        sa.Column("text", sa.Text()),
        sa.Column("color", sa.String(20)),
    )
    op.create_index("ix_calendar_notes_user_id", "calendar_notes", ["user_id"])

    op.create_table(
        "testimonials",
        _id(),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("author", sa.String(255)),
        sa.Column("quote", sa.Text()),
        sa.Column("status", sa.String(20)),
        sa.Column("submission_date", sa.Date()),
    )
    op.create_index("ix_testimonials_agent_id", "testimonials", ["agent_id"])


def downgrade():
    for table in (
        "testimonials", "calendar_notes", "notifications", "licenses", "messages",
        "tasks", "interactions", "policies", "clients", "agents", "users", "id_sequence",
    ):
        op.drop_table(table)
