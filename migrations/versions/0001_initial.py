"""events, participants, matches, messages

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("host_email", sa.String(length=255), nullable=False),
        sa.Column("host_key_hash", sa.String(length=255), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=True),
        sa.Column("registration_open", sa.Boolean(), nullable=False),
        sa.Column("draw_completed", sa.Boolean(), nullable=False),
        sa.Column("draw_generation", sa.Integer(), nullable=False),
        sa.Column("drawn_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_events")),
    )

    op.create_table(
        "participants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("wishlist_q1", sa.Text(), nullable=False),
        sa.Column("wishlist_q2", sa.Text(), nullable=False),
        sa.Column("registered_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["event_id"], ["events.id"],
            name=op.f("fk_participants_event_id_events"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_participants")),
        sa.UniqueConstraint("event_id", "email", name="uq_participant_event_email"),
    )
    op.create_index(op.f("ix_participants_event_id"), "participants", ["event_id"])

    op.create_table(
        "matches",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("giver_id", sa.Integer(), nullable=False),
        sa.Column("receiver_id", sa.Integer(), nullable=False),
        sa.CheckConstraint("giver_id <> receiver_id", name=op.f("ck_matches_no_self_match")),
        sa.ForeignKeyConstraint(
            ["event_id"], ["events.id"],
            name=op.f("fk_matches_event_id_events"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["giver_id"], ["participants.id"],
            name=op.f("fk_matches_giver_id_participants"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["receiver_id"], ["participants.id"],
            name=op.f("fk_matches_receiver_id_participants"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_matches")),
        sa.UniqueConstraint("event_id", "giver_id", name="uq_match_event_giver"),
        sa.UniqueConstraint("event_id", "receiver_id", name="uq_match_event_receiver"),
    )
    op.create_index(op.f("ix_matches_event_id"), "matches", ["event_id"])

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["event_id"], ["events.id"],
            name=op.f("fk_messages_event_id_events"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["match_id"], ["matches.id"],
            name=op.f("fk_messages_match_id_matches"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["sender_id"], ["participants.id"],
            name=op.f("fk_messages_sender_id_participants"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["recipient_id"], ["participants.id"],
            name=op.f("fk_messages_recipient_id_participants"), ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_messages")),
    )
    op.create_index(op.f("ix_messages_event_id"), "messages", ["event_id"])
    op.create_index(op.f("ix_messages_match_id"), "messages", ["match_id"])


def downgrade():
    op.drop_index(op.f("ix_messages_match_id"), table_name="messages")
    op.drop_index(op.f("ix_messages_event_id"), table_name="messages")
    op.drop_table("messages")
    op.drop_index(op.f("ix_matches_event_id"), table_name="matches")
    op.drop_table("matches")
    op.drop_index(op.f("ix_participants_event_id"), table_name="participants")
    op.drop_table("participants")
    op.drop_table("events")
