from datetime import datetime
from .extensions import db


class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    host_email = db.Column(db.String(255), nullable=False)

    # argon2 hash of the host key handed out once at creation
    host_key_hash = db.Column(db.String(255), nullable=False)
    # Opaque reference to an account in an external auth system, if any.
    owner_id = db.Column(db.String(64), nullable=True)

    registration_open = db.Column(db.Boolean, default=True, nullable=False)
    draw_completed = db.Column(db.Boolean, default=False, nullable=False)

    # Bumped by every committed draw; the draw claims the event by matching it.
    draw_generation = db.Column(db.Integer, default=0, nullable=False)
    drawn_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    participants = db.relationship(
        "Participant",
        back_populates="event",
        order_by="Participant.id",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )


class Participant(db.Model):
    __tablename__ = "participants"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    wishlist_q1 = db.Column(db.Text, nullable=False)
    wishlist_q2 = db.Column(db.Text, nullable=False)

    registered_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    event = db.relationship("Event", back_populates="participants")

    __table_args__ = (
        db.UniqueConstraint("event_id", "email", name="uq_participant_event_email"),
    )


class Match(db.Model):
    """
    One giver -> receiver record. All matches of an event form a single
    fixed-point-free permutation of its roster.
    """
    __tablename__ = "matches"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    giver_id = db.Column(db.Integer, db.ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    receiver_id = db.Column(db.Integer, db.ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)

    giver = db.relationship("Participant", foreign_keys=[giver_id])
    receiver = db.relationship("Participant", foreign_keys=[receiver_id])

    __table_args__ = (
        db.UniqueConstraint("event_id", "giver_id", name="uq_match_event_giver"),
        db.UniqueConstraint("event_id", "receiver_id", name="uq_match_event_receiver"),
        db.CheckConstraint("giver_id <> receiver_id", name="no_self_match"),
    )


class Message(db.Model):
    __tablename__ = "messages"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    match_id = db.Column(db.Integer, db.ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    recipient_id = db.Column(db.Integer, db.ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    match = db.relationship("Match")
    sender = db.relationship("Participant", foreign_keys=[sender_id])
    recipient = db.relationship("Participant", foreign_keys=[recipient_id])
