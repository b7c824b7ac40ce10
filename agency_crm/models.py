from datetime import date, datetime
from typing import Any, Dict, Iterable

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

from agency_crm.common.date_rules import utcnow

Base = declarative_base()


class RecordMixin:
    """Column-level dict export shared by every table."""

    def to_dict(self, exclude: Iterable[str] = ()) -> Dict[str, Any]:
        skip = set(exclude)
        out: Dict[str, Any] = {}
        for col in self.__table__.columns:
            if col.name in skip:
                continue
            val = getattr(self, col.name)
            if isinstance(val, (date, datetime)):
                val = val.isoformat()
            out[col.name] = val
        return out


class IdSequence(Base):
    """Single-row table holding the global id counter shared by every entity table."""
    __tablename__ = 'id_sequence'
    name = Column(String(32), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)


class User(RecordMixin, Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255))
    role = Column(String(20), nullable=False, default='Agent')  # Admin, Sub-Admin, Agent
    avatar = Column(String(500), default='')
    title = Column(String(100), default='')
    is_verified = Column(Boolean, default=False)
    verification_code = Column(String(16))

    PRIVATE_FIELDS = ('password_hash', 'verification_code')

    def to_public(self) -> Dict[str, Any]:
        return self.to_dict(exclude=self.PRIVATE_FIELDS)


class Agent(RecordMixin, Base):
    __tablename__ = 'agents'
    id = Column(Integer, primary_key=True, autoincrement=False)  # same id as the paired user
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), nullable=False)
    leads = Column(Integer, nullable=False, default=0)
    client_count = Column(Integer, nullable=False, default=0)
    conversion_rate = Column(Float, nullable=False, default=0.0)
    commission_rate = Column(Float, nullable=False, default=0.75)
    location = Column(String(255), default='')
    phone = Column(String(50), default='')
    languages = Column(JSON, default=list)
    bio = Column(Text, default='')
    calendar_link = Column(String(500), default='')
    avatar = Column(String(500), default='')
    status = Column(String(20), nullable=False, default='Pending')  # Pending, Active, Inactive
    join_date = Column(Date)
    socials = Column(JSON, default=dict)

    def refresh_conversion_rate(self) -> float:
        leads = int(self.leads or 0)
        clients = int(self.client_count or 0)
        self.conversion_rate = (clients / leads) if leads > 0 else 0.0
        return self.conversion_rate


class Client(RecordMixin, Base):
    __tablename__ = 'clients'
    id = Column(Integer, primary_key=True, autoincrement=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), default='')
    phone = Column(String(50), default='')
    address = Column(String(500), default='')
    city = Column(String(100))
    state = Column(String(50))
    status = Column(String(20), nullable=False, default='Lead')  # Lead, Active, Inactive
    join_date = Column(Date)
    agent_id = Column(Integer, index=True)
    # Sensitive and medical details, opaque to the lifecycle logic
    dob = Column(String(20))
    ssn = Column(String(20))
    bank_name = Column(String(255))
    account_number = Column(String(64))
    routing_number = Column(String(64))
    account_type = Column(String(20))  # Checking, Saving
    monthly_premium = Column(Float)
    annual_premium = Column(Float)
    height = Column(String(20))
    weight = Column(Float)
    birth_state = Column(String(50))
    medications = Column(Text)


class Policy(RecordMixin, Base):
    __tablename__ = 'policies'
    id = Column(Integer, primary_key=True, autoincrement=False)
    client_id = Column(Integer, nullable=False, index=True)
    policy_number = Column(String(100), nullable=False)
    type = Column(String(100))
    monthly_premium = Column(Float, default=0.0)
    annual_premium = Column(Float, default=0.0)
    start_date = Column(Date)
    end_date = Column(Date)
    status = Column(String(20), nullable=False, default='Active')  # Active, Expired, Cancelled
    carrier = Column(String(255))


class Interaction(RecordMixin, Base):
    __tablename__ = 'interactions'
    id = Column(Integer, primary_key=True, autoincrement=False)
    client_id = Column(Integer, nullable=False, index=True)
    type = Column(String(20))  # Call, Email, Meeting, Note
    date = Column(Date)
    summary = Column(Text, default='')


class Task(RecordMixin, Base):
    __tablename__ = 'tasks'
    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(255), nullable=False)
    due_date = Column(Date)
    completed = Column(Boolean, default=False)
    client_id = Column(Integer)
    agent_id = Column(Integer)


class Message(RecordMixin, Base):
    __tablename__ = 'messages'
    id = Column(Integer, primary_key=True, autoincrement=False)
    sender_id = Column(Integer, nullable=False, index=True)
    receiver_id = Column(Integer, nullable=False, index=True)
    text = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=utcnow)
    edited = Column(Boolean, default=False)
    status = Column(String(20), nullable=False, default='active')  # active, trashed
    source = Column(String(20), nullable=False, default='internal')  # internal, public_profile
    deleted_timestamp = Column(DateTime)
    deleted_by = Column(Integer)
    is_read = Column(Boolean, default=False)


class License(RecordMixin, Base):
    __tablename__ = 'licenses'
    id = Column(Integer, primary_key=True, autoincrement=False)
    agent_id = Column(Integer, nullable=False, index=True)
    type = Column(String(50))
    state = Column(String(10))
    license_number = Column(String(100))
    expiration_date = Column(Date)
    file_name = Column(String(255))


class Notification(RecordMixin, Base):
    __tablename__ = 'notifications'
    id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(30), nullable=False, default='general')
    message = Column(Text, nullable=False)
    link = Column(String(255), default='')
    is_read = Column(Boolean, default=False)
    timestamp = Column(DateTime, default=utcnow)
    policy_id = Column(Integer)  # renewal dedup key


class CalendarNote(RecordMixin, Base):
    __tablename__ = 'calendar_notes'
    id = Column(Integer, primary_key=True, autoincrement=False)
    user_id = Column(Integer, nullable=False, index=True)
    date = Column(Date)
    text = Column(Text, default='')
    color = Column(String(20), default='Blue')


class Testimonial(RecordMixin, Base):
    __tablename__ = 'testimonials'
    id = Column(Integer, primary_key=True, autoincrement=False)
    agent_id = Column(Integer, nullable=False, index=True)
    author = Column(String(255))
    quote = Column(Text)
    status = Column(String(20), default='Pending')  # Pending, Approved
    submission_date = Column(Date)
