import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .shared.dates import age_on, local_today

APPOINTMENT_TYPES = ("Call", "Meeting", "Site Visit", "Policy Review", "Claim Processing")
APPOINTMENT_STATUSES = (
    "Scheduled",
    "Confirmed",
    "In Progress",
    "Completed",
    "Cancelled",
    "Rescheduled",
)
PRIORITIES = ("High", "Medium", "Low")

POLICY_STATUSES = ("Active", "Inactive", "Expired", "Lapsed")

REMINDER_TYPES = (
    "Call",
    "Visit",
    "Policy Expiry",
    "Maturing Policy",
    "Birthday",
    "Holiday",
    "Custom",
    "Appointment",
)
REMINDER_STATUSES = ("Active", "Completed", "Cancelled")

NOTIFICATION_CHANNELS = ("Email", "SMS", "WhatsApp", "Push")
NOTIFICATION_STATUSES = ("Pending", "Sending", "Sent", "Failed", "Cancelled")


def generate_id():
    return str(uuid.uuid4())


class Agent(Base):
    __tablename__ = "agents"

    agent_id = Column(String(36), primary_key=True, default=generate_id)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=False)
    password_hash = Column(String(256), nullable=False)
    avatar = Column(Text, nullable=True)
    password_reset_token = Column(String(128), nullable=True, index=True)
    password_reset_expires = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    settings = relationship(
        "AgentSettings", back_populates="agent", uselist=False, cascade="all, delete-orphan"
    )
    clients = relationship("Client", back_populates="agent")
    appointments = relationship("Appointment", back_populates="agent")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


class AgentSettings(Base):
    __tablename__ = "agent_settings"

    settings_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), unique=True, nullable=False)
    dark_mode = Column(Boolean, default=False, nullable=False)
    email_notifications = Column(Boolean, default=True, nullable=False)
    sms_notifications = Column(Boolean, default=False, nullable=False)
    whatsapp_notifications = Column(Boolean, default=False, nullable=False)
    push_notifications = Column(Boolean, default=True, nullable=False)
    sound_enabled = Column(Boolean, default=True, nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agent = relationship("Agent", back_populates="settings")


class InsuranceCompany(Base):
    __tablename__ = "insurance_companies"

    company_id = Column(String(36), primary_key=True, default=generate_id)
    company_name = Column(String(100), unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)


class PolicyType(Base):
    __tablename__ = "policy_types"

    type_id = Column(String(36), primary_key=True, default=generate_id)
    type_name = Column(String(50), unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)


class Client(Base):
    __tablename__ = "clients"

    client_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    surname = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    phone_number = Column(String(20), nullable=False)
    email = Column(String(100), nullable=False)
    address = Column(String(500), nullable=True)
    national_id = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    is_client = Column(Boolean, default=False, nullable=False)  # False = prospect
    insurance_type = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agent = relationship("Agent", back_populates="clients")
    policies = relationship("ClientPolicy", back_populates="client")
    appointments = relationship("Appointment", back_populates="client")

    @property
    def full_name(self):
        return " ".join(p for p in (self.first_name, self.surname, self.last_name) if p)

    @property
    def age(self):
        if self.date_of_birth is None:
            return None
        return age_on(self.date_of_birth, local_today())


class ClientPolicy(Base):
    __tablename__ = "client_policies"
    __table_args__ = (CheckConstraint("end_date > start_date", name="ck_policy_dates"),)

    policy_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    client_id = Column(String(36), ForeignKey("clients.client_id"), index=True, nullable=False)
    policy_name = Column(String(100), nullable=False)
    policy_number = Column(String(50), nullable=True)
    company_id = Column(String(36), ForeignKey("insurance_companies.company_id"), nullable=True)
    type_id = Column(String(36), ForeignKey("policy_types.type_id"), nullable=True)
    status = Column(String(20), default="Active", nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    premium = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="policies")
    company = relationship("InsuranceCompany")
    policy_type = relationship("PolicyType")

    @property
    def days_until_expiry(self):
        return (self.end_date - local_today()).days

    @property
    def company_name(self):
        return self.company.company_name if self.company else None

    @property
    def type_name(self):
        return self.policy_type.type_name if self.policy_type else None

    @property
    def client_name(self):
        return self.client.full_name if self.client else None


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (CheckConstraint("start_time < end_time", name="ck_appointment_times"),)

    appointment_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    client_id = Column(String(36), ForeignKey("clients.client_id"), index=True, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    appointment_date = Column(Date, index=True, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    location = Column(String(200), nullable=True)
    type = Column(String(50), nullable=False)
    status = Column(String(20), default="Scheduled", nullable=False)
    priority = Column(String(10), default="Medium", nullable=False)
    notes = Column(Text, nullable=True)
    reminder_set = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agent = relationship("Agent", back_populates="appointments")
    client = relationship("Client", back_populates="appointments")

    @property
    def client_name(self):
        return self.client.full_name if self.client else None

    @property
    def client_phone(self):
        return self.client.phone_number if self.client else None

    @property
    def client_email(self):
        return self.client.email if self.client else None


class Reminder(Base):
    __tablename__ = "reminders"

    reminder_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    client_id = Column(String(36), ForeignKey("clients.client_id"), nullable=True)
    appointment_id = Column(String(36), ForeignKey("appointments.appointment_id"), nullable=True)
    reminder_type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    reminder_date = Column(Date, index=True, nullable=False)
    reminder_time = Column(Time, nullable=True)
    client_name = Column(String(150), nullable=True)
    priority = Column(String(10), default="Medium", nullable=False)
    status = Column(String(20), default="Active", nullable=False)
    enable_sms = Column(Boolean, default=False, nullable=False)
    enable_whatsapp = Column(Boolean, default=False, nullable=False)
    enable_push_notification = Column(Boolean, default=True, nullable=False)
    advance_notice = Column(String(20), default="1 day", nullable=False)
    custom_message = Column(Text, nullable=True)
    auto_send = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    completed_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client")


class ReminderSetting(Base):
    """Per-agent, per-type preferences for generated reminders"""

    __tablename__ = "reminder_settings"
    __table_args__ = (UniqueConstraint("agent_id", "reminder_type", name="uq_reminder_setting_type"),)

    reminder_setting_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    reminder_type = Column(String(50), nullable=False)
    is_enabled = Column(Boolean, default=True, nullable=False)
    days_before = Column(Integer, default=1, nullable=False)
    time_of_day = Column(Time, nullable=True)
    repeat_daily = Column(Boolean, default=False, nullable=False)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())


class DailyNote(Base):
    __tablename__ = "daily_notes"
    __table_args__ = (UniqueConstraint("agent_id", "note_date", name="uq_daily_note_agent_date"),)

    note_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    note_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=False, default="")
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())


class SearchHistory(Base):
    __tablename__ = "search_history"
    __table_args__ = (UniqueConstraint("agent_id", "search_term", name="uq_search_history_term"),)

    search_history_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    search_term = Column(String(500), nullable=False)
    search_count = Column(Integer, default=1, nullable=False)
    last_searched = Column(DateTime, server_default=func.now(), nullable=False)


class ActivityLog(Base):
    __tablename__ = "activity_log"

    activity_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    activity_type = Column(String(50), nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(36), nullable=True)
    description = Column(Text, nullable=True)
    additional_data = Column(JSON, nullable=True)
    activity_date = Column(DateTime, server_default=func.now(), index=True, nullable=False)


class DashboardStatistics(Base):
    __tablename__ = "dashboard_statistics"
    __table_args__ = (UniqueConstraint("agent_id", "stat_date", name="uq_dashboard_stats_day"),)

    stat_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    stat_date = Column(Date, nullable=False)
    total_clients = Column(Integer, default=0, nullable=False)
    total_prospects = Column(Integer, default=0, nullable=False)
    active_policies = Column(Integer, default=0, nullable=False)
    today_appointments = Column(Integer, default=0, nullable=False)
    week_appointments = Column(Integer, default=0, nullable=False)
    month_appointments = Column(Integer, default=0, nullable=False)
    completed_appointments = Column(Integer, default=0, nullable=False)
    pending_reminders = Column(Integer, default=0, nullable=False)
    today_birthdays = Column(Integer, default=0, nullable=False)
    expiring_policies = Column(Integer, default=0, nullable=False)
    updated_date = Column(DateTime, server_default=func.now(), onupdate=func.now())


class DashboardViewCache(Base):
    __tablename__ = "dashboard_views_cache"
    __table_args__ = (
        UniqueConstraint("agent_id", "view_name", "cache_date", name="uq_dashboard_cache_key"),
    )

    cache_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=False)
    view_name = Column(String(100), nullable=False)
    cache_date = Column(Date, nullable=False)
    cache_data = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=True, index=True)


class Notification(Base):
    """Outbox row: every outbound email/SMS/WhatsApp/push goes through here"""

    __tablename__ = "notifications"

    notification_id = Column(String(36), primary_key=True, default=generate_id)
    agent_id = Column(String(36), ForeignKey("agents.agent_id"), index=True, nullable=True)
    channel = Column(String(20), nullable=False)
    recipient = Column(String(200), nullable=False)
    subject = Column(String(200), nullable=True)
    body = Column(Text, nullable=False)
    status = Column(String(20), default="Pending", index=True, nullable=False)
    scheduled_time = Column(DateTime, nullable=True)
    attempts = Column(Integer, default=0, nullable=False)
    max_attempts = Column(Integer, default=5, nullable=False)
    next_attempt_at = Column(DateTime, nullable=True, index=True)
    last_error = Column(String(500), nullable=True)
    sent_at = Column(DateTime, nullable=True)
    created_date = Column(DateTime, server_default=func.now(), nullable=False)
    modified_date = Column(DateTime, server_default=func.now(), onupdate=func.now())
