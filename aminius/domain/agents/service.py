"""Agent service - registration, login, profile, settings and password flows"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ... import config
from ...email_templates import (
    password_reset_template,
    sign_in_notice_template,
    welcome_email_template,
)
from ...errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ...models import Agent, AgentSettings, InsuranceCompany, PolicyType
from ...security import generate_secure_token, hash_password, hash_token, verify_password
from ...shared.validators import require_fields
from ..notifications.service import NotificationService
from .repository import AgentRepository
from .schemas import (
    AgentLogin,
    AgentRegister,
    AgentSettingsUpdate,
    AgentUpdate,
    ChangePassword,
    PasswordResetConfirm,
    PasswordResetRequest,
)

logger = logging.getLogger(__name__)


class AgentService:
    """Service layer for agent business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AgentRepository()
        self.notifications = NotificationService(db)
        # Outbox rows created during this request, dispatched by the router
        self.queued_notifications: list[str] = []

    def _queue_email(self, agent: Agent, subject: str, build_mjml) -> None:
        notification_id = self.notifications.try_enqueue_agent_email(agent, subject, build_mjml)
        if notification_id:
            self.queued_notifications.append(notification_id)

    def get_agent(self, agent_id: str) -> Agent:
        agent = self.repo.get_by_id(self.db, agent_id)
        if not agent:
            raise NotFoundError("Agent not found")
        return agent

    def register(self, data: AgentRegister) -> Agent:
        require_fields(
            data.model_dump(by_alias=True),
            ("firstName", "lastName", "email", "phone", "password"),
        )
        if self.repo.get_by_email(self.db, data.email):
            raise ConflictError("An agent with this email already exists", "EMAIL_EXISTS")

        logger.info(f"📥 Registering agent {data.email}")
        agent = self.repo.create(
            self.db,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            email=data.email,
            phone=data.phone,
            avatar=data.avatar,
            password_hash=hash_password(data.password),
        )
        self._queue_email(
            agent, "Welcome to AminiUs", lambda: welcome_email_template(agent.full_name)
        )
        return agent

    def login(self, data: AgentLogin) -> Agent:
        require_fields(data.model_dump(by_alias=True), ("email", "password"))
        agent = self.repo.get_by_email(self.db, data.email.strip())
        if not agent or not agent.is_active or not verify_password(data.password, agent.password_hash):
            logger.warning(f"⚠️ Failed login attempt for {data.email}")
            raise AuthenticationError("Invalid email or password", "INVALID_CREDENTIALS")

        signed_in_at = datetime.utcnow().strftime("%Y-%m-%d %H:%M UTC")
        self._queue_email(
            agent,
            "New sign-in to your AminiUs account",
            lambda: sign_in_notice_template(agent.full_name, signed_in_at),
        )
        return self.get_agent(agent.agent_id)

    def update_profile(self, agent_id: str, data: AgentUpdate) -> Agent:
        agent = self.get_agent(agent_id)
        updates = {k: v for k, v in data.provided().items() if v is not None}

        if "email" in updates and updates["email"] != agent.email.lower():
            existing = self.repo.get_by_email(self.db, updates["email"])
            if existing and existing.agent_id != agent.agent_id:
                raise ConflictError("An agent with this email already exists", "EMAIL_EXISTS")

        return self.repo.update(self.db, agent, **updates)

    def update_settings(self, agent_id: str, data: AgentSettingsUpdate) -> Agent:
        agent = self.get_agent(agent_id)
        if agent.settings is None:
            agent.settings = AgentSettings()
        updates = {k: v for k, v in data.provided().items() if v is not None}
        self.repo.update(self.db, agent.settings, **updates)
        return self.get_agent(agent_id)

    def change_password(self, agent_id: str, data: ChangePassword) -> None:
        require_fields(data.model_dump(by_alias=True), ("oldPassword", "newPassword"))
        agent = self.get_agent(agent_id)
        if not verify_password(data.old_password, agent.password_hash):
            raise ValidationError("Current password is incorrect", "INVALID_PASSWORD")
        self.repo.update(self.db, agent, password_hash=hash_password(data.new_password))
        logger.info(f"🔑 Password changed for agent {agent_id}")

    def request_password_reset(self, data: PasswordResetRequest) -> None:
        """Issue a reset token when the email is known; silent otherwise"""
        require_fields(data.model_dump(by_alias=True), ("email",))
        agent = self.repo.get_by_email(self.db, data.email.strip())
        if not agent or not agent.is_active:
            logger.info(f"Password reset requested for unknown email {data.email}")
            return

        token = generate_secure_token()
        self.repo.update(
            self.db,
            agent,
            password_reset_token=hash_token(token),
            password_reset_expires=datetime.utcnow()
            + timedelta(minutes=config.PASSWORD_RESET_TOKEN_MINUTES),
        )
        reset_link = f"{config.FRONTEND_URL}/reset-password?token={token}"
        self._queue_email(
            agent,
            "Reset your AminiUs password",
            lambda: password_reset_template(
                agent.full_name, reset_link, config.PASSWORD_RESET_TOKEN_MINUTES
            ),
        )

    def confirm_password_reset(self, data: PasswordResetConfirm) -> None:
        require_fields(data.model_dump(by_alias=True), ("token", "newPassword"))
        agent = self.repo.get_by_reset_token(self.db, hash_token(data.token))
        if (
            not agent
            or not agent.password_reset_expires
            or agent.password_reset_expires < datetime.utcnow()
        ):
            raise ValidationError("Invalid or expired reset token", "INVALID_RESET_TOKEN")

        self.repo.update(
            self.db,
            agent,
            password_hash=hash_password(data.new_password),
            password_reset_token=None,
            password_reset_expires=None,
        )
        logger.info(f"🔑 Password reset completed for agent {agent.agent_id}")

    def get_insurance_companies(self) -> list[InsuranceCompany]:
        return self.repo.get_insurance_companies(self.db)

    def get_policy_types(self) -> list[PolicyType]:
        return self.repo.get_policy_types(self.db)
