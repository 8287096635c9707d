"""
MJML Email Templates
Agent-facing emails: account notices, appointment confirmations and daily digests
"""

from html import escape
from typing import Optional

from .config import FRONTEND_URL

THEME = {
    "primary": "#1d4ed8",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "danger": "#ef4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" padding="0 0 16px 0">
              {title}
            </mj-text>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              AminiUs Insurance App. You're receiving this because you have an agent account.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _appointment_rows(appointments: list[dict]) -> str:
    if not appointments:
        return f'<mj-text color="{THEME["text_muted"]}">No appointments.</mj-text>'

    rows = []
    for a in appointments:
        rows.append(
            f"""
            <tr style="border-bottom: 1px solid {THEME['border']};">
              <td style="padding: 6px 8px;">{escape(str(a.get('date', '')))}</td>
              <td style="padding: 6px 8px;">{escape(a.get('start', ''))} - {escape(a.get('end', ''))}</td>
              <td style="padding: 6px 8px;">{escape(a.get('title', ''))}</td>
              <td style="padding: 6px 8px;">{escape(a.get('client', ''))}</td>
              <td style="padding: 6px 8px;">{escape(a.get('status', ''))}</td>
            </tr>
            """
        )
    return f"""
    <mj-table font-size="14px" color="{THEME['text_secondary']}">
      <tr style="text-align: left; background: {THEME['primary_light']};">
        <th style="padding: 6px 8px;">Date</th>
        <th style="padding: 6px 8px;">Time</th>
        <th style="padding: 6px 8px;">Title</th>
        <th style="padding: 6px 8px;">Client</th>
        <th style="padding: 6px 8px;">Status</th>
      </tr>
      {''.join(rows)}
    </mj-table>
    """


def welcome_email_template(agent_name: str) -> str:
    content = f"""
    <mj-text>Hi {escape(agent_name)},</mj-text>
    <mj-text>
      Welcome to AminiUs! Your agent account is ready. Add your clients and
      prospects, schedule appointments and let us remind you about renewals
      and birthdays.
    </mj-text>
    """
    return get_base_template(
        title="Welcome to AminiUs",
        preview_text="Your agent account has been created",
        content_sections=content,
        cta_url=FRONTEND_URL,
        cta_label="Open Dashboard",
    )


def sign_in_notice_template(agent_name: str, signed_in_at: str) -> str:
    content = f"""
    <mj-text>Hi {escape(agent_name)},</mj-text>
    <mj-text>We noticed a new sign-in to your account at {escape(signed_in_at)}.</mj-text>
    <mj-text color="{THEME['text_muted']}">
      If this wasn't you, reset your password immediately.
    </mj-text>
    """
    return get_base_template(
        title="New sign-in to your account",
        preview_text="A new sign-in was detected",
        content_sections=content,
    )


def password_reset_template(agent_name: str, reset_link: str, valid_minutes: int) -> str:
    content = f"""
    <mj-text>Hi {escape(agent_name)},</mj-text>
    <mj-text>
      We received a request to reset your password. The link below is valid for
      {valid_minutes} minutes.
    </mj-text>
    <mj-text color="{THEME['text_muted']}">
      If you didn't request this, you can ignore this email.
    </mj-text>
    """
    return get_base_template(
        title="Reset your password",
        preview_text="Password reset requested",
        content_sections=content,
        cta_url=reset_link,
        cta_label="Reset Password",
    )


def appointment_created_template(
    agent_name: str,
    appointment: dict,
    week_schedule: list[dict],
    statistics: dict,
) -> str:
    """Confirmation of a new appointment with the agent's week ahead and counters"""
    details = f"""
    <mj-text>Hi {escape(agent_name)},</mj-text>
    <mj-text>A new appointment has been scheduled:</mj-text>
    <mj-text padding="0 0 0 20px">
      <strong>{escape(appointment.get('title', ''))}</strong><br/>
      Client: {escape(appointment.get('client', ''))}<br/>
      Date: {escape(str(appointment.get('date', '')))}<br/>
      Time: {escape(appointment.get('start', ''))} - {escape(appointment.get('end', ''))}<br/>
      Type: {escape(appointment.get('type', ''))} · Priority: {escape(appointment.get('priority', ''))}<br/>
      Location: {escape(appointment.get('location') or 'Not specified')}
    </mj-text>
    <mj-text font-weight="600" padding-top="24px">Your week</mj-text>
    {_appointment_rows(week_schedule)}
    <mj-text font-weight="600" padding-top="24px">At a glance</mj-text>
    <mj-text padding="0 0 0 20px">
      Today: {statistics.get('todayAppointments', 0)}<br/>
      This week: {statistics.get('weekAppointments', 0)}<br/>
      This month: {statistics.get('monthAppointments', 0)}<br/>
      Upcoming: {statistics.get('upcomingAppointments', 0)}
    </mj-text>
    """
    return get_base_template(
        title="Appointment scheduled",
        preview_text=f"{appointment.get('title', '')} on {appointment.get('date', '')}",
        content_sections=details,
    )


def daily_appointments_template(agent_name: str, day: str, appointments: list[dict]) -> str:
    content = f"""
    <mj-text>Good morning {escape(agent_name)},</mj-text>
    <mj-text>You have {len(appointments)} appointment(s) on {escape(day)}:</mj-text>
    {_appointment_rows(appointments)}
    """
    return get_base_template(
        title="Today's appointments",
        preview_text=f"{len(appointments)} appointment(s) today",
        content_sections=content,
    )


def birthday_digest_template(agent_name: str, clients: list[dict]) -> str:
    items = "<br/>".join(
        f"• {escape(c['name'])} turns {c['age']}" + (f" ({escape(c['phone'])})" if c.get("phone") else "")
        for c in clients
    )
    content = f"""
    <mj-text>Hi {escape(agent_name)},</mj-text>
    <mj-text>These clients celebrate their birthday today:</mj-text>
    <mj-text padding="0 0 0 20px">{items}</mj-text>
    """
    return get_base_template(
        title="Client birthdays today",
        preview_text=f"{len(clients)} client birthday(s) today",
        content_sections=content,
    )
