"""
MJML Email Templates
Appointment emails for patients and clinic staff, with plain-text twins
"""

from datetime import date, datetime
from typing import Optional

from .config import CLINIC_NAME
from .utils.sanitization import sanitize_multiline, sanitize_string

# Clinic brand colors
THEME = {
    "primary": "#0067AC",
    "accent": "#FF642F",
    "header_bg": "#C9E8FB",
    "background": "#f8f9fa",
    "card_bg": "#ffffff",
    "text_secondary": "#333333",
    "border": "#e0e0e0",
    "success": "#10b981",
}


def format_long_date(value: date) -> str:
    """Monday, March 2, 2026"""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def format_time_12h(value: str) -> str:
    """Convert 24-hour HH:MM into 9:30 AM style"""
    try:
        parsed = datetime.strptime(value, "%H:%M")
    except (TypeError, ValueError):
        return value or ""
    return parsed.strftime("%I:%M %p").lstrip("0")


def format_submitted_at(value: Optional[datetime]) -> str:
    return (value or datetime.now()).strftime("%d %b %Y, %I:%M %p")


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    is_staff_email: bool = False,
) -> str:
    """Base MJML template wrapper for all emails"""
    clinic = sanitize_string(CLINIC_NAME)

    header_bg = THEME["primary"] if is_staff_email else THEME["header_bg"]
    header_color = "#ffffff" if is_staff_email else THEME["primary"]

    footer_notice = (
        "This is an automated notification from the appointment system."
        if is_staff_email
        else "This is an automated email. Please do not reply to this message."
    )

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Arial, 'Helvetica Neue', sans-serif" />
          <mj-text font-size="15px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="{header_bg}" padding="30px 20px" border-radius="10px 10px 0 0">
          <mj-column>
            <mj-text align="center" font-size="26px" font-weight="700" color="{header_color}" padding="0">
              {clinic}
            </mj-text>
            <mj-text align="center" font-size="14px" color="{header_color}" padding="8px 0 0 0">
              {title}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="{THEME['card_bg']}" padding="30px 30px 40px 30px" border="1px solid {THEME['border']}">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        <!-- Footer -->
        <mj-section padding="20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="#666666" padding="0">
              {footer_notice}
            </mj-text>
            <mj-text align="center" font-size="12px" color="#666666" padding="8px 0 0 0">
              © {datetime.now().year} {clinic}. All rights reserved.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    """Label/value rows inside a shaded details box"""
    lines = "<br/>".join(
        f'<span style="font-weight: bold; color: {THEME["primary"]};">{label}:</span> {value}'
        for label, value in rows
    )
    return f"""
    <mj-text background-color="{THEME['background']}" padding="16px" container-background-color="{THEME['background']}">
      {lines}
    </mj-text>
    """


def _appointment_rows(appointment) -> list[tuple[str, str]]:
    rows = [
        ("Appointment Number", sanitize_string(appointment.appointment_number)),
        ("Name", sanitize_string(appointment.full_name)),
        ("Email", sanitize_string(appointment.email)),
        ("Phone", sanitize_string(appointment.phone)),
        ("Service", sanitize_string(appointment.service)),
        ("Preferred Date", format_long_date(appointment.preferred_date)),
        ("Preferred Time", format_time_12h(appointment.preferred_time)),
    ]
    if appointment.message:
        rows.append(("Message", sanitize_multiline(appointment.message)))
    return rows


def appointment_confirmation_template(appointment) -> str:
    """Booking confirmation sent to the patient"""
    long_date = format_long_date(appointment.preferred_date)
    content = f"""
    <mj-text font-size="20px" font-weight="600" color="{THEME['primary']}" padding="0 0 16px 0">
      Hello {sanitize_string(appointment.full_name)},
    </mj-text>

    <mj-text>
      Thank you for booking an appointment with us! Your appointment has been confirmed.
    </mj-text>

    {_detail_rows(_appointment_rows(appointment))}

    <mj-text>
      <strong>Status:</strong> <span style="color: {THEME['success']}; font-weight: bold;">Confirmed</span>
    </mj-text>

    <mj-text>
      We look forward to seeing you on {long_date}. Please arrive 10 minutes before your
      scheduled appointment time. If you have any questions or need to make changes,
      please don't hesitate to contact us.
    </mj-text>

    <mj-text padding-top="24px">
      Best regards,<br/>
      <strong>The {sanitize_string(CLINIC_NAME)} Team</strong>
    </mj-text>
    """

    return get_base_template(
        title="Appointment Confirmation",
        preview_text=f"Your appointment {appointment.appointment_number} is confirmed",
        content_sections=content,
    )


def appointment_confirmation_text(appointment) -> str:
    """Plain-text version of the patient confirmation"""
    long_date = format_long_date(appointment.preferred_date)
    lines = [
        f"Hello {appointment.full_name},",
        "",
        "Thank you for booking an appointment with us! Your appointment has been confirmed.",
        "",
        "Appointment Details:",
        f"- Appointment Number: {appointment.appointment_number}",
        f"- Name: {appointment.full_name}",
        f"- Email: {appointment.email}",
        f"- Phone: {appointment.phone}",
        f"- Service: {appointment.service}",
        f"- Preferred Date: {long_date}",
        f"- Preferred Time: {format_time_12h(appointment.preferred_time)}",
    ]
    if appointment.message:
        lines.append(f"- Message: {appointment.message}")
    lines += [
        "",
        "Status: Confirmed",
        "",
        f"We look forward to seeing you on {long_date}. "
        "Please arrive 10 minutes before your scheduled appointment time.",
        "",
        "Best regards,",
        f"The {CLINIC_NAME} Team",
    ]
    return "\n".join(lines)


def new_appointment_admin_template(appointment) -> str:
    """New booking notice for clinic staff"""
    rows = _appointment_rows(appointment)
    rows.append(("Submitted", format_submitted_at(appointment.created_at)))

    content = f"""
    <mj-text font-size="20px" font-weight="600" color="{THEME['primary']}" padding="0 0 16px 0">
      Appointment Details
    </mj-text>

    {_detail_rows(rows)}

    <mj-text color="{THEME['accent']}" font-weight="bold">
      Action Required: Please review and confirm this appointment.
    </mj-text>
    """

    return get_base_template(
        title="New Appointment Request",
        preview_text=f"{sanitize_string(appointment.full_name)} booked {sanitize_string(appointment.service)}",
        content_sections=content,
        is_staff_email=True,
    )


def new_appointment_admin_text(appointment) -> str:
    """Plain-text version of the staff notice"""
    lines = [
        "New Appointment Request",
        "",
        f"Appointment Number: {appointment.appointment_number}",
        f"Full Name: {appointment.full_name}",
        f"Email: {appointment.email}",
        f"Phone: {appointment.phone}",
        f"Service: {appointment.service}",
        f"Preferred Date: {format_long_date(appointment.preferred_date)}",
        f"Preferred Time: {format_time_12h(appointment.preferred_time)}",
    ]
    if appointment.message:
        lines.append(f"Message: {appointment.message}")
    lines += [
        f"Submitted: {format_submitted_at(appointment.created_at)}",
        "",
        "Action Required: Please review and confirm this appointment.",
    ]
    return "\n".join(lines)
