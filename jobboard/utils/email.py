import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Tuple

from jobboard.config import settings

logger = logging.getLogger("jobboard.email")

SIGNATURE = "Best regards,\nThe JobBoard Team"


def _welcome(data: dict) -> Tuple[str, str]:
    if data.get("role") == "recruiter":
        goal, first_step = "post jobs and find great candidates", "posting your first job"
    else:
        goal, first_step = "explore job opportunities", "applying to jobs that match your skills"
    text = (
        f"Welcome to JobBoard, {data['name']}!\n\n"
        f"Thank you for joining our platform. You're now ready to {goal}. "
        f"Get started by completing your profile and {first_step}.\n\n{SIGNATURE}"
    )
    return "Welcome to JobBoard!", text


def _application_received(data: dict) -> Tuple[str, str]:
    text = (
        f"You have received a new application for the position: {data['job_title']}\n"
        f"Applicant: {data['applicant_name']}\n"
        f"Email: {data['applicant_email']}\n\n"
        f"Please log in to your dashboard to review the application.\n\n{SIGNATURE}"
    )
    return f"New Application for {data['job_title']}", text


def _application_status(data: dict) -> Tuple[str, str]:
    text = (
        f"Hello {data['applicant_name']},\n\n"
        f"{data['message']} for the position: {data['job_title']} at {data['company']}\n\n"
        f"Please log in to your dashboard for more details.\n\n{SIGNATURE}"
    )
    return f"Application Update: {data['job_title']}", text


def _password_reset(data: dict) -> Tuple[str, str]:
    text = (
        f"Hello {data['name']},\n\n"
        f"Use this link to reset your password:\n\n{data['reset_url']}\n\n"
        f"The link is valid for {data['expires_minutes']} minutes.\n\n{SIGNATURE}"
    )
    return "Reset your password", text


TEMPLATES = {
    "welcome": _welcome,
    "application_received": _application_received,
    "application_status": _application_status,
    "password_reset": _password_reset,
}


def render_email(kind: str, data: dict) -> Tuple[str, str]:
    """Return (subject, text body) for a notification kind."""
    try:
        template = TEMPLATES[kind]
    except KeyError:
        raise ValueError(f"Unknown email template: {kind}")
    return template(data)


def send_email_sync(to_email: str, subject: str, text_content: str, html_content: Optional[str] = None) -> bool:
    """Send email via SMTP. Blocking; run it on a worker thread."""
    if not settings.mail_username or not settings.mail_password:
        logger.warning("Email credentials not configured, printing email instead")
        log_email_to_console(to_email, subject, text_content)
        return False

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = f"{settings.mail_from_name} <{settings.mail_from}>"
    message["To"] = to_email

    message.attach(MIMEText(text_content, "plain"))
    if html_content:
        message.attach(MIMEText(html_content, "html"))

    with smtplib.SMTP(settings.mail_host, settings.mail_port, timeout=settings.mail_timeout) as server:
        server.ehlo()
        if settings.mail_use_tls:
            server.starttls()
            server.ehlo()
        server.login(settings.mail_username, settings.mail_password)
        server.send_message(message)

    logger.info("Email sent to %s", to_email)
    return True


def log_email_to_console(to_email: str, subject: str, text_content: str):
    """Fallback for local development without SMTP credentials."""
    logger.info("EMAIL (console mode)\nTo: %s\nSubject: %s\n\n%s", to_email, subject, text_content)
