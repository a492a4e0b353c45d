import smtplib
from email.message import EmailMessage

from flask import current_app

from utils.dates import to_local


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def send_email(to_email: str, subject: str, body: str):
    host = current_app.config.get("SMTP_HOST")
    port = current_app.config.get("SMTP_PORT", 587)
    username = current_app.config.get("SMTP_USERNAME")
    password = current_app.config.get("SMTP_PASSWORD")
    from_email = current_app.config.get("SMTP_FROM_EMAIL") or username
    use_tls = current_app.config.get("SMTP_USE_TLS", True)

    if not host or not from_email:
        return False, "Email not configured"

    msg = EmailMessage()
    msg["From"] = from_email
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    try:
        with smtplib.SMTP(host, port, timeout=10) as server:
            if use_tls:
                server.starttls()
            if username and password:
                server.login(username, password)
            server.send_message(msg)
        return True, None
    except (smtplib.SMTPException, OSError) as exc:
        return False, str(exc)


def render_confirmation(appointment):
    when = to_local(appointment.scheduled_at).strftime("%d/%m/%Y %H:%M")
    subject = f"Agendamento Confirmado - Código: {appointment.confirmation_code}"
    body = (
        f"Olá {appointment.client_name},\n\n"
        "Seu agendamento foi confirmado:\n\n"
        f"Data/Hora: {when}\n"
        f"Serviço: {appointment.service}\n"
        f"Empresa: {appointment.client_company or '-'}\n"
        f"Código: {appointment.confirmation_code}\n\n"
        f"Observações: {appointment.notes or '-'}\n\n"
        "Para alterações, entre em contato.\n\n"
        "Atenciosamente,\nEquipe Logística"
    )
    return subject, body


def send_booking_confirmation(appointment):
    subject, body = render_confirmation(appointment)
    return send_email(appointment.client_email, subject, body)
