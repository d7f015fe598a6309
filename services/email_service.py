import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from core.config import settings
from utils.logger import get_logger

logger = get_logger(__name__)


def send_email(to_email: str, subject: str, body: str):
    # Skip email sending in test environment
    if settings.ENV == "testing":
        logger.info(
            "[TEST MODE] Email skipped",
            extra={"recipient": to_email, "subject": subject}
        )
        return

    logger.debug(
        "Attempting to send email",
        extra={"recipient": to_email, "subject": subject}
    )

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = f"URL Shortener <{settings.MAIL_FROM}>"
    message["To"] = to_email
    message.attach(MIMEText(body, "html"))

    try:
        with smtplib.SMTP(settings.MAIL_SERVER, settings.MAIL_PORT) as server:
            server.starttls()
            if settings.MAIL_USERNAME:
                server.login(settings.MAIL_USERNAME, settings.MAIL_PASSWORD)
            server.sendmail(settings.MAIL_FROM, to_email, message.as_string())

        logger.info(
            "Email sent successfully",
            extra={"recipient": to_email, "subject": subject}
        )

    except smtplib.SMTPException as e:
        logger.error(
            f"Failed to send email: {str(e)}",
            extra={
                "recipient": to_email,
                "subject": subject,
                "error_type": type(e).__name__
            },
            exc_info=True
        )
        raise
