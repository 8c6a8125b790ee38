import logging
import re
from django.conf import settings
from django.core.mail import send_mail
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client as TwilioClient

logger = logging.getLogger(__name__)


def send_notification(user, subject, email_message, sms_message):
    """
    Send notifications to users via email and SMS.

    Args:
        user: User object to send notification to
        subject: Email subject
        email_message: Email message content
        sms_message: SMS message content
    """
    if user.email:
        send_mail(
            subject=subject,
            message=email_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[user.email],
            fail_silently=True
        )
        logger.info(f"Email notification sent to {user.email}")

    if not user.phone_number or not settings.TWILIO_ACCOUNT_SID:
        return
    if not re.match(r'^\+\d{9,15}$', user.phone_number):
        logger.warning(f"Skipping SMS to invalid phone number {user.phone_number}")
        return
    try:
        client = TwilioClient(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        client.messages.create(
            body=sms_message,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=user.phone_number
        )
        logger.info(f"SMS notification sent to {user.phone_number}")
    except TwilioRestException as e:
        logger.error(f"Failed to send SMS to {user.phone_number}: {str(e)}")


STAGE_MESSAGES = {
    'accept_application': (
        "Application Accepted for {title}",
        "Your application for job '{title}' has been accepted. You can now start work.",
    ),
    'start_work': (
        "Work Started: {title}",
        "{name} has started work on '{title}'.",
    ),
    'mark_completed': (
        "Work Completed: {title}",
        "{name} has marked '{title}' as completed. Please release the payment.",
    ),
    'release_payment': (
        "Payment Released for {title}",
        "The client has released payment for '{title}'.",
    ),
    'accept_payment': (
        "Payment Confirmed for {title}",
        "{name} has confirmed receiving payment for '{title}'.",
    ),
    'submit_review': (
        "New Review for {title}",
        "{name} has left you a review for '{title}'.",
    ),
    'close_job': (
        "Job Closed: {title}",
        "{name} has closed the job '{title}'.",
    ),
}


def notify_progress(application, action, actor, recipient):
    """Tell the other participant that ``actor`` moved the job forward."""
    subject_template, message_template = STAGE_MESSAGES[action]
    values = {
        'title': application.job.title,
        'name': actor.first_name or actor.username,
    }
    subject = subject_template.format(**values)
    message = message_template.format(**values)
    email_message = (
        f"Dear {recipient.first_name or recipient.username},\n\n"
        f"{message}\n\n"
        f"Best regards,\nWorkie.lk Team"
    )
    send_notification(recipient, subject, email_message, message)
