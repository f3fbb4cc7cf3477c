import logging
from smtplib import SMTPException

from ddm_jewellers.core.extensions import mail
from ddm_jewellers.core.imports import Message, current_app, datetime, escape

logger = logging.getLogger(__name__)


def _layout(title, body):
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 560px; margin: auto;">
      <h2 style="color: #b8860b;">DDM Jewellers</h2>
      <h3>{title}</h3>
      {body}
      <p style="color: #888; font-size: 12px;">&copy; {datetime.utcnow().year} DDM Jewellers</p>
    </div>
    """


def send_email(to, subject, html):
    msg = Message(subject=subject, recipients=[to])
    msg.html = html
    try:
        mail.send(msg)
        return True
    except (SMTPException, OSError) as e:
        logger.error(f"Error sending email to {to}: {e}")
        return False


def send_verification_email(user):
    link = f"{current_app.config['FRONTEND_URL']}/api/auth/verify-email/{user.email_verification_token}"
    body = f"""
      <p>Hi {escape(user.first_name)},</p>
      <p>Welcome to DDM Jewellers! Please confirm your email address:</p>
      <p><a href="{link}">Verify my email</a></p>
    """
    return send_email(user.email, "Verify your email", _layout("Confirm your email", body))


def send_password_reset_email(email, otp):
    body = f"""
      <p>We received a request to reset your password. Use the code below to proceed:</p>
      <p style="font-size: 24px; letter-spacing: 4px;"><b>{otp}</b></p>
      <p>The code is valid for 60 minutes.</p>
    """
    return send_email(email, "Your Password Reset OTP", _layout("Password Reset Code", body))


def send_wholesaler_decision_email(user, approved):
    if approved:
        title, text = "Account approved", "Your wholesaler account has been approved. You can now upload designs."
    else:
        title, text = "Account not approved", "We are unable to approve your wholesaler account at this time."
    body = f"<p>Hi {escape(user.first_name)},</p><p>{text}</p>"
    return send_email(user.email, f"Wholesaler {title.lower()}", _layout(title, body))


def send_corporate_approval_email(registration):
    body = f"""
      <p>Dear {escape(registration.contact_person_name)},</p>
      <p>The partnership request for <b>{escape(registration.company_name)}</b> has been approved.</p>
      <p>Your corporate code is <b>{registration.corporate_code}</b>. Employees can use it at
      checkout for {current_app.config['CORPORATE_DISCOUNT_PERCENT']}% off and free jewelry maintenance.</p>
    """
    return send_email(registration.contact_person_email, "Corporate partnership approved",
                      _layout("Welcome aboard", body))
