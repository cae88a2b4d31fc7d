from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from flask import current_app


def send_mail(to_email, subject, html):
    """Send through SendGrid. Returns ``(provider, status)``.

    Without an API key the message is only logged, which is the normal mode
    for development and tests.
    """
    api_key = current_app.config.get('SENDGRID_API_KEY')
    if not api_key:
        current_app.logger.info('[mail not configured] to=%s subject=%s', to_email, subject)
        return 'log', None
    sg = SendGridAPIClient(api_key=api_key)
    message = Mail(from_email=(current_app.config['MAIL_FROM'], current_app.config['MAIL_FROM_NAME']),
                   to_emails=to_email,
                   subject=subject,
                   html_content=html)
    resp = sg.send(message)
    return 'sendgrid', resp.status_code
