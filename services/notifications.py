"""
Email Notifications

Fire-and-forget emails through the SendGrid v3 HTTP API. A notification
that cannot be delivered is logged and dropped; it never fails the request
that triggered it.
"""

import logging

import requests

logger = logging.getLogger(__name__)

SENDGRID_URL = 'https://api.sendgrid.com/v3/mail/send'


def _greeting(user):
    return f"Hi {user.first_name or 'there'},"


def render_welcome(user, payload):
    return (
        "Welcome to My Meal Planner AI!",
        f"{_greeting(user)}\n\nYour {user.meal_credits} free meal suggestions are waiting. "
        "Set your preferences and we'll find family-sized meals you'll love.",
    )


def render_recipes_suggested(user, payload):
    titles = payload.get('titles', [])
    lines = '\n'.join(f"- {title}" for title in titles)
    return (
        f"Your {len(titles)} new meal ideas",
        f"{_greeting(user)}\n\nHere are your latest meal suggestions:\n\n{lines}",
    )


def render_grocery_list(user, payload):
    sections = []
    for category in payload.get('ingredients', []):
        items = '\n'.join(f"  - {item}" for item in category['items'])
        sections.append(f"{category['category']}\n{items}")
    return (
        f"Your grocery list for the week of {payload.get('weekStartDate')}",
        f"{_greeting(user)}\n\nHere is your shopping list:\n\n" + '\n\n'.join(sections),
    )


TEMPLATES = {
    'welcome': render_welcome,
    'recipes_suggested': render_recipes_suggested,
    'grocery_list_ready': render_grocery_list,
}


class EmailNotifier:
    """notify(user, event_kind, payload): send an email, never raise."""

    def __init__(self, api_key, from_email, from_name='', enabled=True, timeout=10):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.enabled = enabled
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('SENDGRID_API_KEY'),
            from_email=config.get('MAIL_FROM'),
            from_name=config.get('MAIL_FROM_NAME', ''),
            enabled=config.get('MAIL_ENABLED', True),
        )

    def notify(self, user, event_kind, payload=None):
        render = TEMPLATES.get(event_kind)
        if render is None:
            logger.warning("No email template for event %s", event_kind)
            return False
        if not user.email:
            logger.debug("User %s has no email; skipping %s", user.id, event_kind)
            return False

        subject, text = render(user, payload or {})
        if not self.enabled or not self.api_key:
            logger.info("Email would be sent: %s to %s", subject, user.email)
            return False

        message = {
            'personalizations': [{'to': [{'email': user.email}]}],
            'from': {'email': self.from_email, 'name': self.from_name},
            'subject': subject,
            'content': [{'type': 'text/plain', 'value': text}],
        }
        try:
            response = requests.post(
                SENDGRID_URL,
                headers={'Authorization': f'Bearer {self.api_key}'},
                json=message,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("SendGrid email error for %s (%s): %s", user.id, event_kind, e)
            return False

        logger.info("Sent %s email to user %s", event_kind, user.id)
        return True
