"""
Transactional email templates (welcome, verification, password reset, ...).

Each template declares the request fields it needs; rendering fails with
``EmailValidationError`` when one is missing.
"""
from dataclasses import dataclass
from typing import Dict, Tuple

from jinja2 import DictLoader, Environment, StrictUndefined, select_autoescape

from app.core.config import settings
from app.core.exceptions import EmailValidationError
from app.schemas.email import SendEmailRequest, TransactionalEmailRequest

_LAYOUT = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
{% block body %}{% endblock %}
</div>
"""

_MACROS = (
    '{% macro button(url, color, label) %}'
    '<div style="text-align: center; margin: 30px 0;">'
    '<a href="{{ url }}" style="background-color: {{ color }}; color: white; padding: 12px 24px; '
    'text-decoration: none; border-radius: 6px; display: inline-block;">{{ label }}</a></div>'
    '{% endmacro %}'
)

_TEMPLATES = {
    "layout.html": _LAYOUT,
    "macros.html": _MACROS,
    "welcome.html": """{% extends "layout.html" %}{% block body %}
<h1 style="color: #333;">Welcome {{ name }}!</h1>
<p>Thank you for joining Marky AI Studio.</p>
<p>Your account has been created successfully.</p>
<p>Get started by logging in and exploring our features.</p>
<div style="margin-top: 30px; padding: 20px; background-color: #f8f9fa; border-radius: 8px;">
  <p style="margin: 0;"><strong>Next steps:</strong></p>
  <ul>
    <li>Complete your profile</li>
    <li>Explore our AI image generation tools</li>
    <li>Join our community</li>
  </ul>
</div>
{% endblock %}""",
    "verification.html": """{% extends "layout.html" %}{% block body %}{% from "macros.html" import button %}
<h1 style="color: #333;">Verify Your Email</h1>
<p>Hello {{ name }},</p>
<p>Thank you for signing up for Marky AI! Please verify your email address to complete your registration.</p>
{{ button(verification_url, "#007bff", "Verify Email Address") }}
<p style="color: #666; font-size: 14px;">If the button doesn't work, copy and paste this link into your browser:</p>
<p style="word-break: break-all; color: #666; font-size: 12px;">{{ verification_url }}</p>
<p style="color: #666; font-size: 14px;">This link will expire in 24 hours.</p>
{% endblock %}""",
    "password-reset.html": """{% extends "layout.html" %}{% block body %}{% from "macros.html" import button %}
<h1 style="color: #333;">Password Reset</h1>
<p>You requested a password reset for your Marky AI account.</p>
<p>If you didn't request this, please ignore this email.</p>
{{ button(reset_url, "#28a745", "Reset Password") }}
<p style="color: #666; font-size: 14px;">If the button doesn't work, copy and paste this link into your browser:</p>
<p style="word-break: break-all; color: #666; font-size: 12px;">{{ reset_url }}</p>
<p style="color: #666; font-size: 14px;">This link will expire in {{ expiry_time or "1 hour" }}.</p>
{% endblock %}""",
    "reset-request-notification.html": """{% extends "layout.html" %}{% block body %}
<h1 style="color: #dc3545;">Security Alert</h1>
<p>A password reset was requested for your Marky AI account.</p>
<p><strong>If this wasn't you:</strong></p>
<ul>
  <li>Change your password immediately</li>
  <li>Contact our support team</li>
  <li>Review your account activity</li>
</ul>
<p>If you requested this reset, you can safely ignore this email.</p>
<p>Support: <a href="mailto:{{ support_email }}">{{ support_email }}</a></p>
{% endblock %}""",
    "password-changed.html": """{% extends "layout.html" %}{% block body %}
<h1 style="color: #28a745;">Password Updated</h1>
<p>Hello {{ name }},</p>
<p>Your password has been successfully changed.</p>
<p>If you didn't make this change, please contact support immediately at
<a href="mailto:{{ default_support_email }}">{{ default_support_email }}</a>.</p>
{% endblock %}""",
    "verification-reminder.html": """{% extends "layout.html" %}{% block body %}{% from "macros.html" import button %}
<h1 style="color: #333;">Account Verification Reminder</h1>
<p>Hello {{ name }},</p>
<p>We noticed you haven't verified your email address yet.</p>
<p>Please verify your email to complete your registration and start using Marky AI.</p>
{{ button(verification_url, "#007bff", "Verify Email Now") }}
{% endblock %}""",
    "welcome-immediate.html": """{% extends "layout.html" %}{% block body %}{% from "macros.html" import button %}
<h1 style="color: #333;">Welcome {{ name }}!</h1>
<p>Your Marky AI account is ready to use.</p>
{{ button(login_url, "#007bff", "Login to Your Account") }}
<p>Start exploring our AI-powered image generation tools and create amazing content!</p>
{% endblock %}""",
}

env = Environment(
    loader=DictLoader(_TEMPLATES),
    autoescape=select_autoescape(default=True, default_for_string=True),
    undefined=StrictUndefined,
)


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    required: Tuple[str, ...]


EMAIL_TEMPLATES: Dict[str, EmailTemplate] = {
    "welcome": EmailTemplate("Welcome to Marky AI!", ("to", "name")),
    "verification": EmailTemplate("Verify your Marky AI account", ("to", "name", "verification_url")),
    "password-reset": EmailTemplate("Reset your Marky AI password", ("to", "reset_url")),
    "reset-request-notification": EmailTemplate("Password reset requested - Security Alert", ("to", "support_email")),
    "password-changed": EmailTemplate("Password changed successfully", ("to", "name")),
    "verification-reminder": EmailTemplate("Reminder: Verify your Marky AI account", ("to", "name", "verification_url")),
    "welcome-immediate": EmailTemplate("Welcome to Marky AI!", ("to", "name", "login_url")),
}


def render_transactional_email(request: TransactionalEmailRequest) -> SendEmailRequest:
    template = EMAIL_TEMPLATES.get(request.type)
    if template is None:
        raise EmailValidationError(f"Unknown email type: {request.type}")

    missing = [field for field in template.required if not getattr(request, field)]
    if missing:
        aliases = [TransactionalEmailRequest.model_fields[field].alias or field for field in missing]
        raise EmailValidationError(f"Missing required fields: {', '.join(aliases)}")

    context = request.model_dump(exclude={"type"})
    context["default_support_email"] = settings.SUPPORT_EMAIL
    html = env.get_template(f"{request.type}.html").render(**context)
    return SendEmailRequest(to=request.to, subject=template.subject, html=html)
