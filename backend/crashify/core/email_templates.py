"""
HTML bodies for outgoing mail.

Templates are rendered with autoescaping on; user supplied notes are escaped
before line breaks are turned into <br>.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from jinja2 import DictLoader, Environment, select_autoescape
from markupsafe import Markup, escape

_BASE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <style>
        body { font-family: 'Segoe UI', Arial, sans-serif; line-height: 1.6; color: #333; background-color: #f4f6f8; }
        .container { max-width: 600px; margin: 0 auto; padding: 20px; background-color: #ffffff; }
        .header { background: #DC2626; color: white; padding: 20px; text-align: center; }
        .content { padding: 30px; background: #f9fafb; }
        .info-box { background: white; border-left: 4px solid #DC2626; padding: 15px; margin: 20px 0; }
        .footer { padding: 20px; text-align: center; color: #6B7280; font-size: 12px; }
    </style>
</head>
<body>
<div class="container">
    <div class="header"><h1 style="margin: 0; font-size: 24px;">{% block title %}{% endblock %}</h1></div>
    <div class="content">{% block content %}{% endblock %}</div>
    <div class="footer"><p style="margin: 0;">&copy; {{ year }} Crashify Pty Ltd. All rights reserved.</p></div>
</div>
</body>
</html>
"""

_REPAIRER = """{% extends "base.html" %}
{% block title %}Repair Authority{% endblock %}
{% block content %}
<p>Dear {{ owner_name or "Team" }},</p>
<p>Please find attached the repair authority and assessed quote for:</p>
<div class="info-box">
    <p><strong>Vehicle:</strong> {{ vehicle }}</p>
    {% if a.claim_reference %}<p><strong>Claim:</strong> {{ a.claim_reference }}</p>{% endif %}
    <p><strong>Assessment #:</strong> {{ a.id }}</p>
    <p><strong>Insurer:</strong> {{ a.company_name }}</p>
</div>
<p><strong>Attached Documents:</strong></p>
<ul>{% for name in attachments %}<li>{{ name }}</li>{% endfor %}</ul>
<p>Please proceed with authorized repairs as detailed.</p>
{% if notes %}<div class="info-box"><p><strong>Additional Notes:</strong></p><p>{{ notes }}</p></div>{% endif %}
<p>Kind regards,<br>Crashify Assessment Team</p>
{% endblock %}
"""

_INSURER = """{% extends "base.html" %}
{% block title %}Assessment Report{% endblock %}
{% block content %}
<p>Dear {{ recipient_name or a.your_name or "Team" }},</p>
<p>Please find attached the complete assessment report{% if a.claim_reference %} for claim {{ a.claim_reference }}{% endif %}.</p>
<div class="info-box">
    <h3 style="margin-top: 0; color: #DC2626;">ASSESSMENT SUMMARY</h3>
    <p><strong>Vehicle:</strong> {{ vehicle }}</p>
    {% if a.registration %}<p><strong>Registration:</strong> {{ a.registration }}</p>{% endif %}
    {% if a.claim_reference %}<p><strong>Claim:</strong> {{ a.claim_reference }}</p>{% endif %}
    <p><strong>Assessment #:</strong> {{ a.id }}</p>
    {% if assessment_date %}<p><strong>Assessment Date:</strong> {{ assessment_date }}</p>{% endif %}
    {% if owner_name %}<p><strong>Insured:</strong> {{ owner_name }}</p>{% endif %}
    {% if a.incident_description %}<p><strong>Incident:</strong> {{ a.incident_description }}</p>{% endif %}
</div>
<p><strong>ATTACHED DOCUMENTS</strong></p>
<ul>{% for name in attachments %}<li>{{ name }}</li>{% endfor %}</ul>
{% if notes %}<div class="info-box"><p><strong>Additional Notes:</strong></p><p>{{ notes }}</p></div>{% endif %}
<p>Please contact us if you require any additional information or clarification.</p>
<p>Kind regards,<br>Crashify Assessment Team</p>
{% endblock %}
"""

_CONTACT = """{% extends "base.html" %}
{% block title %}New Contact Message{% endblock %}
{% block content %}
<p>You have received a new message from the website contact form.</p>
<div class="info-box">
    <p><strong>Name:</strong> {{ name }}</p>
    <p><strong>Email:</strong> {{ email }}</p>
    <p><strong>Message:</strong></p>
    <p>{{ message }}</p>
</div>
{% endblock %}
"""

_env = Environment(
    loader=DictLoader({
        "base.html": _BASE,
        "repairer.html": _REPAIRER,
        "insurer.html": _INSURER,
        "contact.html": _CONTACT,
    }),
    autoescape=select_autoescape(default=True, default_for_string=True),
)


def _multiline(text: Optional[str]) -> Optional[Markup]:
    if not text:
        return None
    return Markup("<br>").join(escape(line) for line in text.split("\n"))


def owner_name(owner_info: Optional[Dict[str, Any]]) -> str:
    if not owner_info:
        return ""
    return f"{owner_info.get('firstName') or ''} {owner_info.get('lastName') or ''}".strip()


def vehicle_display(assessment) -> str:
    """e.g. "Toyota Corolla (2019) - ABC123" """
    text = f"{assessment.make} {assessment.model}"
    if assessment.year:
        text += f" ({assessment.year})"
    if assessment.registration:
        text += f" - {assessment.registration}"
    return text


def render_repairer_email(assessment, attachments, notes: Optional[str] = None) -> str:
    return _env.get_template("repairer.html").render(
        a=assessment,
        vehicle=vehicle_display(assessment),
        owner_name=owner_name(assessment.owner_info),
        attachments=attachments,
        notes=_multiline(notes),
        year=datetime.now().year,
    )


def render_insurer_email(assessment, attachments, notes: Optional[str] = None, recipient_name: Optional[str] = None) -> str:
    created = assessment.created_at.strftime("%d %B %Y") if assessment.created_at else None
    return _env.get_template("insurer.html").render(
        a=assessment,
        vehicle=vehicle_display(assessment),
        owner_name=owner_name(assessment.owner_info),
        assessment_date=created,
        recipient_name=recipient_name,
        attachments=attachments,
        notes=_multiline(notes),
        year=datetime.now().year,
    )


def render_contact_email(name: str, email: str, message: str) -> str:
    return _env.get_template("contact.html").render(
        name=name,
        email=email,
        message=_multiline(message),
        year=datetime.now().year,
    )
