"""Built-in email templates.

Each template is a Jinja2 subject/HTML/text triple rendered by the
``TemplateRenderer``. Variables available to every template:
``display_name``, ``app_name`` and ``app_url``.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    html_body: str
    text_body: str


_HTML_LAYOUT_START = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{{ app_name }}</title></head>
<body style="margin: 0; padding: 0; background-color: #f4f7fa; font-family: Arial, Helvetica, sans-serif;">
<table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="padding: 40px 0;">
<tr><td align="center">
<table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background-color: #ffffff; border-radius: 8px; padding: 40px;">
<tr><td style="color: #2d3748; font-size: 16px; line-height: 1.6;">
"""

_HTML_LAYOUT_END = """
<p style="margin: 32px 0 0 0; color: #718096; font-size: 14px;">The {{ app_name }} Team</p>
</td></tr>
</table>
</td></tr>
</table>
</body>
</html>
"""

EMAIL_VERIFICATION = EmailTemplate(
    subject="Email Verification",
    html_body=_HTML_LAYOUT_START
    + """<h1 style="margin: 0 0 24px 0; font-size: 24px;">Verify your email address</h1>
<p>Hello {{ display_name }},</p>
<p>Thanks for signing up for {{ app_name }}. Please confirm your email address to activate your account.</p>
<p style="margin: 32px 0;"><a href="{{ verification_url }}" style="display: inline-block; background-color: #3498db; color: #ffffff; text-decoration: none; padding: 14px 40px; border-radius: 6px; font-weight: 600;">Verify Email Address</a></p>
<p style="word-break: break-all; color: #3498db; font-size: 14px;">{{ verification_url }}</p>
<p style="color: #718096; font-size: 14px;">This link expires in {{ expires_in_hours }} hours.</p>"""
    + _HTML_LAYOUT_END,
    text_body="""Hello {{ display_name }},

Thanks for signing up for {{ app_name }}. Please confirm your email address
to activate your account by opening this link:

{{ verification_url }}

This link expires in {{ expires_in_hours }} hours.

The {{ app_name }} Team
""",
)

RESEND_VERIFICATION = EmailTemplate(
    subject="Resend Email Verification",
    html_body=_HTML_LAYOUT_START
    + """<h1 style="margin: 0 0 24px 0; font-size: 24px;">Verify your email address</h1>
<p>Hello {{ display_name }},</p>
<p>You asked for a new verification link. Please confirm your email address to activate your account.</p>
<p style="margin: 32px 0;"><a href="{{ verification_url }}" style="display: inline-block; background-color: #3498db; color: #ffffff; text-decoration: none; padding: 14px 40px; border-radius: 6px; font-weight: 600;">Verify Email Address</a></p>
<p style="word-break: break-all; color: #3498db; font-size: 14px;">{{ verification_url }}</p>
<p style="color: #718096; font-size: 14px;">This link expires in {{ expires_in_hours }} hours.</p>"""
    + _HTML_LAYOUT_END,
    text_body="""Hello {{ display_name }},

You asked for a new verification link. Please confirm your email address
to activate your account by opening this link:

{{ verification_url }}

This link expires in {{ expires_in_hours }} hours.

The {{ app_name }} Team
""",
)

PASSWORD_RESET = EmailTemplate(
    subject="Password Reset",
    html_body=_HTML_LAYOUT_START
    + """<h1 style="margin: 0 0 24px 0; font-size: 24px;">Reset your password</h1>
<p>Hello {{ display_name }},</p>
<p>We received a request to reset your password. Use this code to choose a new one:</p>
<p style="margin: 32px 0; font-size: 32px; font-weight: 700; letter-spacing: 8px; text-align: center;">{{ code }}</p>
<p style="color: #718096; font-size: 14px;">The code expires in {{ expires_in_minutes }} minutes. If you did not request a password reset, you can ignore this email.</p>"""
    + _HTML_LAYOUT_END,
    text_body="""Hello {{ display_name }},

We received a request to reset your password. Use this code to choose a new one:

    {{ code }}

The code expires in {{ expires_in_minutes }} minutes. If you did not request
a password reset, you can ignore this email.

The {{ app_name }} Team
""",
)

PASSWORD_RESET_SUCCESS = EmailTemplate(
    subject="Password Reset Successful",
    html_body=_HTML_LAYOUT_START
    + """<h1 style="margin: 0 0 24px 0; font-size: 24px;">Your password was changed</h1>
<p>Hello {{ display_name }},</p>
<p>The password for your {{ app_name }} account has been reset and you have been signed out on all devices.</p>
<p style="color: #718096; font-size: 14px;">If you did not make this change, reset your password again immediately.</p>"""
    + _HTML_LAYOUT_END,
    text_body="""Hello {{ display_name }},

The password for your {{ app_name }} account has been reset and you have
been signed out on all devices.

If you did not make this change, reset your password again immediately.

The {{ app_name }} Team
""",
)

VERIFICATION_SUCCESS_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Email verified - {{ app_name }}</title>
</head>
<body style="margin: 0; min-height: 100vh; display: flex; align-items: center; justify-content: center; background-color: #f4f7fa; font-family: Arial, Helvetica, sans-serif;">
<div style="background-color: #ffffff; border-radius: 8px; padding: 48px; max-width: 480px; text-align: center;">
<h1 style="margin: 0 0 16px 0; color: #2d3748;">Email verified</h1>
<p style="color: #4a5568; font-size: 16px; line-height: 1.6;">Thank you, {{ display_name }}. Your email address has been confirmed and your account is ready to use.</p>
<p style="margin-top: 32px;"><a href="{{ app_url }}" style="color: #3498db;">Continue to {{ app_name }}</a></p>
</div>
</body>
</html>
"""
