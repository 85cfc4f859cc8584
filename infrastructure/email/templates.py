"""Jinja2 rendering of the one-time-code emails.

Each purpose maps to an HTML template under templates/emails/ plus a plain
text fallback built here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from schemas.models.token import OTP_PURPOSE_PASSWORD_RESET, OTP_PURPOSE_VERIFICATION

_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "templates",
    "emails",
)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html_body: str
    text_body: str


_SUBJECTS = {
    OTP_PURPOSE_VERIFICATION: "Email Verification Code",
    OTP_PURPOSE_PASSWORD_RESET: "Password Reset Code",
}

_TEMPLATES = {
    OTP_PURPOSE_VERIFICATION: "verification.html",
    OTP_PURPOSE_PASSWORD_RESET: "password_reset.html",
}

_TEXT_LEADS = {
    OTP_PURPOSE_VERIFICATION: "Your verification code is",
    OTP_PURPOSE_PASSWORD_RESET: "Your password reset code is",
}


class EmailTemplates:
    def __init__(
        self,
        app_name: str,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._app_name = app_name
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def one_time_code(
        self,
        purpose: str,
        code: str,
        expiry_minutes: int,
        user_name: Optional[str] = None,
    ) -> RenderedEmail:
        subject = f"{_SUBJECTS[purpose]} - {self._app_name}"
        template = self._jinja.get_template(_TEMPLATES[purpose])
        html_body = template.render(
            otp_code=code,
            user_name=user_name,
            expiry_minutes=expiry_minutes,
            app_name=self._app_name,
        )
        text_body = (
            f"Hello{f' {user_name}' if user_name else ''},\n\n"
            f"{_TEXT_LEADS[purpose]}: {code}\n\n"
            f"It expires in {expiry_minutes} minutes.\n\n"
            f"If you didn't request this, you can safely ignore this email."
        )
        return RenderedEmail(subject=subject, html_body=html_body, text_body=text_body)
