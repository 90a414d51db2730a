"""
HTML email templates for marketplace notifications.

Every builder returns ``(subject, html)``. User-supplied text (names,
titles, messages) is HTML-escaped.
"""

from __future__ import annotations

from decimal import Decimal
from html import escape
from typing import Optional, Tuple


EmailContent = Tuple[str, str]

_PARAGRAPH = '<p style="margin: 0 0 16px 0; color: #3f3f46; line-height: 1.5;">{}</p>'


def _layout(content: str, base_url: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Flock &amp; Fur</title></head>
<body style="margin: 0; padding: 40px 0; background-color: #f4f4f5; font-family: Arial, sans-serif;">
  <div style="max-width: 600px; margin: 0 auto;">
    <h1 style="text-align: center; font-size: 24px; color: #18181b;">Flock &amp; Fur</h1>
    <div style="background-color: #ffffff; padding: 40px; border-radius: 8px;">
      {content}
    </div>
    <p style="text-align: center; color: #71717a; font-size: 12px;">
      Flock &amp; Fur - Animal Cleanup Services in Birmingham, AL<br>
      <a href="{base_url}" style="color: #71717a;">Visit our website</a>
    </p>
  </div>
</body>
</html>"""


def _button(text: str, url: str) -> str:
    return (
        f'<a href="{url}" style="display: inline-block; padding: 12px 24px; '
        f'background-color: #18181b; color: #ffffff; text-decoration: none; '
        f'border-radius: 6px;">{text}</a>'
    )


def _money(amount: Optional[Decimal]) -> str:
    return f"${amount:.2f}" if amount is not None else "-"


def _render(heading: str, greeting_name: str, paragraphs, button: Tuple[str, str], base_url: str) -> str:
    body = [
        f'<h2 style="margin: 0 0 16px 0; color: #18181b; font-size: 20px;">{heading}</h2>',
        _PARAGRAPH.format(f"Hi {escape(greeting_name)},"),
    ]
    body.extend(_PARAGRAPH.format(p) for p in paragraphs)
    body.append(_button(*button))
    return _layout("\n".join(body), base_url)


# =============================================================================
# APPLICATIONS
# =============================================================================

def application_received(
    *,
    client_name: str,
    cleaner_name: str,
    job_title: str,
    proposed_price: Optional[Decimal],
    message: Optional[str],
    job_url: str,
    base_url: str,
) -> EmailContent:
    paragraphs = [
        f"<strong>{escape(cleaner_name)}</strong> has applied to your job: "
        f"<strong>{escape(job_title)}</strong>",
    ]
    if proposed_price is not None:
        paragraphs.append(f"<strong>Proposed price:</strong> {_money(proposed_price)}")
    if message:
        paragraphs.append(f"<strong>Message:</strong> \"{escape(message)}\"")
    paragraphs.append("Review their application and accept if you'd like to work with them.")

    subject = f'New application for "{job_title}"'
    return subject, _render(
        "New Application Received", client_name, paragraphs,
        ("View Application", job_url), base_url,
    )


def application_accepted(
    *,
    cleaner_name: str,
    client_name: str,
    job_title: str,
    agreed_price: Decimal,
    cleaner_payout: Decimal,
    job_address: str,
    job_url: str,
    base_url: str,
) -> EmailContent:
    paragraphs = [
        f"Great news! <strong>{escape(client_name)}</strong> has accepted your "
        f"application for: <strong>{escape(job_title)}</strong>",
        f"<strong>Agreed price:</strong> {_money(agreed_price)}<br>"
        f"<strong>Your payout:</strong> {_money(cleaner_payout)}<br>"
        f"<strong>Location:</strong> {escape(job_address)}",
        "You can now start working on this job when you're ready.",
    ]
    subject = f'You\'ve been accepted for "{job_title}"'
    return subject, _render(
        "Congratulations!", cleaner_name, paragraphs,
        ("View Job Details", job_url), base_url,
    )


# =============================================================================
# JOB PROGRESS
# =============================================================================

def job_started(*, client_name: str, cleaner_name: str, job_title: str, job_url: str, base_url: str) -> EmailContent:
    paragraphs = [
        f"<strong>{escape(cleaner_name)}</strong> has started working on your job: "
        f"<strong>{escape(job_title)}</strong>",
        "You'll receive another notification when they mark the job as complete with photos.",
    ]
    subject = f'{cleaner_name} has started working on "{job_title}"'
    return subject, _render("Job In Progress", client_name, paragraphs, ("View Job", job_url), base_url)


def job_completed(
    *,
    client_name: str,
    cleaner_name: str,
    job_title: str,
    agreed_price: Decimal,
    job_url: str,
    base_url: str,
) -> EmailContent:
    paragraphs = [
        f"<strong>{escape(cleaner_name)}</strong> has marked your job as complete: "
        f"<strong>{escape(job_title)}</strong>",
        "Please review the completion photos and confirm the job is done to your "
        f"satisfaction. Once confirmed, you'll be prompted to pay <strong>{_money(agreed_price)}</strong>.",
    ]
    subject = f'"{job_title}" has been completed - Please confirm'
    return subject, _render("Job Completed", client_name, paragraphs, ("Review & Confirm", job_url), base_url)


def job_confirmed(
    *,
    cleaner_name: str,
    client_name: str,
    job_title: str,
    cleaner_payout: Decimal,
    job_url: str,
    base_url: str,
) -> EmailContent:
    paragraphs = [
        f"<strong>{escape(client_name)}</strong> has confirmed that <strong>{escape(job_title)}</strong> "
        "was completed to their satisfaction.",
        f"Your payout of <strong>{_money(cleaner_payout)}</strong> will be sent once the client's payment is processed.",
    ]
    subject = f'"{job_title}" confirmed - Payment incoming'
    return subject, _render("Job Confirmed!", cleaner_name, paragraphs, ("View Job", job_url), base_url)


def payment_processed(
    *,
    cleaner_name: str,
    job_title: str,
    cleaner_payout: Decimal,
    job_url: str,
    base_url: str,
) -> EmailContent:
    paragraphs = [
        f"Payment for <strong>{escape(job_title)}</strong> has been processed.",
        f"<strong>{_money(cleaner_payout)}</strong> is on its way to your connected payout account.",
    ]
    subject = f'Payment received for "{job_title}"'
    return subject, _render("Payment Processed", cleaner_name, paragraphs, ("View Job", job_url), base_url)


# =============================================================================
# REVIEWS & DISPUTES
# =============================================================================

def review_received(
    *,
    reviewee_name: str,
    reviewer_name: str,
    job_title: str,
    rating: int,
    comment: Optional[str],
    profile_url: str,
    base_url: str,
) -> EmailContent:
    stars = "★" * rating + "☆" * (5 - rating)
    paragraphs = [
        f"<strong>{escape(reviewer_name)}</strong> left you a review for "
        f"<strong>{escape(job_title)}</strong>: {stars}",
    ]
    if comment:
        paragraphs.append(f"\"{escape(comment)}\"")
    subject = f"You received a {rating}-star review"
    return subject, _render("New Review", reviewee_name, paragraphs, ("View Profile", profile_url), base_url)


def dispute_filed(
    *,
    cleaner_name: str,
    job_title: str,
    reason: str,
    job_url: str,
    base_url: str,
) -> EmailContent:
    paragraphs = [
        f"The client has filed a dispute on <strong>{escape(job_title)}</strong>.",
        f"<strong>Reason:</strong> {escape(reason)}",
        "Payment is on hold until an administrator reviews the dispute.",
    ]
    subject = f'Dispute filed for "{job_title}"'
    return subject, _render("Dispute Filed", cleaner_name, paragraphs, ("View Job", job_url), base_url)


RESOLUTION_MESSAGES = {
    "refund_client": "The client has been issued a full refund.",
    "pay_cleaner": "The cleaner has been paid in full.",
    "partial_refund": "A partial resolution has been applied.",
}


def dispute_resolved(
    *,
    recipient_name: str,
    job_title: str,
    resolution: str,
    notes: Optional[str],
    job_url: str,
    base_url: str,
) -> EmailContent:
    paragraphs = [
        f"The dispute on <strong>{escape(job_title)}</strong> has been resolved.",
        RESOLUTION_MESSAGES.get(resolution, "The dispute has been closed."),
    ]
    if notes:
        paragraphs.append(f"<strong>Notes:</strong> {escape(notes)}")
    subject = f'Dispute resolved for "{job_title}"'
    return subject, _render("Dispute Resolved", recipient_name, paragraphs, ("View Job", job_url), base_url)
