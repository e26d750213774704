import re

from errors import BadRequestError
from models import ContactSubmission, SubscribeRequest


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 5000


def validate_email(email: str) -> str:
    if not EMAIL_PATTERN.fullmatch(email):
        raise BadRequestError("Invalid email format")
    return email


def validate_contact(submission: ContactSubmission) -> ContactSubmission:
    """Check a contact form submission, raising BadRequestError with a user-facing message"""
    if not (
        submission.name
        and submission.email
        and submission.message
        and submission.turnstile_token
    ):
        raise BadRequestError("All fields are required")

    validate_email(submission.email)

    if len(submission.message) < MESSAGE_MIN_LENGTH:
        raise BadRequestError(
            f"Message must be at least {MESSAGE_MIN_LENGTH} characters"
        )
    if len(submission.message) > MESSAGE_MAX_LENGTH:
        raise BadRequestError(
            f"Message is too long (max {MESSAGE_MAX_LENGTH} characters)"
        )
    return submission


def validate_subscription(request: SubscribeRequest) -> str:
    if not request.email or "@" not in request.email:
        raise BadRequestError("Valid email is required")
    return validate_email(request.email)
