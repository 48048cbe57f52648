# Input validation for request bodies
import re

from errors import ValidationError

USERNAME_PATTERN = re.compile(r'[a-zA-Z][a-zA-Z0-9_]*')
TRAILING_DIGITS_PATTERN = re.compile(r'\d{5,}\Z')
EMAIL_PATTERN = re.compile(r'[^@\s]+@[^@\s]+\.[^@\s]+')
PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)')

POST_MAX_LENGTH = 1000
COMMENT_MAX_LENGTH = 500
BIO_MAX_LENGTH = 200


def validate_username(username):
    """Return the first rule `username` breaks, or None when it is acceptable."""
    if not isinstance(username, str) or not 3 <= len(username) <= 30:
        return 'Username must be between 3 and 30 characters'
    if not USERNAME_PATTERN.fullmatch(username):
        return ('Username must start with a letter and can only contain '
                'letters, numbers, and underscores')
    if TRAILING_DIGITS_PATTERN.search(username):
        return 'Username cannot end with more than 4 consecutive digits'
    letter_count = sum(1 for ch in username if ch.isascii() and ch.isalpha())
    if letter_count < 2 and len(username) > 5:
        return 'Username must contain at least 2 letters'
    return None


def normalize_email(email):
    return email.strip().lower() if isinstance(email, str) else email


def validate_email(email):
    return isinstance(email, str) and EMAIL_PATTERN.fullmatch(email) is not None


def validate_password(password):
    if not isinstance(password, str) or len(password) < 6:
        return 'Password must be at least 6 characters long'
    if not PASSWORD_PATTERN.match(password):
        return ('Password must contain at least one lowercase letter, '
                'one uppercase letter, and one number')
    return None


def _check(errors, field, message):
    if message:
        errors.append({"field": field, "message": message})


def validate_register(data):
    errors = []
    _check(errors, 'username', validate_username(data.get('username')))
    if not validate_email(normalize_email(data.get('email'))):
        _check(errors, 'email', 'Please provide a valid email')
    _check(errors, 'password', validate_password(data.get('password')))
    if errors:
        raise ValidationError(errors)


def validate_login(data):
    errors = []
    if not validate_email(normalize_email(data.get('email'))):
        _check(errors, 'email', 'Please provide a valid email')
    if not data.get('password'):
        _check(errors, 'password', 'Password is required')
    if errors:
        raise ValidationError(errors)


def validate_content(content, max_length, label):
    if not isinstance(content, str) or not 1 <= len(content) <= max_length:
        raise ValidationError([{
            "field": "content",
            "message": f"{label} must be between 1 and {max_length} characters"
        }])


def validate_post(data):
    validate_content(data.get('content'), POST_MAX_LENGTH, 'Post content')


def validate_comment(data):
    validate_content(data.get('content'), COMMENT_MAX_LENGTH, 'Comment')


def clean_tags(tags):
    """Trim tag strings, dropping empty ones."""
    if tags is None:
        return None
    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise ValidationError([{"field": "tags", "message": "Tags must be a list of strings"}])
    return [tag.strip() for tag in tags if tag.strip()]


def validate_bio(bio):
    if not isinstance(bio, str) or len(bio) > BIO_MAX_LENGTH:
        raise ValidationError([{
            "field": "bio",
            "message": f"Bio cannot be more than {BIO_MAX_LENGTH} characters"
        }])
