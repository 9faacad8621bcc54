"""
Input Validators

Field-level checks for mood and user records before they reach the store.
Each validator raises ValidationError carrying a field -> message map.
"""

import re

from bs4 import BeautifulSoup

from models import Mood, UserCreate
from utils.errors import FieldErrors

HEX_COLOR_RX = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

MAX_TITLE_LENGTH = 100
MAX_EMOTION_LENGTH = 50
MAX_EMOJI_LENGTH = 4
MIN_PASSWORD_LENGTH = 8


def not_blank(value: str) -> bool:
    return bool(value) and value.strip() != ""


def plain_text(html: str) -> str:
    """Strip all markup from rich-text content"""
    return BeautifulSoup(html or "", "html.parser").get_text()


def validate_mood(mood: Mood):
    """Validate a mood entry; raises ValidationError listing every bad field."""
    v = FieldErrors()

    v.check(not_blank(mood.title), "title", "must be provided")
    v.check(len(mood.title) <= MAX_TITLE_LENGTH, "title", "must not be more than 100 characters long")

    v.check(not_blank(plain_text(mood.content)), "content", "must be provided")

    v.check(not_blank(mood.emotion), "emotion", "name must be provided")
    v.check(len(mood.emotion) <= MAX_EMOTION_LENGTH, "emotion", "name must not be more than 50 characters long")

    v.check(not_blank(mood.emoji), "emoji", "must be provided")
    v.check(len(mood.emoji) <= MAX_EMOJI_LENGTH, "emoji", "is too long for a typical emoji")

    v.check(not_blank(mood.color), "color", "must be provided")
    v.check(bool(HEX_COLOR_RX.match(mood.color)), "color", "must be a valid hex color code (e.g., #FFD700)")

    v.raise_if_any()


def validate_user(user: UserCreate):
    """Validate a new account request."""
    v = FieldErrors()

    v.check(not_blank(user.name), "name", "must be provided")
    v.check(not_blank(user.email), "email", "must be provided")
    v.check(bool(EMAIL_RX.match(user.email)), "email", "must be a valid email address")
    v.check(len(user.password) >= MIN_PASSWORD_LENGTH, "password", "must be at least 8 characters long")
    v.check(len(user.password.encode("utf-8")) <= 72, "password", "must not be more than 72 bytes long")

    v.raise_if_any()
