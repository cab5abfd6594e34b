from __future__ import annotations

import re

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[a-zA-Z]{2,}$")
# 10-digit mobile number starting 6-9
PHONE_RE = re.compile(r"^[6-9]\d{9}$")
LETTERS_RE = re.compile(r"^[a-zA-Z\s]+$")


def validate_email(v: str) -> str:
    v = (v or "").strip().lower()
    if not v:
        raise ValueError("Email is required")
    if not EMAIL_RE.match(v):
        raise ValueError("Invalid email format")
    return v


def validate_phone(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("Phone number is required")
    if not re.fullmatch(r"\d{10}", v):
        raise ValueError("Phone number must be 10 digits")
    if not PHONE_RE.match(v):
        raise ValueError("Phone number must start with 6-9")
    return v
