# onboard/forms/validators.py
import re

# Losse patronen, bewust niet strenger dan het formulier in de browser
EMAIL_RE = re.compile(r".+@.+\..+")
PHONE_RE = re.compile(r"^\+?[0-9()\-\s]{7,20}$")
INSTAGRAM_RE = re.compile(r"^[a-zA-Z0-9._]{1,30}$")
URL_RE = re.compile(
    r"^(https?://)?([\w-]+\.)+[\w-]{2,}(/[\w\-._~:/?#\[\]@!$&'()*+,;=.]+)?$",
    re.ASCII,
)


def strip_handle(value: str) -> str:
    return value.lstrip("@")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.search(value))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_RE.fullmatch(value))


def is_valid_instagram(value: str) -> bool:
    # max 30 tekens, mag niet op een punt eindigen
    return bool(INSTAGRAM_RE.fullmatch(value)) and not value.endswith(".")


def is_valid_url(value: str) -> bool:
    # fullmatch: geen afsluitende newline
    return bool(URL_RE.fullmatch(value))
