import re


def validate_email(email):
    return re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', email or "") is not None


def validate_phone(phone):
    return re.match(r'^\+?\d{9,15}$', phone or "") is not None


def format_ugx(amount):
    return f"UGX {amount:,}"
