# security.py
import math
import re

VIN_MAX_LENGTH = 17
PLATE_MAX_LENGTH = 10


def sanitize_input(text):
    """Sanitize input text"""
    if text is None:
        return None
    return str(text).strip()


def normalize_vin(vin):
    """Normalize VIN format"""
    if not vin:
        return ""
    return re.sub(r"\s+", "", str(vin)).upper()


def normalize_plate(plate):
    """Upper-case a license plate; blank plates become None."""
    plate = sanitize_input(plate)
    if not plate:
        return None
    return plate.upper()


def validate_vin(vin):
    """Validate VIN length (1-17 characters once whitespace is removed)"""
    clean_vin = normalize_vin(vin)
    return 0 < len(clean_vin) <= VIN_MAX_LENGTH


def validate_plate(plate):
    """Validate license plate length; an empty plate is allowed"""
    plate = normalize_plate(plate)
    if plate is None:
        return True
    return len(plate) <= PLATE_MAX_LENGTH


def validate_numeric(value, min_val=None, max_val=None):
    """Validate numeric values"""
    try:
        num = float(value)
        if not math.isfinite(num):
            return False
        if min_val is not None and num < min_val:
            return False
        if max_val is not None and num > max_val:
            return False
        return True
    except (ValueError, TypeError):
        return False


def parse_price(value):
    """Coerce price text to a float.

    Blank text is 0 and a decimal comma is accepted. Returns None when the
    value is not a finite, non-negative number.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        text = str(value)
    else:
        text = str(value).strip().replace(",", ".")
    if text == "":
        return 0.0
    if not validate_numeric(text, min_val=0):
        return None
    return float(text)
