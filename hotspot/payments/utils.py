import hashlib
import hmac
import re
import secrets
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from urllib.parse import quote

import phonenumbers
from django.conf import settings
from phonenumber_field.phonenumber import PhoneNumber

PACKAGE_TYPE_RE = re.compile(r'^[A-Za-z0-9]{1,16}$')
BASE36_DIGITS = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ'
MAC_PLACEHOLDER = 'DEVICE'


def now_millis():
    return int(time.time() * 1000)


def to_base36(number):
    if number == 0:
        return '0'
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(BASE36_DIGITS[rem])
    return ''.join(reversed(digits))


def is_valid_package_type(package_type):
    return bool(package_type) and bool(PACKAGE_TYPE_RE.match(str(package_type)))


def generate_reference(package_type):
    """Build a client reference: WIFI-{PACKAGE}-{millis}-{8 hex chars}."""
    random_part = secrets.token_hex(4).upper()
    return f"WIFI-{str(package_type).upper()}-{now_millis()}-{random_part}"


def short_mac(mac_address):
    """Six hex characters taken from the device half of a MAC address."""
    if not mac_address:
        return MAC_PLACEHOLDER
    cleaned = re.sub(r'[^a-fA-F0-9]', '', str(mac_address))
    segment = cleaned[6:12].upper()
    if len(segment) < 6:
        return MAC_PLACEHOLDER
    return segment


def generate_voucher_code(package_type, mac_address=None):
    """Voucher used as both username and password on the hotspot login page.

    Format: {PACKAGE}-{MAC6}-{base36 millis}{6 hex chars}, e.g.
    ``24H-A1B2C3-M2X9K0QZ4F1A2B``.
    """
    timestamp = to_base36(now_millis())
    random_part = secrets.token_hex(3).upper()
    return f"{str(package_type).upper()}-{short_mac(mac_address)}-{timestamp}{random_part}"


def parse_amount(value):
    if value is None or isinstance(value, bool):
        raise ValueError('amount is required')
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            raise ValueError(f'amount must be finite: {value!r}')
        amount = amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f'amount is not a usable number: {value!r}')
    # Sub-cent amounts have rounded to 0.00 by now.
    if amount <= 0:
        raise ValueError(f'amount must be positive: {value!r}')
    return amount


def format_amount(value):
    """Render an amount the way the gateway expects it: "25.00"."""
    return f"{parse_amount(value):.2f}"


def normalize_customer_phone(phone, region=None):
    """Return the E.164 form of a mobile number for the configured country, or None."""
    if not phone:
        return None
    region = region or getattr(settings, 'CUSTOMER_PHONE_REGION', 'GM')
    try:
        number = PhoneNumber.from_string(str(phone), region=region)
    except phonenumbers.NumberParseException:
        return None
    expected_country = phonenumbers.country_code_for_region(region)
    if number.country_code != expected_country or not phonenumbers.is_possible_number(number):
        return None
    return number.as_e164


def mask_phone(phone):
    if not phone:
        return phone
    return phone[:4] + '*' * max(len(phone) - 6, 0) + phone[-2:]


def append_query_param(url, key, value):
    separator = '&' if '?' in url else '?'
    return f"{url}{separator}{key}={quote(str(value), safe='')}"


def is_https_url(url):
    return isinstance(url, str) and url.startswith('https://')


def compute_signature(body, secret):
    """Hex HMAC-SHA256 of the raw webhook body."""
    if isinstance(body, str):
        body = body.encode('utf-8')
    return hmac.new(secret.encode('utf-8'), body, hashlib.sha256).hexdigest()


def signatures_match(expected, supplied):
    if not supplied:
        return False
    return hmac.compare_digest(
        expected.lower().encode('utf-8'),
        str(supplied).strip().lower().encode('utf-8'),
    )
