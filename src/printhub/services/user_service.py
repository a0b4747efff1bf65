"""
User Service - Customer records, pricing tiers, one-time codes and bearer
tokens.

Signing in is a two-step exchange: request_otp() issues a 6-digit code for a
phone number, and register()/login() redeem it for a bearer token. Codes
expire after OTP_TTL_SECONDS and are single use. Tokens are opaque random
strings. Only SHA-256 digests of codes and tokens are kept.
"""
import hashlib
import hmac
import logging
import re
import secrets
import threading
import time
from typing import Callable, Optional

from ..engine.models import Tier
from .record_store import JsonRecordStore, RecordNotFound, utc_now

logger = logging.getLogger(__name__)

ROLES = ('user', 'admin')
OTP_TTL_SECONDS = 5 * 60
OTP_DIGITS = 6

# Fields a user may change on their own record
SELF_EDITABLE_FIELDS = {'name', 'email', 'tier'}
ADMIN_EDITABLE_FIELDS = SELF_EDITABLE_FIELDS | {'role', 'phone'}


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _normalize_phone(phone: str) -> str:
    return re.sub(r"[\s\-()]", "", str(phone or ""))


def generate_otp() -> str:
    return f"{secrets.randbelow(10 ** OTP_DIGITS):0{OTP_DIGITS}d}"


def public_user(user: Optional[dict]) -> Optional[dict]:
    """User record without credential material."""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k != 'token_hashes'}


class UserService:
    """Service for managing users, sign-in codes and bearer tokens."""

    def __init__(self, store: JsonRecordStore, otp_ttl_seconds: int = OTP_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        self.store = store
        self.otp_ttl_seconds = otp_ttl_seconds
        self.clock = clock
        # phone -> (code digest, expiry timestamp)
        self._otps: dict[str, tuple[str, float]] = {}
        self._otp_lock = threading.Lock()

    def find_by_phone(self, phone: str) -> Optional[dict]:
        phone = _normalize_phone(phone)
        matches = self.store.list(lambda u: u.get('phone') == phone)
        return matches[0] if matches else None

    # ------------------------------------------------------------------
    # One-time codes
    # ------------------------------------------------------------------

    def _purge_expired_otps(self, now: float):
        for phone in [p for p, (_, expires_at) in self._otps.items() if now > expires_at]:
            del self._otps[phone]

    def request_otp(self, phone: str) -> str:
        """Issue a sign-in code for a phone number, replacing any earlier one."""
        phone = _normalize_phone(phone)
        if not phone:
            raise ValueError("Phone number is required")

        code = generate_otp()
        now = self.clock()
        with self._otp_lock:
            self._purge_expired_otps(now)
            self._otps[phone] = (_hash_token(code), now + self.otp_ttl_seconds)
        logger.info("Issued sign-in code for %s", phone)
        return code

    def verify_otp(self, phone: str, code: Optional[str]):
        """Consume a sign-in code. Raises ValueError when it is missing, expired or wrong."""
        phone = _normalize_phone(phone)
        if not phone or not code:
            raise ValueError("Phone number and OTP are required")

        now = self.clock()
        with self._otp_lock:
            stored = self._otps.get(phone)
            if stored is None:
                raise ValueError("OTP not found. Please request a new one.")
            digest, expires_at = stored
            if now > expires_at:
                del self._otps[phone]
                raise ValueError("OTP expired. Please request a new one.")
            if not hmac.compare_digest(digest, _hash_token(str(code).strip())):
                raise ValueError("Invalid OTP")
            del self._otps[phone]

    # ------------------------------------------------------------------
    # Accounts and tokens
    # ------------------------------------------------------------------

    def create_user(self, name: str, phone: str, email: Optional[str] = None,
                    tier=Tier.REGULAR, role: str = 'user') -> tuple[dict, str]:
        """Create a user and issue a token without a sign-in code. Returns (user, token)."""
        phone = _normalize_phone(phone)
        if not name or not name.strip():
            raise ValueError("Name is required")
        if not phone:
            raise ValueError("Phone number is required")
        if role not in ROLES:
            raise ValueError(f"Unknown role '{role}'")
        if self.find_by_phone(phone):
            raise ValueError("A user with this phone number already exists")

        token = secrets.token_urlsafe(32)
        user = self.store.add({
            'name': name.strip(),
            'phone': phone,
            'email': email or f"{phone.lstrip('+')}@printhub.app",
            'tier': Tier.normalize(tier).value,
            'role': role,
            'created_at': utc_now(),
            'last_active': utc_now(),
            'orders': 0,
            'total_spent': 0,
            'token_hashes': [_hash_token(token)],
        })
        logger.info("Created %s %s (%s)", role, user['id'], user['tier'])
        return public_user(user), token

    def register(self, name: str, phone: str, otp: str, email: Optional[str] = None,
                 tier=Tier.REGULAR) -> tuple[dict, str]:
        """Redeem a sign-in code for a new customer account."""
        if self.find_by_phone(phone):
            raise ValueError("A user with this phone number already exists")
        self.verify_otp(phone, otp)
        return self.create_user(name=name, phone=phone, email=email, tier=tier)

    def login(self, phone: str, otp: str) -> tuple[dict, str]:
        """Redeem a sign-in code for a fresh token on an existing account."""
        self.verify_otp(phone, otp)
        user = self.find_by_phone(phone)
        if user is None:
            raise RecordNotFound("User not found. Please register first.")

        token = secrets.token_urlsafe(32)
        user = self.store.update(user['id'], {
            'last_active': utc_now(),
            'token_hashes': list(user.get('token_hashes', [])) + [_hash_token(token)],
        })
        return public_user(user), token

    def authenticate(self, token: Optional[str]) -> Optional[dict]:
        """Resolve a bearer token to its user, or None."""
        if not token:
            return None
        digest = _hash_token(token)
        matches = self.store.list(lambda u: digest in u.get('token_hashes', []))
        return public_user(matches[0]) if matches else None

    def get_user(self, user_id: str) -> Optional[dict]:
        return public_user(self.store.get(user_id))

    def list_users(self, tier: Optional[str] = None) -> list[dict]:
        users = self.store.list()
        if tier and tier != 'all':
            wanted = Tier.normalize(tier).value
            users = [u for u in users if u.get('tier') == wanted]
        return [public_user(u) for u in users]

    def update_user(self, user_id: str, updates: dict, as_admin: bool = False) -> dict:
        allowed = ADMIN_EDITABLE_FIELDS if as_admin else SELF_EDITABLE_FIELDS
        rejected = set(updates) - allowed
        if rejected:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(rejected))}")

        changes = dict(updates)
        if 'tier' in changes:
            changes['tier'] = Tier.normalize(changes['tier']).value
        if 'role' in changes and changes['role'] not in ROLES:
            raise ValueError(f"Unknown role '{changes['role']}'")
        if 'phone' in changes:
            changes['phone'] = _normalize_phone(changes['phone'])

        user = self.store.update(user_id, changes)
        logger.info("Updated user %s fields %s", user_id, sorted(changes))
        return public_user(user)

    def record_order(self, user_id: str, amount) -> None:
        """Bump a user's order count and spend after an order is placed."""
        user = self.store.get(user_id)
        if user is None:
            return
        self.store.update(user_id, {
            'orders': int(user.get('orders', 0)) + 1,
            'total_spent': float(user.get('total_spent', 0)) + float(amount),
            'last_active': utc_now(),
        })

    @staticmethod
    def tier_for(user: Optional[dict]) -> Tier:
        """Pricing tier of a user; anonymous callers pay regular prices."""
        if user is None:
            return Tier.REGULAR
        return Tier.normalize(user.get('tier'))

    @staticmethod
    def is_admin(user: Optional[dict]) -> bool:
        return bool(user) and user.get('role') == 'admin'
