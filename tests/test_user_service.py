import pytest

from printhub.engine.models import Tier
from printhub.services.record_store import JsonRecordStore, RecordNotFound
from printhub.services.user_service import UserService


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def users(settings, clock):
    return UserService(JsonRecordStore(settings.users_json), clock=clock)


def test_register_with_code_issues_token(users):
    code = users.request_otp("+91 98765-43210")
    user, token = users.register(name="Asha", phone="+91 98765-43210", otp=code, tier="student")

    assert user["phone"] == "+919876543210"
    assert user["tier"] == "student"
    assert user["role"] == "user"
    assert "token_hashes" not in user
    assert users.authenticate(token)["id"] == user["id"]


def test_codes_are_six_digits(users):
    code = users.request_otp("12345")
    assert len(code) == 6
    assert code.isdigit()


def test_wrong_code_rejected(users):
    code = users.request_otp("12345")
    wrong = "000000" if code != "000000" else "111111"
    with pytest.raises(ValueError, match="Invalid OTP"):
        users.register(name="Asha", phone="12345", otp=wrong)
    assert users.find_by_phone("12345") is None


def test_expired_code_rejected(users, clock):
    code = users.request_otp("12345")
    clock.now += 5 * 60 + 1
    with pytest.raises(ValueError, match="expired"):
        users.register(name="Asha", phone="12345", otp=code)


def test_code_valid_until_expiry(users, clock):
    code = users.request_otp("12345")
    clock.now += 5 * 60
    user, _ = users.register(name="Asha", phone="12345", otp=code)
    assert user["name"] == "Asha"


def test_code_is_single_use(users):
    code = users.request_otp("12345")
    users.register(name="Asha", phone="12345", otp=code)
    with pytest.raises(ValueError, match="OTP not found"):
        users.login("12345", code)


def test_new_code_replaces_old_one(users):
    first = users.request_otp("12345")
    second = users.request_otp("12345")
    if first != second:
        with pytest.raises(ValueError, match="Invalid OTP"):
            users.register(name="Asha", phone="12345", otp=first)
    users.register(name="Asha", phone="12345", otp=second)


def test_code_bound_to_phone(users):
    code = users.request_otp("12345")
    with pytest.raises(ValueError, match="OTP not found"):
        users.register(name="Ravi", phone="67890", otp=code)


def test_expired_codes_are_purged(users, clock):
    users.request_otp("1")
    clock.now += 5 * 60 + 1
    users.request_otp("2")
    assert list(users._otps) == ["2"]


def test_login_requires_code(users):
    admin, _ = users.create_user(name="Admin", phone="100", role="admin")
    with pytest.raises(ValueError, match="required"):
        users.login("100", "")
    with pytest.raises(ValueError, match="OTP not found"):
        users.login("100", "123456")

    code = users.request_otp("100")
    user, token = users.login("100", code)
    assert user["id"] == admin["id"]
    assert users.authenticate(token)["role"] == "admin"


def test_duplicate_phone_rejected(users):
    users.create_user(name="Asha", phone="12345")
    code = users.request_otp("12345")
    with pytest.raises(ValueError, match="already exists"):
        users.register(name="Other", phone="12345", otp=code)


def test_login_adds_token(users):
    user, first = users.create_user(name="Asha", phone="12345")
    _, second = users.login("12345", users.request_otp("12345"))

    assert first != second
    assert users.authenticate(first)["id"] == user["id"]
    assert users.authenticate(second)["id"] == user["id"]


def test_login_unknown_phone(users):
    with pytest.raises(RecordNotFound):
        users.login("999", users.request_otp("999"))


def test_bad_token(users):
    assert users.authenticate("not-a-token") is None
    assert users.authenticate(None) is None


def test_self_update_cannot_change_role(users):
    user, _ = users.create_user(name="Asha", phone="12345")
    with pytest.raises(ValueError, match="role"):
        users.update_user(user["id"], {"role": "admin"})

    updated = users.update_user(user["id"], {"tier": "Institute"})
    assert updated["tier"] == "institute"


def test_admin_update_role(users):
    user, _ = users.create_user(name="Asha", phone="12345")
    assert users.update_user(user["id"], {"role": "admin"}, as_admin=True)["role"] == "admin"


def test_list_users_by_tier(users):
    users.create_user(name="A", phone="1", tier="student")
    users.create_user(name="B", phone="2", tier="regular")
    assert [u["name"] for u in users.list_users(tier="student")] == ["A"]
    assert len(users.list_users()) == 2


def test_tier_for_guest_is_regular(users):
    assert users.tier_for(None) is Tier.REGULAR
    assert users.tier_for({"tier": "student"}) is Tier.STUDENT
