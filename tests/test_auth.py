import pytest

from sareestage.core.auth import ACCOUNTS_KEY, AuthService
from sareestage.core.entitlements import EntitlementRecord, UserIdentity
from sareestage.core.errors import AuthenticationError, PersistenceError


@pytest.fixture
def auth(session, entitlements):
    return AuthService(session, entitlements)


async def test_signup_starts_on_free_tier(auth, entitlements):
    user = await auth.signup_with_email("Priya@Gmail.com", "secret123")

    assert user.email == "priya@gmail.com"
    assert auth.get_current_user() == user
    identity = entitlements.resolve_identity()
    assert identity == UserIdentity(id=user.uid, is_guest=False)
    assert entitlements.get_balance(identity) == EntitlementRecord(credits=0, plan="free_tier")


async def test_duplicate_signup_rejected(auth):
    await auth.signup_with_email("priya@gmail.com", "secret123")

    with pytest.raises(AuthenticationError) as exc_info:
        await auth.signup_with_email("priya@gmail.com", "another1")

    assert exc_info.value.message == "Email already registered"


@pytest.mark.parametrize(
    "email, password",
    [("not-an-email", "secret123"), ("priya@gmail.com", "12345")],
)
async def test_malformed_credentials(auth, email, password):
    with pytest.raises(AuthenticationError) as exc_info:
        await auth.signup_with_email(email, password)

    assert "at least 6 characters" in exc_info.value.message


async def test_login_returns_same_identity(auth):
    created = await auth.signup_with_email("priya@gmail.com", "secret123")
    await auth.logout()

    user = await auth.login_with_email("priya@gmail.com", "secret123")

    assert user.uid == created.uid


async def test_login_wrong_password(auth):
    await auth.signup_with_email("priya@gmail.com", "secret123")
    await auth.logout()

    with pytest.raises(AuthenticationError):
        await auth.login_with_email("priya@gmail.com", "wrongpass")
    assert auth.get_current_user() is None


async def test_login_unknown_account(auth):
    with pytest.raises(AuthenticationError):
        await auth.login_with_email("nobody@gmail.com", "secret123")


async def test_google_login_keeps_existing_record(auth, entitlements):
    first = await auth.login_with_google()
    entitlements.purchase_plan("spark")
    await auth.logout()

    second = await auth.login_with_google()

    assert second.uid == first.uid
    assert second.display_name == "Google User"
    assert entitlements.get_balance().credits == 10


async def test_logout_restores_guest_balance(auth, entitlements):
    guest = entitlements.resolve_identity()
    entitlements.debit(guest)

    await auth.signup_with_email("priya@gmail.com", "secret123")
    await auth.logout()

    assert entitlements.resolve_identity() == guest
    assert entitlements.get_balance().credits == 2


async def test_identity_change_notifications(auth, session):
    seen = []
    unsubscribe = session.on_identity_changed(seen.append)

    user = await auth.signup_with_email("priya@gmail.com", "secret123")
    await auth.logout()
    unsubscribe()
    await auth.login_with_email("priya@gmail.com", "secret123")

    assert seen == [user, None]


async def test_session_close_drops_listeners(auth, session):
    seen = []
    session.on_identity_changed(seen.append)
    session.close()

    await auth.login_with_google()

    assert seen == []


async def test_corrupt_registry_is_not_overwritten(auth, store):
    await auth.signup_with_email("asha@gmail.com", "secret123")
    await auth.logout()
    corrupt = store.get(ACCOUNTS_KEY)[:10]
    store.set(ACCOUNTS_KEY, corrupt)

    with pytest.raises(PersistenceError):
        await auth.signup_with_email("meera@gmail.com", "secret123")
    with pytest.raises(PersistenceError):
        await auth.login_with_email("asha@gmail.com", "secret123")

    assert store.get(ACCOUNTS_KEY) == corrupt
    assert auth.get_current_user() is None
