"""
Credit bookkeeping for guests and signed-in users.

Every known user id maps to an ``EntitlementRecord`` inside one JSON blob in the
store. Records are created lazily on first read.
"""

import json
import uuid
from dataclasses import asdict, dataclass
from typing import Dict, Optional

from sareestage.config import logger
from sareestage.core.errors import PersistenceError, UnknownPlanError
from sareestage.core.session import Session
from sareestage.core.store import Store

GUEST_ID_KEY = "sareestage_guest_id"
USER_DATA_KEY = "sareestage_userdata_"

FREE_GUEST_CREDITS = 3
GUEST_PLAN = "guest"
FREE_TIER_PLAN = "free_tier"


@dataclass(frozen=True)
class Plan:
    key: str
    name: str
    credits: int


PLANS: Dict[str, Plan] = {
    "spark": Plan(key="spark", name="Creative Spark", credits=10),
    "enthusiast": Plan(key="enthusiast", name="Style Enthusiast", credits=50),
    "pro": Plan(key="pro", name="Boutique Pro", credits=200),
}


@dataclass(frozen=True)
class UserIdentity:
    id: str
    is_guest: bool


@dataclass(frozen=True)
class EntitlementRecord:
    credits: int
    plan: str


class EntitlementStore:
    """Reads and mutates credit balances through a key-value ``Store``."""

    def __init__(self, store: Store, session: Session):
        self.store = store
        self.session = session

    # -------------------------
    # Identity
    # -------------------------
    def resolve_identity(self) -> UserIdentity:
        user = self.session.current_user
        if user is not None:
            return UserIdentity(id=user.uid, is_guest=False)
        return UserIdentity(id=self._guest_id(), is_guest=True)

    def _guest_id(self) -> str:
        guest_id = self.store.get(GUEST_ID_KEY)
        if not guest_id:
            guest_id = f"guest_{uuid.uuid4()}"
            self.store.set(GUEST_ID_KEY, guest_id)
            logger.info("Created guest identity", extra={"guest_id": guest_id})
        return guest_id

    # -------------------------
    # Balances
    # -------------------------
    def get_balance(self, identity: Optional[UserIdentity] = None) -> EntitlementRecord:
        identity = identity or self.resolve_identity()
        all_data = self._load_all()
        record = all_data.get(identity.id)
        if record is None:
            record = (
                EntitlementRecord(credits=FREE_GUEST_CREDITS, plan=GUEST_PLAN)
                if identity.is_guest
                else EntitlementRecord(credits=0, plan=FREE_TIER_PLAN)
            )
            all_data[identity.id] = record
            self._save_all(all_data)
            logger.info(
                "Initialized entitlement record",
                extra={"user_id": identity.id, "credits": record.credits, "plan": record.plan},
            )
        return record

    def has_record(self, identity: UserIdentity) -> bool:
        return identity.id in self._load_all()

    def debit(self, identity: Optional[UserIdentity] = None) -> EntitlementRecord:
        """Spend one credit, never going below zero."""
        identity = identity or self.resolve_identity()
        current = self.get_balance(identity)
        updated = EntitlementRecord(credits=max(0, current.credits - 1), plan=current.plan)
        self._put(identity, updated)
        logger.info(
            "Credit debited",
            extra={"user_id": identity.id, "credits": updated.credits},
        )
        return updated

    def credit(
        self, identity: Optional[UserIdentity], plan: str, amount: int
    ) -> EntitlementRecord:
        """Add ``amount`` credits and switch the record to ``plan``."""
        if amount < 0:
            raise ValueError("Credit amount must not be negative")
        identity = identity or self.resolve_identity()
        current = self.get_balance(identity)
        updated = EntitlementRecord(credits=current.credits + amount, plan=plan)
        self._put(identity, updated)
        logger.info(
            "Credits added",
            extra={"user_id": identity.id, "plan": plan, "amount": amount, "credits": updated.credits},
        )
        return updated

    def purchase_plan(
        self, plan_key: str, identity: Optional[UserIdentity] = None
    ) -> EntitlementRecord:
        plan = PLANS.get(plan_key)
        if plan is None:
            raise UnknownPlanError(f"Unknown plan: {plan_key}")
        return self.credit(identity, plan.key, plan.credits)

    # -------------------------
    # Persistence helpers
    # -------------------------
    def _put(self, identity: UserIdentity, record: EntitlementRecord) -> None:
        all_data = self._load_all()
        all_data[identity.id] = record
        self._save_all(all_data)

    def _load_all(self) -> Dict[str, EntitlementRecord]:
        raw = self.store.get(USER_DATA_KEY)
        if not raw:
            return {}
        try:
            payload = json.loads(raw)
            return {
                user_id: EntitlementRecord(
                    credits=int(entry["credits"]), plan=str(entry["plan"])
                )
                for user_id, entry in payload.items()
            }
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error(f"Entitlement data is corrupt: {exc}")
            raise PersistenceError(
                "Saved credit data is unreadable. Credit bookkeeping may be out of date."
            ) from exc

    def _save_all(self, all_data: Dict[str, EntitlementRecord]) -> None:
        self.store.set(
            USER_DATA_KEY,
            json.dumps({user_id: asdict(record) for user_id, record in all_data.items()}),
        )


def next_screen(entitlements: EntitlementStore) -> str:
    """Where the start button leads: the try-on flow, pricing or sign-in."""
    identity = entitlements.resolve_identity()
    if entitlements.get_balance(identity).credits > 0:
        return "saree"
    return "auth" if identity.is_guest else "pricing"


__all__ = [
    "GUEST_ID_KEY",
    "USER_DATA_KEY",
    "FREE_GUEST_CREDITS",
    "PLANS",
    "Plan",
    "UserIdentity",
    "EntitlementRecord",
    "EntitlementStore",
    "next_screen",
]
