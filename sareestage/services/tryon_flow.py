"""Try-on workflow: collect inputs, generate, show the result, retry with tweaks."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Optional

from sareestage.config import DEFAULT_MAX_UPLOAD_BYTES, logger
from sareestage.core.entitlements import EntitlementStore, UserIdentity
from sareestage.core.errors import (
    InsufficientCredits,
    InvalidTransitionError,
    MissingInputError,
    PersistenceError,
    SareeStageError,
    ValidationError,
    WorkflowBusyError,
)
from sareestage.core.prompt_templates import build_tweak_prompt
from sareestage.core.relay_client import TryOnGenerator
from sareestage.core.upload_validator import UploadedImage, validate_upload

from .contexts import BlouseType, GarmentSpecification, GenerationAttempt, TryOnForm

UNEXPECTED_ERROR_MESSAGE = "An unknown error occurred during generation."
MISSING_INPUTS_MESSAGE = "Cannot retry without the original inputs. Please start over."


def _log(level: int, message: str, **context: Any) -> None:
    """Helper to emit structured logs with contextual metadata."""
    logger.log(level, "%s | context=%s", message, context)


class FlowState(str, Enum):
    COLLECTING = "collecting"
    VALIDATING = "validating"
    GENERATING = "generating"
    RESULT = "result"
    RETRY_GENERATING = "retry_generating"


BUSY_STATES = frozenset({FlowState.GENERATING, FlowState.RETRY_GENERATING})


class TryOnWorkflow:
    """
    Finite-state machine behind the saree try-on screens.

    One credit is spent per successful initial generation. Retries reuse the
    retained model photo and specification and are never charged. Only one
    generation may be in flight at a time; triggers fired meanwhile raise
    ``WorkflowBusyError``.
    """

    def __init__(
        self,
        generator: TryOnGenerator,
        entitlements: EntitlementStore,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.generator = generator
        self.entitlements = entitlements
        self.max_upload_bytes = max_upload_bytes
        self._reset()

    def _reset(self) -> None:
        self.state = FlowState.COLLECTING
        self.form = TryOnForm()
        self.model_image: Optional[UploadedImage] = None
        self.spec: Optional[GarmentSpecification] = None
        self.result_image: Optional[str] = None
        self.error: Optional[str] = None
        self.retry_error: Optional[str] = None
        self.warning: Optional[str] = None
        self.redirect_to: Optional[str] = None
        self.bookkeeping_inconsistent = False
        self._charged = False

    # -------------------------
    # State helpers
    # -------------------------
    @property
    def is_busy(self) -> bool:
        return self.state in BUSY_STATES

    @property
    def result_data_uri(self) -> Optional[str]:
        if self.result_image is None:
            return None
        return f"data:image/png;base64,{self.result_image}"

    def _ensure_idle(self) -> None:
        if self.is_busy:
            raise WorkflowBusyError("A generation is already in progress")

    def _require(self, state: FlowState, action: str) -> None:
        self._ensure_idle()
        if self.state is not state:
            raise InvalidTransitionError(
                f"Cannot {action} while in state {self.state.value}"
            )

    # -------------------------
    # Form inputs
    # -------------------------
    def attach_model_image(
        self, data: bytes, mime_type: Optional[str], filename: Optional[str] = None
    ) -> Optional[UploadedImage]:
        image = self._validated(data, mime_type, filename)
        if image is not None:
            self.form.model_image = image
        return image

    def attach_body_image(
        self, data: bytes, mime_type: Optional[str], filename: Optional[str] = None
    ) -> Optional[UploadedImage]:
        image = self._validated(data, mime_type, filename)
        if image is not None:
            self.form.body.image = image
        return image

    def attach_pallu_image(
        self, data: bytes, mime_type: Optional[str], filename: Optional[str] = None
    ) -> Optional[UploadedImage]:
        image = self._validated(data, mime_type, filename)
        if image is not None:
            self.form.pallu.image = image
        return image

    def _validated(
        self, data: bytes, mime_type: Optional[str], filename: Optional[str]
    ) -> Optional[UploadedImage]:
        # A rejected upload leaves the previously attached image in place
        self._require(FlowState.COLLECTING, "change inputs")
        try:
            image = validate_upload(data, mime_type, filename, self.max_upload_bytes)
        except ValidationError as exc:
            self.error = exc.message
            return None
        self.error = None
        return image

    def set_body_text(self, text: str) -> None:
        self._require(FlowState.COLLECTING, "change inputs")
        self.form.body.text = text

    def set_pallu_text(self, text: str) -> None:
        self._require(FlowState.COLLECTING, "change inputs")
        self.form.pallu.text = text

    def set_blouse(self, blouse_type: BlouseType, description: str = "") -> None:
        self._require(FlowState.COLLECTING, "change inputs")
        if blouse_type not in ("running", "custom"):
            raise ValueError(f"Unknown blouse type: {blouse_type}")
        self.form.blouse.type = blouse_type
        self.form.blouse.description = description

    def set_consent(self, agreed: bool) -> None:
        self._require(FlowState.COLLECTING, "change inputs")
        self.form.consent = agreed

    # -------------------------
    # Transitions
    # -------------------------
    async def submit(self) -> FlowState:
        """Run the initial generation for the collected inputs."""
        self._require(FlowState.COLLECTING, "submit")
        self.error = None
        self.redirect_to = None

        identity = self._resolve_identity()
        if identity is not None and not self._has_credits(identity):
            destination = "auth" if identity.is_guest else "pricing"
            blocked = InsufficientCredits(destination=destination)
            self.error = blocked.message
            self.redirect_to = destination
            _log(logging.INFO, "generation_blocked_no_credits", user_id=identity.id)
            return self.state

        self.state = FlowState.VALIDATING
        try:
            self._check_inputs()
        except MissingInputError as exc:
            self.state = FlowState.COLLECTING
            self.error = exc.message
            return self.state

        attempt = GenerationAttempt(
            model_image=self.form.model_image,
            spec=GarmentSpecification.from_form(self.form),
        )

        self.state = FlowState.GENERATING
        _log(logging.INFO, "generation_started", retry=False)
        try:
            image = await self.generator.generate(attempt.to_request())
        except Exception as exc:
            self.state = FlowState.COLLECTING
            self.error = _user_message(exc)
            _log(logging.WARNING, "generation_failed", error=self.error)
            return self.state

        self._charge_once(identity)
        self.model_image = attempt.model_image
        self.spec = attempt.spec
        self.result_image = image
        self.retry_error = None
        self.state = FlowState.RESULT
        _log(logging.INFO, "generation_complete", charged=self._charged)
        return self.state

    async def retry(self, tweak_ids: Iterable[str] = ()) -> FlowState:
        """Regenerate from the retained inputs with the selected tweaks, free of charge."""
        self._require(FlowState.RESULT, "retry")

        if self.model_image is None or self.spec is None:
            # Back to a fresh cycle; the filled-in form survives
            self.state = FlowState.COLLECTING
            self.model_image = None
            self.spec = None
            self.result_image = None
            self.retry_error = None
            self._charged = False
            self.error = MISSING_INPUTS_MESSAGE
            return self.state

        attempt = GenerationAttempt(
            model_image=self.model_image,
            spec=self.spec,
            tweak=build_tweak_prompt(tweak_ids),
        )

        self.state = FlowState.RETRY_GENERATING
        _log(logging.INFO, "generation_started", retry=True, tweaked=attempt.is_retry)
        try:
            image = await self.generator.generate(attempt.to_request())
        except Exception as exc:
            self.state = FlowState.RESULT
            self.retry_error = _user_message(exc)
            _log(logging.WARNING, "retry_failed", error=self.retry_error)
            return self.state

        self.result_image = image
        self.retry_error = None
        self.state = FlowState.RESULT
        _log(logging.INFO, "retry_complete")
        return self.state

    def start_over(self) -> FlowState:
        self._ensure_idle()
        self._reset()
        return self.state

    # -------------------------
    # Guards and bookkeeping
    # -------------------------
    def _check_inputs(self) -> None:
        form = self.form
        if form.model_image is None:
            raise MissingInputError("A model image is required.")
        if form.body.image is None:
            raise MissingInputError("An image for the Main Saree Body is required.")
        if form.pallu.image is None:
            raise MissingInputError("An image for the Saree Pallu is required.")
        if form.blouse.type == "custom" and not form.blouse.description.strip():
            raise MissingInputError("Please describe the custom blouse.")
        if not form.consent:
            raise MissingInputError(
                "You must agree to the Terms of Service and Privacy Policy to proceed."
            )

    def _resolve_identity(self) -> Optional[UserIdentity]:
        try:
            return self.entitlements.resolve_identity()
        except PersistenceError as exc:
            self._flag_bookkeeping(exc)
            return None

    def _has_credits(self, identity: UserIdentity) -> bool:
        try:
            return self.entitlements.get_balance(identity).credits > 0
        except PersistenceError as exc:
            # Unknown balance: let the generation through and flag it
            self._flag_bookkeeping(exc)
            return True

    def _charge_once(self, identity: Optional[UserIdentity]) -> None:
        if self._charged:
            return
        self._charged = True
        try:
            self.entitlements.debit(identity)
        except PersistenceError as exc:
            self._flag_bookkeeping(exc)

    def _flag_bookkeeping(self, exc: PersistenceError) -> None:
        self.warning = exc.message
        self.bookkeeping_inconsistent = True
        _log(logging.WARNING, "credit_bookkeeping_inconsistent", error=exc.message)


def _user_message(exc: Exception) -> str:
    if isinstance(exc, SareeStageError):
        return exc.message
    logger.error("Unexpected generation failure", exc_info=exc)
    return UNEXPECTED_ERROR_MESSAGE


__all__ = ["FlowState", "TryOnWorkflow", "BUSY_STATES"]
