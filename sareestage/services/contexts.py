"""Lightweight dataclasses shared across try-on helpers."""

from dataclasses import dataclass, field
from typing import Literal, Optional

from sareestage.core.upload_validator import UploadedImage
from sareestage.models import (
    BlouseSpec,
    GarmentSideSpec,
    GenerateRequest,
    SareeSpecification,
)

BlouseType = Literal["running", "custom"]


@dataclass
class GarmentSide:
    image: Optional[UploadedImage] = None
    text: str = ""


@dataclass
class BlouseChoice:
    type: BlouseType = "running"
    description: str = ""


@dataclass
class TryOnForm:
    """Everything the user enters on the upload screen."""

    model_image: Optional[UploadedImage] = None
    body: GarmentSide = field(default_factory=GarmentSide)
    pallu: GarmentSide = field(default_factory=GarmentSide)
    blouse: BlouseChoice = field(default_factory=BlouseChoice)
    consent: bool = False


@dataclass(frozen=True)
class GarmentSpecification:
    body_image: Optional[UploadedImage]
    body_text: str
    pallu_image: Optional[UploadedImage]
    pallu_text: str
    blouse_type: BlouseType
    blouse_description: str

    @classmethod
    def from_form(cls, form: TryOnForm) -> "GarmentSpecification":
        return cls(
            body_image=form.body.image,
            body_text=form.body.text,
            pallu_image=form.pallu.image,
            pallu_text=form.pallu.text,
            blouse_type=form.blouse.type,
            blouse_description=form.blouse.description,
        )

    def to_wire(self) -> SareeSpecification:
        return SareeSpecification(
            body=GarmentSideSpec(
                image=self.body_image.to_base64_file() if self.body_image else None,
                text=self.body_text,
            ),
            pallu=GarmentSideSpec(
                image=self.pallu_image.to_base64_file() if self.pallu_image else None,
                text=self.pallu_text,
            ),
            blouse=BlouseSpec(type=self.blouse_type, description=self.blouse_description),
        )


@dataclass(frozen=True)
class GenerationAttempt:
    """One call to the generation collaborator; a non-empty tweak marks a retry."""

    model_image: UploadedImage
    spec: GarmentSpecification
    tweak: str = ""

    @property
    def is_retry(self) -> bool:
        return bool(self.tweak)

    def to_request(self) -> GenerateRequest:
        return GenerateRequest(
            model_image=self.model_image.to_base64_file(),
            spec=self.spec.to_wire(),
            tweak_prompt=self.tweak or None,
        )
