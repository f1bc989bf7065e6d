"""
Assembles Gemini ``generateContent`` payloads for try-on and edit requests.

The part order is fixed so that an initial generation and every retry send the
model the same instruction layout.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sareestage.core.prompt_templates import (
    LABELS,
    SAREE_PROMPT_TEMPLATE,
    build_blouse_instruction,
)
from sareestage.models import Base64File, GarmentSideSpec, SareeSpecification

Part = Dict[str, Any]


@dataclass
class GenerationPayload:
    """Ordered content parts plus the generation config sent to Gemini."""

    parts: List[Part] = field(default_factory=list)
    response_modalities: List[str] = field(default_factory=lambda: ["IMAGE"])

    def to_request(self) -> Dict[str, Any]:
        return {
            "contents": [{"parts": self.parts}],
            "generationConfig": {"responseModalities": self.response_modalities},
        }

    @property
    def text(self) -> str:
        """Concatenated text parts, handy for logging the rendered prompt."""
        return "".join(part["text"] for part in self.parts if "text" in part)

    @property
    def image_count(self) -> int:
        return sum(1 for part in self.parts if "inline_data" in part)


def _image_part(image: Base64File) -> Part:
    return {"inline_data": {"mime_type": image.mime_type, "data": image.data}}


def _append_reference(parts: List[Part], label: str, side: GarmentSideSpec) -> None:
    if side.image is None:
        return
    parts.append({"text": label})
    parts.append(_image_part(side.image))
    if side.text.strip():
        parts.append({"text": LABELS.notes.format(text=side.text.strip())})


def build_generation_payload(
    model_image: Base64File,
    spec: SareeSpecification,
    tweak_text: Optional[str] = "",
) -> GenerationPayload:
    """Build the try-on payload for a model photo and saree specification."""
    parts: List[Part] = [{"text": SAREE_PROMPT_TEMPLATE}]

    parts.append({"text": LABELS.inputs_start})
    parts.append({"text": LABELS.model_image})
    parts.append(_image_part(model_image))

    parts.append({"text": LABELS.saree_references})
    _append_reference(parts, LABELS.pallu_image, spec.pallu)
    _append_reference(parts, LABELS.body_image, spec.body)

    instruction = build_blouse_instruction(spec.blouse.type, spec.blouse.description)
    parts.append({"text": LABELS.blouse.format(instruction=instruction)})

    if tweak_text and tweak_text.strip():
        parts.append({"text": LABELS.tweaks.format(tweak=tweak_text.strip())})

    parts.append({"text": LABELS.inputs_end})

    return GenerationPayload(parts=parts)


def build_edit_payload(image: Base64File, prompt: str) -> GenerationPayload:
    """Build the single-image editing payload: the image first, then the instruction."""
    return GenerationPayload(parts=[_image_part(image), {"text": prompt}])


__all__ = ["GenerationPayload", "build_generation_payload", "build_edit_payload"]
