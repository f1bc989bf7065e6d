"""Prompt templates and builders for SareeStage's Gemini virtual try-on flows."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, List


# --- GENERATION PROMPT ---

SAREE_PROMPT_TEMPLATE = """**Objective:** Create a photorealistic virtual try-on image. Your task is to generate an image of a person wearing a specific saree, based on a photo of the person and reference images of the saree.

**Core Requirements:**

1.  **Preserve the Person and Background:** The person in the output image (including their face, pose, expression, skin tone) and the background must be identical to the original photo of the person provided. The only change is the clothing. This is a virtual try-on, so do not modify the person's identity or the environment.
2.  **Reconstruct the Saree:** Analyze the provided saree images to understand its design.
    - **Saree Body:** Identify the main color, fabric texture, and pattern from the saree body reference image.
    - **Saree Pallu:** Identify the design, color, and details of the pallu from its reference image.
    - **Border:** Infer a natural and cohesive border design from the body and pallu images.
3.  **Apply the Blouse:** Follow the text instructions for the blouse. If the instruction is 'running blouse', use the saree body's design. Otherwise, create the blouse based on the custom description.
4.  **Realistic Draping:** The saree must be draped on the person naturally. Pay close attention to pleats, the flow of the pallu, and how the fabric would realistically hang and fold on the body.

**Output:**
A single, high-quality, full-body image of the person wearing the described saree. Avoid any glitches, artifacts, or unrealistic elements."""


@dataclass(frozen=True)
class PromptLabels:
    """Fixed labels framing the inline inputs sent to the model."""

    inputs_start: str = "\n\n--- Start of Inputs ---"
    inputs_end: str = "\n--- End of Inputs ---"
    model_image: str = (
        "\n**Input 1: Photo of the Person**\n"
        "This is the person who will wear the saree. Do not alter them or the background."
    )
    saree_references: str = (
        "\n**Input 2: Saree Reference Images**\n"
        "Use these images to create the saree's design."
    )
    pallu_image: str = "Reference Image for Saree Pallu:"
    body_image: str = "Reference Image for Saree Body:"
    notes: str = "Notes: {text}"
    blouse: str = "\n\n**Input 3: Blouse Instructions**\n{instruction}"
    tweaks: str = "\n\n**Additional Tweaks:** {tweak}"


LABELS = PromptLabels()

RUNNING_BLOUSE_INSTRUCTION = (
    "The blouse is a 'running blouse', matching the main saree body."
)
CUSTOM_BLOUSE_INSTRUCTION = "The blouse is custom: {description}."


def build_blouse_instruction(blouse_type: str, description: str = "") -> str:
    """Describe the blouse, falling back to a running blouse without a description."""
    if blouse_type == "custom" and description.strip():
        return CUSTOM_BLOUSE_INSTRUCTION.format(description=description.strip())
    return RUNNING_BLOUSE_INSTRUCTION


# --- TWEAKS ---


@dataclass(frozen=True)
class TweakOption:
    id: str
    label: str
    prompt: str


TWEAK_OPTIONS: List[TweakOption] = [
    TweakOption(
        id="border",
        label="Stronger border prominence",
        prompt="Emphasize border thickness by 10-15% while preserving realism.",
    ),
    TweakOption(
        id="pallu",
        label="Longer pallu",
        prompt="Increase pallu length and flow subtly.",
    ),
    TweakOption(
        id="sheen",
        label="Increase silk sheen",
        prompt="Enhance silk sheen slightly; avoid glare.",
    ),
]


def build_tweak_prompt(selected_ids: Iterable[str]) -> str:
    """Join the prompt fragments of the selected tweaks in display order."""
    selected = set(selected_ids)
    known = {option.id for option in TWEAK_OPTIONS}
    unknown = selected - known
    if unknown:
        raise ValueError(f"Unknown tweak option(s): {', '.join(sorted(unknown))}")

    return " ".join(option.prompt for option in TWEAK_OPTIONS if option.id in selected)


__all__ = [
    "SAREE_PROMPT_TEMPLATE",
    "LABELS",
    "PromptLabels",
    "RUNNING_BLOUSE_INSTRUCTION",
    "CUSTOM_BLOUSE_INSTRUCTION",
    "TWEAK_OPTIONS",
    "TweakOption",
    "build_blouse_instruction",
    "build_tweak_prompt",
]
