from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class Prompt:
    name: str
    template: str


# One instruction per image operation. Image parts always precede the text part.
PROMPTS: Dict[str, Prompt] = {
    "remove_bg": Prompt(
        name="remove_bg",
        template=(
            "Remove the background from this image. Make the background transparent so it can be "
            "used as a layer. The output must be a PNG image with a transparent background."
        ),
    ),
    "cartoonify": Prompt(
        name="cartoonify",
        template=(
            "Convert the subject in this image to a vibrant cartoon style. Maintain the transparent "
            "background. The output must be a PNG image with a transparent background."
        ),
    ),
    "compose_image": Prompt(
        name="compose_image",
        template=(
            "Layer the first image (the subject) onto the second image (the background). "
            "Blend them naturally to create a cohesive final image."
        ),
    ),
    "compose_color": Prompt(
        name="compose_color",
        template="Place the subject from this image onto a solid background with the hex color {color}.",
    ),
}


def get_prompt(name: str, **params: str) -> str:
    if name not in PROMPTS:
        raise KeyError(f"Unknown prompt: {name}")
    return PROMPTS[name].template.format(**params)
