"""Thumbnail configuration and image data models."""
import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MAX_IMAGES_PER_SLOT = 5
ACCENT_DELIMITER = "*"

_DATA_URL_RE = re.compile(r"^data:(.*?);base64,(.*)$", re.DOTALL)


class Layout(str, Enum):
    """Character composition layouts."""

    centered = "centered"
    thirds_left = "thirds-left"
    thirds_right = "thirds-right"
    vs = "vs"
    reaction = "reaction"
    group = "group"
    perspective = "perspective"
    brainstorm = "brainstorm"
    split = "split"
    silhouette = "silhouette"


class Palette(str, Enum):
    """Color palette / lighting themes."""

    vibrant = "vibrant"
    dark = "dark"
    pastel = "pastel"
    neon = "neon"
    warm = "warm"
    cold = "cold"
    monochrome = "monochrome"
    retro = "retro"
    nature = "nature"
    luxury = "luxury"


# Text color identifiers (as chosen in the form) -> name used in prompts.
COLOR_NAMES: dict[str, str] = {
    "text-white": "White",
    "text-black": "Black",
    "text-red-500": "Vibrant Red",
    "text-blue-500": "Electric Blue",
    "text-green-500": "Bright Green",
    "text-yellow-400": "Canary Yellow",
    "text-purple-500": "Royal Purple",
    "text-pink-500": "Hot Pink",
}
DEFAULT_COLOR_NAME = "White"


def color_name(identifier: str) -> str:
    """Return the prompt name for a text color identifier (White if unknown)."""
    return COLOR_NAMES.get(identifier, DEFAULT_COLOR_NAME)


class ThumbnailConfig(BaseModel):
    """Form values describing the thumbnail to generate.

    ``title`` may wrap words in paired ``*`` to mark them for the accent color,
    e.g. ``"INCREÍBLE *VIDEO*"``.
    """

    model_config = ConfigDict(frozen=True)

    title: str = "INCREÍBLE *VIDEO*"
    description: str = ""
    character_count: int = Field(1, ge=1)
    layout: Layout = Layout.centered
    palette: Palette = Palette.dark
    extra_info: str = ""
    text_color_base: str = "text-white"
    text_color_accent: str = "text-yellow-400"


# Slot index (0-based) -> image references (data URLs; the CLI also takes paths).
CharacterImageSet = dict[int, list[str]]


class InputImage(BaseModel):
    """A decoded image ready to be sent inline to the image API."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: str  # base64 payload

    @classmethod
    def from_data_url(cls, url: str) -> "InputImage":
        """Parse ``data:<mime>;base64,<payload>``.

        Raises:
            ValueError: When ``url`` is not a base64 data URL.
        """
        match = _DATA_URL_RE.match(url)
        if match is None:
            raise ValueError("Invalid base64 data URL")
        return cls(mime_type=match.group(1), data=match.group(2))

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"
