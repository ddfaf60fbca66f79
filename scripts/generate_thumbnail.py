"""Generate a thumbnail prompt (and optionally the image) from the command line.

Standalone from the FastAPI server. Credentials come from the same store the
server uses (credentials file, seeded from GEMINI_API_KEY / GCP_PROJECT_ID).
Local file paths and http(s) URLs are accepted as image references here only.

Usage:
    # Run from the project root
    python scripts/generate_thumbnail.py --config thumbnail.json            # print prompt
    python scripts/generate_thumbnail.py --title "BIG *NEWS*" --generate   # prompt + image
    python scripts/generate_thumbnail.py --config t.json --adapt draft.png \\
        --character 0=face1.jpg --character 0=face2.jpg --generate
"""

import argparse
import asyncio
import base64
import sys
from pathlib import Path

# Add backend/ to the path when run as a standalone script
_BACKEND_PATH = Path(__file__).parent.parent / "backend"
if str(_BACKEND_PATH) not in sys.path:
    sys.path.insert(0, str(_BACKEND_PATH))

from thumbnail_studio.core.config import get_settings  # noqa: E402
from thumbnail_studio.models.thumbnail import (  # noqa: E402
    CharacterImageSet,
    InputImage,
    Layout,
    Palette,
    ThumbnailConfig,
)
from thumbnail_studio.services.credentials import (  # noqa: E402
    credential_store_from_settings,
    effective_project_id,
)
from thumbnail_studio.services.image import (  # noqa: E402
    ImageGenerationError,
    decode_image_reference,
    request_generated_image,
)
from thumbnail_studio.services.prompt import (  # noqa: E402
    compose_adaptation_prompt,
    compose_generation_prompt,
)


def load_config(args: argparse.Namespace) -> ThumbnailConfig:
    """Read a ThumbnailConfig from --config, then apply flag overrides.

    Returns:
        ThumbnailConfig instance.
    """
    if args.config:
        config = ThumbnailConfig.model_validate_json(Path(args.config).read_text(encoding="utf-8"))
    else:
        config = ThumbnailConfig()
    overrides = {
        "title": args.title,
        "description": args.description,
        "character_count": args.characters,
        "layout": args.layout,
        "palette": args.palette,
        "extra_info": args.extra,
    }
    return ThumbnailConfig.model_validate(
        {**config.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
    )


def parse_characters(values: list[str]) -> CharacterImageSet:
    """Turn repeated ``SLOT=PATH`` flags into a slot -> images mapping."""
    images: CharacterImageSet = {}
    for value in values:
        slot, _, path = value.partition("=")
        if not path or not slot.isdigit():
            raise SystemExit(f"--character expects SLOT=PATH, got {value!r}")
        images.setdefault(int(slot), []).append(path)
    return images


def write_data_url(data_url: str, output: Path) -> None:
    image = InputImage.from_data_url(data_url)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(base64.b64decode(image.data))
    print(f"Saved image to {output}")


async def run(args: argparse.Namespace) -> int:
    config = load_config(args)
    character_images = parse_characters(args.character)

    if args.adapt:
        prompt = compose_adaptation_prompt(config, character_images)
    else:
        prompt = compose_generation_prompt(config)
    print(prompt)

    if not args.generate:
        return 0

    settings = get_settings()
    credentials = credential_store_from_settings(settings).load()
    api_key = credentials.api_key.strip()
    if not api_key:
        print(
            "No credential configured: set GEMINI_API_KEY or save one via /api/credentials.",
            file=sys.stderr,
        )
        return 1

    input_images: list[InputImage] = []
    model = args.model or settings.default_model
    try:
        if args.adapt:
            input_images.append(await decode_image_reference(args.adapt, allow_local=True))
            for slot in range(config.character_count):
                for reference in character_images.get(slot, []):
                    input_images.append(await decode_image_reference(reference, allow_local=True))
        data_url = await request_generated_image(
            api_key,
            prompt,
            model,
            effective_project_id(api_key, credentials.project_id),
            input_images,
            settings.vertex_ai_location,
            timeout=settings.request_timeout_seconds,
        )
    except ImageGenerationError as exc:
        print(f"Image generation failed: {exc}", file=sys.stderr)
        return 1

    write_data_url(data_url, Path(args.output))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a YouTube thumbnail prompt and optionally generate the image."
    )
    parser.add_argument("--config", help="ThumbnailConfig JSON file.")
    parser.add_argument("--title", help="Title text; wrap words in * for the accent color.")
    parser.add_argument("--description", help="Background description.")
    parser.add_argument("--characters", type=int, help="Number of characters (>= 1).")
    parser.add_argument("--layout", choices=[layout.value for layout in Layout])
    parser.add_argument("--palette", choices=[palette.value for palette in Palette])
    parser.add_argument("--extra", help="Additional notes for the model.")
    parser.add_argument(
        "--adapt",
        metavar="DRAFT",
        help="Build the face-adaptation prompt for this draft image instead.",
    )
    parser.add_argument(
        "--character",
        action="append",
        default=[],
        metavar="SLOT=PATH",
        help="Reference photo for a character slot (repeatable, 0-based slot).",
    )
    parser.add_argument("--model", help="Image model id (defaults to settings).")
    parser.add_argument("--generate", action="store_true", help="Call the image API.")
    parser.add_argument("--output", default="thumbnail.png", help="Where to write the image.")
    return parser


if __name__ == "__main__":
    sys.exit(asyncio.run(run(build_parser().parse_args())))
