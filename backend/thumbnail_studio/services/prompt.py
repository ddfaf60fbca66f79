"""Prompt composition for thumbnail generation and face adaptation.

Both composers are pure functions of their arguments: no I/O, no state, and
identical inputs always produce identical prompts.
"""
from typing import Mapping, Sequence

from thumbnail_studio.models.thumbnail import (
    ACCENT_DELIMITER,
    Layout,
    Palette,
    ThumbnailConfig,
    color_name,
)

MAX_COMPOSITION_COUNT = 6
FIRST_CHARACTER_IMAGE_INDEX = 2  # image 1 is always the base thumbnail

DEFAULT_BACKGROUND = "A captivating abstract background suitable for high click-through rate."
DEFAULT_EXTRA_INFO = "No additional specific instructions."
DEFAULT_POSITION = "in the image"
DEFAULT_LIGHTING_NOTE = "cinematic lighting matching the scene"

COMPOSITION_BY_COUNT: dict[Layout, dict[int, str]] = {
    Layout.centered: {
        1: "Central Composition (Single): The sole subject is dead center, commanding the frame with direct eye contact. Symmetrical balance.",
        2: "Central Composition (Duo): Two subjects standing back-to-back or side-by-side in the center. Perfectly balanced symmetry.",
        3: "Central Composition (Trio): One main subject in front-center, flanked by two others slightly behind. Pyramid composition.",
        4: "Central Composition (Quartet): Four subjects arranged in a diamond or square formation in the center. Tight grouping.",
        5: "Central Composition (Quintet): One central leader figure surrounded by four others in a semi-circle. Strong focal point.",
        6: "Central Composition (Ensemble): A dense central group of 6+ people, layered depth, looking like a powerful team poster.",
    },
    Layout.thirds_left: {
        1: "Rule of Thirds (Single): Subject stands on the left vertical third line. Empty space on the right for text.",
        2: "Rule of Thirds (Duo): Two subjects clustered on the left side. One slightly in front of the other.",
        3: "Rule of Thirds (Trio): Three subjects standing in a row or wedge on the left side of the frame.",
        4: "Rule of Thirds (Group): A cluster of 4 people on the left. Dynamic interaction within the group.",
        5: "Rule of Thirds (Crowd): A defined group of 5 filling the left half of the frame, leaving the right side clear.",
        6: "Rule of Thirds (Mass): A large group of 6+ people packed into the left side, creating a wall of faces.",
    },
    Layout.thirds_right: {
        1: "Rule of Thirds (Single): Subject stands on the right vertical third line. Empty space on the left for text.",
        2: "Rule of Thirds (Duo): Two subjects clustered on the right side. Interactive pose.",
        3: "Rule of Thirds (Trio): Three subjects arranged continuously on the right side.",
        4: "Rule of Thirds (Group): Four people grouped tightly on the right side. Depth arrangement.",
        5: "Rule of Thirds (Crowd): Five people filling the right side of the screen. Dynamic layering.",
        6: "Rule of Thirds (Mass): 6+ people crowding the right side, leaving the left open for massive text.",
    },
    Layout.vs: {
        1: "Versus (Split Self): A visual split effect. The same person shown twice in contrasting moods (e.g., Happy vs Sad) on left and right.",
        2: "Versus (Duel): One person on the far left, one on the far right. Facing each other aggressively or competitively. Space in middle.",
        3: "Versus (Uneven): One main rival on left vs two challengers on right. Asymmetrical confrontation.",
        4: "Versus (Team Battle): Two people on the left vs Two people on the right. Balanced standoff.",
        5: "Versus (Boss Fight): One powerful figure on left vs a team of four on the right.",
        6: "Versus (War): Three people on left vs Three people on right. Epic team clash composition.",
    },
    Layout.reaction: {
        1: "Reaction (Selfie): Extreme close-up of face in the foreground corner (left or right). Blurred background event.",
        2: "Reaction (Duo): Two people in the foreground corner reacting together to something behind them.",
        3: "Reaction (Trio): Three heads popping up from the bottom or corner, shocked expressions.",
        4: "Reaction (Group): A row of 4 distinct reaction faces along the bottom or side edge.",
        5: "Reaction (Audience): 5 people reacting wildly, positioned to frame the main content in the background.",
        6: "Reaction (Crowd): A sea of 6+ shocked faces filling the foreground, looking at a distant event.",
    },
    Layout.group: {
        1: "Group (Solo Leader): One person stepping forward as if leading an invisible army. Command presence.",
        2: "Group (Partners): Two partners standing shoulder-to-shoulder. Buddy cop movie poster vibe.",
        3: "Group (Trio): Classic Charlie's Angels or band formation. V-shape arrangement.",
        4: "Group (Squad): Four people walking towards the camera in a line. Slow-motion stride energy.",
        5: "Group (Team): Five people in a wedge formation. The leader in front, others fanning out.",
        6: "Group (Army): 6+ people filling the width of the frame. An overwhelming number of subjects.",
    },
    Layout.perspective: {
        1: "Forced Perspective (Hand): Subject in background, their hand reaching close to lens holding an object (or empty).",
        2: "Forced Perspective (Duo): One person huge in foreground (looking down), other person tiny in background.",
        3: "Forced Perspective (Depth): One very close, one mid-ground, one far background. Extreme depth of field.",
        4: "Forced Perspective (Line): A line of 4 people stretching from extreme foreground to infinity.",
        5: "Forced Perspective (Circle): 5 people standing in a circle looking down at the camera (fisheye lens).",
        6: "Forced Perspective (Tunnel): 6+ people forming a tunnel or aisle that recedes into the distance.",
    },
    Layout.brainstorm: {
        1: "Mind Map (Solo): Subject in center, looking confused or inspired. Icons/Elements floating around their head.",
        2: "Brainstorm (Discussion): Two people arguing or discussing. Ideas/graphics appearing between them.",
        3: "Brainstorm (Roundtable): Three people looking at a central glowing object or plan.",
        4: "Brainstorm (Team): Four people pointing at different floating diagrams in the air. Collaborative chaos.",
        5: "Brainstorm (Huddle): Five people heads together in a circle looking at a map/plan.",
        6: "Brainstorm (Classroom): One person teaching, 5+ people listening or taking notes with visible thought bubbles.",
    },
    Layout.split: {
        1: "Split Screen (Before/After): The same person on both sides. Left side 'Before', Right side 'After'.",
        2: "Split Screen (Duo): Vertical divider. Person A in their world (Left) vs Person B in their world (Right).",
        3: "Split Screen (Trio): Three vertical panels. One person in each panel. Triptych style.",
        4: "Split Screen (Quad): 2x2 Grid. One person in each quadrant. Different emotions.",
        5: "Split Screen (Mixed): Left half has 1 person, Right half has 4 people in a grid.",
        6: "Split Screen (Grid): 2x3 Grid. Six separate panels reacting differently.",
    },
    Layout.silhouette: {
        1: "Silhouette (Hero): Single dark hero outline against a blazing sunset/explosion background.",
        2: "Silhouette (Couple): Two silhouettes holding hands or fighting against a bright backdrop.",
        3: "Silhouette (Trio): Three mysterious figures in shadow. Dramatic backlighting.",
        4: "Silhouette (Squad): Four tactical silhouettes moving through smoke/mist.",
        5: "Silhouette (Gang): Five distinct character outlines posed on a ridge.",
        6: "Silhouette (Army): A massive array of dark shapes/soldiers against a light source.",
    },
}

PALETTE_DESCRIPTIONS: dict[Palette, str] = {
    Palette.vibrant: "Vibrant: High saturation, bright yellows and vivid colors. High energy.",
    Palette.dark: "Dark/Tech: sleek blacks, deep blues, cybernetic neon accents. Moody and professional.",
    Palette.pastel: "Pastel: Soft, creamy colors (pinks, baby blues). Gentle lighting, approachable feel.",
    Palette.neon: "Neon/Cyberpunk: Glowing greens, purples, and electric blues. High contrast night vibes.",
    Palette.warm: "Warm: Golden hour tones, oranges, reds, and cozy yellows. Welcoming.",
    Palette.cold: "Cold: Icy blues, cyans, and clean whites. Crisp, professional, wintery.",
    Palette.monochrome: "Monochrome: Black and white with high contrast / Noir style.",
    Palette.retro: "Retro 80s: Synthwave purples and oranges, sunset gradients, vintage filter.",
    Palette.nature: "Nature: Organic greens, earth tones, sunlight, fresh atmosphere.",
    Palette.luxury: "Luxury: Gold, black, and marble textures. Sophisticated and expensive.",
}

# Where each character slot sits for a layout; slots past the end reuse the last entry.
POSITION_DESCRIPTORS: dict[Layout, list[str]] = {
    Layout.centered: ["in the CENTER of the image"],
    Layout.thirds_left: ["on the LEFT THIRD of the image"],
    Layout.thirds_right: ["on the RIGHT THIRD of the image"],
    Layout.vs: ["on the LEFT side (facing right)", "on the RIGHT side (facing left)"],
    Layout.reaction: ["in the CORNER/FOREGROUND (reaction position)"],
    Layout.group: [
        "in the CENTER (front)",
        "on the LEFT SIDE",
        "on the RIGHT SIDE",
        "in the BACK LEFT",
        "in the BACK RIGHT",
    ],
    Layout.perspective: ["in the main subject position"],
    Layout.brainstorm: ["in the CENTER of the composition"],
    Layout.split: ["on the LEFT HALF of the split", "on the RIGHT HALF of the split"],
    Layout.silhouette: ["as the main SILHOUETTE figure"],
}

LIGHTING_NOTES: dict[Palette, str] = {
    Palette.vibrant: "bright, saturated lighting with warm highlights on skin",
    Palette.dark: "dramatic shadows with cool blue rim lighting on face edges",
    Palette.pastel: "soft, diffused lighting with gentle shadows",
    Palette.neon: "strong neon color reflections on skin (greens, purples, pinks)",
    Palette.warm: "golden hour warm tones on skin with orange/yellow highlights",
    Palette.cold: "cool blue-white lighting with crisp shadows",
    Palette.monochrome: "high contrast black and white lighting",
    Palette.retro: "synthwave purple and orange color cast on skin",
    Palette.nature: "natural daylight with soft green ambient reflections",
    Palette.luxury: "elegant rim lighting with subtle gold reflections",
}


def strip_accent_delimiters(title: str) -> str:
    """Return the literal title text with accent delimiters removed."""
    return title.replace(ACCENT_DELIMITER, "")


def composition_description(layout: Layout, character_count: int) -> str:
    """Look up the composition for a layout and character count.

    Counts are clamped to 1..6, so anything above 6 reads the count-6 entry.
    An unknown layout reads the centered family.
    """
    safe_count = min(max(character_count, 1), MAX_COMPOSITION_COUNT)
    by_count = COMPOSITION_BY_COUNT.get(layout, COMPOSITION_BY_COUNT[Layout.centered])
    return by_count[safe_count]


def position_for_slot(layout: Layout, index: int) -> str:
    positions = POSITION_DESCRIPTORS.get(layout) or [DEFAULT_POSITION]
    return positions[min(index, len(positions) - 1)]


def compose_generation_prompt(config: ThumbnailConfig) -> str:
    """Build the stage-one prompt that creates a thumbnail from scratch.

    Args:
        config: Form values for the thumbnail.

    Returns:
        Prompt string for a text-to-image model.
    """
    raw_title = strip_accent_delimiters(config.title)
    base_color = color_name(config.text_color_base)
    accent_color = color_name(config.text_color_accent)

    if ACCENT_DELIMITER in config.title:
        text_instructions = (
            f'The text contains emphasized words. The words enclosed in asterisks in "{config.title}" '
            f"should be colored {accent_color}, while the rest is {base_color}."
        )
    else:
        text_instructions = f"The text color is primarily {base_color}."

    text_section = (
        "**1. MAIN TEXT & TYPOGRAPHY**\n"
        f'- Content: "{raw_title}"\n'
        "- Style: Bold, impactful, high-readability font suitable for YouTube thumbnails.\n"
        f"- Colors: Primary color is {base_color}. Accent/Highlight color is {accent_color}.\n"
        f"- Instructions: {text_instructions} Text must be massive, legible, and integrated "
        "into the scene but distinct from the background."
    )

    background = config.description.strip() or DEFAULT_BACKGROUND
    background_section = (
        "**2. BACKGROUND & SETTING**\n"
        f"- Description: {background}\n"
        "- Detail Level: High definition, 8k resolution textures.\n"
        "- Depth: Ensure a sense of depth to separate the subject from the background."
    )

    quantity = "1 person" if config.character_count == 1 else f"{config.character_count} people"
    characters_section = (
        "**3. CHARACTERS**\n"
        f"- Quantity: {quantity}.\n"
        "- Appearance: Expressive, emotional, and engaging. High-quality facial features.\n"
        "- Role: Main focus of the thumbnail, interacting with the viewer or the scene elements."
    )

    composition_section = (
        "**4. COMPOSITION & CAMERA**\n"
        f"- Layout Style: {composition_description(config.layout, config.character_count)}\n"
        "- Aspect Ratio: 16:9 (YouTube Standard).\n"
        "- Framing: Ensure space is reserved for the text overlay. Avoid cluttering the text areas."
    )

    palette_section = (
        "**5. COLOR PALETTE & LIGHTING**\n"
        f"- Theme: {PALETTE_DESCRIPTIONS[config.palette]}\n"
        "- Lighting: Cinematic lighting, rim lights to separate subject from background."
    )

    extra = config.extra_info.strip() or DEFAULT_EXTRA_INFO
    extra_section = (
        "**6. ADDITIONAL DETAILS**\n"
        f"- Notes: {extra}\n"
        "- Quality: Trending on ArtStation, Unreal Engine 5 render style, sharp focus."
    )

    return "\n\n".join(
        [
            "Create a high-quality YouTube thumbnail image based on the following detailed specifications:",
            text_section,
            background_section,
            characters_section,
            composition_section,
            palette_section,
            extra_section,
            "**GOAL**: Maximize Click-Through Rate (CTR). The image must be eye-catching, "
            "high contrast, and emotionally resonant.",
        ]
    )


def _character_mapping(
    config: ThumbnailConfig, character_images: Mapping[int, Sequence[str]]
) -> str:
    blocks: list[str] = []
    image_index = FIRST_CHARACTER_IMAGE_INDEX
    for slot in range(config.character_count):
        count = len(character_images.get(slot, ()))
        position = position_for_slot(config.layout, slot)
        header = f"**PERSON {slot + 1}** (Position: {position})"
        if count > 0:
            if count == 1:
                image_range = f"IMAGE {image_index}"
                coverage = "Single reference provided"
            else:
                image_range = f"IMAGES {image_index}-{image_index + count - 1}"
                coverage = "Multiple angles provided for maximum likeness accuracy"
            blocks.append(
                f"{header}\n"
                f"- Reference photos: {image_range}\n"
                f"- {coverage}\n"
                "- ACTION: Replace the character at this position with this person's face and features"
            )
            image_index += count
        else:
            blocks.append(
                f"{header}\n"
                "- Reference photos: NONE PROVIDED\n"
                "- ACTION: Keep the existing character or generate a fitting placeholder"
            )
    return "\n\n".join(blocks)


_RULE = "=" * 63


def compose_adaptation_prompt(
    config: ThumbnailConfig, character_images: Mapping[int, Sequence[str]]
) -> str:
    """Build the stage-two prompt that swaps faces into an existing thumbnail.

    Image 1 is the base thumbnail; character reference photos are numbered
    from 2 upwards, slot by slot, in upload order. Slots at or beyond
    ``config.character_count`` are ignored.

    Args:
        config: Form values for the thumbnail.
        character_images: Slot index -> uploaded reference images.

    Returns:
        Prompt string for a multimodal image-editing model.
    """
    lighting_note = LIGHTING_NOTES.get(config.palette, DEFAULT_LIGHTING_NOTE)
    mapping = _character_mapping(config, character_images)
    title = strip_accent_delimiters(config.title)

    return f"""[FACE REPLACEMENT TASK]

You are receiving multiple images for a FACE REPLACEMENT task. This is NOT a generation task - you are MODIFYING an existing thumbnail.

{_RULE}
IMAGE INPUT MAPPING
{_RULE}

**IMAGE 1: BASE THUMBNAIL (THE REFERENCE)**
- This is the thumbnail layout you MUST preserve
- Keep: ALL text, background, effects, composition, lighting mood
- Modify: ONLY the face regions of the characters

{mapping}

{_RULE}
CRITICAL INSTRUCTIONS
{_RULE}

1. **PRESERVE EVERYTHING FROM IMAGE 1 EXCEPT FACES**
   - Text overlay: KEEP EXACTLY as-is (no modifications, no repositioning)
   - Background: KEEP EXACTLY as-is
   - Composition/Layout: KEEP EXACTLY as-is
   - Overall lighting mood: KEEP as-is
   - Character faces: REPLACE with reference photos

2. **IDENTITY MATCHING (99% ACCURACY REQUIRED)**
   - The replaced faces MUST look EXACTLY like the people in the reference photos
   - Match: facial structure, nose shape, eye shape, skin tone, facial hair
   - If multiple reference angles are provided, use them ALL to understand the face from different perspectives
   - The result should be indistinguishable from a real photo of that person

3. **EXPRESSION & POSE ADAPTATION**
   - Keep the IDENTITY from the reference photos
   - Apply the EXPRESSION and HEAD ANGLE from IMAGE 1
   - Example: If IMAGE 1 shows a screaming pose, make the person from the reference scream

4. **LIGHTING & SEAMLESS BLENDING**
   - Face lighting: {lighting_note}
   - Match the lighting direction from IMAGE 1
   - Ensure skin tones blend naturally with the scene
   - Add appropriate rim lights/reflections to match the environment
   - NO visible seams, mismatched shadows, or color temperature issues

5. **TEXT PROTECTION (CRITICAL)**
   - The text "{title}" must remain UNTOUCHED
   - Do NOT generate new text, move existing text, or allow faces to overlap text
   - Text is SACRED - pixel-perfect preservation required

{_RULE}
OUTPUT REQUIREMENTS
{_RULE}

- Resolution: 1920x1080 (16:9 YouTube Standard)
- Quality: Photorealistic, professional YouTube thumbnail quality
- The result should look like the ORIGINAL thumbnail but with DIFFERENT PEOPLE
- No AI artifacts, no blurry regions, no uncanny valley effects"""
