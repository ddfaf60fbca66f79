"""Tests for prompt composition (generation and face adaptation)."""
import re

import pytest

from thumbnail_studio.models.thumbnail import Layout, Palette, ThumbnailConfig
from thumbnail_studio.services.prompt import (
    COMPOSITION_BY_COUNT,
    DEFAULT_BACKGROUND,
    DEFAULT_EXTRA_INFO,
    LIGHTING_NOTES,
    PALETTE_DESCRIPTIONS,
    POSITION_DESCRIPTORS,
    compose_adaptation_prompt,
    compose_generation_prompt,
    composition_description,
    position_for_slot,
    strip_accent_delimiters,
)


def _config(**kwargs: object) -> ThumbnailConfig:
    defaults: dict[str, object] = {
        "title": "INCREÍBLE *VIDEO*",
        "character_count": 1,
        "layout": Layout.centered,
        "palette": Palette.dark,
    }
    defaults.update(kwargs)
    return ThumbnailConfig(**defaults)  # type: ignore[arg-type]


class TestLookupTables:
    """Every closed tag must resolve to a non-empty description."""

    def test_composition_covers_every_layout_and_count(self) -> None:
        for layout in Layout:
            for count in range(1, 7):
                assert COMPOSITION_BY_COUNT[layout][count]

    def test_every_palette_has_description_and_lighting(self) -> None:
        for palette in Palette:
            assert PALETTE_DESCRIPTIONS[palette]
            assert LIGHTING_NOTES[palette]

    def test_every_layout_has_positions(self) -> None:
        for layout in Layout:
            assert POSITION_DESCRIPTORS[layout]
            assert all(POSITION_DESCRIPTORS[layout])

    @pytest.mark.parametrize("layout", list(Layout))
    @pytest.mark.parametrize("count", [7, 10, 50])
    def test_counts_above_six_reuse_six(self, layout: Layout, count: int) -> None:
        assert composition_description(layout, count) == composition_description(layout, 6)

    def test_unknown_layout_falls_back_to_centered(self) -> None:
        assert composition_description("diagonal", 3) == COMPOSITION_BY_COUNT[Layout.centered][3]  # type: ignore[arg-type]

    def test_position_reuses_last_descriptor(self) -> None:
        assert position_for_slot(Layout.vs, 0) == "on the LEFT side (facing right)"
        assert position_for_slot(Layout.vs, 1) == "on the RIGHT side (facing left)"
        assert position_for_slot(Layout.vs, 4) == "on the RIGHT side (facing left)"

    def test_single_position_layout_reused_for_all_slots(self) -> None:
        for slot in range(4):
            assert position_for_slot(Layout.centered, slot) == "in the CENTER of the image"

    def test_strip_accent_delimiters_keeps_diacritics(self) -> None:
        assert strip_accent_delimiters("INCREÍBLE *VIDEO* *YA*") == "INCREÍBLE VIDEO YA"


class TestComposeGenerationPrompt:
    def test_title_without_delimiter_is_single_color(self) -> None:
        prompt = compose_generation_prompt(_config(title="PLAIN TITLE"))
        assert "The text color is primarily White." in prompt
        assert "emphasized words" not in prompt

    def test_title_with_delimiters_names_both_colors(self) -> None:
        config = _config(
            title="WATCH *THIS* NOW",
            text_color_base="text-white",
            text_color_accent="text-red-500",
        )
        prompt = compose_generation_prompt(config)
        assert "emphasized words" in prompt
        assert '"WATCH *THIS* NOW"' in prompt
        assert "colored Vibrant Red, while the rest is White." in prompt

    def test_content_uses_stripped_title(self) -> None:
        prompt = compose_generation_prompt(_config(title="INCREÍBLE *VIDEO*"))
        assert '- Content: "INCREÍBLE VIDEO"' in prompt

    def test_blank_description_uses_default(self) -> None:
        prompt = compose_generation_prompt(_config(description="   "))
        assert DEFAULT_BACKGROUND in prompt

    def test_description_is_interpolated(self) -> None:
        prompt = compose_generation_prompt(_config(description="  A volcano at night  "))
        assert "- Description: A volcano at night\n" in prompt

    def test_blank_extra_info_uses_default(self) -> None:
        assert DEFAULT_EXTRA_INFO in compose_generation_prompt(_config())

    def test_extra_info_is_interpolated(self) -> None:
        prompt = compose_generation_prompt(_config(extra_info="Add a red arrow"))
        assert "- Notes: Add a red arrow" in prompt

    def test_quantity_singular_and_plural(self) -> None:
        assert "- Quantity: 1 person." in compose_generation_prompt(_config(character_count=1))
        assert "- Quantity: 3 people." in compose_generation_prompt(_config(character_count=3))

    def test_composition_and_palette_sections(self) -> None:
        prompt = compose_generation_prompt(
            _config(layout=Layout.split, character_count=4, palette=Palette.retro)
        )
        assert COMPOSITION_BY_COUNT[Layout.split][4] in prompt
        assert PALETTE_DESCRIPTIONS[Palette.retro] in prompt

    def test_sections_in_fixed_order(self) -> None:
        prompt = compose_generation_prompt(_config())
        headings = [
            "**1. MAIN TEXT & TYPOGRAPHY**",
            "**2. BACKGROUND & SETTING**",
            "**3. CHARACTERS**",
            "**4. COMPOSITION & CAMERA**",
            "**5. COLOR PALETTE & LIGHTING**",
            "**6. ADDITIONAL DETAILS**",
            "**GOAL**",
        ]
        positions = [prompt.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_is_deterministic(self) -> None:
        config = _config(title="A *B* C *D*", character_count=8, layout=Layout.group)
        assert compose_generation_prompt(config) == compose_generation_prompt(config)

    def test_does_not_mutate_config(self) -> None:
        config = _config()
        before = config.model_dump()
        compose_generation_prompt(config)
        assert config.model_dump() == before


class TestComposeAdaptationPrompt:
    def _indices(self, prompt: str) -> list[int]:
        found: list[int] = []
        for match in re.finditer(r"Reference photos: IMAGES? (\d+)(?:-(\d+))?", prompt):
            start = int(match.group(1))
            end = int(match.group(2) or start)
            found.extend(range(start, end + 1))
        return found

    def test_first_slot_first_image_is_two(self) -> None:
        prompt = compose_adaptation_prompt(_config(), {0: ["data:image/png;base64,AA"]})
        assert "Reference photos: IMAGE 2\n" in prompt
        assert "Single reference provided" in prompt

    def test_multiple_images_use_a_range(self) -> None:
        prompt = compose_adaptation_prompt(_config(), {0: ["a", "b", "c"]})
        assert "Reference photos: IMAGES 2-4" in prompt
        assert "Multiple angles provided" in prompt

    def test_indices_contiguous_across_slots(self) -> None:
        config = _config(character_count=4, layout=Layout.group)
        images = {0: ["a", "b"], 1: [], 2: ["c"], 3: ["d", "e", "f"]}
        prompt = compose_adaptation_prompt(config, images)
        assert self._indices(prompt) == [2, 3, 4, 5, 6, 7]
        assert "IMAGES 2-3" in prompt
        assert "IMAGE 4\n" in prompt
        assert "IMAGES 5-7" in prompt

    def test_slot_without_images_keeps_character(self) -> None:
        prompt = compose_adaptation_prompt(_config(character_count=2, layout=Layout.vs), {1: ["x"]})
        assert "**PERSON 1** (Position: on the LEFT side (facing right))" in prompt
        assert "Reference photos: NONE PROVIDED" in prompt
        assert "Keep the existing character" in prompt
        assert "**PERSON 2** (Position: on the RIGHT side (facing left))" in prompt
        assert "Reference photos: IMAGE 2\n" in prompt

    def test_slots_beyond_count_are_ignored(self) -> None:
        prompt = compose_adaptation_prompt(_config(character_count=1), {0: ["a"], 3: ["b", "c"]})
        assert "PERSON 2" not in prompt
        assert self._indices(prompt) == [2]

    def test_every_slot_gets_a_block(self) -> None:
        prompt = compose_adaptation_prompt(_config(character_count=6, layout=Layout.group), {})
        for n in range(1, 7):
            assert f"**PERSON {n}**" in prompt
        assert "**PERSON 6** (Position: in the BACK RIGHT)" in prompt

    def test_lighting_note_follows_palette(self) -> None:
        prompt = compose_adaptation_prompt(_config(palette=Palette.neon), {})
        assert f"Face lighting: {LIGHTING_NOTES[Palette.neon]}" in prompt

    def test_text_protection_uses_stripped_title(self) -> None:
        prompt = compose_adaptation_prompt(_config(title="WIN *BIG*"), {})
        assert 'The text "WIN BIG" must remain UNTOUCHED' in prompt

    def test_is_deterministic(self) -> None:
        config = _config(character_count=3, layout=Layout.split)
        images = {0: ["a"], 2: ["b", "c"]}
        assert compose_adaptation_prompt(config, images) == compose_adaptation_prompt(config, images)

    def test_does_not_mutate_images(self) -> None:
        images = {0: ["a", "b"]}
        compose_adaptation_prompt(_config(), images)
        assert images == {0: ["a", "b"]}
