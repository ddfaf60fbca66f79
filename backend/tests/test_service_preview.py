"""Tests for the mock-preview layout helpers."""
from thumbnail_studio.models.thumbnail import Layout, Palette, ThumbnailConfig
from thumbnail_studio.services.preview import (
    HIDDEN,
    PREVIEW_SLOT_STYLES,
    build_preview,
    slot_style,
    split_title,
)


class TestSplitTitle:
    def test_plain_title_is_one_base_segment(self) -> None:
        segments = split_title("HELLO", "text-white", "text-red-500")
        assert [(s.text, s.accent, s.color) for s in segments] == [("HELLO", False, "text-white")]

    def test_odd_segments_are_accent(self) -> None:
        segments = split_title("A *B* C *D*", "base", "accent")
        assert [(s.text, s.accent) for s in segments] == [
            ("A ", False),
            ("B", True),
            (" C ", False),
            ("D", True),
        ]
        assert segments[1].color == "accent"

    def test_leading_delimiter_keeps_alternation(self) -> None:
        segments = split_title("*WOW* moment", "base", "accent")
        assert [(s.text, s.accent) for s in segments] == [("WOW", True), (" moment", False)]


class TestSlotStyle:
    def test_every_layout_defines_five_slots(self) -> None:
        for layout in Layout:
            assert len(PREVIEW_SLOT_STYLES[layout]) == 5

    def test_index_past_table_is_hidden(self) -> None:
        assert slot_style(Layout.group, 5) == HIDDEN

    def test_split_third_slot_hidden(self) -> None:
        assert slot_style(Layout.split, 2) == HIDDEN

    def test_unknown_layout_uses_centered(self) -> None:
        assert slot_style("diagonal", 0) == PREVIEW_SLOT_STYLES[Layout.centered][0]  # type: ignore[arg-type]


class TestBuildPreview:
    def test_one_style_per_character(self) -> None:
        config = ThumbnailConfig(character_count=3, layout=Layout.vs, palette=Palette.warm)
        preview = build_preview(config)
        assert preview.slot_styles == PREVIEW_SLOT_STYLES[Layout.vs][:3]
        assert preview.layout == Layout.vs
        assert preview.palette == Palette.warm

    def test_visible_slots_capped_at_five(self) -> None:
        preview = build_preview(ThumbnailConfig(character_count=9))
        assert len(preview.slot_styles) == 5

    def test_title_segments_use_config_colors(self) -> None:
        config = ThumbnailConfig(
            title="GO *FAST*", text_color_base="text-black", text_color_accent="text-pink-500"
        )
        segments = build_preview(config).title_segments
        assert [s.color for s in segments] == ["text-black", "text-pink-500"]
