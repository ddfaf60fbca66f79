"""Mock-preview layout: title accent segments and per-slot placement styles."""
from thumbnail_studio.models.studio import ThumbnailPreview, TitleSegment
from thumbnail_studio.models.thumbnail import ACCENT_DELIMITER, Layout, ThumbnailConfig

MAX_PREVIEW_SLOTS = 5
HIDDEN = "hidden"

PREVIEW_SLOT_STYLES: dict[Layout, list[str]] = {
    Layout.centered: [
        "inset-x-[20%] bottom-0 top-[20%] z-10",
        "inset-x-[5%] bottom-0 top-[30%] -z-10 scale-90 translate-x-[-30%]",
        "inset-x-[5%] bottom-0 top-[30%] -z-10 scale-90 translate-x-[30%]",
        "inset-x-[10%] bottom-0 top-[40%] -z-20 scale-75 translate-x-[-50%]",
        "inset-x-[10%] bottom-0 top-[40%] -z-20 scale-75 translate-x-[50%]",
    ],
    Layout.thirds_left: [
        "left-[10%] bottom-0 top-[10%] w-[40%] z-10",
        "left-[5%] bottom-0 top-[20%] w-[30%] -z-10",
        "left-[20%] bottom-0 top-[20%] w-[30%] -z-10",
        "left-[0%] bottom-0 top-[30%] w-[30%] -z-20",
        "left-[35%] bottom-0 top-[30%] w-[30%] -z-20",
    ],
    Layout.thirds_right: [
        "right-[10%] bottom-0 top-[10%] w-[40%] z-10",
        "right-[5%] bottom-0 top-[20%] w-[30%] -z-10",
        "right-[20%] bottom-0 top-[20%] w-[30%] -z-10",
        "right-[0%] bottom-0 top-[30%] w-[30%] -z-20",
        "right-[35%] bottom-0 top-[30%] w-[30%] -z-20",
    ],
    Layout.vs: [
        "left-[5%] bottom-0 top-[10%] w-[45%] -skew-x-6 border-r-4 border-red-500 z-10",
        "right-[5%] bottom-0 top-[10%] w-[45%] skew-x-6 z-10",
        "inset-[30%] opacity-50 z-0",
        "inset-[30%] opacity-50 z-0",
        "inset-[30%] opacity-50 z-0",
    ],
    Layout.reaction: [
        "right-0 bottom-0 w-[40%] h-[50%] z-20 rounded-tl-3xl border-t-4 border-l-4 border-white shadow-2xl",
        "inset-0 z-0 opacity-50 scale-110",
        "inset-0 z-0 opacity-50",
        "inset-0 z-0 opacity-50",
        "inset-0 z-0 opacity-50",
    ],
    Layout.group: [
        "left-[50%] -translate-x-1/2 bottom-0 top-[15%] w-[30%] z-30",
        "left-[25%] bottom-0 top-[20%] w-[25%] z-20",
        "right-[25%] bottom-0 top-[20%] w-[25%] z-20",
        "left-[10%] bottom-0 top-[30%] w-[20%] z-10",
        "right-[10%] bottom-0 top-[30%] w-[20%] z-10",
    ],
    Layout.perspective: [
        "inset-x-[30%] bottom-0 top-[10%] z-30 scale-125 origin-bottom",
        "inset-x-[10%] bottom-[20%] top-[40%] z-20 opacity-80",
        "inset-x-[60%] bottom-[20%] top-[40%] z-20 opacity-80",
        "inset-x-[40%] bottom-[40%] top-[50%] z-10 opacity-60",
        "inset-x-0 bottom-[40%] top-[50%] z-10 opacity-60",
    ],
    Layout.brainstorm: [
        "inset-[25%] z-10 rounded-full border border-white/20",
        "top-0 left-0 w-[30%] h-[40%]",
        "top-0 right-0 w-[30%] h-[40%]",
        "bottom-0 left-0 w-[30%] h-[40%]",
        "bottom-0 right-0 w-[30%] h-[40%]",
    ],
    Layout.split: [
        "left-0 inset-y-0 w-[50%] border-r-2 border-white",
        "right-0 inset-y-0 w-[50%]",
        HIDDEN,
        HIDDEN,
        HIDDEN,
    ],
    Layout.silhouette: [
        "inset-x-[20%] bottom-0 top-[20%] grayscale brightness-0 contrast-200 z-20",
        "inset-x-[5%] bottom-0 top-[30%] grayscale brightness-0 contrast-200 z-10 opacity-80",
        "inset-x-[60%] bottom-0 top-[30%] grayscale brightness-0 contrast-200 z-10 opacity-80",
        HIDDEN,
        HIDDEN,
    ],
}


def split_title(title: str, base_color: str, accent_color: str) -> list[TitleSegment]:
    """Split a title on ``*``: odd segments take the accent color, even the base.

    Empty segments (e.g. from a leading ``*``) are dropped but still count
    towards the odd/even alternation.
    """
    segments: list[TitleSegment] = []
    for index, text in enumerate(title.split(ACCENT_DELIMITER)):
        if not text:
            continue
        accent = index % 2 == 1
        segments.append(
            TitleSegment(text=text, accent=accent, color=accent_color if accent else base_color)
        )
    return segments


def slot_style(layout: Layout, index: int) -> str:
    styles = PREVIEW_SLOT_STYLES.get(layout, PREVIEW_SLOT_STYLES[Layout.centered])
    if 0 <= index < len(styles):
        return styles[index]
    return HIDDEN


def build_preview(config: ThumbnailConfig) -> ThumbnailPreview:
    """Describe the on-screen mock preview for a configuration."""
    visible = min(config.character_count, MAX_PREVIEW_SLOTS)
    return ThumbnailPreview(
        layout=config.layout,
        palette=config.palette,
        title_segments=split_title(
            config.title, config.text_color_base, config.text_color_accent
        ),
        slot_styles=[slot_style(config.layout, i) for i in range(visible)],
    )
