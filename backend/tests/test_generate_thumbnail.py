"""Tests for scripts/generate_thumbnail.py."""
import base64
import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

# Make scripts/ importable
_SCRIPTS_DIR = Path(__file__).parent.parent.parent / "scripts"
if str(_SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(_SCRIPTS_DIR))

from generate_thumbnail import (  # noqa: E402
    build_parser,
    load_config,
    parse_characters,
    run,
    write_data_url,
)
from thumbnail_studio.core.config import get_settings  # noqa: E402
from thumbnail_studio.models.thumbnail import Layout, ThumbnailConfig  # noqa: E402
from thumbnail_studio.services.credentials import CredentialStore  # noqa: E402
from thumbnail_studio.services.image import NoImageError  # noqa: E402
from thumbnail_studio.services.prompt import compose_generation_prompt  # noqa: E402


def _args(*argv: str):
    return build_parser().parse_args(list(argv))


# ---------------------------------------------------------------------------
# load_config / parse_characters
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_defaults_without_flags(self) -> None:
        assert load_config(_args()) == ThumbnailConfig()

    def test_flags_override_file(self, tmp_path: Path) -> None:
        path = tmp_path / "t.json"
        path.write_text(json.dumps({"title": "FILE", "layout": "vs", "character_count": 2}))
        config = load_config(_args("--config", str(path), "--title", "FLAG"))
        assert config.title == "FLAG"
        assert config.layout == Layout.vs
        assert config.character_count == 2

    def test_invalid_character_count_rejected(self) -> None:
        with pytest.raises(ValueError):
            load_config(_args("--characters", "0"))

    def test_unknown_layout_rejected_by_parser(self) -> None:
        with pytest.raises(SystemExit):
            _args("--layout", "diagonal")


class TestParseCharacters:
    def test_groups_by_slot(self) -> None:
        assert parse_characters(["0=a.jpg", "1=b.jpg", "0=c.jpg"]) == {
            0: ["a.jpg", "c.jpg"],
            1: ["b.jpg"],
        }

    @pytest.mark.parametrize("value", ["a.jpg", "x=a.jpg", "0="])
    def test_malformed_value_exits(self, value: str) -> None:
        with pytest.raises(SystemExit):
            parse_characters([value])


def test_write_data_url(tmp_path: Path) -> None:
    output = tmp_path / "out" / "thumb.png"
    write_data_url("data:image/png;base64," + base64.b64encode(b"PNG").decode(), output)
    assert output.read_bytes() == b"PNG"


# ---------------------------------------------------------------------------
# run
# ---------------------------------------------------------------------------


class TestRun:
    async def test_prints_prompt_only(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("generate_thumbnail.request_generated_image", new=AsyncMock()) as dispatch:
            assert await run(_args("--title", "HI")) == 0
        dispatch.assert_not_awaited()
        assert compose_generation_prompt(ThumbnailConfig(title="HI")) in capsys.readouterr().out

    async def test_generate_requires_api_key(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert await run(_args("--generate")) == 1
        assert "GEMINI_API_KEY" in capsys.readouterr().err

    async def test_generate_writes_image(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "AIzaSyFAKE1234")
        get_settings.cache_clear()
        output = tmp_path / "thumb.png"
        data_url = "data:image/png;base64," + base64.b64encode(b"IMG").decode()
        with patch(
            "generate_thumbnail.request_generated_image", new=AsyncMock(return_value=data_url)
        ) as dispatch:
            code = await run(
                _args("--generate", "--model", "gemini-2.5-flash-image", "--output", str(output))
            )
        assert code == 0
        assert output.read_bytes() == b"IMG"
        args = dispatch.await_args.args
        assert args[0] == "AIzaSyFAKE1234"
        assert args[2] == "gemini-2.5-flash-image"
        assert args[3] is None

    async def test_adapt_sends_draft_then_characters(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "AIzaSyFAKE1234")
        get_settings.cache_clear()
        draft = tmp_path / "draft.png"
        face = tmp_path / "face.jpg"
        draft.write_bytes(b"D")
        face.write_bytes(b"F")
        with patch(
            "generate_thumbnail.request_generated_image",
            new=AsyncMock(return_value="data:image/png;base64,AA=="),
        ) as dispatch:
            code = await run(
                _args(
                    "--adapt", str(draft),
                    "--character", f"0={face}",
                    "--generate",
                    "--output", str(tmp_path / "out.png"),
                )
            )
        assert code == 0
        images = dispatch.await_args.args[4]
        assert [img.data for img in images] == [
            base64.b64encode(b"D").decode(),
            base64.b64encode(b"F").decode(),
        ]
        assert images[1].mime_type == "image/jpeg"
        assert "IMAGE 2" in dispatch.await_args.args[1]

    async def test_generation_failure_returns_1(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "AIzaSyFAKE1234")
        get_settings.cache_clear()
        with patch(
            "generate_thumbnail.request_generated_image",
            new=AsyncMock(side_effect=NoImageError("SAFETY")),
        ):
            assert await run(_args("--generate")) == 1
        assert "SAFETY" in capsys.readouterr().err

    async def test_uses_credentials_saved_through_the_api(self, tmp_path: Path) -> None:
        # conftest points CREDENTIALS_FILE here and leaves GEMINI_API_KEY empty
        CredentialStore(tmp_path / "credentials.json").save(
            api_key="ya29." + "t" * 120, project_id="stored-proj"
        )
        with patch(
            "generate_thumbnail.request_generated_image",
            new=AsyncMock(return_value="data:image/png;base64,AA=="),
        ) as dispatch:
            code = await run(_args("--generate", "--output", str(tmp_path / "o.png")))
        assert code == 0
        args = dispatch.await_args.args
        assert args[0] == "ya29." + "t" * 120
        assert args[3] == "stored-proj"
