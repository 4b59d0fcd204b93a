"""
Tests for the video-intel command-line interface.

Covers the annotate and config subcommands with the language service
replaced by a fake provider.
"""

import json
from unittest.mock import patch

import pytest

from helpers import FakeOperation, FakeProvider, make_page
from video_intel import cli
from video_intel.analysis import entity_annotator


@pytest.fixture
def configured_env(clean_env, tmp_path):
    clean_env.setenv("LANGUAGE_AI_ENDPOINT", "https://lang.example.com")
    clean_env.setenv("LANGUAGE_AI_API_KEY", "cli-key-0000")
    clean_env.setenv("LANGUAGE_AI_PROJECT_NAME", "video-keywords")
    clean_env.setenv("LANGUAGE_AI_DEPLOYMENT_NAME", "production")
    return tmp_path


def _patch_client(provider):
    return patch.object(
        entity_annotator.TextAnalyticsClient,
        "from_config",
        return_value=provider,
    )


class TestAnnotateCommand:

    def test_annotates_file_and_writes_output(self, configured_env, capsys):
        video_file = configured_env / "video.yaml"
        video_file.write_text(
            "video_id: vid-42\n"
            "description_raw: Contoso X1 with a Fabrikam lens\n",
            encoding="utf-8",
        )
        output = configured_env / "out" / "video.json"
        provider = FakeProvider(FakeOperation([make_page([("Contoso X1", 0.92), ("lens", 0.4)])]))

        with _patch_client(provider):
            cli.main(["annotate", str(video_file), "--output", str(output)])

        stdout = capsys.readouterr().out
        assert "2 entity(ies) added" in stdout
        assert "Contoso X1" in stdout

        saved = json.loads(output.read_text(encoding="utf-8"))
        assert saved["video_id"] == "vid-42"
        assert saved["processed_text"] == "Contoso X1\n"
        assert len(saved["categorized_entities"]) == 2

    def test_json_output_on_failure_exits_1(self, configured_env, capsys):
        provider = FakeProvider(submit_error=RuntimeError("quota exceeded"))

        with _patch_client(provider), pytest.raises(SystemExit) as exc_info:
            cli.main(["annotate", "--video-id", "v1", "--description", "text", "--output-json"])

        assert exc_info.value.code == 1
        data = json.loads(capsys.readouterr().out)
        assert data["failure"]["message"] == "quota exceeded"

    def test_empty_description_is_skipped(self, configured_env, capsys):
        provider = FakeProvider()

        with _patch_client(provider):
            cli.main(["annotate", "--video-id", "v1"])

        assert "nothing to annotate" in capsys.readouterr().out
        assert provider.submissions == []

    def test_missing_input_exits(self, configured_env):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["annotate"])
        assert exc_info.value.code == 1

    @pytest.mark.parametrize(
        "content",
        [
            "- a\n- b\n",
            "video_id: [unclosed\n",
        ],
        ids=["yaml-list", "malformed-yaml"],
    )
    def test_invalid_record_file_exits(self, configured_env, capsys, content):
        video_file = configured_env / "video.yaml"
        video_file.write_text(content, encoding="utf-8")
        provider = FakeProvider()

        with _patch_client(provider), pytest.raises(SystemExit) as exc_info:
            cli.main(["annotate", str(video_file)])

        assert exc_info.value.code == 1
        assert "ERROR: Invalid video record" in capsys.readouterr().out
        assert provider.submissions == []


class TestConfigCommand:

    def test_prints_masked_config(self, configured_env, capsys):
        cli.main(["config", "--output-json"])
        data = json.loads(capsys.readouterr().out)
        assert data["api_key"] == "cli-***"
        assert data["endpoint"] == "https://lang.example.com"

    def test_invalid_config_exits(self, clean_env, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["config"])

        assert exc_info.value.code == 1
        assert "endpoint" in capsys.readouterr().out
