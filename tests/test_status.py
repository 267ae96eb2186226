"""
Tests for the read-only status report.
"""

from termsetup.core.models.settings import Settings
from termsetup.core.services.packages import Platform
from termsetup.core.services.zshrc import patch_file
from termsetup.core.use_cases.status import get_status


class TestGetStatus:
    def test_fresh_home(self, settings: Settings):
        result = get_status(settings, platform=Platform.DEBIAN)
        assert not result.framework
        assert not result.zshrc_exists
        assert [p["checkout"] for p in result.plugins] == [False, False, False]
        assert result.zshrc["missing_plugins"] == settings.required_plugin_names
        assert not result.complete

    def test_everything_in_place(self, settings: Settings):
        settings.zsh_dir.mkdir()
        for repo in settings.plugins:
            (repo.target_dir(settings.plugins_dir) / ".git").mkdir(parents=True)
        patch_file(settings.zshrc, settings, include_prompt=True)

        result = get_status(settings, platform=Platform.MACOS)
        assert result.framework
        assert result.zshrc["root_variable"]
        assert result.zshrc["missing_plugins"] == []
        assert result.complete
        assert result.to_dict()["complete"] is True

    def test_malformed_zshrc_reported(self, settings: Settings):
        settings.zshrc.write_text("plugins=(git\n")
        result = get_status(settings, platform=Platform.DEBIAN)
        assert result.zshrc["error"]
        assert not result.complete

    def test_to_dict_shape(self, settings: Settings):
        data = get_status(settings, platform=Platform.DEBIAN).to_dict()
        assert data["platform"] == "debian"
        assert data["zshrc"]["exists"] is False
        assert set(data["commands"]) == {"zsh", "git", "curl", "starship"}

    def test_undecodable_zshrc_reported(self, settings: Settings):
        settings.zshrc.write_bytes(b"plugins=(git)\n\xff\xfe\n")
        result = get_status(settings, platform=Platform.DEBIAN)
        assert result.zshrc_exists
        assert "Cannot read" in result.zshrc["error"]
        assert not result.complete
