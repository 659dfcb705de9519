"""Tests for workbranch.config.settings."""

import workbranch.config.settings as settings
from workbranch.config.settings import Settings


class TestLoadConfig:
    def test_defaults_only(self, mocker, reset_config_cache):
        defaults = {"git": {"default_branch": "main"}}
        mocker.patch.object(settings, "_load_defaults", return_value=defaults)
        mocker.patch("workbranch.config.settings.load_yaml", return_value=None)
        assert settings.load_config() == defaults
        assert settings.get_config_loaded_sources() == ["defaults"]

    def test_project_beats_global(self, mocker, reset_config_cache):
        defaults = {"git": {"default_branch": "main", "remote": "origin"}}
        mocker.patch.object(settings, "_load_defaults", return_value=defaults)
        mocker.patch(
            "workbranch.config.settings.load_yaml",
            side_effect=[{"git": {"default_branch": "develop"}}, {"git": {"remote": "upstream"}}],
        )
        result = settings.load_config()
        assert result["git"] == {"default_branch": "develop", "remote": "upstream"}
        assert settings.get_config_loaded_sources() == [
            "defaults",
            str(settings.GLOBAL_CONFIG),
            str(settings.PROJECT_CONFIG),
        ]

    def test_global_file_read_from_disk(self, tmp_path, monkeypatch, reset_config_cache):
        global_file = tmp_path / "config.yaml"
        global_file.write_text("branch:\n  prefix: WI-\n")
        monkeypatch.setattr(settings, "GLOBAL_CONFIG", global_file)
        monkeypatch.setattr(settings, "PROJECT_CONFIG", tmp_path / "missing.yaml")
        result = settings.load_config()
        assert result["branch"]["prefix"] == "WI-"
        # bundled defaults still present
        assert result["git"]["default_branch"] == "main"


class TestGetConfig:
    def test_caches_on_first_call(self, mocker, reset_config_cache):
        load_mock = mocker.patch.object(settings, "_load_defaults", return_value={"a": 1})
        mocker.patch("workbranch.config.settings.load_yaml", return_value=None)
        settings.get_config()
        settings.get_config()
        assert load_mock.call_count == 1

    def test_reload_forces_reload(self, mocker, reset_config_cache):
        load_mock = mocker.patch.object(settings, "_load_defaults", return_value={"a": 1})
        mocker.patch("workbranch.config.settings.load_yaml", return_value=None)
        settings.get_config()
        settings.reload_config()
        assert load_mock.call_count == 2


class TestBundledDefaults:
    def test_defaults_build_settings(self):
        s = Settings.from_config(settings._load_defaults())
        assert s.organization.startswith("https://dev.azure.com/")
        assert s.branch_prefix == "AB#"
        assert s.default_branch == "main"
        assert s.remote == "origin"
        assert s.include_untracked is False
        assert s.codeartifact is not None
        assert s.rds is not None
        assert [p.name for p in s.aws_profiles] == ["cip-nonprod", "ciptooling-prod"]


class TestSettingsFromConfig:
    def test_empty_config_uses_defaults(self):
        s = Settings.from_config({})
        assert s.organization == ""
        assert s.branch_prefix == "AB#"
        assert s.stash_message == "Temporary stash before creating new branch"
        assert s.aws_profiles == ()
        assert s.codeartifact is None
        assert s.rds is None
        assert s.env == {}

    def test_sections_mapped(self):
        config = {
            "azure_devops": {"organization": "https://dev.azure.com/Example"},
            "branch": {"prefix": "WI-"},
            "git": {"default_branch": "develop", "remote": "upstream", "include_untracked": True},
            "aws": {
                "region": "us-east-1",
                "profiles": [
                    {"name": "dev", "eks_clusters": ["c1"], "ecr_registries": ["r1"]},
                    {"name": "ops"},
                ],
                "codeartifact": {"profile": "ops", "domain": "d", "domain_owner": 123},
                "rds": {"profile": "dev", "hostname": "db", "username": "ro"},
            },
            "env": {"PORT": 8080},
        }
        s = Settings.from_config(config, debug=True)
        assert s.organization == "https://dev.azure.com/Example"
        assert s.branch_prefix == "WI-"
        assert s.default_branch == "develop"
        assert s.remote == "upstream"
        assert s.include_untracked is True
        assert s.aws_region == "us-east-1"
        assert s.aws_profiles[0].eks_clusters == ("c1",)
        assert s.aws_profiles[1].ecr_registries == ()
        assert s.codeartifact.domain_owner == "123"
        assert s.rds.port == 5432
        assert s.env == {"PORT": "8080"}
        assert s.debug is True

    def test_get_settings_uses_cached_config(self, mocker, reset_config_cache):
        mocker.patch.object(
            settings, "_load_defaults", return_value={"branch": {"prefix": "X-"}}
        )
        mocker.patch("workbranch.config.settings.load_yaml", return_value=None)
        assert settings.get_settings().branch_prefix == "X-"
