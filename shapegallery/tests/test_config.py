"""Tests for environment configuration."""

from pathlib import Path

from shapegallery.config import ENV_FILE_VARIABLE, Settings, _apply_env_file, read_env_file


class TestEnvFile:
    """Tests for env-file parsing."""

    def test_read_env_file(self, tmp_path: Path) -> None:
        path = tmp_path / "shapegallery.env"
        path.write_text(
            "# gallery\n"
            "SHAPE_GALLERY_NAME = Library\n"
            "SHAPE_GALLERY_EXPORT_DPI=72\n"
            'SHAPE_GALLERY_DIR="/tmp/shapes"\n'
            "EMPTY=\n"
            "not a setting\n",
            encoding="utf-8",
        )

        assert read_env_file(path) == {
            "SHAPE_GALLERY_NAME": "Library",
            "SHAPE_GALLERY_EXPORT_DPI": "72",
            "SHAPE_GALLERY_DIR": "/tmp/shapes",
        }

    def test_env_file_never_overrides_environment(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "custom.env"
        path.write_text("SHAPE_GALLERY_NAME=FromFile\nSHAPE_GALLERY_EXPORT_DPI=48\n", encoding="utf-8")
        monkeypatch.setenv(ENV_FILE_VARIABLE, str(path))
        monkeypatch.setenv("SHAPE_GALLERY_NAME", "FromEnvironment")
        # Registered with monkeypatch so the value loaded from the file is undone
        monkeypatch.setenv("SHAPE_GALLERY_EXPORT_DPI", "96")
        monkeypatch.delenv("SHAPE_GALLERY_EXPORT_DPI")

        _apply_env_file()

        settings = Settings()
        assert settings.gallery_name == "FromEnvironment"
        assert settings.export_dpi == 48


class TestSettings:
    """Tests for Settings."""

    def test_environment_overrides(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("SHAPE_GALLERY_DIR", str(tmp_path))
        monkeypatch.setenv("SHAPE_GALLERY_NAME", "Library")
        monkeypatch.setenv("SHAPE_GALLERY_PROTECT_REPEAT", "5")
        monkeypatch.setenv("SHAPE_GALLERY_LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.gallery_file == tmp_path / "Library.pptx"
        assert settings.protect_repeat == 5
        assert settings.log_level == "DEBUG"
