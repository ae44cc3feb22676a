"""
Tests for wechat_minapp.qr_code module.
"""

import pytest

from wechat_minapp.errors import ArgumentError
from wechat_minapp.qr_code import EnvVersion, QrCode, QrCodeArgs, Rgb


class TestQrCodeArgs:

    def test_path_only_body(self):
        assert QrCodeArgs(path="pages/index").to_body() == {"path": "pages/index"}

    def test_missing_path(self):
        with pytest.raises(ArgumentError) as exc_info:
            QrCodeArgs()

        assert exc_info.value.field == "path"

    def test_path_too_long(self):
        with pytest.raises(ArgumentError):
            QrCodeArgs(path="p" * 1025)

    def test_path_at_limit(self):
        assert QrCodeArgs(path="p" * 1024).path == "p" * 1024

    @pytest.mark.parametrize("width", [279, 1281])
    def test_width_out_of_range(self, width):
        with pytest.raises(ArgumentError) as exc_info:
            QrCodeArgs(path="p", width=width)

        assert exc_info.value.field == "width"

    def test_env_version_from_string(self):
        assert QrCodeArgs(path="p", env_version="develop").env_version is (
            EnvVersion.DEVELOP
        )

    def test_bad_env_version(self):
        with pytest.raises(ArgumentError):
            QrCodeArgs(path="p", env_version="beta")

    def test_full_body(self):
        args = QrCodeArgs(
            path="p",
            width=280,
            auto_color=False,
            line_color=Rgb(255, 0, 10),
            is_hyaline=False,
            env_version=EnvVersion.RELEASE,
        )
        assert args.to_body() == {
            "path": "p",
            "width": 280,
            "auto_color": False,
            "line_color": {"r": 255, "g": 0, "b": 10},
            "is_hyaline": False,
            "env_version": "release",
        }


class TestQrCode:

    def test_save(self, tmp_path):
        target = QrCode(buffer=b"\x89PNG").save(tmp_path / "qr.png")
        assert target.read_bytes() == b"\x89PNG"
