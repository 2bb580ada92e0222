"""
core.script_provider 單元測試
驗證檔案 / inline provider 的讀取與錯誤轉換。
"""

import dataclasses

import pytest

from core.exceptions import ProviderError
from core.script_provider import (
    AxeScript,
    FileScriptProvider,
    InlineScriptProvider,
    ScriptProvider,
    default_provider,
)


@pytest.mark.unit
class TestFileScriptProvider:
    """FileScriptProvider"""

    @pytest.mark.unit
    def test_reads_file(self, tmp_path):
        path = tmp_path / "axe.min.js"
        path.write_text("window.axe = {};", encoding="utf-8")
        assert FileScriptProvider(path).get_script() == "window.axe = {};"

    @pytest.mark.unit
    def test_missing_file(self, tmp_path):
        provider = FileScriptProvider(tmp_path / "missing.js")
        with pytest.raises(ProviderError) as exc_info:
            provider.get_script()
        assert "missing.js" in str(exc_info.value)
        assert exc_info.value.context["provider"] == "file:missing.js"

    @pytest.mark.unit
    def test_directory_is_not_a_script(self, tmp_path):
        with pytest.raises(ProviderError):
            FileScriptProvider(tmp_path).get_script()

    @pytest.mark.unit
    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.js"
        path.write_text("   \n", encoding="utf-8")
        with pytest.raises(ProviderError):
            FileScriptProvider(path).get_script()

    @pytest.mark.unit
    def test_decode_error_wrapped(self, tmp_path):
        path = tmp_path / "bad.js"
        path.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(ProviderError) as exc_info:
            FileScriptProvider(path).get_script()
        assert isinstance(exc_info.value.original, UnicodeDecodeError)

    @pytest.mark.unit
    def test_default_provider_uses_config(self, monkeypatch, tmp_path):
        monkeypatch.setattr("core.script_provider.Config.AXE_SCRIPT_PATH", tmp_path / "x.js")
        assert default_provider().path == tmp_path / "x.js"


@pytest.mark.unit
class TestInlineScriptProvider:
    """InlineScriptProvider"""

    @pytest.mark.unit
    def test_returns_source(self):
        assert InlineScriptProvider("axe.run()").get_script() == "axe.run()"

    @pytest.mark.unit
    def test_empty_source(self):
        with pytest.raises(ProviderError):
            InlineScriptProvider("").get_script()


@pytest.mark.unit
class TestScriptProviderBase:
    """ScriptProvider 抽象類別 / AxeScript"""

    @pytest.mark.unit
    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            ScriptProvider()

    @pytest.mark.unit
    def test_default_name_is_class_name(self):
        class Custom(ScriptProvider):
            def get_script(self):
                return "x"

        assert Custom().name == "Custom"

    @pytest.mark.unit
    def test_axe_script_is_immutable(self):
        script = AxeScript("src", "msg", "type")
        with pytest.raises(dataclasses.FrozenInstanceError):
            script.source = "other"
