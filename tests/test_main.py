import io
import logging

import pytest
import zstandard as zstd

from Collapser import config, main
from Collapser.parser_core import SampleFolder

from conftest import SAMPLE_FOLDED, SAMPLE_FOLDED_NO_MODULES


@pytest.fixture(autouse=True)
def _fresh_config(fresh_config):
    yield


def test_main_writes_output_file(tmp_path, sample_text):
    input_path = tmp_path / "sample.txt"
    input_path.write_text(sample_text, encoding="utf-8")
    output_path = tmp_path / "out" / "sample.folded"

    assert main.main([str(input_path), "-o", str(output_path)]) == 0
    assert output_path.read_text(encoding="utf-8") == SAMPLE_FOLDED


def test_main_no_modules_to_stdout(tmp_path, sample_text, capsys):
    input_path = tmp_path / "sample.txt"
    input_path.write_text(sample_text, encoding="utf-8")

    assert main.main([str(input_path), "--no-modules"]) == 0
    assert capsys.readouterr().out == SAMPLE_FOLDED_NO_MODULES


def test_main_reads_stdin(sample_text, capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(sample_text))
    assert main.main([]) == 0
    assert capsys.readouterr().out == SAMPLE_FOLDED


def test_main_missing_input(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        assert main.main([str(tmp_path / "missing.txt"), "-o", str(tmp_path / "out.folded")]) == 1
    assert "处理 sample 输出时出错" in caplog.text


def test_zstd_input(tmp_path, sample_text):
    input_path = tmp_path / "sample.txt.zst"
    input_path.write_bytes(zstd.ZstdCompressor().compress(sample_text.encode("utf-8")))

    out = io.StringIO()
    SampleFolder().collapse_file(input_path, out)
    assert out.getvalue() == SAMPLE_FOLDED


def test_config_options_and_log_level():
    settings = config.initialize_config(["sample.txt", "--no-modules", "-v"])
    assert settings.input == "sample.txt"
    assert settings.output is None
    assert settings.to_options().no_modules is True
    assert settings.log_level() == logging.DEBUG
    # cached until reset
    assert config.initialize_config(["other.txt"]) is settings


def test_config_defaults():
    settings = config.initialize_config([])
    assert settings.input is None
    assert settings.to_options().no_modules is False
    assert settings.log_level() == logging.INFO


def test_config_rejects_verbose_with_quiet(capsys):
    with pytest.raises(SystemExit) as excinfo:
        config.initialize_config(["-v", "-q"])
    assert excinfo.value.code == 2
    assert "--verbose 和 --quiet 不能同时使用" in capsys.readouterr().err


def test_main_unicode_escape_writes_utf8_file(tmp_path):
    input_path = tmp_path / "sample.txt"
    input_path.write_text(
        "Call graph:\n    5 Thread_1\n    + 5 foo$ud800$bar\nTotal number in stack\n",
        encoding="utf-8",
    )
    output_path = tmp_path / "sample.folded"

    assert main.main([str(input_path), "-o", str(output_path)]) == 0
    assert output_path.read_text(encoding="utf-8") == "Thread_1;foo$ud800$bar 5\n"
