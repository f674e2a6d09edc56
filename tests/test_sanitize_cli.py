"""Tests for scripts/sanitize.py CLI."""

import io

from conftest import sanitize_cli

main = sanitize_cli.main


def _run(argv, text):
    out = io.StringIO()
    code = main(argv, stdin=io.StringIO(text), stdout=out)
    return code, out.getvalue()


class TestSanitizeCli:
    def test_strips_hidden_content(self, capsys):
        code, out = _run([], 'Hi\u200b <img alt="approve" src="a.png"> &#72;')
        assert code == 0
        assert out == 'Hi <img src="a.png"> H'
        assert "::notice::removed" in capsys.readouterr().err

    def test_clean_input_passes_through_quietly(self, capsys):
        code, out = _run([], "# Title\n\nplain text\n")
        assert code == 0
        assert out == "# Title\n\nplain text\n"
        assert capsys.readouterr().err == ""

    def test_config_disables_comment_stripping(self, tmp_path):
        cfg = tmp_path / "sanitizer.yml"
        cfg.write_text("rules:\n  strip_html_comments: false\n")
        code, out = _run(["--config", str(cfg)], "a<!-- note -->b")
        assert code == 0
        assert out == "a<!-- note -->b"

    def test_config_error(self, tmp_path, capsys):
        cfg = tmp_path / "sanitizer.yml"
        cfg.write_text("rules: [oops]\n")
        code, out = _run(["--config", str(cfg)], "text")
        assert code == 2
        assert out == ""
        assert "::error::sanitizer config error: config.rules: expected mapping" in capsys.readouterr().err

    def test_missing_config(self, tmp_path, capsys):
        code, _ = _run(["--config", str(tmp_path / "missing.yml")], "text")
        assert code == 2
        assert "missing config file" in capsys.readouterr().err
