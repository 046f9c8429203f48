from __future__ import annotations

from typer.testing import CliRunner

from cli import doctor

runner = CliRunner()


def test_jpeg_support_check_passes():
    ok, detail = doctor._check_jpeg()

    assert ok, detail


def test_setup_key_stores_prompted_key(monkeypatch, tmp_path):
    written: dict[str, str] = {}

    def fake_write(values):
        written.update(values)
        return tmp_path / ".env"

    monkeypatch.setattr(doctor, "write_user_env_vars", fake_write)

    result = runner.invoke(doctor.app, ["setup-key"], input="secret-key\n")

    assert result.exit_code == 0, result.output
    assert written == {"PLANT_ID_GEMINI_API_KEY": "secret-key"}
    assert "secret-key" not in result.output
