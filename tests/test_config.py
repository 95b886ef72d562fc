import pytest

from resonance_tools.config import ENV_OVERRIDES, Settings, load_settings, save_settings
from resonance_tools.errors import SettingsError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_name in list(ENV_OVERRIDES.values()) + ["RESONANCE_SETTINGS"]:
        monkeypatch.delenv(env_name, raising=False)


def test_defaults():
    settings = load_settings()
    assert settings == Settings()
    assert settings.edge_harmonic == 108
    assert settings.orb_divisor == 30
    assert settings.primary_orb == pytest.approx(12.0)
    assert settings.orb_for(same_chart=True) == pytest.approx(12.0)
    assert settings.orb_for(same_chart=False) == pytest.approx(6.0)
    assert settings.pattern_orb(1) == pytest.approx(12.0)
    assert settings.pattern_orb(2) == pytest.approx(6.0)


def test_full_orbs_for_doubles():
    settings = Settings(half_orbs_for_doubles=False)
    assert settings.orb_for(same_chart=False) == pytest.approx(12.0)


def test_read_settings_file(tmp_path):
    path = tmp_path / "settings.ini"
    path.write_text(
        "# resonance settings\n"
        "HARMONICA_ULTIMA = 24\n"
        "\n"
        "ORBS_DIVISOR=20\n"
        "this line is ignored\n"
        "UNKNOWN_KEY = 5\n"
        "ORBES_DIMIDII_DUPLICIBUS = false\n",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings == Settings(edge_harmonic=24, orb_divisor=20, half_orbs_for_doubles=False)
    assert settings.primary_orb == pytest.approx(18.0)


def test_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / "settings.ini"
    path.write_text("HARMONICA_ULTIMA = 24\n", encoding="utf-8")
    monkeypatch.setenv("RESONANCE_SETTINGS", str(path))
    monkeypatch.setenv("RESONANCE_EDGE_HARMONIC", "12")
    monkeypatch.setenv("RESONANCE_HALF_ORBS", "no")
    settings = load_settings()
    assert settings.edge_harmonic == 12
    assert settings.half_orbs_for_doubles is False


def test_missing_file_means_defaults(tmp_path):
    assert load_settings(tmp_path / "absent.ini") == Settings()


@pytest.mark.parametrize("line", ["HARMONICA_ULTIMA = 0", "ORBS_DIVISOR = many", "ORBS_DIVISOR = -3"])
def test_invalid_values(tmp_path, line):
    path = tmp_path / "settings.ini"
    path.write_text(line + "\n", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(path)


def test_settings_validate_directly():
    with pytest.raises(SettingsError):
        Settings(edge_harmonic=0)
    with pytest.raises(SettingsError):
        Settings(orb_divisor=0)


def test_overrides_skip_none():
    settings = Settings().with_overrides(edge_harmonic=36, orb_divisor=None)
    assert settings == Settings(edge_harmonic=36)


def test_save_and_load(tmp_path):
    original = Settings(edge_harmonic=48, orb_divisor=24, half_orbs_for_doubles=False)
    path = save_settings(original, tmp_path / "conf" / "settings.ini")
    assert path.read_text(encoding="utf-8").splitlines()[0] == "HARMONICA_ULTIMA = 48"
    assert load_settings(path) == original
