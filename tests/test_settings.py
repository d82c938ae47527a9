from tourney import server
from tourney.models import Team, is_scored, validate_roster
from tourney.settings import load_settings


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://user:pw@db:5432/golf")
    monkeypatch.setenv("SCORING_PIN", "4321")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("DEFAULT_STANDINGS_VIEW", "Fractional")
    settings = load_settings()
    assert settings.database_url == "postgresql://user:pw@db:5432/golf"
    assert settings.scoring_pin == "4321"
    assert settings.log_level == "DEBUG"
    assert settings.default_standings_view == "fractional"


def test_settings_defaults(monkeypatch):
    for key in ("DATABASE_URL", "SCORING_PIN", "TOURNAMENT_TZ", "DEFAULT_STANDINGS_VIEW"):
        monkeypatch.delenv(key, raising=False)
    settings = load_settings()
    assert settings.database_url == "postgresql://localhost:5432/tourney"
    assert settings.scoring_pin == "1234"
    assert settings.tournament_tz == "Africa/Nairobi"
    assert settings.default_standings_view == "official"


def test_unknown_default_view_falls_back(monkeypatch):
    monkeypatch.setenv("DEFAULT_STANDINGS_VIEW", "projected")
    assert load_settings().default_standings_view == "official"


def test_roster_seeds_unique_per_division():
    teams = [
        Team(1, "Lions", "Trophy", seed=1),
        Team(2, "Eagles", "Trophy", seed=1),
        Team(3, "Owls", "Bowl", seed=1),
        Team(4, "Hawks", "Trophy", seed=1),
    ]
    assert validate_roster(teams) == [("Trophy", 1)]
    assert validate_roster(teams[2:3]) == []


def test_zero_strokes_mean_unscored():
    assert not is_scored(None)
    assert not is_scored(0)
    assert is_scored(1)


def test_server_port_and_ssl_from_environment(monkeypatch):
    monkeypatch.delenv("APP_PORT", raising=False)
    monkeypatch.setenv("PORT", "9100")
    assert server._port_from_env() == 9100
    monkeypatch.setenv("APP_PORT", "not-a-port")
    assert server._port_from_env() == 9100

    monkeypatch.setenv("SSL_CERT_FILE", "/certs/cert.pem")
    monkeypatch.delenv("SSL_KEY_FILE", raising=False)
    assert server._ssl_kwargs() == {}
    monkeypatch.setenv("SSL_KEY_FILE", "/certs/key.pem")
    monkeypatch.delenv("SSL_KEY_PASSWORD", raising=False)
    assert server._ssl_kwargs() == {"ssl_certfile": "/certs/cert.pem", "ssl_keyfile": "/certs/key.pem"}
