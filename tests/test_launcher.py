import launcher


def test_parse_env_reads_values(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("# comment\nPORT=3000\nCORS_MODE=open\nEMPTY\n", encoding="utf-8")

    assert launcher.parse_env(env_file) == {"PORT": "3000", "CORS_MODE": "open"}


def test_parse_env_missing_file(tmp_path):
    assert launcher.parse_env(tmp_path / "absent.env") == {}


def test_update_env_value_replaces_and_appends(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=3000\nLOG_LEVEL=INFO\n", encoding="utf-8")
    env = {"PORT": "3000"}

    launcher.update_env_value(env, "PORT", "3001", env_file)
    launcher.update_env_value(env, "FRONTEND_PORT", "5174", env_file)

    assert env_file.read_text(encoding="utf-8") == "PORT=3001\nLOG_LEVEL=INFO\nFRONTEND_PORT=5174\n"
    assert env == {"PORT": "3001", "FRONTEND_PORT": "5174"}


def test_with_port():
    assert launcher.with_port("http://localhost:3000", 3001) == "http://localhost:3001"
    assert launcher.with_port("https://api.example.com/base", 8443) == "https://api.example.com:8443/base"


def test_report_env_gaps_flags_mismatches():
    warnings = launcher.report_env_gaps(
        {"CORS_MODE": "everything", "PORT": "3000", "API_BASE_URL": "http://localhost:4000"}
    )

    assert len(warnings) == 2
    assert "CORS_MODE" in warnings[0]
    assert "4000" in warnings[1]


def test_report_env_gaps_accepts_defaults():
    assert launcher.report_env_gaps({}) == []


def test_find_free_port_skips_busy_ports(monkeypatch):
    busy = {3000, 3001}
    monkeypatch.setattr(launcher, "port_available", lambda port: port not in busy)

    assert launcher.find_free_port(3000) == 3002
    assert launcher.find_free_port(3000, limit=2) is None


def test_resolve_port_keeps_free_port(monkeypatch):
    monkeypatch.setattr(launcher, "port_available", lambda port: True)

    assert launcher.resolve_port({}, "PORT", 3000, "API") == 3000


def test_resolve_port_moves_api_and_base_url(monkeypatch, tmp_path):
    monkeypatch.setattr(launcher, "ENV_FILE", tmp_path / ".env")
    monkeypatch.setattr(launcher, "port_available", lambda port: port != 3000)
    monkeypatch.setattr(launcher, "prompt_yes_no", lambda question, default=True: True)
    env = {"API_BASE_URL": "http://localhost:3000"}

    port = launcher.resolve_port(env, "PORT", 3000, "API")

    assert port == 3001
    assert env["PORT"] == "3001"
    assert env["API_BASE_URL"] == "http://localhost:3001"
    assert "API_BASE_URL=http://localhost:3001" in (tmp_path / ".env").read_text(encoding="utf-8")


def test_resolve_port_declined(monkeypatch, tmp_path):
    monkeypatch.setattr(launcher, "ENV_FILE", tmp_path / ".env")
    monkeypatch.setattr(launcher, "port_available", lambda port: port != 5173)
    monkeypatch.setattr(launcher, "prompt_yes_no", lambda question, default=True: False)

    assert launcher.resolve_port({}, "FRONTEND_PORT", 5173, "frontend") is None
    assert not (tmp_path / ".env").exists()


def test_uvicorn_command_uses_given_host():
    assert launcher.uvicorn_command("py", "app.main:app", "127.0.0.1", 3000) == [
        "py", "-m", "uvicorn", "app.main:app", "--reload", "--host", "127.0.0.1", "--port", "3000",
    ]


def test_servers_start_on_configured_hosts(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("HOST=127.0.0.1\nFRONTEND_HOST=localhost\n", encoding="utf-8")
    env = launcher.parse_env(env_file)
    commands = []
    monkeypatch.setattr(launcher, "run", lambda cmd, check=True, capture_output=False: commands.append(cmd))
    monkeypatch.setattr(launcher.subprocess, "Popen", lambda cmd, cwd=None: commands.append(cmd))

    launcher.start_frontend("py", launcher.host_for(env, "FRONTEND_HOST"), 5173)
    launcher.start_api("py", launcher.host_for(env, "HOST"), 3000)

    frontend_cmd, api_cmd = commands
    assert frontend_cmd[frontend_cmd.index("--host") + 1] == "localhost"
    assert api_cmd[api_cmd.index("--host") + 1] == "127.0.0.1"


def test_host_for_defaults_to_all_interfaces():
    assert launcher.host_for({}, "HOST") == "0.0.0.0"
    assert launcher.host_for({"HOST": ""}, "HOST") == "0.0.0.0"
    assert launcher.host_for({"FRONTEND_HOST": "127.0.0.1"}, "FRONTEND_HOST") == "127.0.0.1"
