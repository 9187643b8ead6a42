"""One-shot launcher to set up Python, virtual env, and both dev servers."""

import json
import os
import shutil
import socket
import subprocess
import sys
from pathlib import Path
from urllib.parse import urlparse, urlunparse

from dotenv import dotenv_values

ROOT = Path(__file__).parent.resolve()
ENV_FILE = ROOT / ".env"
ENV_EXAMPLE = ROOT / ".env.example"
VENV_DIR = ROOT / ".venv"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_API_PORT = 3000
DEFAULT_FRONTEND_PORT = 5173
CORS_MODES = ("allowlist", "open", "disabled")


def prompt_yes_no(question: str, default: bool = True) -> bool:
    """Console prompt that returns a boolean while handling default answers."""
    default_text = "[Y/n]" if default else "[y/N]"
    while True:
        choice = input(f"{question} {default_text} ").strip().lower()
        if not choice:
            return default
        if choice in ("y", "yes"):
            return True
        if choice in ("n", "no"):
            return False
        print("Please respond with 'y' or 'n'.")


def run(cmd, check=True, capture_output=False):
    """Wrapper around subprocess.run that echoes the command for transparency."""
    print(f"> {' '.join(cmd)}")
    return subprocess.run(cmd, check=check, capture_output=capture_output, text=True)


def ensure_uv():
    """Ensure the `uv` tool is installed; optionally install it via pip."""
    uv_cmd = shutil.which("uv")
    if uv_cmd:
        return uv_cmd
    if not prompt_yes_no("uv not found. Install via pip?", default=True):
        raise RuntimeError("uv is required. Aborting because installation was declined.")
    run([sys.executable, "-m", "pip", "install", "uv"])
    uv_cmd = shutil.which("uv")
    if not uv_cmd:
        raise RuntimeError("uv installation failed. Please install uv manually and retry.")
    return uv_cmd


def try_capture(cmd):
    """Run a command, returning None if it cannot be executed or exits non-zero."""
    try:
        return run(cmd, capture_output=True)
    except (OSError, subprocess.CalledProcessError):
        return None


def find_python_path(version: str = "3.12", uv_cmd: str | None = None) -> str | None:
    """Find a Python interpreter matching the requested version.

    Tries a direct pythonX.Y call first, then interpreters managed by uv.
    """
    result = try_capture([f"python{version}", "-c", "import sys; print(sys.executable)"])
    if result and result.stdout.strip():
        return result.stdout.strip()

    if uv_cmd:
        result = try_capture([uv_cmd, "python", "find", version])
        if result and result.stdout.strip():
            return result.stdout.strip().splitlines()[-1].strip()

        result = try_capture([uv_cmd, "python", "list", "--only-installed", "--output-format", "json"])
        if result and result.stdout:
            try:
                py_list = json.loads(result.stdout)
            except ValueError:
                py_list = []
            for entry in py_list:
                if str(entry.get("version", "")).startswith(version) and entry.get("path"):
                    return entry["path"]
    return None


def ensure_python(version: str, uv_cmd: str) -> str:
    """Return an interpreter path, installing with uv if not present."""
    path = find_python_path(version, uv_cmd)
    if path:
        print(f"Using Python {version} at: {path}")
        return path
    print(f"Python {version} not found. Installing via uv ...")
    run([uv_cmd, "python", "install", version])
    path = find_python_path(version, uv_cmd)
    if not path:
        raise RuntimeError(f"Failed to install Python {version}. Rerun the launcher once uv's install dir is on PATH.")
    print(f"Installed Python {version} at: {path}")
    return path


def ensure_env_file():
    """Create a .env from .env.example if missing so the servers share one config."""
    if ENV_FILE.exists():
        return
    if ENV_EXAMPLE.exists() and prompt_yes_no("No .env found. Copy from .env.example?", default=True):
        ENV_FILE.write_text(ENV_EXAMPLE.read_text(encoding="utf-8"), encoding="utf-8")
        print("Created .env from .env.example")
    else:
        print("No .env present. Built-in defaults will be used (API on 3000, frontend on 5173).")


def parse_env(env_file: Path | None = None) -> dict:
    """Read key/value pairs from the .env file, skipping keys without a value."""
    env_file = env_file or ENV_FILE
    if not env_file.exists():
        return {}
    return {key: value for key, value in dotenv_values(env_file).items() if value is not None}


def report_env_gaps(env: dict) -> list[str]:
    """Warn about settings that would make the frontend miss the API."""
    warnings = []
    mode = env.get("CORS_MODE", "allowlist")
    if mode not in CORS_MODES:
        warnings.append(f"CORS_MODE={mode!r} is not one of {', '.join(CORS_MODES)}.")

    api_port = int(env.get("PORT", DEFAULT_API_PORT))
    base = urlparse(env.get("API_BASE_URL", f"http://localhost:{DEFAULT_API_PORT}"))
    if base.port and base.port != api_port:
        warnings.append(f"API_BASE_URL points at port {base.port} but the API listens on {api_port}.")

    for warning in warnings:
        print(f"Warning: {warning}")
    return warnings


def port_available(port: int) -> bool:
    """Check whether a TCP port can be bound (used before starting servers)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind(("", port))
            return True
        except OSError:
            return False


def find_free_port(start_port: int, limit: int = 20) -> int | None:
    """Find the first available port in a consecutive range starting at start_port."""
    for p in range(start_port, start_port + limit):
        if port_available(p):
            return p
    return None


def update_env_value(env: dict, key: str, value: str, env_file: Path | None = None):
    """Set `key` in the .env file (appending it when absent) and in `env`."""
    env_file = env_file or ENV_FILE
    lines = env_file.read_text(encoding="utf-8").splitlines() if env_file.exists() else []
    new_lines = []
    replaced = False
    for line in lines:
        if line.startswith(f"{key}="):
            new_lines.append(f"{key}={value}")
            replaced = True
        else:
            new_lines.append(line)
    if not replaced:
        new_lines.append(f"{key}={value}")
    env_file.write_text("\n".join(new_lines) + "\n", encoding="utf-8")
    env[key] = value


def with_port(url: str, port: int) -> str:
    """Return `url` with its port replaced, keeping scheme, host and path."""
    parsed = urlparse(url)
    host = parsed.hostname or "localhost"
    return urlunparse((parsed.scheme or "http", f"{host}:{port}", parsed.path, parsed.params, parsed.query, parsed.fragment))


def resolve_port(env: dict, key: str, default: int, label: str) -> int | None:
    """Return a bindable port for `label`, offering the next free one on conflict."""
    desired_port = int(env.get(key, default))
    if port_available(desired_port):
        return desired_port
    alt = find_free_port(desired_port + 1, limit=20)
    if alt is None:
        print(f"No free port found for the {label} in the next 20 ports.")
        return None
    if not prompt_yes_no(f"Port {desired_port} is in use. Run the {label} on {alt} instead?", default=True):
        print(f"Port conflict unresolved; skipping the {label}.")
        return None
    update_env_value(env, key, str(alt))
    if key == "PORT":
        # keep the frontend pointed at the relocated API
        update_env_value(env, "API_BASE_URL", with_port(env.get("API_BASE_URL", "http://localhost"), alt))
    return alt


def create_venv(uv_cmd: str, python_path: str):
    """Create a new virtual environment with uv."""
    run([uv_cmd, "venv", "--python", python_path])


def venv_python() -> Path:
    """Return the path to the venv's python executable on this OS."""
    if os.name == "nt":
        return VENV_DIR / "Scripts" / "python.exe"
    return VENV_DIR / "bin" / "python"


def venv_python_matches(version: str) -> bool:
    """Verify the venv python version matches the target major.minor."""
    py = venv_python()
    if not py.exists():
        return False
    result = try_capture([str(py), "-c", "import sys; print(f'{sys.version_info.major}.{sys.version_info.minor}')"])
    return bool(result and result.stdout.strip().startswith(version))


def recreate_venv(uv_cmd: str, python_path: str):
    """Delete and recreate the venv (used when the version is mismatched)."""
    if VENV_DIR.exists():
        shutil.rmtree(VENV_DIR)
    create_venv(uv_cmd, python_path)


def install_dependencies(uv_cmd, python_path: str):
    """Install the project into the venv using uv pip after user confirmation."""
    if prompt_yes_no("Install project dependencies with uv pip?", default=True):
        run([uv_cmd, "pip", "install", "--python", python_path, "-e", str(ROOT)])


def host_for(env: dict, key: str) -> str:
    """Bind address for a server from .env, falling back to all interfaces."""
    return env.get(key) or DEFAULT_HOST


def uvicorn_command(python_path: str, target: str, host: str, port: int) -> list[str]:
    return [python_path, "-m", "uvicorn", target, "--reload", "--host", host, "--port", str(port)]


def start_frontend(python_path: str, host: str, port: int):
    """Start the frontend dev server in the background and return its process."""
    cmd = uvicorn_command(python_path, "app.frontend.server:app", host, port)
    print(f"> {' '.join(cmd)}")
    return subprocess.Popen(cmd, cwd=ROOT)


def start_api(python_path: str, host: str, port: int):
    """Run the API in the foreground until interrupted."""
    print("Starting API server (Ctrl+C to stop)...")
    run(uvicorn_command(python_path, "app.main:app", host, port), check=False)


def main():
    """Primary orchestrator for the launcher workflow."""
    uv_cmd = ensure_uv()
    target_python = ensure_python("3.12", uv_cmd)
    ensure_env_file()
    env = parse_env()
    report_env_gaps(env)

    if not VENV_DIR.exists():
        if prompt_yes_no(f"Create .venv with Python at {target_python}?", default=True):
            create_venv(uv_cmd, target_python)
    elif not venv_python_matches("3.12"):
        if prompt_yes_no(".venv exists but is not Python 3.12. Recreate it?", default=True):
            recreate_venv(uv_cmd, target_python)
    install_dependencies(uv_cmd, str(venv_python()))

    api_port = resolve_port(env, "PORT", DEFAULT_API_PORT, "API")
    frontend_port = resolve_port(env, "FRONTEND_PORT", DEFAULT_FRONTEND_PORT, "frontend")

    frontend = None
    if frontend_port and prompt_yes_no(f"Start the frontend on http://localhost:{frontend_port}?", default=True):
        frontend = start_frontend(str(venv_python()), host_for(env, "FRONTEND_HOST"), frontend_port)
    try:
        if api_port and prompt_yes_no(f"Start the API on http://localhost:{api_port}?", default=True):
            start_api(str(venv_python()), host_for(env, "HOST"), api_port)
        elif frontend is not None:
            frontend.wait()
    finally:
        if frontend is not None and frontend.poll() is None:
            frontend.terminate()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nShutting down.")
    except Exception as exc:
        print(f"Error: {exc}")
        sys.exit(1)
