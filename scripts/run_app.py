import os
import socket
import threading
import time
import webbrowser
from pathlib import Path

import uvicorn

HOST = "127.0.0.1"
PORT = 8000


def wait_for_server(host, port, timeout=10):
    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.2)
    return False


def open_docs():
    if wait_for_server(HOST, PORT):
        webbrowser.open(f"http://{HOST}:{PORT}/docs")


def _default_db_dir() -> Path:
    base = os.environ.get("DB_DIR")

    if base:
        return Path(base)

    if os.name == "nt":
        root = Path(os.environ.get("APPDATA", Path.home() / "AppData/Roaming"))
    else:
        root = Path.home() / ".local" / "share"

    return root / "QuizPlatform" / "data"


def main():
    # Must be set before the api package reads its configuration
    os.environ.setdefault("DB_DIR", str(_default_db_dir()))
    from api.app import app

    threading.Thread(target=open_docs, daemon=True).start()

    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        log_level="info",
    )


if __name__ == "__main__":
    main()
