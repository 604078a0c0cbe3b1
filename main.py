"""
main.py: Server launcher and entry point.

Run this file to start the reservation API and open the API docs:

    python main.py

The Streamlit dashboard is started separately:

    streamlit run dashboard/app.py

This file does NOT contain application logic. See app.py for the FastAPI
application, service wiring, and startup sequence.

Direct uvicorn usage (without browser auto-open):
    uvicorn app:app --reload
"""

from __future__ import annotations

import threading
import time
import webbrowser

import uvicorn


HOST = "127.0.0.1"
PORT = 8000
DOCS_URL = f"http://{HOST}:{PORT}/docs"


def _open_browser_after_startup(delay_seconds: float = 2.0) -> None:
    """Open the API docs once uvicorn has had time to seed the database."""
    time.sleep(delay_seconds)
    print(f"\n  Opening API docs → {DOCS_URL}\n")
    webbrowser.open(DOCS_URL)


def main() -> None:
    """Start the hot-desk reservation server."""
    print("=" * 60)
    print("  Hot-Desk Reservation Service")
    print("=" * 60)
    print(f"  Server   : http://{HOST}:{PORT}")
    print(f"  API docs : {DOCS_URL}")
    print("  Dashboard: streamlit run dashboard/app.py")
    print("=" * 60)
    print("  Press CTRL+C to stop\n")

    browser_thread = threading.Thread(
        target=_open_browser_after_startup,
        daemon=True,
    )
    browser_thread.start()

    # Blocks until CTRL+C
    uvicorn.run(
        "app:app",
        host=HOST,
        port=PORT,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
