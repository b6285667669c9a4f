"""
Runs the CV builder API locally.

Run `python run_server_local.py` in the terminal to launch the server and
open the swagger UI at `http://0.0.0.0:8001/docs` (host/port can be set with
CV_BUILDER_HOST / CV_BUILDER_PORT in .env).
"""
import os
import signal
import sys

import uvicorn
from dotenv import load_dotenv

load_dotenv()


def main():
    # Uvicorn is driven programmatically so Ctrl+C shuts down cleanly
    config = uvicorn.Config(
        "api.server:app",
        host=os.getenv("CV_BUILDER_HOST", "0.0.0.0"),
        port=int(os.getenv("CV_BUILDER_PORT", "8001")),
        reload=os.getenv("ENV", "development") in ("development", "local"),
    )
    server = uvicorn.Server(config)

    def handle_exit(sig, frame):
        print("\nShutting down CV builder API...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_exit)
    signal.signal(signal.SIGTERM, handle_exit)

    server.run()
    print("CV builder API stopped.")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\nKeyboard interrupt received. Exiting...")
        sys.exit(0)
