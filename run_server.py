"""Flask server that stays alive"""

import os
import sys

from app import create_app


def main() -> int:
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")

    app = create_app()

    host = os.environ.get("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.environ.get("FLASK_RUN_PORT", 8000))

    print(f"Server starting on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    try:
        app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)
    except KeyboardInterrupt:
        print("\nServer stopped by user")
    finally:
        app.extensions["tupark_shutdown"]("server exit")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
