from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()  # Load .env file

import uvicorn

from bg_editor.app.logging import setup_logging
from bg_editor.app.settings import load_settings
from bg_editor.web.server import create_app


def main() -> None:
    """
    Entrypoint for `bg-editor`:
    - load settings from env / .env
    - configure JSON logging
    - build the FastAPI app (Gemini-backed transformer) and serve it
    """
    s = load_settings()
    setup_logging(s.log_level, json_output=s.log_json)

    app = create_app(s)
    uvicorn.run(app, host=s.host, port=s.port, log_config=None)


if __name__ == "__main__":
    main()
