"""
Local Company Manager web UI launcher.

Usage (from repo root):
  python cmgr_webui.py

Notes:
  - This runs locally only (127.0.0.1).
  - Records are stored under data/db/companies.db by default.
"""
from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from company_manager.config import load_config  # noqa: E402
from company_manager.web import create_app  # noqa: E402


def main() -> None:
    config = load_config()
    app = create_app(config=config)
    app.run(host="127.0.0.1", port=config.web.port, debug=True)


if __name__ == "__main__":
    main()
