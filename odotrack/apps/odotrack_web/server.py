from __future__ import annotations

import os
from pathlib import Path

from ...config import load_resolved_config
from ...log import configure_logging
from . import create_app


def main() -> None:
    cfg_env = os.environ.get("ODOTRACK_CONFIG")
    cfg = load_resolved_config(Path(cfg_env) if cfg_env else None)
    configure_logging(cfg.logging.level)
    app = create_app(cfg)
    app.run(host=cfg.web.bind_host, port=cfg.web.bind_port, threaded=True)


if __name__ == "__main__":
    main()
