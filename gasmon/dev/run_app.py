from __future__ import annotations

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from gasmon.bootstrap import build_app_system, shutdown_app_system
from gasmon.core.config.yaml_config import load_app_config
from gasmon.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """
    Start the monitoring loop and serve the ingest API.

    Notes
    -----
    - Loads ``.env`` from the working directory, then configuration from
      `config.yaml` by default.
    - Optional CLI usage:
        python -m gasmon.dev.run_app --config path/to/config.yaml
    - All state is in memory and is lost when the process exits.
    """
    config_path = None
    if "--config" in sys.argv:
        i = sys.argv.index("--config")
        if i + 1 < len(sys.argv):
            config_path = sys.argv[i + 1]

    load_dotenv(Path.cwd() / ".env")

    cfg = load_app_config(config_path)
    configure_logging(cfg.logging.level)

    wiring = build_app_system(cfg=cfg)
    wiring.loop.start()

    logger.info("ingest API listening on http://%s:%d", cfg.ingest.host, cfg.ingest.port)
    try:
        # threaded=True: readings are published from request threads while the loop runs.
        wiring.ingest_app.run(host=cfg.ingest.host, port=cfg.ingest.port, debug=False, threaded=True)
    finally:
        shutdown_app_system(wiring)


if __name__ == "__main__":
    main()
