# To run:
# python -m src.main


import logging
import traceback
import tkinter as tk

from src.config import AppConfig
from src.logging_setup import setup_logging
from src.gui_home import App

logger = logging.getLogger("main")


def main() -> int:
    try:
        cfg = AppConfig.from_env()
    except ValueError as exc:
        print(exc)
        return 2

    setup_logging(cfg.log_level)
    logger.info("HR Console booting against %s", cfg.api_base_url)

    try:
        root = tk.Tk()
        App(root, cfg)
        root.mainloop()
        return 0
    except Exception as exc:
        logger.error("Unhandled error: %s", exc)
        if cfg.debug:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
