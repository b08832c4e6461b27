"""Allow running MenuTimer as a module: python -m menutimer."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .log import LOG_DIR, setup_logging
from .settings import load_settings
from .app import MenuTimerApp, APP_NAME


def main() -> None:
    settings = load_settings()
    setup_logging(
        settings.log_level,
        LOG_DIR / "menutimer.log" if settings.log_to_file else None,
    )
    init_db()
    logging.getLogger("menutimer").info("MenuTimer ready")

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_NAME)
    app.setQuitOnLastWindowClosed(False)

    menu_timer = MenuTimerApp(settings=settings)
    menu_timer.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
