from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QListWidget,
    QStackedWidget,
    QSizePolicy,
)
from PySide6.QtCore import Qt
from pathlib import Path
import sys

from .constants import APP_NAME, STYLE_FILE
from .config import PricingSettings
from .database import get_connection
from .modules.base_module import BaseModule
from .modules.checkout.controller import CheckoutController
from .utils.loggers import get_logger


def load_qss() -> str:
    qss = ""
    f = Path(__file__).resolve().parent / STYLE_FILE
    if f.exists():
        qss = f.read_text(encoding="utf-8")
    return qss


class MainWindow(QMainWindow):
    def __init__(self, conn, settings: PricingSettings | None = None):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(980, 600)

        self.conn = conn
        self.settings = settings or PricingSettings.from_env()

        # ---- Central layout: left nav + stacked pages ----
        central = QWidget(self)
        layout = QVBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(110)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()

        row = QWidget()
        row_lay = QHBoxLayout(row)
        row_lay.addWidget(self.nav)
        row_lay.addWidget(self.stack, 1)
        layout.addWidget(row, 1)

        self.modules: list[tuple[str, BaseModule]] = []
        self.nav.currentRowChanged.connect(self.stack.setCurrentIndex)

        self.add_module("Checkout", CheckoutController(self.conn, self.settings))

        if self.nav.count():
            self.nav.setCurrentRow(0)

    def add_module(self, title: str, module: BaseModule):
        self.modules.append((title, module))
        self.nav.addItem(title)
        self.stack.addWidget(module.get_widget())

    def closeEvent(self, event):
        if self.conn is not None:
            self.conn.commit()
            self.conn.close()
            self.conn = None
        super().closeEvent(event)


def main():
    log = get_logger()

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setStyleSheet(load_qss())

    settings = PricingSettings.from_env()
    conn = get_connection()
    log.info("Starting %s (GST %s%%)", APP_NAME, settings.gst_rate_percent)

    win = MainWindow(conn, settings)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
