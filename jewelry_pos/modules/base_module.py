from PySide6.QtCore import QObject
from PySide6.QtWidgets import QWidget


class BaseModule(QObject):
    """A navigable screen: owns its widget and wires it to the database."""

    def get_widget(self) -> QWidget:
        raise NotImplementedError
