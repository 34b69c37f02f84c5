# Fichier: logitrack/schemas/toast_schema.py

import enum

from pydantic import BaseModel


class ToastType(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# Message éphémère affiché par le front après une action
class Toast(BaseModel):
    message: str
    type: ToastType = ToastType.INFO
