"""Global error reporting for the transform overlay"""
import sys
import logging
from PyQt5.QtWidgets import QMessageBox

logger = logging.getLogger(__name__)

# Full tracebacks when running from source, popups when packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

_main_window = None

def set_main_window(window):
    """Set the window used as parent for error popups"""
    global _main_window
    _main_window = window

def loggerRaise(e: Exception, user_message: str = None, title: str = "Transform Error"):
    """Report an exception raised while handling a map gesture, then re-raise it

    Args:
        e: The exception to report
        user_message: Message shown in the popup (defaults to str(e))
        title: Title for the popup dialog

    In DEBUG_MODE the exception is re-raised untouched. Otherwise the
    traceback is logged and a critical popup is shown on the main window
    before re-raising.
    """
    if DEBUG_MODE:
        raise e

    logger.error("%s: %s", title, user_message or e, exc_info=e)

    message = user_message if user_message else str(e)
    if _main_window:
        QMessageBox.critical(_main_window, title, message)
    else:
        logger.error("No window for popup: %s - %s", title, message)

    raise e
