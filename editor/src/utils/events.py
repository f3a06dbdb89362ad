"""Named event emitter.

Components own an EventEmitter instead of inheriting an evented base class.
Listeners receive a single dict payload that always carries a 'type' key.
"""
import logging

logger = logging.getLogger(__name__)


class EventEmitter:
    """Registers listeners per event name and fires payloads to them."""

    def __init__(self):
        self._listeners = {}

    def on(self, name, callback):
        self._listeners.setdefault(name, []).append(callback)
        return self

    def off(self, name, callback=None):
        """Remove one listener, or every listener of `name` when callback is None."""
        if callback is None:
            self._listeners.pop(name, None)
            return self
        listeners = self._listeners.get(name, [])
        if callback in listeners:
            listeners.remove(callback)
        return self

    def fire(self, name, **payload):
        payload['type'] = name
        # Copy so listeners may unsubscribe while being called
        for callback in list(self._listeners.get(name, [])):
            callback(payload)
        return self

    def listens(self, name) -> bool:
        return bool(self._listeners.get(name))
