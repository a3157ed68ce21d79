"""Synchronous per-object event with disposable connections."""
import logging

logger = logging.getLogger(__name__)


class Connection:
    __slots__ = ('_signal', '_callback')

    def __init__(self, signal, callback):
        self._signal = signal
        self._callback = callback

    @property
    def connected(self):
        return self._signal is not None

    def disconnect(self):
        if self._signal is None:
            return
        self._signal._connections.remove(self)
        self._signal = None
        self._callback = None

    def __repr__(self):
        state = 'connected' if self.connected else 'disconnected'
        return f'<Connection {state} {self._callback!r}>'


class Signal:
    """Handlers run in connection order; a handler connected during `fire`
    waits for the next one. A handler that raises is logged and the rest
    still run."""

    def __init__(self, name='Signal'):
        self.name = name
        self._connections = []

    def connect(self, callback):
        if not callable(callback):
            raise TypeError(f'{self.name}: handler must be callable, got {callback!r}')
        conn = Connection(self, callback)
        self._connections.append(conn)
        return conn

    def fire(self, *args):
        for conn in list(self._connections):
            callback = conn._callback
            if callback is None:   # disconnected by an earlier handler
                continue
            try:
                callback(*args)
            except Exception:
                logger.exception('%s handler %r failed', self.name, callback)

    def disconnect_all(self):
        for conn in list(self._connections):
            conn.disconnect()

    def __len__(self):
        return len(self._connections)

    def __repr__(self):
        return f'<Signal {self.name} ({len(self)} connections)>'
