"""
Printer session: the single owner of a printer transport.

The session tracks connection state, serializes prints with a lock, composes
tickets into directives, encodes them and hands the bytes to the transport in
one write. Nothing else touches the transport.
"""

from __future__ import annotations

import atexit
import logging
import threading
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from todo_printer.core.errors import InvalidInput, NotConnected, PrintFailed

from .compose import Ticket, compose
from .encoders import make_encoder
from .transport import ConnectionState, Transport, build_target, make_transport

logger = logging.getLogger(__name__)


class PrinterSession:
    def __init__(self, transport: Transport, encoder, clock: Callable[[], datetime] = datetime.now) -> None:
        self.transport = transport
        self.encoder = encoder
        self.clock = clock
        self._lock = threading.Lock()
        self._exit_hook = False

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "PrinterSession":
        """
        Build a session from resolved settings.

        Raises TransportUnavailable if no printer target can be built.
        """
        transport = make_transport(build_target(settings))
        return cls(transport, make_encoder(settings))

    @property
    def state(self) -> ConnectionState:
        return self.transport.state

    @property
    def connected(self) -> bool:
        return self.transport.state is ConnectionState.CONNECTED

    def connect(self) -> bool:
        with self._lock:
            logger.info("Connecting to printer %s", self.transport.target.uri)
            return self.transport.connect() is ConnectionState.CONNECTED

    def disconnect(self) -> None:
        with self._lock:
            self.transport.disconnect()

    def disconnect_at_exit(self) -> None:
        """Register ``disconnect`` with atexit; repeat calls are no-ops."""
        with self._lock:
            if self._exit_hook:
                return
            self._exit_hook = True
        atexit.register(self.disconnect)

    def print_ticket(
        self,
        title: str,
        assignee: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Ticket:
        """
        Print one todo ticket and return the (normalized) ticket that was printed.

        Raises:
            NotConnected: the session is not connected; nothing is written.
            InvalidInput: the title is missing or blank.
            PrintFailed: encoding or the transport write failed. Paper may be
                partially printed; connection state is left unchanged.
        """
        with self._lock:
            if not self.connected:
                raise NotConnected(f"printer is {self.state.value}")
            if not isinstance(title, str) or not title.strip():
                raise InvalidInput("Title is required and must be a non-empty string")

            ticket = Ticket.create(title, assignee, description)
            logger.info("Printing ticket: %s (owner: %s)", ticket.title, ticket.assignee or "-")
            directives = compose(ticket, now=self.clock())
            try:
                payload = self.encoder.encode(directives)
            except Exception as e:
                raise PrintFailed(f"could not encode ticket: {e}") from e

            if not self.transport.send(payload):
                raise PrintFailed(self.transport.last_error or "transport write failed")
            logger.info("Ticket printed (%d bytes)", len(payload))
            return ticket

    def status(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "connected": self.connected,
            "state": self.state.value,
        }
        info.update(self.transport.describe())
        info["last_error"] = self.transport.last_error
        return info


__all__ = ["PrinterSession"]
