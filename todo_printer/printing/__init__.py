"""
Printing subsystem for Todo Printer.

- layout: fixed-width word wrapping
- directives / compose: the ticket layout as a render plan
- encoders: render plan -> ESC/POS bytes (python-escpos or raw table)
- transport: USB (pyusb) and TCP printer connections
- session: connection state + serialized ticket printing
- worker: background print queue and job registry
"""

from .compose import Ticket, compose, format_timestamp, round_to_hour
from .directives import *
from .encoders import EscposEncoder, RawEncoder, make_encoder
from .layout import wrap
from .session import PrinterSession
from .transport import (
    ConnectionState,
    NetworkTarget,
    NetworkTransport,
    Transport,
    UsbTarget,
    UsbTransport,
    build_target,
    make_transport,
)
from .worker import enqueue_ticket, ensure_worker, get_job, list_jobs, worker_status
