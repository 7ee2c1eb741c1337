"""
Printer transports.

Two variants share one contract so the printer session stays transport-agnostic:

- UsbTransport: pyusb bulk writes to a claimed interface (kernel driver detached)
- NetworkTransport: python-escpos' Network printer over TCP (raw port 9100 by default)

connect() never raises for device/socket problems; it records the failure in
`last_error` and returns ConnectionState.FAILED. send() reports failure as
False and never retries. disconnect() is idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from todo_printer.core.config import setting_float, setting_int
from todo_printer.core.errors import ConnectFailed, DeviceNotFound, TransportError, TransportUnavailable

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    FAILED = "failed"


@dataclass(frozen=True)
class UsbTarget:
    vendor_id: int
    product_id: int
    interface: int = 0
    out_endpoint: Optional[int] = None
    timeout_ms: int = 5000

    @property
    def uri(self) -> str:
        return f"usb://{self.vendor_id:04x}:{self.product_id:04x}"

    def describe(self) -> Dict[str, Any]:
        return {
            "transport": "usb",
            "interface": self.uri,
            "vendor_id": f"0x{self.vendor_id:04x}",
            "product_id": f"0x{self.product_id:04x}",
        }


@dataclass(frozen=True)
class NetworkTarget:
    host: str
    port: int = 9100
    timeout: float = 5.0

    @property
    def uri(self) -> str:
        return f"tcp://{self.host}:{self.port}"

    def describe(self) -> Dict[str, Any]:
        return {"transport": "network", "interface": self.uri, "host": self.host, "port": self.port}


ConnectionTarget = Union[UsbTarget, NetworkTarget]


def _parse_hex_id(value: Any, name: str) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 16)
    except ValueError as e:
        raise TransportUnavailable(f"invalid {name}: {value!r}") from e


def build_target(settings: Mapping[str, Any]) -> ConnectionTarget:
    """
    Build the connection target from resolved settings.

    Raises TransportUnavailable when neither a USB nor a network target can be built.
    """
    ptype = str(settings.get("printer_type") or "").strip().lower()
    if ptype == "usb":
        out_ep = settings.get("usb_out_endpoint")
        return UsbTarget(
            vendor_id=_parse_hex_id(settings.get("usb_vendor_id"), "usb_vendor_id"),
            product_id=_parse_hex_id(settings.get("usb_product_id"), "usb_product_id"),
            interface=setting_int(settings, "usb_interface"),
            out_endpoint=_parse_hex_id(out_ep, "usb_out_endpoint") if out_ep not in (None, "") else None,
            timeout_ms=setting_int(settings, "usb_timeout_ms"),
        )
    if ptype == "network":
        host = str(settings.get("network_host") or "").strip()
        if not host:
            raise TransportUnavailable("network printer selected but no network_host configured")
        return NetworkTarget(
            host=host,
            port=setting_int(settings, "network_port"),
            timeout=setting_float(settings, "connect_timeout"),
        )
    raise TransportUnavailable(f"Unsupported printer type: {ptype or '<unset>'}")


class Transport:
    """
    Base class: tracks connection state and maps failures onto the shared contract.

    Subclasses implement _open(), _write() and _close().
    """

    def __init__(self, target: ConnectionTarget) -> None:
        self.target = target
        self.state = ConnectionState.DISCONNECTED
        self.last_error: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def describe(self) -> Dict[str, Any]:
        return self.target.describe()

    def connect(self) -> ConnectionState:
        if self.connected:
            return self.state
        try:
            self._open()
        except TransportError as e:
            self._release_quietly()
            self.state = ConnectionState.FAILED
            self.last_error = f"{type(e).__name__}: {e}"
            logger.warning("Printer connect failed (%s): %s", self.target.uri, self.last_error)
            return self.state
        self.state = ConnectionState.CONNECTED
        self.last_error = None
        logger.info("Printer connected (%s)", self.target.uri)
        return self.state

    def send(self, data: bytes) -> bool:
        if not self.connected:
            logger.error("Send attempted on %s while %s", self.target.uri, self.state.value)
            return False
        try:
            self._write(data)
        except OSError as e:
            self.last_error = f"{type(e).__name__}: {e}"
            logger.error("Write to %s failed: %s", self.target.uri, self.last_error)
            return False
        logger.debug("Wrote %d bytes to %s", len(data), self.target.uri)
        return True

    def disconnect(self) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            return
        self._release_quietly()
        self.state = ConnectionState.DISCONNECTED
        logger.info("Printer disconnected (%s)", self.target.uri)

    def _release_quietly(self) -> None:
        try:
            self._close()
        except Exception as e:
            logger.warning("Error releasing %s: %s", self.target.uri, e)

    def __enter__(self) -> "Transport":
        self.connect()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.disconnect()

    def _open(self) -> None:
        raise NotImplementedError

    def _write(self, data: bytes) -> None:
        raise NotImplementedError

    def _close(self) -> None:
        raise NotImplementedError


class UsbTransport(Transport):
    """Bulk-transfer transport over pyusb."""

    target: UsbTarget

    def __init__(self, target: UsbTarget) -> None:
        super().__init__(target)
        self.device = None
        self.endpoint = None
        self._claimed = False
        self._detached = False

    def _open(self) -> None:
        import usb.core
        import usb.util

        t = self.target
        try:
            device = usb.core.find(idVendor=t.vendor_id, idProduct=t.product_id)
        except usb.core.NoBackendError as e:
            raise ConnectFailed(f"no USB backend available: {e}") from e
        if device is None:
            raise DeviceNotFound(f"printer not found (VID: 0x{t.vendor_id:04x}, PID: 0x{t.product_id:04x})")
        self.device = device

        try:
            if device.is_kernel_driver_active(t.interface):
                device.detach_kernel_driver(t.interface)
                self._detached = True
                logger.info("Detached kernel driver from interface %d", t.interface)
        except NotImplementedError:
            # libusb cannot query kernel drivers on this platform
            pass
        except usb.core.USBError as e:
            raise ConnectFailed(f"could not detach kernel driver: {e}") from e

        try:
            device.set_configuration()
        except usb.core.USBError:
            # already configured
            pass

        try:
            usb.util.claim_interface(device, t.interface)
        except usb.core.USBError as e:
            raise ConnectFailed(f"could not claim interface {t.interface}: {e}") from e
        self._claimed = True

        try:
            intf = device.get_active_configuration()[(t.interface, 0)]
        except (usb.core.USBError, KeyError, IndexError) as e:
            raise ConnectFailed(f"interface {t.interface} unavailable: {e}") from e

        endpoint = None
        if t.out_endpoint is not None:
            endpoint = usb.util.find_descriptor(intf, bEndpointAddress=t.out_endpoint)
            if endpoint is None:
                logger.warning("Configured endpoint 0x%02x not found; using first OUT endpoint", t.out_endpoint)
        if endpoint is None:
            endpoint = usb.util.find_descriptor(
                intf,
                custom_match=lambda e: usb.util.endpoint_direction(e.bEndpointAddress) == usb.util.ENDPOINT_OUT,
            )
        if endpoint is None:
            raise ConnectFailed("could not find output endpoint")
        self.endpoint = endpoint

    def _write(self, data: bytes) -> None:
        written = self.device.write(self.endpoint.bEndpointAddress, data, self.target.timeout_ms)
        if written != len(data):
            raise OSError(f"short write: {written} of {len(data)} bytes")

    def _close(self) -> None:
        import usb.util

        device, self.device, self.endpoint = self.device, None, None
        if device is None:
            return
        try:
            if self._claimed:
                usb.util.release_interface(device, self.target.interface)
            if self._detached:
                device.attach_kernel_driver(self.target.interface)
        finally:
            self._claimed = False
            self._detached = False
            usb.util.dispose_resources(device)


class NetworkTransport(Transport):
    """TCP transport (JetDirect style, port 9100) over python-escpos' Network printer."""

    target: NetworkTarget

    def __init__(self, target: NetworkTarget) -> None:
        super().__init__(target)
        self.printer = None

    def _open(self) -> None:
        from escpos.exceptions import DeviceNotFoundError
        from escpos.printer import Network

        t = self.target
        printer = Network(t.host, t.port, timeout=t.timeout)
        try:
            printer.open(raise_not_found=True)
        except (DeviceNotFoundError, OSError) as e:
            raise ConnectFailed(f"could not open {t.uri}: {e}") from e
        self.printer = printer

    def _write(self, data: bytes) -> None:
        if self.printer is None:
            raise OSError("connection closed")
        self.printer._raw(data)

    def _close(self) -> None:
        printer, self.printer = self.printer, None
        if printer is not None:
            printer.close()


def make_transport(target: Optional[ConnectionTarget]) -> Transport:
    if isinstance(target, UsbTarget):
        return UsbTransport(target)
    if isinstance(target, NetworkTarget):
        return NetworkTransport(target)
    raise TransportUnavailable("no USB or network printer target configured")


__all__ = [
    "ConnectionState",
    "ConnectionTarget",
    "NetworkTarget",
    "NetworkTransport",
    "Transport",
    "UsbTarget",
    "UsbTransport",
    "build_target",
    "make_transport",
]
