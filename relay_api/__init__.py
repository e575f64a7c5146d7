"""Tank telemetry relay: WebSocket fan-out of tank readings and controller commands."""

__version__ = "0.1.0"
