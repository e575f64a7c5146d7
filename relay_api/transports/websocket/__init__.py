from .handler import WebSocketSendHandle, relay_socket, router

__all__ = ["WebSocketSendHandle", "relay_socket", "router"]
