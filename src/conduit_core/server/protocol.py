"""JSON-RPC 2.0 envelope helpers for the peer protocol."""

import json
from typing import Any

JSONRPC_VERSION = "2.0"

# Every protocol-level failure is reported with this code
ERROR_CODE = -1

# Method names
METHOD_TOOLS_LIST = "tools/list"
METHOD_TOOLS_CALL = "tools/call"
METHOD_CONNECTION_INFO = "connection/info"
METHOD_PING = "ping"
NOTIFICATION_CONNECTED = "server/connected"


class JSONRPCMessage:
    """JSON-RPC 2.0 message builder and parser."""

    @staticmethod
    def request(method: str, params: dict[str, Any] | None = None, id: str = "1") -> dict[str, Any]:
        """Build a JSON-RPC request.

        Args:
            method: Method name (e.g., "tools/list", "tools/call", "ping")
            params: Optional parameters
            id: Correlation id

        Returns:
            JSON-RPC request dict
        """
        msg: dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "id": id,
            "method": method,
        }
        if params is not None:
            msg["params"] = params
        return msg

    @staticmethod
    def notification(method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Build a JSON-RPC notification (no id, no response expected)."""
        msg: dict[str, Any] = {
            "jsonrpc": JSONRPC_VERSION,
            "method": method,
        }
        if params is not None:
            msg["params"] = params
        return msg

    @staticmethod
    def success_response(id: Any, result: Any) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": id,
            "result": result,
        }

    @staticmethod
    def error_response(id: Any, message: str, code: int = ERROR_CODE) -> dict[str, Any]:
        """Build a JSON-RPC error response.

        Args:
            id: Request id (None when the request could not be parsed)
            message: Error message
            code: Error code

        Returns:
            JSON-RPC error response dict
        """
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": id,
            "error": {"code": code, "message": message},
        }

    @staticmethod
    def parse(message: str | bytes) -> Any:
        """Parse a raw frame.

        Raises:
            ValueError: If the frame is not valid JSON
        """
        if isinstance(message, bytes):
            message = message.decode("utf-8")
        return json.loads(message)

    @staticmethod
    def encode(message: dict[str, Any]) -> str:
        return json.dumps(message, default=str)

    @staticmethod
    def is_response(message: dict[str, Any]) -> bool:
        """Check if message is a response (has 'result' or 'error')."""
        return "result" in message or "error" in message

    @staticmethod
    def is_error(message: dict[str, Any]) -> bool:
        return "error" in message

    @staticmethod
    def error_message(message: dict[str, Any]) -> str:
        """Extract the message of an error response."""
        error = message.get("error")
        if isinstance(error, dict):
            return str(error.get("message", "Unknown error"))
        return str(error)
