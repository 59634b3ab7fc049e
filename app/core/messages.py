"""User-facing error messages and text for the backend."""

# Authentication messages
AUTH_CREDENTIALS_INVALID = "Could not validate credentials"
AUTH_USER_NOT_FOUND_OR_INACTIVE = "User not found or inactive"
AUTH_ACCESS_DENIED = "Access denied"

# WebSocket close reasons
WS_TOKEN_INVALID = "Invalid token"
WS_USER_NOT_FOUND = "User not found or inactive"

# Chat messages
CHAT_MESSAGE_NOT_FOUND = "Message not found"
CHAT_MESSAGE_DELETED = "Message deleted successfully"
