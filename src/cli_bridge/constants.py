"""
Configuration constants for CLI operations.
"""

# Daemon address
DEFAULT_DAEMON_HOST = "127.0.0.1"
DEFAULT_DAEMON_PORT = 8000

# API communication
API_REQUEST_TIMEOUT_BUFFER_S = 30  # Added to the reply wait for HTTP request
