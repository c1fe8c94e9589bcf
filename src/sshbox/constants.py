"""Default configuration constants for sshbox."""

# Key fetch settings (milliseconds)
DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_RETRY_DELAY_MS = 1_000
DEFAULT_MAX_RETRIES = 3

# Default retry status codes for remote key fetches
DEFAULT_RETRY_STATUS_CODES = (408, 429, 500, 502, 503, 504)

# Size limits (bytes)
DEFAULT_MAX_KEY_SIZE = 64 * 1024

# Armor line width (characters)
DEFAULT_ARMOR_WIDTH = 64

# Mode for files written by the pipeline
OUTPUT_FILE_MODE = 0o644
