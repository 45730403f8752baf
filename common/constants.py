"""Project-wide constants (file type tags, Drive defaults)."""

CHUNKIFIED_FILE_TYPE_PREFIX: str = "chunkified-"

DEFAULT_CHUNK_MIME_TYPE: str = "text/plain"

PUBLIC_READ_PERMISSION: dict = {"role": "reader", "type": "anyone"}

DRIVE_BASE_URL: str = "https://www.googleapis.com"

RATE_LIMIT_REASONS: frozenset = frozenset({"userRateLimitExceeded", "rateLimitExceeded"})
