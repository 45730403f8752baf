"""Configuration settings for the uploader."""

import os

from common.constants import DRIVE_BASE_URL


DATABASE_PATH = os.environ.get("DRIVEPOOL_DATABASE_PATH", "/app/data/drivepool.db")

SERVICE_ACCOUNTS_PATH = os.environ.get("DRIVEPOOL_SERVICE_ACCOUNTS_PATH", "/app/config/service_accounts.json")

DRIVE_API_BASE_URL = os.environ.get("DRIVEPOOL_DRIVE_BASE_URL", DRIVE_BASE_URL)

HTTP_TIMEOUT_SECONDS = float(os.environ.get("DRIVEPOOL_HTTP_TIMEOUT", "60"))

RETRY_MAX_ATTEMPTS = int(os.environ.get("DRIVEPOOL_RETRY_MAX_ATTEMPTS", "5"))

RETRY_BASE_DELAY_SECONDS = float(os.environ.get("DRIVEPOOL_RETRY_BASE_DELAY", "1.0"))

RETRY_MAX_DELAY_SECONDS = float(os.environ.get("DRIVEPOOL_RETRY_MAX_DELAY", "32.0"))
