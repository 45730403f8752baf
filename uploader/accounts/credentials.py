"""Loading service account credentials and turning them into accounts."""

import json
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from pydantic import ValidationError

from common.logging_config import get_logger
from uploader.accounts.account import Account
from uploader.drive_client import DriveClient, RemoteBackend, StaticTokenAuthorizer
from uploader.exceptions import BootstrapError
from uploader.retry import RetryExecutor
from uploader.schemas import ServiceAccountConfig

logger = get_logger(__name__)


def load_service_accounts(path) -> List[ServiceAccountConfig]:
    """
    Read service account configs from a JSON list file.

    Raises:
        BootstrapError: If the file is missing, unreadable or malformed
    """
    config_path = Path(path)
    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise BootstrapError(f"Cannot read service accounts from {config_path}: {e}") from e

    if not isinstance(data, list):
        raise BootstrapError(f"Service accounts file {config_path} must hold a JSON list")

    try:
        return [ServiceAccountConfig.model_validate(entry) for entry in data]
    except ValidationError as e:
        raise BootstrapError(f"Invalid service account entry in {config_path}: {e}") from e


def _drive_backend(config: ServiceAccountConfig) -> RemoteBackend:
    return DriveClient(StaticTokenAuthorizer(config.access_token))


async def generate_accounts(
    configs: Iterable[ServiceAccountConfig],
    backend_factory: Callable[[ServiceAccountConfig], RemoteBackend] = _drive_backend,
    retry: Optional[RetryExecutor] = None,
) -> List[Account]:
    """
    Build one ready-to-use Account per service account config.

    Args:
        configs: Parsed service account entries
        backend_factory: Builds the remote backend of each account
        retry: Shared retry policy; each account gets a default one if None
    """
    accounts = []
    for config in configs:
        accounts.append(Account(config.identifier, backend_factory(config), retry=retry))
    logger.info(f"Generated {len(accounts)} accounts from service account configs")
    return accounts
