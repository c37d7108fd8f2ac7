"""
Load ReelBot's environment from an AWS Secrets Manager secret
"""
from __future__ import annotations

import json
import os

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .logger import logger


def load_secret_env(secret_id: str | None = None, *, region_name: str | None = None,
                    override: bool = False) -> list[str]:
    """
    Merge a JSON secret (DISCORD_TOKEN, DB_PASSWORD, ADMIN_IDS, ...) into os.environ.

    The secret id defaults to SECRETS_MANAGER_ID. Keys already present in the
    environment, for example from a local .env file, are kept unless override is set.

    Returns:
        The environment keys that were set from the secret. Empty when no secret
        is configured or it could not be read.
    """
    secret_id = secret_id or os.getenv("SECRETS_MANAGER_ID")
    if not secret_id:
        return []

    region_name = region_name or os.getenv("AWS_REGION", "us-east-1")
    try:
        client = boto3.client("secretsmanager", region_name=region_name)
        secret_string = client.get_secret_value(SecretId=secret_id).get("SecretString")
    except (BotoCoreError, ClientError) as e:
        logger.error(f"[SECRETS] Failed to read {secret_id}: {e}")
        return []

    if not secret_string:
        logger.warning(f"[SECRETS] Secret {secret_id} has no SecretString")
        return []

    try:
        payload = json.loads(secret_string)
    except ValueError as e:
        logger.error(f"[SECRETS] Secret {secret_id} is not valid JSON: {e}")
        return []

    loaded = []
    for key, value in payload.items():
        if value is None or (key in os.environ and not override):
            continue
        os.environ[key] = str(value)
        loaded.append(key)
    logger.info(f"[SECRETS] Loaded {len(loaded)} value(s) from {secret_id}")
    return loaded
