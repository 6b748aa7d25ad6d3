import base64
import json
import logging
import os
from dataclasses import dataclass

import boto3


@dataclass(frozen=True)
class Config:
    public_key: str
    log_level: str = "INFO"


def get_secret_json(name: str) -> dict:
    secrets = boto3.client("secretsmanager")
    resp = secrets.get_secret_value(SecretId=name)
    if "SecretString" in resp:
        s = resp["SecretString"]
    else:
        s = base64.b64decode(resp["SecretBinary"]).decode()
    return json.loads(s) if s else {}


def log_level_name(value: str | None) -> str:
    # logging only accepts upper-case names; anything unknown falls back to INFO
    name = (value or "INFO").strip().upper()
    return name if isinstance(logging.getLevelName(name), int) else "INFO"


def load_config(environ=os.environ) -> Config:
    public_key = environ.get("DISCORD_PUBLIC_KEY", "")
    secret_name = environ.get("DISCORD_SECRET_NAME")
    if not public_key and secret_name:
        public_key = get_secret_json(secret_name).get("publicKey", "")
    return Config(public_key=public_key, log_level=log_level_name(environ.get("LOG_LEVEL")))
