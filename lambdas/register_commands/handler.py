"""
Publish the bot's slash commands to Discord.

Run once after changing ALL_COMMANDS, either by invoking the Lambda or
locally with `python handler.py` (APP_ID and DISCORD_TOKEN in the environment).
"""
import base64
import json
import logging
import os
from dataclasses import dataclass

import boto3
import urllib3


def log_level_name(value: str | None) -> str:
    name = (value or "INFO").strip().upper()
    return name if isinstance(logging.getLevelName(name), int) else "INFO"


logger = logging.getLogger()
logger.setLevel(log_level_name(os.environ.get("LOG_LEVEL")))

API_BASE = "https://discord.com/api/v10"
USER_AGENT = "DiscordBot (https://github.com/discord/discord-example-app, 1.0.0)"

http = urllib3.PoolManager()

# Pattern command to look up SkyHanni regexes by key
PATTERN_COMMAND = {
    "name": "pattern",
    "type": 1,
    "description": "Get SkyHanni patterns",
    "options": [
        {
            "type": 3,
            "name": "key",
            "description": "The key of the pattern to get",
            "required": True,
        },
    ],
    "integration_types": [0, 1],
    "contexts": [0, 1, 2],
}

ALL_COMMANDS = [PATTERN_COMMAND]


class SettingsError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    app_id: str
    bot_token: str


class DiscordAPIError(Exception):
    def __init__(self, status: int, body: str):
        super().__init__(f"discord API returned HTTP {status}: {body}")
        self.status = status
        self.body = body


def get_secret_json(name: str) -> dict:
    secrets = boto3.client("secretsmanager")
    resp = secrets.get_secret_value(SecretId=name)
    if "SecretString" in resp:
        s = resp["SecretString"]
    else:
        s = base64.b64decode(resp["SecretBinary"]).decode()
    return json.loads(s) if s else {}


def load_settings(environ=os.environ) -> Settings:
    app_id = environ.get("APP_ID", "")
    token = environ.get("DISCORD_TOKEN", "")
    secret_name = environ.get("DISCORD_SECRET_NAME")
    if (not app_id or not token) and secret_name:
        cfg = get_secret_json(secret_name)
        app_id = app_id or cfg.get("appId", "")
        token = token or cfg.get("botToken", "")
    if not app_id or not token:
        raise SettingsError("APP_ID and DISCORD_TOKEN must be set")
    return Settings(app_id=app_id, bot_token=token)


def discord_request(endpoint: str, method: str, bot_token: str, body=None):
    url = f"{API_BASE}/{endpoint}"
    headers = {
        "Authorization": f"Bot {bot_token}",
        "Content-Type": "application/json; charset=UTF-8",
        "User-Agent": USER_AGENT,
    }
    data = json.dumps(body).encode() if body is not None else None
    r = http.request(method, url, body=data, headers=headers)
    if r.status < 200 or r.status >= 300:
        raise DiscordAPIError(r.status, r.data.decode(errors="ignore"))
    return json.loads(r.data.decode()) if r.data else None


def install_global_commands(app_id: str, commands: list, bot_token: str):
    # bulk overwrite: replaces every global command of the application
    return discord_request(f"applications/{app_id}/commands", "PUT", bot_token, body=commands)


def handler(event, context):
    try:
        settings = load_settings()
    except Exception as e:
        logger.exception({"config_error": str(e)})
        return {"statusCode": 500, "body": json.dumps({"error": "registrar misconfigured"})}

    try:
        install_global_commands(settings.app_id, ALL_COMMANDS, settings.bot_token)
    except DiscordAPIError as e:
        logger.exception({"install_error": e.status, "body": e.body})
        return {"statusCode": 502, "body": json.dumps({"error": str(e)})}

    names = [c["name"] for c in ALL_COMMANDS]
    logger.info({"installed": names, "app_id": settings.app_id})
    return {"statusCode": 200, "body": json.dumps({"installed": names})}


if __name__ == "__main__":
    logging.basicConfig()
    print(handler({}, None))
