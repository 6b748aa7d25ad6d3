import json
import logging

from config import Config, load_config
from patterns import PatternFetchError, fetch_patterns, filter_patterns
from verify import SIGNATURE_HEADER, TIMESTAMP_HEADER, header, raw_body_from_event, verify_signature

logger = logging.getLogger()
logger.setLevel(logging.INFO)

# discord interaction / response types
PING = 1
APPLICATION_COMMAND = 2
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4

MAX_CONTENT_LENGTH = 2000
MAX_QUERY_ECHO = 100
INTRO = "Here are the patterns matching your query:\n\n"
FETCH_FAILED = "Could not load patterns right now, try again later."
MISSING_KEY = "Missing the `key` option."
COMMAND_FAILED = "Something went wrong handling that command."


class MissingOption(Exception):
    pass


def json_response(status: int, payload: dict) -> dict:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def message(content: str) -> dict:
    return json_response(200, {"type": CHANNEL_MESSAGE_WITH_SOURCE, "data": {"content": content}})


def render_patterns(patterns: dict, query: str) -> str:
    if not patterns:
        if len(query) > MAX_QUERY_ECHO:
            query = query[:MAX_QUERY_ECHO] + "…"
        return INTRO + f"No patterns matched `{query}`."

    content = INTRO
    items = list(patterns.items())
    for i, (key, value) in enumerate(items):
        block = f"**Pattern Key:** {key}\n```regex\n{value}\n```\n\n"
        rest = len(items) - i
        trailer = f"…and {rest - 1} more." if rest > 1 else ""
        # keep room for the trailer whenever more blocks follow
        if len(content) + len(block) + len(trailer) > MAX_CONTENT_LENGTH:
            return content + f"…and {rest} more."
        content += block
    return content


def first_option_value(data: dict | None) -> str:
    options = (data or {}).get("options") or []
    first = options[0] if isinstance(options, list) and options else None
    if not isinstance(first, dict) or "value" not in first:
        raise MissingOption("pattern command invoked without options")
    return str(first["value"])


def pattern_command(data: dict) -> dict:
    query = first_option_value(data)
    patterns = filter_patterns(fetch_patterns(), query)
    logger.info({"command": "pattern", "query": query, "matches": len(patterns)})
    return message(render_patterns(patterns, query))


COMMANDS = {
    "pattern": pattern_command,
}


def handle_command(interaction: dict) -> dict:
    data = interaction.get("data")
    if not isinstance(data, dict):
        logger.warning({"malformed_interaction": "missing data"})
        return message(MISSING_KEY)

    name = data.get("name")
    command = COMMANDS.get(name)
    if command is None:
        logger.warning({"unknown_command": name})
        return message(f"Unknown command `/{name}`.")

    try:
        return command(data)
    except MissingOption as e:
        logger.warning({"malformed_interaction": str(e)})
        return message(MISSING_KEY)
    except PatternFetchError as e:
        logger.exception({"fetch_error": type(e).__name__, "detail": str(e)})
        return message(FETCH_FAILED)
    except Exception as e:
        logger.exception({"error": str(e)})
        return message(COMMAND_FAILED)


def handle_interaction(event: dict, cfg: Config) -> dict:
    raw_body = raw_body_from_event(event)
    signature = header(event, SIGNATURE_HEADER)
    timestamp = header(event, TIMESTAMP_HEADER)
    if not verify_signature(cfg.public_key, signature, timestamp, raw_body):
        logger.warning({"unauthorized": "bad request signature"})
        return {"statusCode": 401, "headers": {"Content-Type": "text/plain"}, "body": "Bad request signature"}

    try:
        interaction = json.loads(raw_body)
    except ValueError:
        return json_response(400, {"error": "invalid JSON"})
    if not isinstance(interaction, dict):
        return json_response(400, {"error": "invalid JSON"})

    kind = interaction.get("type")
    # bool is an int subclass, so `true` must not pass for 1
    if type(kind) is not int:
        kind = None
    if kind == PING:
        return json_response(200, {"type": PONG})

    logger.info({"interaction": interaction})
    if kind == APPLICATION_COMMAND:
        return handle_command(interaction)
    return json_response(400, {"error": "unsupported interaction type"})


def handler(event, context):
    try:
        cfg = load_config()
    except Exception as e:
        logger.exception({"config_error": str(e)})
        return json_response(500, {"error": "server misconfigured"})
    logger.setLevel(cfg.log_level)
    if not cfg.public_key:
        logger.error({"config_error": "DISCORD_PUBLIC_KEY is not set"})
        return json_response(500, {"error": "server misconfigured"})
    return handle_interaction(event, cfg)
