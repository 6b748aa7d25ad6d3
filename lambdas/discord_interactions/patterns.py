import requests

REGEXES_URL = "https://raw.githubusercontent.com/hannibal002/SkyHanni-REPO/main/constants/regexes.json"


class PatternFetchError(Exception):
    pass


class UpstreamUnavailable(PatternFetchError):
    pass


class UpstreamStatusError(PatternFetchError):
    def __init__(self, status_code: int):
        super().__init__(f"upstream returned HTTP {status_code}")
        self.status_code = status_code


class MalformedDocument(PatternFetchError):
    pass


class MissingRegexes(PatternFetchError):
    pass


def fetch_patterns(url: str = REGEXES_URL, timeout: int = 30) -> dict:
    """
    Download the SkyHanni regex constants and return the `regexes` mapping.

    Example document:
      {"regexes": {
          "data.hypixeldata.serverid.tablist": " Server: §r§8(?<serverid>\\S+)",
          "data.hypixeldata.lobbytype": "(?<lobbyType>.*lobby)\\d+",
      }}

    Fetched on every call; key order is the upstream file's order.
    """
    try:
        r = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise UpstreamUnavailable(str(e)) from e
    if not r.ok:
        raise UpstreamStatusError(r.status_code)

    try:
        data = r.json()
    except ValueError as e:
        raise MalformedDocument(f"response is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedDocument("response is not a JSON object")

    regexes = data.get("regexes")
    if not isinstance(regexes, dict):
        raise MissingRegexes("no `regexes` object in response")
    return regexes


def filter_patterns(document: dict, query: str) -> dict:
    # plain case-sensitive substring match on the key, "" matches everything
    return {k: v for k, v in document.items() if query in k}
