import re
from typing import Dict, Mapping

# @ is used because $ and {} are not allowed in tag values.
PLACEHOLDER_FORMAT = re.compile(r"@([a-z]*)@")

PLACEHOLDER_HOST = "host"
PLACEHOLDER_PATH = "path"
PLACEHOLDER_QUERY = "query"


def render(template: str, bindings: Mapping[str, str]) -> str:
    """
    Replace @name@ tokens in template with their value from bindings.

    @@ renders as a single @, unknown names render as an empty string.
    """

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if not name:
            return "@"
        return bindings.get(name, "")

    return PLACEHOLDER_FORMAT.sub(_replace, template)


def request_bindings(request) -> Dict[str, str]:
    return {
        PLACEHOLDER_HOST: request.host,
        PLACEHOLDER_PATH: request.path,
        PLACEHOLDER_QUERY: request.query_string,
    }
