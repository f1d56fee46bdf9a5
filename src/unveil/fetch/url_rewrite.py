"""Request URL rewriting driven by domain rules."""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from unveil.rules.models import MergedRuleSet


def apply_url_mods(url: str, rules: MergedRuleSet) -> str:
    """Substitute query parameters as the rules direct.

    Existing parameters keep their position; replaced keys take the new
    value and unknown keys are appended.

    Args:
        url: Request URL.
        rules: Merged rules for the URL's host.

    Returns:
        The rewritten URL, or ``url`` unchanged when there is nothing to do.
    """
    if rules.url_mods is None or not rules.url_mods.query:
        return url

    parts = urlsplit(url)
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    for mod in rules.url_mods.query:
        params[mod.key] = mod.value

    return urlunsplit(parts._replace(query=urlencode(params)))
