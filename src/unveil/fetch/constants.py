"""HTTP constants for the fetch layer.

Centralizes all fetch-related constants to avoid duplication across modules.
"""

# HTTP Status Codes
HTTP_STATUS_OK = 200
HTTP_STATUS_NOT_FOUND = 404

# Direct fetch retry policy
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 500
DEFAULT_MAX_REDIRECTS = 2

# Timeouts (seconds)
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0
DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0
DEFAULT_PAGE_LOAD_TIMEOUT_SECONDS = 10
DEFAULT_SCRIPT_TIMEOUT_SECONDS = 5

# Probability (percent) of using the primary crawler identity when a domain
# asks to appear as a crawler
CRAWLER_IDENTITY_WEIGHT = 70

# Search-crawler identities used for user-agent rotation; the first is primary
CRAWLER_USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko; compatible; Googlebot/2.1; "
    "+http://www.google.com/bot.html) Chrome/W.X.Y.Z Safari/537.36",
    "Mozilla/5.0 (Linux; Android 6.0.1; Nexus 5X Build/MMB29P) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/W.X.Y.Z Mobile Safari/537.36 (compatible; "
    "Googlebot/2.1; +http://www.google.com/bot.html)",
    "Googlebot-News",
)

CRAWLER_FROM_HEADER = "googlebot(at)googlebot.com"

SOCIAL_REFERRERS: tuple[str, ...] = (
    "https://t.co/",
    "https://www.twitter.com/",
    "https://www.facebook.com/",
    "https://www.linkedin.com/",
)

DEFAULT_REQUEST_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "DNT": "1",
}

# Web archive
ARCHIVE_AVAILABILITY_URL = "https://archive.org/wayback/available"
