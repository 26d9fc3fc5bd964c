"""Shared constants for SearchBlocker.

User-facing messages, default paths and HTTP surface names used across
modules are defined here. Import from here rather than repeating literals.
"""

# ─── Verdict messages ────────────────────────────────────────────────────────

# Shown to the shopper (frontend flash message) or returned to API clients.
SUSPICIOUS_PATTERN_MESSAGE: str = "Suspicious search term detected."
BLACKLISTED_MESSAGE: str = "This search term is not allowed."

# ─── Frontend adapter ────────────────────────────────────────────────────────

# Redirect target for blocked frontend searches when no redirect_path is set.
DEFAULT_REDIRECT_PATH: str = "/noroute"

# Cookie carrying the one-shot error message across the redirect.
FLASH_MESSAGE_COOKIE: str = "searchblocker_message"

# Query parameter holding the frontend search term.
FRONTEND_QUERY_PARAM: str = "q"

# ─── REST adapter ────────────────────────────────────────────────────────────

# Filter field in searchCriteria that carries the search term.
REST_SEARCH_FIELD: str = "search_term"

# ─── GraphQL adapter ─────────────────────────────────────────────────────────

# Argument of the products query that carries the search term.
GRAPHQL_SEARCH_ARGUMENT: str = "search"

# ─── Files ───────────────────────────────────────────────────────────────────

DEFAULT_POLICY_PATH: str = ".searchblocker/policy.yaml"
DEFAULT_SEARCH_LOG_PATH: str = "var/log/search_blocker.log"

# ─── Headers ─────────────────────────────────────────────────────────────────

REQUEST_ID_HEADER: str = "X-SearchBlocker-Request-ID"
