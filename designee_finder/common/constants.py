"""Application constants."""

USER_AGENT = "designee-finder/0.3 (+dpe-search)"
DEFAULT_SEARCH_URL = "https://designee.faa.gov/designeeapi/api/Cloa/Search/"
DEFAULT_COUNTRY_ID = 184
# Big enough to cover every DPE in one page.
DEFAULT_PAGE_ROWS = 65536
SNAPSHOT_FILENAME_TEMPLATE = "designees-{category_id}.json"
ACCEPTED_RESPONSE_STATUSES = (0, 200)
METERS_PER_STATUTE_MILE = 1609.344
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "category_id",
    "source",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
