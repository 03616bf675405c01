"""Application constants."""

USER_AGENT = "wikidata-publish/1.0 (+business entity publishing; contact: configured-email)"
PUBLISH_TARGETS = ("test", "production")
COMMANDS = (
    "assemble",
    "validate",
    "publish",
)
EXIT_SUCCESS = 0
EXIT_NOT_NOTABLE = 10
EXIT_PUBLISH_FAILED = 20
EXIT_HARD_FAIL = 30
# error code for a business whose stored state is still "publishing"
PUBLISH_IN_FLIGHT = "PUBLISH_IN_FLIGHT"
DEFAULT_LANGUAGE = "en"
MAX_TERM_LENGTH = 250
MIN_PROPERTY_COUNT = 3
BUSINESS_QID = "Q4830453"
EARTH_GLOBE = "http://www.wikidata.org/entity/Q2"
GREGORIAN_CALENDAR = "http://www.wikidata.org/entity/Q1985727"
COORDINATE_PRECISION = 0.0001
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "business_id",
    "target",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "property_count",
    "error_code",
    "message",
)
