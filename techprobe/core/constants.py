# Signal weights (added per matching rule)
DEFAULT_SIGNAL_WEIGHTS = {
    "content": 0.30,
    "filePath": 0.25,
    "header": 0.40,
    "cssClass": 0.20,
    "comment": 0.25,
    "inlineScript": 0.30,
    "cookie": 0.30,
    "metaTag": 0.40,
    "element": 0.20,
}

# Scoring
INCLUSION_THRESHOLD = 0.2
HIGH_CONFIDENCE_THRESHOLD = 0.7
MAX_CONFIDENCE = 1.0

METHOD_HIGH_CONFIDENCE = "High Confidence Detection"
METHOD_PATTERN_MATCHING = "Pattern Matching"
METHOD_CUSTOM_PATTERN = "Custom Pattern"

# Custom patterns
CUSTOM_PATTERN_CONFIDENCE = 0.8
CUSTOM_PATTERN_CATEGORY = "Custom Detection"
CUSTOM_PATTERN_PREFIX = "Custom Pattern: "

# Social classifier
SOCIAL_MIN_CONFIDENCE = 0.3
SOCIAL_MAX_CONFIDENCE = 0.95
SOCIAL_FALLBACK_MAX_CONFIDENCE = 0.9

# Timeouts (in seconds)
DEFAULT_SUGGEST_TIMEOUT = 20.0
DEFAULT_FETCH_TIMEOUT = 45
DEFAULT_NAVIGATION_TIMEOUT = 30
DEFAULT_BATCH_CONCURRENCY = 4

# LLM
SUGGESTION_SAMPLE_CHARS = 8000
MAX_SUGGESTED_PATTERNS = 20

DEFAULT_USER_AGENT = "TechProbe/1.0 (Website Technology Scanner)"

MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB
