# fieldsuggest/config.py
# Module-level defaults. EngineConfig picks these up; override per engine instance.

MAX_SUGGESTIONS: int = 8
MIN_QUERY_LENGTH: int = 2

# /* ~~~ rebuild the index on the next query once it is older than this ~~~ */
CACHE_EXPIRY_MS: int = 30 * 60 * 1000

# Ranking weights (must sum to 1.0)
DEFAULT_WEIGHTS = {
    "frequency": 0.4,
    "recency": 0.3,
    "similarity": 0.2,
    "context": 0.1,
}

# Candidates at or below this similarity never reach ranking
MIN_SIMILARITY: float = 0.1

# Shortest value learn_from_input() will index
MIN_LEARN_LENGTH: int = 2

# Shortest word generate_search_tokens() expands into substrings
MIN_TOKEN_LENGTH: int = 2

INDEX_VERSION: int = 1

# Historical store: "memory://" or "json:///path/to/dir-or-file.json"
DEFAULT_DSN: str = "memory://"

# File names (without .json) used by the receipt and quotation modes of the shop app
RECEIPTS_KEY: str = "ciaociao_receipts"
QUOTATIONS_KEY: str = "quotations_ciaociao"
