from prometheus_client import Counter

ARTICLES_PROCESSED = Counter(
    "extractor_articles_processed_total",
    "Articles that reached a terminal status",
    ["status"],
)
STRATEGY_ATTEMPTS = Counter(
    "extractor_strategy_attempts_total",
    "Extraction strategy attempts by outcome",
    ["strategy", "outcome"],
)
ANALYSES = Counter(
    "extractor_analyses_total",
    "Analyses produced, by path",
    ["path"],
)
