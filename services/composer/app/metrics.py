from prometheus_client import Counter

DIGESTS = Counter(
    "composer_digests_total",
    "Per-user digest outcomes",
    ["outcome"],
)
