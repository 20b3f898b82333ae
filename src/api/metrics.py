from prometheus_client import Counter, Histogram, REGISTRY


# we check if they are already registered to avoid errors during hot reloads or test runs
def get_or_create_metric(name, documentation, metric_type, **kwargs):
    try:
        return metric_type(name, documentation, **kwargs)
    except ValueError:
        # If it already exists, retrieve it from the registry
        return REGISTRY._names_to_collectors[name]


REQUESTS_TOTAL = get_or_create_metric(
    "voice_requests_total",
    "Total API requests",
    Counter,
    labelnames=["endpoint", "status"],
)

PARSE_REQUESTS_TOTAL = get_or_create_metric(
    "voice_parse_requests_total",
    "Transcript parses by extraction strategy",
    Counter,
    labelnames=["strategy", "status"],
)

PARSE_FALLBACKS_TOTAL = get_or_create_metric(
    "voice_parse_fallbacks_total",
    "Parses that fell back from the LLM provider to the rule-based cascade",
    Counter,
)

PARSE_LATENCY_SECONDS = get_or_create_metric(
    "voice_parse_latency_seconds",
    "Transcript parse latency",
    Histogram,
)

TASKS_CREATED_TOTAL = get_or_create_metric(
    "voice_tasks_created_total",
    "Tasks created",
    Counter,
    labelnames=["source"],
)
