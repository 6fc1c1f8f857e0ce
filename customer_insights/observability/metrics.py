# customer_insights/observability/metrics.py
from fastapi import APIRouter
from starlette.responses import Response

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

router = APIRouter(tags=["observability"])

dataset_load_counter = Counter(
    "customer_insights_dataset_loads_total",
    "Number of dataset loads",
    ["result"],  # success|error
)

query_counter = Counter(
    "customer_insights_query_total",
    "Number of query engine calls",
    ["query"],  # e.g. total_revenue, find_big_spenders
)

latency_hist = Histogram(
    "customer_insights_api_latency_seconds",
    "API latency per route",
    ["route"],  # e.g. /api/customers/total-revenue
)


@router.get("/metrics", include_in_schema=True)
def metrics() -> Response:
    # Prometheus expects text/plain; version=0.0.4
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
