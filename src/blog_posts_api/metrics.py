"""Shared OTel metrics instruments for the service."""

from opentelemetry import metrics

METER_NAME = "blog_posts_api"

meter = metrics.get_meter(METER_NAME)

login_attempts_total = meter.create_counter(
    name="login_attempts_total",
    description="Login attempts by outcome",
    unit="1",
)

auth_rejections_total = meter.create_counter(
    name="auth_rejections_total",
    description="Requests to mutating endpoints rejected by the token gate",
    unit="1",
)

posts_mutations_total = meter.create_counter(
    name="posts_mutations_total",
    description="Successful post create/update/delete operations",
    unit="1",
)

store_errors_total = meter.create_counter(
    name="store_errors_total",
    description="Store operations that failed and were reported as unavailable",
    unit="1",
)

store_duration = meter.create_histogram(
    name="store_duration_seconds",
    description="Duration of a single posts store statement",
    unit="s",
)

rate_limited_total = meter.create_counter(
    name="rate_limited_total",
    description="Requests rejected by the inbound rate limiter",
    unit="1",
)
