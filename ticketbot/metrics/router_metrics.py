"""Prometheus metrics for message routing, answering and background tasks."""

from prometheus_client import Counter, Histogram

route_outcomes_total = Counter(
    "ticketbot_route_outcomes_total",
    "Routing decisions for inbound ticket thread messages",
    ["outcome"],
)

payment_alerts_total = Counter(
    "ticketbot_payment_alerts_total",
    "Gift card payment alerts by delivery result",
    ["result"],
)

answer_outcomes_total = Counter(
    "ticketbot_answer_outcomes_total",
    "Answer service results by outcome",
    ["outcome"],
)

model_request_duration_seconds = Histogram(
    "ticketbot_model_request_duration_seconds",
    "Duration of language model requests",
    buckets=(0.25, 0.5, 1, 2, 4, 8, 15, 30),
)

dedup_history_lookups_total = Counter(
    "ticketbot_dedup_history_lookups_total",
    "Channel history lookups made by the reply deduplicator",
    ["result"],
)

inactivity_prompts_total = Counter(
    "ticketbot_inactivity_prompts_total",
    "Prompts sent to silent ticket creators",
    ["result"],
)

maintenance_sweeps_total = Counter(
    "ticketbot_maintenance_sweeps_total",
    "Entries removed by periodic state sweeps",
    ["store"],
)
