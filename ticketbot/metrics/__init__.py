"""Prometheus metrics for the ticket bot.

Usage:
    from ticketbot.metrics.router_metrics import route_outcomes_total
"""

from ticketbot.metrics import router_metrics

__all__ = ["router_metrics"]
