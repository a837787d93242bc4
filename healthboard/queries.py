"""PromQL expressions issued by the dashboard.

API names are interpolated as-is; callers must not pass names containing
quotes or braces.
"""

STATUS_QUERY = "health_check_status"

HISTORY_STEP_SECONDS = 15


def mean_latency(api_name: str) -> str:
    """Mean check duration (seconds) as the ratio of the histogram counters."""
    return (
        f'health_check_duration_seconds_sum{{api_name="{api_name}"}}'
        f' / health_check_duration_seconds_count{{api_name="{api_name}"}}'
    )


def rate_latency(api_name: str) -> str:
    """Mean check duration over the last minute, from counter rates."""
    return (
        f'rate(health_check_duration_seconds_sum{{api_name="{api_name}"}}[1m])'
        f' / rate(health_check_duration_seconds_count{{api_name="{api_name}"}}[1m])'
    )


def check_total(api_name: str, status: str) -> str:
    return f'health_check_total{{api_name="{api_name}",status="{status}"}}'
