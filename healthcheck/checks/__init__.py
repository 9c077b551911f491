"""Ready-made probes for common dependencies."""

from .broker import BROKER_CHECKER_NAME, broker_dial_check
from .database import DATABASE_CHECKER_NAME, database_ping_check, do_simple_select, sqlite_connection
from .network import (
    DNS_RESOLVE_SUFFIX,
    HTTP_GET_SUFFIX,
    TCP_DIAL_SUFFIX,
    dns_resolve_check,
    http_get_check,
    tcp_dial_check,
)
from .runtime import THREADS_THRESHOLD, thread_count_check
