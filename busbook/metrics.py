from prometheus_client import Counter, Histogram

# Booking metrics
BOOKING_ATTEMPTS = Counter("busbook_booking_attempts_total", "Booking attempts by mode and outcome", ["mode", "result"])
AUTO_ASSIGN_CONFLICTS = Counter("busbook_auto_assign_conflicts_total", "Seat conflicts retried by auto-assign booking")

# Seat ledger metrics
LEDGER_COMMIT_LATENCY = Histogram("busbook_ledger_commit_latency_seconds", "Latency of seat ledger commits")
LEDGER_TIMEOUTS = Counter("busbook_ledger_timeouts_total", "Seat ledger operations that exceeded their deadline")
