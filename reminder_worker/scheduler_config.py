"""
Scheduler Configuration for Escalating Reminders

Defines tick cadence, the batch scan schedule and escalation defaults.
"""

# How often the escalation engine ticks (in seconds)
TICK_INTERVAL_SECONDS = 60  # Every 1 minute

# Server-side batch scan (cron fields, local timezone)
BATCH_SCAN_MINUTE = "*/15"

# Escalation policy applied to tasks created without one
DEFAULT_INTERVAL_MINUTES = 5
DEFAULT_MAX_STEPS = 3

# Single logical key holding the whole alert-state aggregate
ALERT_STATE_KEY = "alertState"

# Alert delivery
DISPATCH_WORKERS = 4
PUSH_TTL_SECONDS = 60 * 60
PUSH_TIMEOUT_SECONDS = 15
