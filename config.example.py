# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKDECK_APP_NAME": "App display name (default: taskdeck).",
    "TASKDECK_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKDECK_LOG_DIR": "Directory for taskdeck.log (default: .local/taskdeck).",
    # Service
    "TASKDECK_API_BASE_URL": "Task/metrics service base URL (default: http://localhost:8080).",
    "TASKDECK_API_TIMEOUT_MS": "Per-request timeout in milliseconds (default: 10000).",
    "TASKDECK_METRICS_PATH": "Metrics endpoint path (default: /metrics).",
}
