from __future__ import annotations

# Predefined host list (hostnames or IPs)
HOSTS: list[str] = [
    "www.google.com",
    "www.yahoo.com",
    "www.reddit.com",
    "www.microsoft.com",
    "cox.net",
    "bing.com",
    "amazon.com",
    "8.8.8.8",  # Google DNS
    "8.8.4.4",  # Google DNS (secondary)
    "stackoverflow.com",
    "gmail.com",
]

# Probe settings
DEFAULT_PROBE_INTERVAL_MS = 1500  # used when the operator input is not a number
PING_TIMEOUT_SECONDS = 2.0  # fail if no reply within this time

# Report cadence, independent of the probe interval
REPORT_INTERVAL_MS = 2000

# Delay before the first probe tick
PROBE_WARMUP_MS = 500

# Number of earliest samples used for jitter (see stats.ENTIRE_LOG)
JITTER_WINDOW = 50

# Latency classification thresholds (ms)
LATENCY_GREEN_MS = 60
LATENCY_YELLOW_MS = 150

# Packet loss classification thresholds (%)
LOSS_YELLOW_PCT = 1.0
LOSS_RED_PCT = 5.0

# Logging
LOG_FILE = "packet_loss_monitor.log"
LOG_LEVEL_ENV = "PACKET_LOSS_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
