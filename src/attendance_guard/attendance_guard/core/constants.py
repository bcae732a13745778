"""Constants and defaults.

Note: Keep scoring thresholds here to avoid magic numbers spread across checks.
"""

EARTH_RADIUS_METERS = 6_371_000

# Geofence / location
GEOFENCE_RADIUS_METERS = 200
GEOFENCE_PENALTY = 35
SESSION_LOCATION_UNPARSEABLE_PENALTY = 10
TRAVEL_LOOKBACK_HOURS = 24
TRAVEL_WINDOW_MINUTES = 5
MAX_TRAVEL_SPEED_KMH = 100
IMPOSSIBLE_TRAVEL_PENALTY = 50
MAX_GPS_ACCURACY_METERS = 100
LOW_GPS_ACCURACY_PENALTY = 15
LOCATION_HISTORY_LIMIT = 5

# Timing
EARLY_TOLERANCE_MINUTES = 15
EARLY_PENALTY = 25
LATE_TOLERANCE_MINUTES = 30
LATE_PENALTY = 30

# Device
DEVICE_OFFLINE_PENALTY = 15
TIMEZONE_MISMATCH_PENALTY = 20
SHARED_DEVICE_PENALTY = 25

# Patterns
RAPID_SUCCESSION_LOOKBACK_DAYS = 7
RAPID_SUCCESSION_MINUTES = 5
RAPID_SUCCESSION_PENALTY = 25
CLUSTERING_LOOKBACK_DAYS = 30
CLUSTERING_MIN_RECORDS = 10
CLUSTERING_AVG_GAP_MINUTES = 5
CLUSTERING_PENALTY = 30

# Session
SESSION_INVALID_PENALTY = 40

# Verdict bands
SUSPICIOUS_ABOVE = 50
VERIFIED_BELOW = 30
REJECT_AT_OR_ABOVE = 70

# Runtime defaults
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 3.0
DEFAULT_AUDIT_QUEUE_SIZE = 1000
DEFAULT_EXPECTED_TIMEZONE = "UTC"
