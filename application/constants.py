"""Application-level constants."""

LOG_FILENAME = "analysis.log"

# Exit codes for the CLI
EXIT_OK = 0
EXIT_ANALYSIS_FAILED = 1
EXIT_CONFIG_ERROR = 2
