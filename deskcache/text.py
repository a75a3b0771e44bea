"""Centralized user-facing text for the deskcache CLI."""

from __future__ import annotations


class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "deskcache: keeps track of which installed package owns each desktop launcher."
    HELP_VERBOSE = "Log reconciliation steps to stderr."
    HELP_REFRESH = "Validate cached launchers and discover new ones."
    HELP_APP_DIR = "Directory scanned for launcher files (defaults to the configured one)."
    HELP_INGEST = "Record the launchers shipped by freshly installed packages."
    HELP_INGEST_PACKAGES = "Package names or package ids (name;version;arch;data)."
    HELP_LOOKUP = "Show the cached owner of a launcher file."
    HELP_LOOKUP_PATH = "Absolute path of the launcher file."
    HELP_LIST = "List cached launchers."
    HELP_LIST_PACKAGE = "Only show launchers owned by this package."
    HELP_CLEAR = "Remove every cached launcher."
    HELP_CONFIG = "Inspect or update the deskcache configuration."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_ENABLE = "Enable or disable the launcher cache."
    HELP_SET_APP_DIR = "Set the directory scanned for launcher files."
    HELP_SET_PROVIDER = "Set the package backend (auto, dpkg, rpm, pacman)."
    HELP_SET_TIMEOUT = "Set the package query timeout in seconds (0 = wait forever)."
    HELP_SET_DATABASE = "Set the cache database path (empty string resets it)."

    ERROR_CACHE_DISABLED = (
        "The launcher cache is disabled. Enable it with `deskcache config --enable`."
    )
    ERROR_STORE_UNAVAILABLE = "Cannot open the launcher cache at {path}: {reason}"
    ERROR_CONFIG_JSON_INVALID = "Config payload must be a JSON object."
    ERROR_CONFIG_VALUE_INVALID = "Config value for {field} is invalid."
    ERROR_PROVIDER_INVALID = "Unsupported provider '{value}'. Allowed: {allowed}."
    ERROR_TIMEOUT_NEGATIVE = "Query timeout must be >= 0"
    ERROR_QUEUE_SIZE_INVALID = "Queue size must be >= 1"
    ERROR_PATH_NOT_ABSOLUTE = "Launcher path must be absolute: {path}"
    ERROR_NO_PACKAGES = "At least one package is required."
    ERROR_NO_BACKEND = (
        "No supported package manager found on PATH (tried: {tried})."
    )
    ERROR_UNKNOWN_PROVIDER = "Unknown package backend '{value}'."

    INFO_REFRESH_RUNNING = "Scanning launchers under {path}..."
    INFO_REFRESH_DONE = (
        "Rescan finished: {validated} valid, {updated} updated, {removed} removed, "
        "{added} added, {skipped} skipped."
    )
    INFO_INGEST_RUNNING = "Collecting launchers for {count} package{plural}..."
    INFO_INGEST_DONE = "Recorded {added} launcher{plural}."
    INFO_INGEST_NOTHING = "No installed or updated packages; nothing to do."
    WARNING_UNSUPPORTED = "The {provider} backend cannot {action}; skipping."
    WARNING_QUERY_FAILED = "The package query did not finish successfully ({status})."
    INFO_LOOKUP_MISSING = "{path} is not in the launcher cache."
    INFO_LOOKUP_RESULT = "{path}\nPackage: {owner}\nShown in menus: {visible}\nFingerprint: {fingerprint}"
    INFO_LIST_EMPTY = "The launcher cache is empty."
    INFO_CLEARED = "Removed {count} cached launcher{plural}."
    INFO_CLEAR_NONE = "The launcher cache is already empty."
    INFO_ENABLED_SET = "Launcher cache {state}."
    INFO_APP_DIR_SET = "Application directory set to {value}."
    INFO_PROVIDER_SET = "Package backend set to {value}."
    INFO_TIMEOUT_SET = "Query timeout set to {value}s."
    INFO_DATABASE_SET = "Cache database set to {value}."
    INFO_DATABASE_RESET = "Cache database reset to the default location."
    INFO_CONFIG_SUMMARY = (
        "Cache enabled: {enabled}\n"
        "Application directory: {app_dir}\n"
        "Package backend: {provider}\n"
        "Query timeout: {timeout}\n"
        "Database: {database}"
    )

    PROGRESS_STARTING = "Starting..."
    PROGRESS_SCAN_APPLICATIONS = "Checking cached launchers"
    PROGRESS_GENERATE_PACKAGE_LIST = "Resolving launcher owners"
    PROGRESS_FINISHED = "Finished"

    TABLE_TITLE = "Cached launchers"
    TABLE_HEADER_PATH = "Launcher"
    TABLE_HEADER_PACKAGE = "Package"
    TABLE_HEADER_SHOW = "Shown"
