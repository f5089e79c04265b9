"""
Configuration module for the FlatMatch matching core.

Loads environment variables and provides configuration singletons.
Uses pydantic for validation.
"""

from pydantic_settings import BaseSettings
from typing import Literal, Optional


class Config(BaseSettings):
    """
    Matching configuration loaded from environment variables.

    All values come from .env file or system environment.
    Type hints provide validation (pydantic converts types automatically).
    """

    # ============================================================
    # REPOSITORY CONFIGURATION
    # ============================================================
    REPOSITORY_BACKEND: Literal["memory", "firestore"] = "memory"
    """Which collaborator store the host wires in: 'memory' or 'firestore'."""

    FIREBASE_PROJECT_ID: Optional[str] = None
    """Firebase project ID. Required only when REPOSITORY_BACKEND=firestore."""

    GOOGLE_APPLICATION_CREDENTIALS: str = "/config/serviceAccountKey.json"
    """Path to Firebase service account JSON file."""

    # ============================================================
    # FEED CONFIGURATION
    # ============================================================
    GRAPH_TIMEOUT: int = 30
    """Maximum seconds a feed graph can run before timeout. Default: 30 seconds."""

    MAX_CANDIDATES: int = 500
    """Upper bound on candidates pulled into one feed pass. Bounds fan-out width."""

    FEED_LIMIT: int = 20
    """Default number of entries returned by generate_feed."""

    FEED_MAX_WORKERS: int = 8
    """Thread pool size for per-candidate scoring."""

    REPORT_THRESHOLD: int = 2
    """Candidates with this many reports or more are hidden from feeds."""

    # ============================================================
    # GROUP CONFIGURATION
    # ============================================================
    MAX_GROUP_SIZE: int = 5
    """Largest group the aggregator will score."""

    # ============================================================
    # RUNTIME FLAGS
    # ============================================================
    DEMO_MODE: bool = False
    """Lower the match display threshold for demo builds."""

    DEBUG: bool = False
    """Enable debug logging. Set True for development, False for production."""

    class Config:
        """Pydantic configuration."""
        env_file = ".env"  # Read from .env file
        case_sensitive = True  # Variable names are case-sensitive
        extra = "ignore"  # Ignore extra env vars not defined above


# ============================================================
# SINGLETON INSTANCE
# ============================================================
# Load config once at startup, reuse throughout the library
config = Config()


# ============================================================
# VALIDATION AT STARTUP
# ============================================================
def validate_config() -> dict:
    """
    Validate that config values are consistent.

    Hosts call this at startup to fail fast if config is incomplete.

    Returns:
        dict: Status of each checked field

    Raises:
        ValueError: If config is missing or out of range
    """
    errors = []

    if config.REPOSITORY_BACKEND == "firestore" and not config.FIREBASE_PROJECT_ID:
        errors.append("REPOSITORY_BACKEND=firestore but FIREBASE_PROJECT_ID not set")

    if config.FEED_MAX_WORKERS < 1:
        errors.append("FEED_MAX_WORKERS must be at least 1")

    if config.FEED_LIMIT < 1 or config.MAX_CANDIDATES < 1:
        errors.append("FEED_LIMIT and MAX_CANDIDATES must be positive")

    if config.MAX_GROUP_SIZE < 2:
        errors.append("MAX_GROUP_SIZE must be at least 2")

    if errors:
        raise ValueError(f"Configuration errors:\n" + "\n".join([f"  - {e}" for e in errors]))

    return {
        "repository": config.REPOSITORY_BACKEND,
        "firebase": "✓ Configured" if config.FIREBASE_PROJECT_ID else "✗ Not set",
        "feed": f"limit={config.FEED_LIMIT} workers={config.FEED_MAX_WORKERS}",
        "demo_mode": "✓ Enabled" if config.DEMO_MODE else "✗ Disabled",
    }


if __name__ == "__main__":
    """Allow testing config by running: python -m flatmatch.config"""
    try:
        status = validate_config()
        print("✅ Configuration is valid!")
        print("\nConfiguration Status:")
        for key, value in status.items():
            print(f"  {key}: {value}")
    except ValueError as e:
        print(f"❌ Configuration error:\n{e}")
        exit(1)
