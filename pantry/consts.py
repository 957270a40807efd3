from pathlib import Path

DEFAULT_DATA_DIR = (Path(__file__).parent.parent.resolve() / "data").absolute().resolve()

# Fixed segment appended to every tier root
NAMESPACE = "com.thatthinginswift.pantry"

# Tier roots under DEFAULT_DATA_DIR, mirroring "documents" vs "caches" storage
PERMANENT_DIR_NAME = "documents"  # Kept until explicitly removed
VOLATILE_DIR_NAME = "caches"  # Purgeable by the host

# Envelope keys
ENVELOPE_EXPIRES_KEY = "expires"
ENVELOPE_STORAGE_KEY = "storage"

# Serialization
JSON_INDENT = 2
TEMP_SUFFIX = ".tmp"

# Environment variable read by the CLI for --data-dir
DATA_DIR_ENV_VAR = "PANTRY_DATA_DIR"
