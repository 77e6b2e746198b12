"""Feature flags for behaviour that is off by default."""

import os


def is_connect_sampling_enabled() -> bool:
    """Sample super-attack connections in defend decisions instead of weighting them."""
    return os.environ.get("TCHESS_SAMPLE_SUPER_CONNECT", "0") == "1"
