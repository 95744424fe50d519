from __future__ import annotations

# OP-stack predeploys (lowercase, 0x-prefixed)
EAS_ADDRESS             = "0x4200000000000000000000000000000000000021"
SCHEMA_REGISTRY_ADDRESS = "0x4200000000000000000000000000000000000020"

# Max read-only calls issued together in one wave
DEFAULT_BATCH_SIZE = 100
