"""Global test fixtures."""

import os
import tempfile

# Keep Config() away from the real ~/.local/share/datareg. Must happen at
# module load time, before any test module builds a Config.
os.environ.setdefault("DATAREG_DATA_DIR", tempfile.mkdtemp(prefix="datareg-test-"))
os.environ.setdefault("DATAREG_STATE_DIR", tempfile.mkdtemp(prefix="datareg-test-state-"))
