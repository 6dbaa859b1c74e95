# tests/conftest.py
"""
Pytest configuration.
Adds src to sys.path and points the process-wide defaults (database, log
directory, optional API keys) at throwaway locations before any curalink
module builds its services.
"""

import os
import sys
import tempfile
from pathlib import Path

project_root = Path(__file__).parent.parent
# Add src to path so `import curalink` works
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

_scratch = Path(tempfile.mkdtemp(prefix="curalink-tests-"))
os.environ["CURALINK_DB_URL"] = f"sqlite:///{_scratch / 'default.db'}"
os.environ["CURALINK_LOG_DIR"] = str(_scratch / "logs")
os.environ["CURALINK_BCRYPT_ROUNDS"] = "4"
for _key in ("GEMINI_API_KEY", "CURALINK_RESEND_API_KEY", "CURALINK_OAUTH_CALLBACK_SECRET"):
    os.environ.pop(_key, None)
