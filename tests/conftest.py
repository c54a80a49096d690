import os
import tempfile

# Keep the TSV log out of scripts/ while testing. Must be set before import.
os.environ.setdefault("SFB_LOG_DIR", tempfile.mkdtemp(prefix="sfb_logs_"))
