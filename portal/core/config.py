import os
from datetime import timedelta
from pathlib import Path

# Remote API the client talks to. Override per environment.
API_URL = os.getenv("PORTAL_API_URL", "http://localhost:5000/api")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("PORTAL_TIMEOUT_SECONDS", "10"))

# Durable session token (the only persisted client state)
TOKEN_FILE = Path(
    os.getenv("PORTAL_TOKEN_FILE", str(Path.home() / ".assignment_portal" / "token"))
)

# Field ceilings
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000
ANSWER_MAX_LENGTH = 2000

# DEV ONLY: development backend token lifetime
ACCESS_TOKEN_EXPIRE = timedelta(hours=24)
