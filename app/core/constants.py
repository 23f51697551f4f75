"""Application constants.

Identifier shape, multipart field names and the candidate row columns.
"""

import re

# ---------------------------------------------------------------------------
# Candidate identifiers
# 24 hex characters: 8 for the creation timestamp, 16 random.
# Matched with fullmatch; stored ids are lower-case.
# ---------------------------------------------------------------------------
CANDIDATE_ID_LENGTH: int = 24
CANDIDATE_ID_PATTERN: re.Pattern[str] = re.compile(r"[0-9a-fA-F]{24}")

# ---------------------------------------------------------------------------
# Create request
# ---------------------------------------------------------------------------
REQUIRED_FIELDS: tuple[str, ...] = ("name", "email", "phone")
CV_FIELD: str = "cv"

# ---------------------------------------------------------------------------
# Record store columns
# ---------------------------------------------------------------------------
CANDIDATE_COLUMNS: str = "id, name, email, phone, cv, created_at"
