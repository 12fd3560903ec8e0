import os
from pathlib import Path

# ---------------------------------------------------------
# Paths
# ---------------------------------------------------------
BASE_DIR = Path(__file__).parent
DATA_DIR = Path(os.environ.get("KB_DATA_DIR", BASE_DIR / "data"))

# ---------------------------------------------------------
# Retrieval & ranking
# ---------------------------------------------------------
TOP_K = 5                          # documents handed to the model
STEM_WEIGHT = 0.85
FUZZY_WEIGHTS = {1: 0.7, 2: 0.5}   # edit distance -> weight
FUZZY_MIN_TOKEN_LEN = 5

# ---------------------------------------------------------
# Grounding context
# ---------------------------------------------------------
MAX_CONTEXT_CHARS = int(os.environ.get("KB_MAX_CONTEXT_CHARS", 12000))
NO_CONTEXT_TEXT = "(No relevant content found in the knowledge base for this question.)"

# ---------------------------------------------------------
# Service
# ---------------------------------------------------------
# 0 disables the periodic reload
REFRESH_INTERVAL_SECONDS = int(os.environ.get("KB_REFRESH_INTERVAL_SECONDS", 0))
PORT = int(os.environ.get("KB_PORT", 5001))
LOG_LEVEL = os.environ.get("KB_LOG_LEVEL", "INFO")
