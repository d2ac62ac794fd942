"""Global pytest configuration."""

import os

# Tests must never reach the real model provider
os.environ["OPENAI_API_KEY"] = ""
