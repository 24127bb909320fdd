"""Root conftest — shared test configuration."""

import os

# Ensure tests never talk to a real CMS, deploy hook or database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("CMS_URL", "http://cms.test")
os.environ.setdefault("PUBLIC_CMS_URL", "https://cms.example.com")
os.environ.setdefault("WEBHOOK_SECRET", "test-webhook-secret")
os.environ.setdefault("CMS_API_TOKEN", "test-cms-token")
