"""Configuration settings for the vault server."""

import os


DATA_DIR = os.environ.get("VAULT_DATA_DIR", "/app/data")

RECORDS_PATH = os.environ.get("VAULT_RECORDS_PATH", os.path.join(DATA_DIR, "records.json"))

BLOB_DIR = os.environ.get("VAULT_BLOB_DIR", os.path.join(DATA_DIR, "blobs"))

VAULT_HOST = os.environ.get("VAULT_HOST", "0.0.0.0")

VAULT_PORT = int(os.environ.get("VAULT_PORT", "8000"))

# Handed to the blob store transport; the core itself never applies it.
STORAGE_TIMEOUT_SECONDS = float(os.environ.get("VAULT_STORAGE_TIMEOUT", "30"))

SHARE_BASE_URL = os.environ.get("VAULT_SHARE_BASE_URL", "https://securevault.app")

API_KEY_PREFIX = "vlt_"
