# pinvault_core/constants.py

SCHEMA_VERSION = "1"

# AES-256-CBC
CIPHER_ALG = "aes-256-cbc"
KEY_SIZE = 32        # bytes, 256-bit
NONCE_SIZE = 16      # bytes, one AES block
BLOCK_SIZE_BITS = 128

# Pin verification poll
DEFAULT_VERIFY_ATTEMPTS = 5
DEFAULT_VERIFY_INTERVAL = 0.2  # seconds

# IPFS (Kubo RPC)
DEFAULT_IPFS_URL = "http://localhost:5001"
DEFAULT_IPFS_TIMEOUT = 10.0
DEFAULT_LOOKUP_TIMEOUT = 5.0

DEFAULT_DB_PATH = "db/pinvault.db"
