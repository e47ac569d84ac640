import os
from dotenv import load_dotenv
load_dotenv()
# ---- Bitcoin (Blockstream Esplora) ----
BTC_API_URL = os.environ.get("BTC_API_URL", "https://blockstream.info/api")
BTC_PAGE_DELAY_SEC = 0.2
BTC_CACHE_TTL_SEC = 15
BTC_RECONSTRUCT_LIMIT = 1000

# ---- Ethereum (EthVM) ----
ETH_API_URL = os.environ.get("ETH_API_URL", "https://rest-api.ethvm.dev")
ETH_PAGE_DELAY_SEC = 0.15
ETH_CACHE_TTL_SEC = 10
ETH_PAGE_SIZE = 100
ETH_RECONSTRUCT_LIMIT = 2000

# ---- Solana (JSON-RPC) ----
SOL_RPC_URL = os.environ.get("SOL_RPC_URL", "https://api.mainnet-beta.solana.com")
SOL_PAGE_DELAY_SEC = 0.12
SOL_CACHE_TTL_SEC = 15
SOL_SIGNATURE_PAGE_SIZE = 1000   # RPC hard max
SOL_DETAIL_BATCH_SIZE = 10
SOL_RECONSTRUCT_LIMIT = 1000

# ---- Transport ----
HTTP_TIMEOUT_SEC = int(os.environ.get("HTTP_TIMEOUT_SEC", "15"))
MAX_RETRIES = int(os.environ.get("MAX_RETRIES", "1"))     # 1 = single attempt
DEFAULT_CACHE_TTL_SEC = 30

# ---- Queries ----
HISTORY_LIMIT = 200

# ---- Logging ----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")
