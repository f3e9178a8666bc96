"""
Constants and configuration values used across the subnetbox codebase.
"""

# API Endpoints
PLATFORM_API = "/ext/P"
INFO_API = "/ext/info"
KEYSTORE_API = "/ext/keystore"
BLOCKCHAIN_PATH = "/ext/bc/{chain_id}"

# Network defaults for a local five node cluster
DEFAULT_HOST = "127.0.0.1"
DEFAULT_SCHEME = "http"
BASE_HTTP_PORT = 9650
PORT_STEP = 2  # each node uses an http port and a staking port
NUM_NODES = 5
PRIMARY_CHAINS = ["P", "C", "X"]

# HTTP timeouts
DEFAULT_CONNECTION_TIMEOUT = 10.0  # seconds
DEFAULT_READ_TIMEOUT = 10.0  # seconds

# Retry configuration for read-only queries
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds
DEFAULT_RETRY_BACKOFF = 2.0  # exponential backoff multiplier

# Polling intervals
WAIT_TIME = 1.0  # seconds between tx status checks
LONG_WAIT_TIME = 10 * WAIT_TIME  # seconds between validating status checks

# Validator registration
VALIDATOR_WEIGHT = 50
VALIDATOR_START_OFFSET = 30  # seconds after issue time
VALIDATOR_END_OFFSET = 15 * 24 * 60 * 60  # seconds after issue time

# Subnet id the local network is configured to track
EXPECTED_SUBNET_ID = "BKBZ6xXTnT86B4L5fp8rvtcmNSpvtNz8En9jG61ywV2uWyeHy"

# Blockchain defaults
DEFAULT_VM_NAME = "subnetbox vm"
GENESIS_ENCODING = "hex"

# Keystore defaults for the throwaway local user
DEFAULT_KEYSTORE_USERNAME = "test"
DEFAULT_KEYSTORE_PASSWORD = "vmsrkewl"
# Pre-funded key of every local network genesis
DEFAULT_FUNDED_KEY = "PrivateKey-ewoqjP7PxY4yr3iLTpLisriqt94hdyDFNgchSxGGztUrTXtNN"
PRIVATE_KEY_PREFIX = "PrivateKey-"

# Default workflow configuration file
DEFAULT_CONFIG_FILE = "subnetbox.yml"

# Transaction status values reported by platform.getTxStatus
TX_STATUS_COMMITTED = "Committed"
TX_STATUS_ABORTED = "Aborted"
TX_STATUS_DROPPED = "Dropped"
TX_STATUS_PROCESSING = "Processing"

# Blockchain status values reported by platform.getBlockchainStatus
CHAIN_STATUS_VALIDATING = "Validating"

# Response field names (from API responses)
FIELD_TX_ID = "txID"
FIELD_STATUS = "status"
FIELD_ADDRESS = "address"
FIELD_BALANCE = "balance"
FIELD_SUBNETS = "subnets"
FIELD_BLOCKCHAINS = "blockchains"
FIELD_NODE_ID = "nodeID"
FIELD_IS_BOOTSTRAPPED = "isBootstrapped"

# Bootstrap step names
STEP_SETUP_KEYSTORE = "setup_keystore"
STEP_CREATE_SUBNET = "create_subnet"
STEP_ADD_VALIDATORS = "add_validators"
STEP_CREATE_BLOCKCHAIN = "create_blockchain"
STEP_WAIT_CONVERGENCE = "wait_convergence"
STEP_DISCOVER_NODES = "discover_nodes"

# Exit codes
EXIT_FAILURE = 1
EXIT_CANCELLED = 130

# Error messages
ERROR_FILE_NOT_FOUND = "File not found: {path}"
ERROR_IDENTITY_COUNT = (
    "Cluster reports {endpoints} endpoints but {identities} node identities"
)
