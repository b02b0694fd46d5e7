"""MPA Python spec configuration constants.

Keep this file aligned with the constants baked into `MPAFactory.sol` and
`MPA.sol`.
"""

# Addresses
ADDRESS_SIZE = 20
ZERO_ADDRESS = bytes(ADDRESS_SIZE)

# Units
ETHER_DECIMALS = 18
GWEI_VALUE = 10**9
WEI_PER_ETHER = 10**ETHER_DECIMALS
U64_MAX = (1 << 64) - 1
U256_MAX = (1 << 256) - 1

# Nonce window accepted at verification time
MAX_NONCE_GAP = 64

# Agreement terms
SHARE_TOTAL = 100  # shares are whole percentages
MIN_BENEFICIARIES = 1
MAX_BENEFICIARIES = 64
MAX_NAME_LEN = 64
MAX_DESCRIPTION_LEN = 1024

# Dev chain
TEST_ACCOUNT_COUNT = 10
DEFAULT_ACCOUNT_BALANCE = 100 * WEI_PER_ETHER

# Chain / network
CHAIN_ID_MAINNET = 1
CHAIN_ID_TESTNET = 5
CHAIN_ID_DEVNET = 1337
