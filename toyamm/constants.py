"""Pool constants.

Centralizes the pricing parameters and the balance width.
"""

from toyamm.safe_int import U128_MAX

# Constant-product fee: amount_in is scaled by 997/1000, i.e. a 0.3% fee
FEE_MULTIPLIER = 997
FEE_BASE = 1000

# Largest representable balance or reserve
MAX_BALANCE = U128_MAX

# Fungible token metadata spec used when an asset's metadata is not looked up
FT_METADATA_SPEC = "ft-1.0.0"
DEFAULT_DECIMALS = 24

# Account identity limits
MIN_ACCOUNT_ID_LEN = 2
MAX_ACCOUNT_ID_LEN = 64
