"""
Domain constants used across services/routers.
"""

# Ethereum address format (0x + 40 hex chars)
ETH_ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"

# Hosted payment page
PAYMENT_BASE_URL = "https://pay.send.it"
USDC_TOKEN_PARAM = "usdc"

# Default recipient shown before the settings panel is used
DEFAULT_TARGET_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc9e7595f1F6E6"
DEFAULT_RECIPIENT_NAME = "Creator"
RECIPIENT_NAME_MAX_LENGTH = 50

PRESET_AMOUNTS = ("1", "5", "10", "25")

# Status auto-reset delays (seconds)
STATUS_RESET_SECONDS = 5.0
WALLET_GUARD_RESET_SECONDS = 3.0

# User-facing messages
MSG_INVALID_ADDRESS = "Invalid Ethereum address"
MSG_INVALID_ADDRESS_FORMAT = "Invalid Ethereum address format"
MSG_INVALID_AMOUNT = "Amount must be a positive number"
MSG_AMOUNT_REQUIRED = "Please enter an amount"
MSG_PAYMENT_LINK_FAILED = "Failed to generate payment link"
MSG_GENERIC_FAILURE = "Something went wrong. Please try again."
MSG_GENERATING_LINK = "Generating payment link..."
MSG_LINK_OPENED = "Payment link opened! Complete your tip in the new window."
MSG_CONFIRM_IN_WALLET = "Confirm the transaction in your wallet..."
MSG_WAITING_CONFIRMATION = "Transaction submitted. Waiting for confirmation..."
MSG_TIP_CONFIRMED = "Tip sent! Transaction confirmed."
MSG_WALLET_NOT_CONNECTED = "Please connect your wallet first"
MSG_USER_REJECTED = "Transaction was rejected in your wallet."
MSG_TRANSACTION_FAILED = "Transaction failed. Please try again."
