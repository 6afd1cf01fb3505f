# config.py

# Default values
DEFAULT_CURRENT_AGE = 30
DEFAULT_LIFE_EXPECTANCY = 90
DEFAULT_ANNUAL_EXPENSE = 40000.0
DEFAULT_BITCOIN_GROWTH_RATE = 8.0
DEFAULT_ANNUAL_CONTRIBUTION = 0.5
DEFAULT_WITHDRAWAL_RATE = 4.0

# Bitcoin growth rate options
BITCOIN_GROWTH_RATE_OPTIONS = {
    "Moderate (8%)": 8.0,
    "Flat (0%)": 0.0,
    "Conservative (4%)": 4.0,
    "Aggressive (15%)": 15.0,
    "Hyperbitcoinization (30%)": 30.0,
}

# Projection models offered by the calculator
MODEL_LIFE_EXPECTANCY = "Life expectancy (drawdown)"
MODEL_SAFE_WITHDRAWAL = "Safe withdrawal rate"
PROJECTION_MODELS = (MODEL_LIFE_EXPECTANCY, MODEL_SAFE_WITHDRAWAL)

# Input validation ranges
AGE_RANGE = (0, 120)
EXPENSE_MIN = 1.0
RATE_MIN = 0.0
CONTRIBUTION_MAX = 21000000.0

# Price oracle
COINGECKO_API_BASE = "https://api.coingecko.com/api/v3"
BINANCE_API_BASE = "https://api.binance.com/api/v3"
ASSET_ID = "bitcoin"
QUOTE_CURRENCY = "usd"
TRADING_PAIR = "BTCUSDT"
MARKET_CHART_DAYS = 1
PROVIDER_TIMEOUT = 5  # seconds, per provider attempt
PRICE_REFRESH_INTERVAL = 60  # seconds
DEFAULT_FALLBACK_PRICE = 100_000

# Safe-withdrawal model
SAFE_WITHDRAWAL_HORIZON_YEARS = 100

# Historical range lookup
HISTORY_TIMEOUT = 10  # seconds
HISTORY_DEFAULT_DAYS = 30

# UI tuning constants
EXPENSE_STEP = 1000.0
CONTRIBUTION_STEP = 0.01
WITHDRAWAL_RATE_STEP = 0.25
CONVERTER_UNITS_STEP = 0.0001
