"""Application constants and configuration"""

# Return lags, in trading observations (rows), not calendar days
TRADING_DAYS = {
    'DoD': 1,
    'MoM': 21,
    'YoY': 252,
}

# Signal engine
AVG_VOLUME_WINDOW = 30
LIQUIDITY_HIGH = 100000
LIQUIDITY_MEDIUM = 20000

MOMENTUM_RVOL_CONFIRM = 1.5
MOMENTUM_RVOL_WEAK = 1.0
HYPE_DOD = 0.08
HYPE_RVOL_LOW = 1.0
BREAKOUT_RVOL = 2.0
STABLE_DOD_MAX = 0.03
STABLE_RVOL = 1.2

TRADE_SCORE_WEIGHTS = {
    'liquidity_high': 2,
    'confirmed_up': 2,
    'stable_trend': 1,
    'hype_risk': -2,
    'strong_sell': -1,
}

# Store write shape (one row per ingested tick)
STORE_COLUMNS = ["SECURITY", "LAST", "TIME", "TIMESTAMP", "VOL", "BID", "ASK", "BID QTY", "ASK QTY"]

VOLUME_MODES = ('max', 'sum')

DEFAULT_MOVERS_LIMIT = 5
MIN_CHART_POINTS = 2

# Chart configuration
CHART_CONFIG = {
    'dpi': 150,
    'format': 'png',
    'bbox_inches': 'tight',
    'default_figsize': (12, 6)
}
