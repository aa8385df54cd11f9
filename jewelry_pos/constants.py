APP_NAME = "Jewelry POS"
STYLE_FILE = "styles.qss"

DATA_DIR = "data"
DB_FILE_NAME = "jewelry_pos.db"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

# ---- pricing ----
# flat GST applied on the cart subtotal (percent)
GST_RATE_PERCENT = "18"

# 24K gold and 999 silver base rates used when no rate has been configured
DEFAULT_GOLD_RATE_24K = "6080"
DEFAULT_SILVER_RATE_999 = "75"
# karat assumed when a gold material type carries no "NNK" marker
DEFAULT_GOLD_KARAT = 22
DEFAULT_SILVER_PURITY = 999

GOLD_KARATS = (24, 22, 20, 18, 14, 10)
SILVER_PURITIES = (999, 925, 900)

# tolerance for split reconciliation (currency units)
EPSILON = "0.01"
