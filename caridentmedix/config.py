"""Configuration constants and settings for caridentmedix."""

# Application constants
APP_VERSION = "0.1.0"

# Logging configuration
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOGGER_NAME = "caridentmedix.main"
LOG_FILE_ENV_VAR = "CARIDENT_LOGFILE"

# File handling
DEFAULT_FILE_ENCODING = 'utf-8'
VALID_OUTPUT_FORMATS = ['json', 'csv', 'tsv', 'txt', 'stdout']
FILE_EXTENSION_MAP = {
    '.json': 'json',
    '.csv': 'csv',
    '.tsv': 'tsv',
    '.txt': 'txt'
}

# Database configuration defaults
DEFAULT_SQL_DRIVER = "{ODBC Driver 18 for SQL Server}"

# Geo search
DEFAULT_RADIUS_KM = 50.0
EARTH_RADIUS_KM = 6371.0

# Metadata parameter keys (for consistency)
METADATA_PARAM_KEYS = [
    'general_search', 'name', 'email', 'phone_number', 'address', 'description', 'website',
    'latitude', 'longitude', 'radius_km', 'clinic_id', 'input_json'
]

# Status constants
STATUS_SUCCESS = "success"
STATUS_SUCCESS_NO_DATA = "success_no_data"
