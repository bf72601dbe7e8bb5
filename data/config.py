DEBUG = False

CURRENT_VERSION = "1.0.0"
