# intmul/config/defaults.py
"""Default configuration values for the multiplier and its worker units."""

from pathlib import Path

PROGRAM_NAME = 'intmul'

# Environment variables read by Config and by spawned process units
ENV_CONFIG_FILE = 'INTMUL_CONFIG'
ENV_BACKEND = 'INTMUL_BACKEND'
ENV_LOG_LEVEL = 'INTMUL_LOG_LEVEL'

CONFIG_FILE_NAME = 'intmul.yml'
USER_CONFIG_DIR = Path.home() / '.intmul'

# Concurrent worker units
WORKERS = {
    'backend': 'process',       # 'process' (one OS process per unit) or 'thread'
    'program': PROGRAM_NAME,    # identity used as diagnostic prefix
    'initial_buffer_size': 64,  # starting capacity of the line reader
}

BACKENDS = ('process', 'thread')

LOGGING = {
    'level': 'WARNING',
    'file': None,                       # optional JSON log file shared by all units
    'max_file_size': 10 * 1024 * 1024,  # 10MB
    'backup_count': 3,
    'use_colors': None,                 # None = auto-detect from stderr
}
