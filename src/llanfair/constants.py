from typing import Final

# Environment variable naming the application home directory
HOME_ENV_VAR: Final = "LLANFAIR_HOME"

# Run-scoped settings live in this subdirectory of the home directory
RUNS_DIR_NAME: Final = "runs"

# Prefixes of the labels reported for unsaved categories
GLOBAL_LABEL: Final = "global"
LOCAL_LABEL: Final = "local"
