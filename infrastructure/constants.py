from pathlib import Path

# Repo-root conventional directories/files (overrideable via pipeline.yaml or environment)
CONFIG_DIR = Path("configs")
PIPELINE_FILE = CONFIG_DIR / "pipeline.yaml"
FIXUPS_FILE = CONFIG_DIR / "taxonomy_fixups.yaml"

DATA_DIR = Path("data")
LOG_DIR = Path("logs")

# Environment variables consulted by the CLI
CONFIG_ENV_VAR = "FRC_CONFIG"
LOG_LEVEL_ENV_VAR = "FRC_LOG_LEVEL"
