from pathlib import Path

# Repo-root conventional directories/files (overrideable via app.yaml)
CONFIG_DIR = Path("configs")
PROVIDERS_DIR = CONFIG_DIR / "providers"
APP_CONFIG_FILE = CONFIG_DIR / "app.yaml"
TAXONOMY_SEED_FILE = CONFIG_DIR / "taxonomy-seed.json"

PROMPTS_DIR = Path("prompts")

# Sub-directories under storage.root
TAXONOMY_DIRNAME = "taxonomy"
ANALYSES_DIRNAME = "analyses"
TRANSCRIPTS_DIRNAME = "transcripts"
LOGS_DIRNAME = "logs"
