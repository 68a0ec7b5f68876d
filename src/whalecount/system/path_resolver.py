import os
from pathlib import Path


class PathResolver:
    """Central authority for all file path resolution in the whale count service.

    Uses environment variables for configuration with sensible defaults.
    """

    def __init__(self) -> None:
        """Initialize PathResolver with environment-based configuration."""
        self.data_dir = Path(os.getenv("WHALECOUNT_DATA", "/var/lib/whalecount"))
        self.package_dir = Path(__file__).resolve().parent.parent

    def get_whalecount_config_path(self) -> Path:
        """Get the path to the main configuration file.

        Checks WHALECOUNT_CONFIG environment variable first, then falls back to default.
        """
        config_path = os.getenv("WHALECOUNT_CONFIG")
        if config_path:
            return Path(config_path)

        return self.data_dir / "config" / "whalecount.yaml"

    def get_data_dir(self) -> Path:
        """Get the data directory where all runtime data is stored."""
        return self.data_dir

    def get_database_dir(self) -> Path:
        """Get the directory holding the SQLite database."""
        return self.data_dir / "database"

    def get_database_path(self) -> Path:
        """Get the path to the main whale count database."""
        return self.get_database_dir() / "whalecount.db"

    def get_species_catalog_path(self) -> Path:
        """Get the bundled species catalog used to seed an empty database."""
        return self.package_dir / "species" / "data" / "species.yaml"
