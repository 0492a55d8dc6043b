# firmware_admin/infrastructure/paths.py
from pathlib import Path
from typing import Optional
import os


class Paths:
    def __init__(self, root: Optional[Path] = None):
        if root is not None:
            self.root = Path(root).resolve()
        else:
            try:
                self.root = Path(__file__).resolve().parents[2]
            except NameError:
                self.root = Path(os.getcwd()).resolve()

        self.resources_dir = self.root / "resources"
        self.logs_dir = self.root / "logs"

        self.config_path = self.resources_dir / "dashboard_config.yaml"

        for d in [self.resources_dir, self.logs_dir]:
            d.mkdir(parents=True, exist_ok=True)


def init_paths(root: Optional[Path] = None) -> Paths:
    return Paths(root)
