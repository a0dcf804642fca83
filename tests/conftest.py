from pathlib import Path
import pytest

from dataclean.config_model.model import RootCfg
from dataclean.dataset import Dataset

@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]

@pytest.fixture(scope="session")
def cfg_path(project_root: Path) -> Path:
    return project_root / "config" / "config.toml"

@pytest.fixture(scope="session")
def cfg(cfg_path: Path) -> RootCfg:
    return RootCfg.from_toml(cfg_path)

@pytest.fixture
def tmp_out(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir(parents=True, exist_ok=True)
    return d

@pytest.fixture
def customers() -> Dataset:
    # small messy table: duplicate emails (case/space), a blank amount, accents
    return Dataset.from_records([
        {"name": "Élodie Martin", "email": " A@B.com ", "amount": 10, "signup": "2024/01/05"},
        {"name": "Jean Dupont", "email": "a@b.com", "amount": None, "signup": "2024-01-06"},
        {"name": "Jean Dupont", "email": "jean@example.org", "amount": 30, "signup": "07.01.2024"},
        {"name": "Zoé Petit", "email": "not-an-email", "amount": 20, "signup": ""},
        {"name": "Marc Blanc", "email": "marc@example.org", "amount": 40, "signup": "2024-01-09"},
    ])
