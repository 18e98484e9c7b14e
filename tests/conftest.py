"""
Configuración de fixtures para pytest.
"""
import pytest

from odoo_sync.api.v1.dependencies.repository_deps import get_database


@pytest.fixture(autouse=True)
def reset_cached_database():
    """La API cachea el acceso a la base por proceso; cada test parte limpio."""
    get_database.cache_clear()
    yield
    get_database.cache_clear()
