"""Pytest fixtures for immofind tests."""

import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from immofind.core.settings import AppSettings
from immofind.domain.models.city_settings import CitySettings
from immofind.domain.models.listing import Listing


@pytest.fixture
def city_settings():
    """Default snapshot: Dresden 9.5, Leipzig 9.8, Senftenberg 6.5, 2 % / 2 %."""
    return CitySettings()


@pytest.fixture
def app_settings():
    return AppSettings(_env_file=None)


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "settings.json"


@pytest.fixture
def sample_listings():
    """Listings as the search API returns them."""
    return [
        Listing(price="300.000 €", area="100 m²", location="Dresden-Neustadt", link="https://example.org/1"),
        Listing(price="189.000 €", area="62,5 m²", location="Dresden-Pieschen", link="https://example.org/2"),
        Listing(price="450.000 €", area="120 m²", location="Dresden-Blasewitz", link="https://example.org/3"),
        Listing(price="Preis auf Anfrage", area="80 m²", location="Dresden-Plauen", link="https://example.org/4"),
    ]
