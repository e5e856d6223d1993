"""
Pytest configuration and fixtures for the scanning core tests.
"""
from datetime import date

import pytest


@pytest.fixture
def today():
    """Fixed reference date for century disambiguation."""
    return date(2024, 6, 1)


@pytest.fixture
def specimen_today():
    """A date at which the ICAO specimen documents were still current."""
    return date(2011, 3, 1)


@pytest.fixture
def sample_mrz_td3():
    """ICAO 9303 specimen passport (TD3), check digits valid."""
    return [
        "P<UTOERIKSSON<<ANNA<MARIA".ljust(44, "<"),
        "L898902C36" + "UTO" + "7408122" + "F" + "1204159" + "ZE184226B<<<<<" + "1" + "0",
    ]


@pytest.fixture
def current_mrz_td3():
    """Passport (TD3) still valid in 2024; check digits not maintained."""
    return [
        "P<UTOERIKSSON<<ANNA<MARIA".ljust(44, "<"),
        "L898902C36" + "UTO" + "8508122" + "F" + "3004159" + "<" * 14 + "<" + "0",
    ]


@pytest.fixture
def sample_mrz_td2():
    """ICAO 9303 specimen ID card (TD2)."""
    return [
        "I<UTOERIKSSON<<ANNA<MARIA".ljust(36, "<"),
        "D231458907" + "UTO" + "7408122" + "F" + "1204159" + "<" * 7 + "6",
    ]


@pytest.fixture
def sample_mrz_td1():
    """ICAO 9303 specimen ID card (TD1)."""
    return [
        "I<UTOD231458907".ljust(30, "<"),
        "7408122" + "F" + "1204159" + "UTO" + "<" * 11 + "6",
        "ERIKSSON<<ANNA<MARIA".ljust(30, "<"),
    ]


@pytest.fixture
def sample_mrz_uzb():
    """Uzbek passport (TD3) carrying a 14-digit personal number."""
    return [
        "P<UZBTOSHMATOV<<ALISHER<BAKHTIYOROVICH".ljust(44, "<"),
        "FA1234567" + "3" + "UZB" + "9002151" + "M" + "3104205" + "12345678901234" + "0" + "2",
    ]
