"""EEG montages the AutoClean pipeline knows how to apply."""

from typing import Any

VALID_MONTAGES = {
    "standard_1005": "10-05 system",
    "standard_1020": "10-20 system",
    "standard_alphabetic": "Letter-number combos",
    "standard_postfixed": "10-20 with postfixes",
    "standard_prefixed": "10-20 with prefixes",
    "standard_primed": "10-20 with primes",
    "biosemi16": "BioSemi 16",
    "biosemi32": "BioSemi 32",
    "biosemi64": "BioSemi 64",
    "biosemi128": "BioSemi 128",
    "biosemi160": "BioSemi 160",
    "biosemi256": "BioSemi 256",
    "easycap-M1": "EasyCap M1 (10-05)",
    "easycap-M10": "EasyCap M10",
    "EGI_256": "EGI 256",
    "GSN-HydroCel-32": "HydroCel GSN 32",
    "GSN-HydroCel-64_1.0": "HydroCel GSN 64",
    "GSN-HydroCel-65_1.0": "HydroCel GSN 65",
    "GSN-HydroCel-128": "HydroCel GSN 128",
    "GSN-HydroCel-129": "HydroCel GSN 129",
    "GSN-HydroCel-256": "HydroCel GSN 256",
    "GSN-HydroCel-257": "HydroCel GSN 257",
    "mgh60": "MGH 60-channel",
    "mgh70": "MGH 70-channel",
    "artinis-octamon": "Artinis OctaMon fNIRS",
    "artinis-brite23": "Artinis Brite23 fNIRS",
    "GSN-HydroCel-124": "HydroCel GSN 124 (NBCD)",
    "MEA30": "Mouse_EEG_v2_H32",
    "Grael4k": "Grael 4k 32 Channel",
}


def is_valid_montage(value: Any) -> bool:
    """Return True when ``value`` names a supported montage."""
    return isinstance(value, str) and value in VALID_MONTAGES
