from enum import IntEnum
from typing import Optional, Union

from errors import InvalidLanguageMap, UnsupportedVersion

DEFAULT_LOCALE = "en"


class Version(IntEnum):
    UNKNOWN = -1
    H2016 = 0
    H2 = 1
    H3 = 2

    @classmethod
    def parse(cls, value) -> "Version":
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                raise UnsupportedVersion(f"Unknown game version '{value}'.") from None
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedVersion(f"Unknown game version {value!r}.") from None


LANGUAGE_MAPS = {
    Version.H2016: ["xx", "en", "fr", "it", "de", "es", "ru", "mx", "br", "pl", "cn", "jp"],
    Version.H2: ["xx", "en", "fr", "it", "de", "es", "ru", "mx", "br", "pl", "cn", "jp", "tc"],
    Version.H3: ["xx", "en", "fr", "it", "de", "es", "ru", "cn", "tc", "jp"],
}


def parse_language_map(lang_map: Union[str, list[str]]) -> list[str]:
    """Accepts "xx,en,fr" or a list of codes and checks it is usable."""
    codes = lang_map.split(",") if isinstance(lang_map, str) else list(lang_map)
    if not codes:
        raise InvalidLanguageMap("Language map is empty.")
    for code in codes:
        if not isinstance(code, str) or code == "":
            raise InvalidLanguageMap(f"Language map {lang_map!r} contains an empty or non-string code.")
    if len(set(codes)) != len(codes):
        raise InvalidLanguageMap(f"Language map {lang_map!r} contains duplicate codes.")
    return codes


def resolve_language_map(version: Version, lang_map: Optional[Union[str, list[str]]] = None) -> list[str]:
    if version not in LANGUAGE_MAPS:
        raise UnsupportedVersion(f"Game version {version!r} has no language map.")
    if lang_map is not None:
        return parse_language_map(lang_map)
    return list(LANGUAGE_MAPS[version])
