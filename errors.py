class LangError(Exception):
    """Base class for everything the language codecs raise."""


# Structural
class InvalidContainer(LangError):
    pass


class InvalidReference(LangError):
    pass


class DidNotReachEOF(LangError):
    pass


# Version / language map
class UnsupportedVersion(LangError):
    pass


class InvalidLanguageMap(LangError):
    pass


# Data
class InvalidSubtitle(LangError):
    pass


class InvalidWeight(LangError):
    pass


class InvalidDocument(LangError):
    pass


# Hash list
class InvalidHashList(LangError):
    pass


class InvalidChecksum(LangError):
    pass
