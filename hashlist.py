import zlib
from io import BytesIO

from binary_io import Reader, Writer
from errors import DidNotReachEOF, InvalidChecksum, InvalidHashList

HMLA_MAGIC = 0x484D4C41


class BiMap:
    """Two-way hash <-> symbol lookup. Not mutated after the table is loaded."""

    def __init__(self, pairs=None):
        self._left: dict[int, str] = {}
        self._right: dict[str, int] = {}
        for h, symbol in (pairs or {}).items():
            old = self._right.get(symbol)
            if old is not None and old != h:
                del self._left[old]
            self._left[h] = symbol
            self._right[symbol] = h

    def get_by_left(self, h: int):
        return self._left.get(h)

    def get_by_right(self, symbol: str):
        return self._right.get(symbol)

    def items(self):
        return self._left.items()

    def __len__(self):
        return len(self._left)


class HashList:
    def __init__(self, tags: BiMap, switches: BiMap, lines: BiMap, version: int):
        self.tags = tags
        self.switches = switches
        self.lines = lines
        self.version = version

    @classmethod
    def from_symbols(cls, tags=None, switches=None, lines=None, version: int = 1) -> "HashList":
        return cls(BiMap(tags), BiMap(switches), BiMap(lines), version)

    @classmethod
    def load(cls, data: bytes) -> "HashList":
        r = Reader.from_bytes(data)
        try:
            if r.get_u32() != HMLA_MAGIC:
                raise InvalidHashList("Invalid hash list magic. Expected 'ALMH'.")
            version = r.get_u32()
            checksum = r.get_u32()
            if checksum != zlib.crc32(data[r.tell():]):
                raise InvalidChecksum(f"Hash list checksum mismatch (stored {checksum:08X}).")

            sections = []
            for _ in range(3):
                pairs = {}
                for _ in range(r.get_u32()):
                    h = r.get_u32()
                    pairs[h] = r.get_cstr()
                sections.append(BiMap(pairs))
        except EOFError as e:
            raise DidNotReachEOF(f"Hash list ended early: {e}") from e

        if r.remaining() != 0:
            raise DidNotReachEOF(f"Hash list has {r.remaining()} trailing bytes.")

        return cls(sections[0], sections[1], sections[2], version)

    def dump(self) -> bytes:
        body = Writer(BytesIO())
        for section in (self.tags, self.switches, self.lines):
            body.store_u32(len(section))
            for h, symbol in section.items():
                body.store_u32(h)
                body.store_cstr(symbol)
        payload = body.getvalue()

        w = Writer(BytesIO())
        w.store_u32(HMLA_MAGIC)
        w.store_u32(self.version)
        w.store_u32(zlib.crc32(payload))
        w.write(payload)
        return w.getvalue()
