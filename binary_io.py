import struct
from dataclasses import dataclass
from io import BytesIO


@dataclass
class Writer:
    file: BytesIO
    big_endian = False

    def _endian(self) -> str:
        return ">" if self.big_endian else "<"

    def write(self, x: bytes):
        return self.file.write(x)

    def tell(self) -> int:
        return self.file.tell()

    def getvalue(self) -> bytes:
        return self.file.getvalue()

    def store_u8(self, x: int):
        self.file.write(struct.pack(f"{self._endian()}B", x))

    def store_u16(self, x: int):
        self.file.write(struct.pack(f"{self._endian()}H", x))

    def store_u32(self, x: int):
        self.file.write(struct.pack(f"{self._endian()}I", x))

    def store_u64(self, x: int):
        self.file.write(struct.pack(f"{self._endian()}Q", x))

    def store_sized_bytes(self, x: bytes):
        self.store_u32(len(x))
        self.file.write(x)

    def store_sized_u32s(self, values: list[int]):
        self.store_u32(len(values))
        for v in values:
            self.store_u32(v)

    def store_cstr(self, x: str):
        self.file.write(x.encode() + b"\0")


@dataclass
class Reader:
    file: BytesIO
    big_endian = False

    @classmethod
    def from_bytes(cls, data: bytes) -> "Reader":
        return cls(BytesIO(data))

    def _endian(self) -> str:
        return ">" if self.big_endian else "<"

    def read(self, length: int) -> bytes:
        data = self.file.read(length)
        if len(data) != length:
            raise EOFError(f"Wanted {length} bytes at offset {self.tell() - len(data)}, got {len(data)}.")
        return data

    def skip(self, length: int):
        self.read(length)

    def seek(self, offset: int):
        self.file.seek(offset)

    def tell(self) -> int:
        return self.file.tell()

    def size(self) -> int:
        return len(self.file.getbuffer())

    def remaining(self) -> int:
        return self.size() - self.tell()

    def get_u8(self) -> int:
        return struct.unpack_from(f"{self._endian()}B", self.read(1))[0]

    def get_u16(self) -> int:
        return struct.unpack_from(f"{self._endian()}H", self.read(2))[0]

    def get_u32(self) -> int:
        return struct.unpack_from(f"{self._endian()}I", self.read(4))[0]

    def peek_u8(self) -> int:
        pos = self.tell()
        try:
            return self.get_u8()
        finally:
            self.seek(pos)

    def peek_u32(self) -> int:
        pos = self.tell()
        try:
            return self.get_u32()
        finally:
            self.seek(pos)

    def get_sized_bytes(self) -> bytes:
        length = self.get_u32()
        return self.read(length)

    def get_sized_u32s(self) -> list[int]:
        count = self.get_u32()
        return [self.get_u32() for _ in range(count)]

    def get_cstr(self) -> str:
        out = bytearray()
        while True:
            c = self.read(1)
            if c == b"\0":
                return out.decode()
            out += c
