import struct

from errors import InvalidSubtitle

XTEA_KEY = (0x53527737, 0x7506499E, 0xBD39AEE3, 0xA59E7268)
XTEA_DELTA = 0x9E3779B9
XTEA_ROUNDS = 32
MASK = 0xFFFFFFFF


def _encipher(v0: int, v1: int) -> tuple[int, int]:
    total = 0
    for _ in range(XTEA_ROUNDS):
        v0 = (v0 + ((((v1 << 4) ^ (v1 >> 5)) + v1) ^ (total + XTEA_KEY[total & 3]))) & MASK
        total = (total + XTEA_DELTA) & MASK
        v1 = (v1 + ((((v0 << 4) ^ (v0 >> 5)) + v0) ^ (total + XTEA_KEY[(total >> 11) & 3]))) & MASK
    return v0, v1


def _decipher(v0: int, v1: int) -> tuple[int, int]:
    total = (XTEA_DELTA * XTEA_ROUNDS) & MASK
    for _ in range(XTEA_ROUNDS):
        v1 = (v1 - ((((v0 << 4) ^ (v0 >> 5)) + v0) ^ (total + XTEA_KEY[(total >> 11) & 3]))) & MASK
        total = (total - XTEA_DELTA) & MASK
        v0 = (v0 - ((((v1 << 4) ^ (v1 >> 5)) + v1) ^ (total + XTEA_KEY[total & 3]))) & MASK
    return v0, v1


def xtea_encrypt(text: str) -> bytes:
    data = text.encode()
    if len(data) % 8 != 0:
        data += b"\0" * (8 - len(data) % 8)

    out = bytearray()
    for i in range(0, len(data), 8):
        v0, v1 = struct.unpack_from("<2I", data, i)
        out += struct.pack("<2I", *_encipher(v0, v1))
    return bytes(out)


def xtea_decrypt(data: bytes) -> str:
    if len(data) % 8 != 0:
        raise InvalidSubtitle(f"Encrypted subtitle length {len(data)} is not a multiple of 8.")

    out = bytearray()
    for i in range(0, len(data), 8):
        v0, v1 = struct.unpack_from("<2I", data, i)
        out += struct.pack("<2I", *_decipher(v0, v1))

    try:
        return out.decode().strip("\0")
    except UnicodeDecodeError as e:
        raise InvalidSubtitle(f"Decrypted subtitle is not valid UTF-8: {e}") from e
