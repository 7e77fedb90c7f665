"""Helpers for hand-assembling DLGE buffers in tests."""

import zlib
from io import BytesIO

from binary_io import Writer
from language_map import Version
from resource_meta import ResourceDependency, ResourceMeta

NONE = 0xFFFFFFFF

TAG_DIALOGUE = 0x11111111
SWITCH_MOOD = 0x22222222
MOOD_HAPPY = 0x33333333
MOOD_SAD = 0x44444444

TAGS = {TAG_DIALOGUE: "Tag_Dialogue", 0x11111112: "Tag_Shout"}
SWITCHES = {SWITCH_MOOD: "Switch_Mood", MOOD_HAPPY: "Mood_Happy", MOOD_SAD: "Mood_Sad"}
LINES = {0x55555555: "LINE_GREETING"}

DITL = "00AAAAAAAAAAAAAA"
CLNG = "00BBBBBBBBBBBBBB"
LINE_ONE_WAV = "[assembly:/sound/wwise/vo/line_one.wav].pc_wes"
LINE_ONE_FFX = "[assembly:/animations/facefx/line_one.animset].pc_animset"
FR_WAV = "[assembly:/sound/wwise/vo/fr/line_one.wav].pc_wes"
FR_FFX = "[assembly:/animations/facefx/fr/line_one.animset].pc_animset"


def new_writer() -> Writer:
    return Writer(BytesIO())


def name_hash(name: str) -> int:
    return zlib.crc32(name.encode())


def wav_record(w: Writer, tag_hash: int, wav_hash: int, languages, version: Version = Version.H3):
    """languages is one (wav_index, ffx_index, payload) tuple per language slot."""
    w.store_u8(1)
    w.store_u32(tag_hash)
    w.store_u32(wav_hash)
    if version != Version.H2016:
        w.store_u32(0)
    for wav_index, ffx_index, payload in languages:
        if version == Version.H2016:
            w.store_u32(0)
        w.store_u32(wav_index)
        w.store_u32(ffx_index)
        if payload:
            w.store_sized_bytes(payload)
        else:
            w.store_u32(0)


def container_record(w: Writer, container_type: int, entries, group_hash: int = 0, default_hash: int = 0):
    """entries is a list of (packed type/index, [hashes])."""
    w.store_u8(container_type)
    w.store_u32(group_hash)
    w.store_u32(default_hash)
    w.store_u32(len(entries))
    for type_index, hashes in entries:
        w.store_u16(type_index)
        w.store_sized_u32s(hashes)


def empty_languages(count: int):
    return [(NONE, NONE, None)] * count


def make_meta(*extra: ResourceDependency, hash_value: str = "00123456789ABCDE") -> ResourceMeta:
    deps = [ResourceDependency(DITL, "1F"), ResourceDependency(CLNG, "1F"), *extra]
    return ResourceMeta.new(hash_value, 0, "DLGE", deps)
