import json
import math
import re
import zlib
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from io import BytesIO
from typing import ClassVar, Optional, Union

from binary_io import Reader, Writer
from cipher import xtea_decrypt, xtea_encrypt
from errors import (
    DidNotReachEOF,
    InvalidContainer,
    InvalidDocument,
    InvalidLanguageMap,
    InvalidReference,
    InvalidWeight,
)
from hashlist import BiMap, HashList
from language_map import DEFAULT_LOCALE, Version, parse_language_map, resolve_language_map
from resource_meta import DependencyResolver, ResourceDependency, ResourceMeta, is_valid_hash

SCHEMA_URL = "https://tonytools.win/schemas/dlge.schema.json"
NO_REFERENCE = 0xFFFFFFFF
WEIGHT_SCALE = 0xFFFFFF
MAX_INDEX = 0xFFF
DEPEND_FLAG = "1F"

HEX_RE = re.compile(r"[0-9A-Fa-f]{1,8}")
WAV_NAME_RE = re.compile(r"[^/]*(?=\.wav)")
FFX_NAME_RE = re.compile(r"[^/]*(?=\.animset)")


class ContainerType(IntEnum):
    WAV_FILE = 1
    RANDOM = 2
    SWITCH = 3
    SEQUENCE = 4


def pack_type_index(container_type: ContainerType, index: int) -> int:
    if not 0 <= index <= MAX_INDEX:
        raise InvalidReference(f"{container_type.name} index {index} does not fit in 12 bits.")
    return (container_type << 12) | index


def unpack_type_index(type_index: int) -> tuple[int, int]:
    return type_index >> 12, type_index & MAX_INDEX


# Per-language values of a WavFile. A language without an entry is simply
# missing from WavFile.languages.
@dataclass
class SubtitleOnly:
    text: str


@dataclass
class LanguageOverride:
    wav: str
    ffx: str
    subtitle: Optional[str] = None


LanguageEntry = Union[SubtitleOnly, LanguageOverride]


@dataclass
class WavFile:
    TYPE: ClassVar[ContainerType] = ContainerType.WAV_FILE

    wav_name: str
    soundtag: str
    default_wav: Optional[str] = None
    default_ffx: Optional[str] = None
    languages: dict[str, LanguageEntry] = field(default_factory=dict)
    # Only set when the WavFile is a direct child of a Switch / Random.
    cases: Optional[list[str]] = None
    weight: Optional[Union[float, str]] = None


@dataclass
class Random:
    TYPE: ClassVar[ContainerType] = ContainerType.RANDOM

    containers: list[WavFile] = field(default_factory=list)
    cases: Optional[list[str]] = None


@dataclass
class Switch:
    TYPE: ClassVar[ContainerType] = ContainerType.SWITCH

    switch_key: str
    default: str
    containers: list[Union[WavFile, Random]] = field(default_factory=list)


@dataclass
class Sequence:
    TYPE: ClassVar[ContainerType] = ContainerType.SEQUENCE

    containers: list[Union[WavFile, Random, Switch]] = field(default_factory=list)


Node = Union[WavFile, Random, Switch, Sequence]


def _language_entry_to_json(entry: LanguageEntry):
    if isinstance(entry, SubtitleOnly):
        return entry.text
    d = {"wav": entry.wav, "ffx": entry.ffx}
    if entry.subtitle is not None:
        d["subtitle"] = entry.subtitle
    return d


def _language_entry_from_json(code: str, value) -> LanguageEntry:
    if isinstance(value, str):
        return SubtitleOnly(value)
    if isinstance(value, dict):
        wav, ffx, subtitle = value.get("wav"), value.get("ffx"), value.get("subtitle")
        if not isinstance(wav, str) or not isinstance(ffx, str):
            raise InvalidDocument(f"Language '{code}' needs string 'wav' and 'ffx' entries.")
        if subtitle is not None and not isinstance(subtitle, str):
            raise InvalidDocument(f"Language '{code}' has a non-string subtitle.")
        return LanguageOverride(wav, ffx, subtitle)
    raise InvalidDocument(f"Language '{code}' must be a string or an object, got {type(value).__name__}.")


def node_to_json(node: Node) -> dict:
    if isinstance(node, WavFile):
        d = {"type": "WavFile", "wavName": node.wav_name}
        if node.cases is not None:
            d["cases"] = list(node.cases)
        if node.weight is not None:
            d["weight"] = node.weight
        d["soundtag"] = node.soundtag
        d["defaultWav"] = node.default_wav
        d["defaultFfx"] = node.default_ffx
        d["languages"] = {code: _language_entry_to_json(e) for code, e in node.languages.items()}
        return d
    if isinstance(node, Random):
        d = {"type": "Random"}
        if node.cases is not None:
            d["cases"] = list(node.cases)
        d["containers"] = [node_to_json(c) for c in node.containers]
        return d
    if isinstance(node, Switch):
        return {
            "type": "Switch",
            "switchKey": node.switch_key,
            "default": node.default,
            "containers": [node_to_json(c) for c in node.containers],
        }
    if isinstance(node, Sequence):
        return {"type": "Sequence", "containers": [node_to_json(c) for c in node.containers]}
    raise InvalidDocument(f"Cannot serialize {type(node).__name__} as a container.")


def _cases_from_json(value) -> Optional[list[str]]:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(c, str) for c in value):
        raise InvalidDocument("'cases' must be a list of strings.")
    return list(value)


def _str_field(d: dict, key: str, optional: bool = False) -> Optional[str]:
    value = d.get(key) if optional else d[key]
    if optional and value is None:
        return None
    if not isinstance(value, str):
        raise InvalidDocument(f"'{key}' must be a string, got {type(value).__name__}.")
    return value


def _children_from_json(d: dict) -> list:
    children = d.get("containers", [])
    if not isinstance(children, list):
        raise InvalidDocument("'containers' must be a list.")
    return [node_from_json(c) for c in children]


def node_from_json(d) -> Node:
    if not isinstance(d, dict):
        raise InvalidDocument(f"Container must be an object, got {type(d).__name__}.")
    kind = d.get("type")
    try:
        if kind == "WavFile":
            languages = d.get("languages", {})
            if not isinstance(languages, dict):
                raise InvalidDocument("'languages' must be an object.")
            weight = d.get("weight")
            if weight is not None and (isinstance(weight, bool) or not isinstance(weight, (int, float, str))):
                raise InvalidDocument(f"Weight {weight!r} must be a number or a hex string.")
            return WavFile(
                wav_name=_str_field(d, "wavName"),
                soundtag=_str_field(d, "soundtag"),
                default_wav=_str_field(d, "defaultWav", optional=True),
                default_ffx=_str_field(d, "defaultFfx", optional=True),
                languages={code: _language_entry_from_json(code, v) for code, v in languages.items()},
                cases=_cases_from_json(d.get("cases")),
                weight=weight,
            )
        if kind == "Random":
            return Random(containers=_children_from_json(d), cases=_cases_from_json(d.get("cases")))
        if kind == "Switch":
            return Switch(switch_key=_str_field(d, "switchKey"), default=_str_field(d, "default"), containers=_children_from_json(d))
        if kind == "Sequence":
            return Sequence(containers=_children_from_json(d))
    except KeyError as e:
        raise InvalidDocument(f"{kind} container is missing {e}.") from e
    raise InvalidDocument(f"Unknown container type {kind!r}.")


@dataclass
class DlgeDocument:
    hash: str
    ditl: str
    clng: str
    root: Node
    langmap: Optional[str] = None
    schema: str = SCHEMA_URL

    def to_dict(self) -> dict:
        d = {"$schema": self.schema, "hash": self.hash, "DITL": self.ditl, "CLNG": self.clng}
        if self.langmap is not None:
            d["langmap"] = self.langmap
        d["rootContainer"] = node_to_json(self.root)
        return d

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, d) -> "DlgeDocument":
        if not isinstance(d, dict):
            raise InvalidDocument("DLGE document must be a JSON object.")
        try:
            langmap = d.get("langmap")
            if langmap is not None and not isinstance(langmap, str):
                raise InvalidDocument("'langmap' must be a comma separated string.")
            return cls(
                hash=_str_field(d, "hash"),
                ditl=_str_field(d, "DITL"),
                clng=_str_field(d, "CLNG"),
                root=node_from_json(d["rootContainer"]),
                langmap=langmap,
                schema=d.get("$schema", SCHEMA_URL),
            )
        except KeyError as e:
            raise InvalidDocument(f"DLGE document is missing {e}.") from e

    @classmethod
    def from_json(cls, text: str) -> "DlgeDocument":
        try:
            return cls.from_dict(json.loads(text))
        except json.JSONDecodeError as e:
            raise InvalidDocument(f"DLGE document is not valid JSON: {e}") from e


@dataclass
class Metadata:
    type_index: int  # >> 12 for the type, & 0xFFF for the index
    hashes: list[int]


@dataclass
class Container:
    type: int
    group_hash: int
    default_hash: int
    metadata: list[Metadata] = field(default_factory=list)

    @classmethod
    def read(cls, r: Reader) -> "Container":
        container = cls(r.get_u8(), r.get_u32(), r.get_u32())
        for _ in range(r.get_u32()):
            type_index = r.get_u16()
            container.metadata.append(Metadata(type_index, r.get_sized_u32s()))
        return container

    def write(self, w: Writer):
        w.store_u8(self.type)
        w.store_u32(self.group_hash)
        w.store_u32(self.default_hash)
        w.store_u32(len(self.metadata))
        for m in self.metadata:
            w.store_u16(m.type_index)
            w.store_sized_u32s(m.hashes)


@dataclass
class Rebuilt:
    file: bytes
    meta: ResourceMeta


def get_wav_name(wav: str, ffx: str, h: int) -> str:
    if is_valid_hash(wav) or is_valid_hash(ffx):
        return f"{h:08X}"

    m = WAV_NAME_RE.search(wav) or FFX_NAME_RE.search(ffx)
    if m:
        return m.group(0)
    return f"{h:08X}"


def decode_weight(h: int, hex_precision: bool) -> Union[float, str]:
    if hex_precision:
        return f"{h:06X}"
    return h / WEIGHT_SCALE


def encode_weight(weight: Union[float, str]) -> int:
    if isinstance(weight, str):
        if not re.fullmatch(r"[0-9A-Fa-f]+", weight):
            raise InvalidWeight(f"Weight '{weight}' is not a hex number.")
        value = int(weight, 16)
    elif isinstance(weight, (int, float)) and not isinstance(weight, bool):
        if math.isnan(weight) or math.isinf(weight):
            raise InvalidWeight(f"Weight {weight} is not a finite number.")
        value = math.floor(weight * WEIGHT_SCALE + 0.5)
    else:
        raise InvalidWeight(f"Weight {weight!r} must be a number or a hex string.")

    if not 0 <= value <= 0xFFFFFFFF:
        raise InvalidWeight(f"Weight {weight!r} is out of range.")
    return value


def _parse_hex(s: str) -> Optional[int]:
    if HEX_RE.fullmatch(s):
        return int(s, 16)
    return None


def _content_hash(s: str) -> int:
    return zlib.crc32(s.encode())


class _ContainerPool:
    """Decoded containers waiting for a parent, keyed by type and local index."""

    def __init__(self):
        self._nodes: dict[int, dict[int, Node]] = {t: {} for t in ContainerType}
        self._counters: dict[int, int] = {t: 0 for t in ContainerType}
        # Random, Switch and Sequence share one "global" numbering which
        # Sequence metadata and the root tag refer to.
        self._globals: dict[int, tuple[int, int]] = {}

    def add(self, node: Node) -> int:
        index = self._counters[node.TYPE]
        self._nodes[node.TYPE][index] = node
        self._counters[node.TYPE] += 1
        if node.TYPE != ContainerType.WAV_FILE:
            self._globals[len(self._globals)] = (node.TYPE, index)
        return index

    def take(self, container_type: int, index: int) -> Node:
        nodes = self._nodes.get(container_type)
        if nodes is None or index not in nodes:
            raise InvalidReference(f"No unclaimed container of type {container_type} at index {index}.")
        return nodes.pop(index)

    def take_global(self, container_type: int, global_index: int) -> Node:
        entry = self._globals.get(global_index)
        if entry is None or entry[0] != container_type:
            raise InvalidReference(f"Global index {global_index} does not name a container of type {container_type}.")
        return self.take(container_type, entry[1])


@dataclass
class _Emitted:
    type: ContainerType
    local: int
    global_index: Optional[int] = None

    @property
    def shared_index(self) -> int:
        # Sequences and the root tag use the global index for everything but WavFiles.
        return self.local if self.global_index is None else self.global_index


@dataclass
class _EncodeState:
    resolver: DependencyResolver
    counters: dict = field(default_factory=lambda: {t: 0 for t in ContainerType})
    next_global: int = 0
    has_switch: bool = False
    has_sequence: bool = False

    def assign(self, container_type: ContainerType) -> _Emitted:
        local = self.counters[container_type]
        self.counters[container_type] += 1
        if container_type == ContainerType.WAV_FILE:
            return _Emitted(container_type, local)
        emitted = _Emitted(container_type, local, self.next_global)
        self.next_global += 1
        return emitted


class DLGE:
    """Dialogue event (DLGE) converter.

    ``convert`` turns a DLGE binary plus its resource meta into a
    ``DlgeDocument``; ``rebuild`` turns a document back into the binary and a
    freshly built resource meta.
    """

    def __init__(
        self,
        hashlist: HashList,
        version: Version,
        lang_map: Optional[Union[str, list[str]]] = None,
        default_locale: Optional[str] = None,
        hex_precision: bool = False,
    ):
        self.hashlist = hashlist
        self.version = Version.parse(version)
        self.lang_map = resolve_language_map(self.version, lang_map)
        self.custom_langmap = lang_map is not None
        self.default_locale = default_locale or DEFAULT_LOCALE
        self.hex_precision = hex_precision

    @staticmethod
    def _symbol(table: BiMap, h: int) -> str:
        symbol = table.get_by_left(h)
        return symbol if symbol is not None else f"{h:08X}"

    @staticmethod
    def _dependency(deps: list[ResourceDependency], index: int) -> str:
        if index >= len(deps):
            raise InvalidReference(f"Dependency index {index} is out of range ({len(deps)} dependencies).")
        return deps[index].hash

    def convert(self, data: bytes, meta: Union[ResourceMeta, str]) -> DlgeDocument:
        if isinstance(meta, str):
            meta = ResourceMeta.from_json(meta)
        deps = meta.hash_reference_data
        r = Reader.from_bytes(data)
        pool = _ContainerPool()

        try:
            ditl = self._dependency(deps, r.get_u32())
            clng = self._dependency(deps, r.get_u32())

            while r.remaining() > 2:
                tag = r.peek_u8()
                if tag == ContainerType.WAV_FILE:
                    pool.add(self._read_wav_file(r, deps))
                elif tag == ContainerType.RANDOM:
                    pool.add(self._read_random(r, pool))
                elif tag == ContainerType.SWITCH:
                    pool.add(self._read_switch(r, pool))
                elif tag == ContainerType.SEQUENCE:
                    pool.add(self._read_sequence(r, pool))
                else:
                    raise InvalidContainer(f"Unknown container type {tag:#04x} at offset {r.tell()}.")

            if r.remaining() != 2:
                raise DidNotReachEOF(f"Expected 2 bytes for the root tag, {r.remaining()} remain.")

            root_type, root_index = unpack_type_index(r.get_u16())
        except EOFError as e:
            raise DidNotReachEOF(f"DLGE ended early: {e}") from e

        if root_type == ContainerType.WAV_FILE:
            root = pool.take(root_type, root_index)
        elif root_type in (ContainerType.RANDOM, ContainerType.SWITCH, ContainerType.SEQUENCE):
            root = pool.take_global(root_type, root_index)
        else:
            raise InvalidContainer(f"Root tag names unknown container type {root_type}.")

        return DlgeDocument(
            hash=meta.hash_path or meta.hash_value,
            ditl=ditl,
            clng=clng,
            root=root,
            langmap=",".join(self.lang_map) if self.custom_langmap else None,
        )

    def _read_wav_file(self, r: Reader, deps: list[ResourceDependency]) -> WavFile:
        r.skip(1)
        tag_hash = r.get_u32()
        wav_hash = r.get_u32()

        if self.version != Version.H2016:
            r.skip(4)

        wav = WavFile(wav_name=f"{wav_hash:08X}", soundtag=self._symbol(self.hashlist.tags, tag_hash))

        try:
            for language in self.lang_map:
                if self.version == Version.H2016:
                    r.skip(4)

                wav_index = r.get_u32()
                ffx_index = r.get_u32()
                entry = None

                if wav_index != NO_REFERENCE and ffx_index != NO_REFERENCE:
                    wav_ref = self._dependency(deps, wav_index)
                    ffx_ref = self._dependency(deps, ffx_index)
                    if language == self.default_locale:
                        wav.default_wav = wav_ref
                        wav.default_ffx = ffx_ref
                        wav.wav_name = get_wav_name(wav_ref, ffx_ref, wav_hash)
                    else:
                        entry = LanguageOverride(wav_ref, ffx_ref)

                if r.peek_u32() != 0:
                    text = xtea_decrypt(r.get_sized_bytes())
                    if entry is None:
                        entry = SubtitleOnly(text)
                    else:
                        entry.subtitle = text
                else:
                    r.skip(4)

                if entry is not None:
                    wav.languages[language] = entry
        except EOFError as e:
            if self.custom_langmap:
                raise InvalidLanguageMap(
                    f"Language map {','.join(self.lang_map)} has more languages than the file contains."
                ) from e
            raise

        return wav

    def _read_random(self, r: Reader, pool: _ContainerPool) -> Random:
        container = Container.read(r)
        random = Random()

        for m in container.metadata:
            child_type, index = unpack_type_index(m.type_index)
            if child_type != ContainerType.WAV_FILE:
                raise InvalidReference(f"Random containers can only hold WavFiles, got type {child_type}.")
            if not m.hashes:
                raise InvalidReference(f"Random entry for WavFile {index} has no weight.")

            wav = pool.take(child_type, index)
            wav.weight = decode_weight(m.hashes[0], self.hex_precision)
            random.containers.append(wav)

        return random

    def _read_switch(self, r: Reader, pool: _ContainerPool) -> Switch:
        container = Container.read(r)
        switch = Switch(
            switch_key=self._symbol(self.hashlist.switches, container.group_hash),
            default=self._symbol(self.hashlist.switches, container.default_hash),
        )

        # Only WavFiles and Randoms appear here; both are referenced by local index.
        for m in container.metadata:
            child_type, index = unpack_type_index(m.type_index)
            if child_type not in (ContainerType.WAV_FILE, ContainerType.RANDOM):
                raise InvalidReference(f"Switch containers cannot hold type {child_type}.")

            child = pool.take(child_type, index)
            child.cases = [self._symbol(self.hashlist.switches, h) for h in m.hashes]
            switch.containers.append(child)

        return switch

    def _read_sequence(self, r: Reader, pool: _ContainerPool) -> Sequence:
        container = Container.read(r)
        sequence = Sequence()

        for m in container.metadata:
            child_type, index = unpack_type_index(m.type_index)
            if child_type == ContainerType.WAV_FILE:
                sequence.containers.append(pool.take(child_type, index))
            elif child_type in (ContainerType.RANDOM, ContainerType.SWITCH):
                sequence.containers.append(pool.take_global(child_type, index))
            else:
                raise InvalidReference(f"Sequence containers cannot hold type {child_type}.")

        return sequence

    @contextmanager
    def _language_map_override(self, langmap: Optional[str]):
        """Swap in a document's own language map for the duration of a rebuild."""
        if langmap is None:
            yield
            return

        override = parse_language_map(langmap)
        old_lang_map = self.lang_map
        print(f"Notice: Using the document language map ({langmap}) instead of the {self.version.name} one.")
        self.lang_map = override
        try:
            yield
        finally:
            self.lang_map = old_lang_map

    def rebuild(self, document: Union[DlgeDocument, dict, str]) -> Rebuilt:
        if isinstance(document, str):
            document = DlgeDocument.from_json(document)
        elif isinstance(document, dict):
            document = DlgeDocument.from_dict(document)

        w = Writer(BytesIO())
        state = _EncodeState(DependencyResolver())

        if document.ditl == document.clng:
            raise InvalidDocument(f"DITL and CLNG must be different resources, both are {document.ditl}.")

        with self._language_map_override(document.langmap):
            w.store_u32(state.resolver.add(document.ditl, DEPEND_FLAG))
            w.store_u32(state.resolver.add(document.clng, DEPEND_FLAG))
            self._emit(w, document.root, state, is_root=True)

        data = w.getvalue()
        return Rebuilt(
            file=data,
            meta=ResourceMeta.new(document.hash, len(data), "DLGE", state.resolver.dependencies),
        )

    def _tag_hash(self, symbol: str) -> int:
        h = self.hashlist.tags.get_by_right(symbol)
        return h if h is not None else _content_hash(symbol)

    def _switch_hash(self, symbol: str) -> int:
        h = self.hashlist.switches.get_by_right(symbol)
        if h is None:
            h = _parse_hex(symbol)
        return h if h is not None else _content_hash(symbol)

    def _emit(self, w: Writer, node: Node, state: _EncodeState, is_root: bool = False) -> _Emitted:
        if isinstance(node, WavFile):
            emitted = self._emit_wav_file(w, node, state)
        elif isinstance(node, Random):
            emitted = self._emit_random(w, node, state)
        elif isinstance(node, Switch):
            emitted = self._emit_switch(w, node, state)
        elif isinstance(node, Sequence):
            emitted = self._emit_sequence(w, node, state)
        else:
            raise InvalidDocument(f"{type(node).__name__} is not a container.")

        if is_root:
            w.store_u16(pack_type_index(emitted.type, emitted.shared_index))
        return emitted

    @staticmethod
    def _write_subtitle(w: Writer, text: Optional[str]):
        if text:
            w.store_sized_bytes(xtea_encrypt(text))
        else:
            w.store_u32(0)

    def _emit_wav_file(self, w: Writer, wav: WavFile, state: _EncodeState) -> _Emitted:
        name_hash = _parse_hex(wav.wav_name)
        w.store_u8(ContainerType.WAV_FILE)
        w.store_u32(self._tag_hash(wav.soundtag))
        w.store_u32(name_hash if name_hash is not None else _content_hash(wav.wav_name))

        if self.version != Version.H2016:
            w.store_u32(0)

        for index, language in enumerate(self.lang_map):
            if self.version == Version.H2016:
                w.store_u32(0)

            flag = f"{0x80 + index:02X}"
            entry = wav.languages.get(language)

            if language == self.default_locale and wav.default_wav is not None and wav.default_ffx is not None:
                if isinstance(entry, LanguageOverride):
                    raise InvalidDocument(
                        f"{wav.wav_name}: default locale '{language}' already uses defaultWav/defaultFfx "
                        "and cannot carry its own wav/ffx."
                    )
                w.store_u32(state.resolver.add(wav.default_wav, flag))
                w.store_u32(state.resolver.add(wav.default_ffx, flag))
                self._write_subtitle(w, entry.text if entry is not None else None)
            elif entry is None:
                w.store_u64(0xFFFFFFFFFFFFFFFF)
                w.store_u32(0)
            elif isinstance(entry, LanguageOverride):
                w.store_u32(state.resolver.add(entry.wav, flag))
                w.store_u32(state.resolver.add(entry.ffx, flag))
                self._write_subtitle(w, entry.subtitle)
            elif isinstance(entry, SubtitleOnly):
                w.store_u64(0xFFFFFFFFFFFFFFFF)
                self._write_subtitle(w, entry.text)
            else:
                raise InvalidDocument(f"{wav.wav_name}: unsupported value for language '{language}'.")

        return state.assign(ContainerType.WAV_FILE)

    def _emit_random(self, w: Writer, random: Random, state: _EncodeState) -> _Emitted:
        container = Container(ContainerType.RANDOM, 0, 0)

        for child in random.containers:
            if not isinstance(child, WavFile):
                raise InvalidReference(f"Random containers can only hold WavFiles, got {type(child).__name__}.")
            if child.weight is None:
                raise InvalidReference(f"WavFile {child.wav_name} inside a Random has no weight.")

            weight = encode_weight(child.weight)
            emitted = self._emit(w, child, state)
            container.metadata.append(Metadata(pack_type_index(emitted.type, emitted.local), [weight]))

        container.write(w)
        return state.assign(ContainerType.RANDOM)

    def _emit_switch(self, w: Writer, switch: Switch, state: _EncodeState) -> _Emitted:
        if state.has_switch:
            raise InvalidContainer("A DLGE can only contain one Switch container.")
        state.has_switch = True

        container = Container(
            ContainerType.SWITCH,
            self._switch_hash(switch.switch_key),
            self._switch_hash(switch.default),
        )

        for child in switch.containers:
            if not isinstance(child, (WavFile, Random)):
                raise InvalidReference(f"Switch containers cannot hold {type(child).__name__}.")
            if not child.cases:
                raise InvalidReference(f"{type(child).__name__} inside a Switch has no cases.")

            emitted = self._emit(w, child, state)
            cases = [self._switch_hash(case) for case in child.cases]
            container.metadata.append(Metadata(pack_type_index(emitted.type, emitted.local), cases))

        container.write(w)
        return state.assign(ContainerType.SWITCH)

    def _emit_sequence(self, w: Writer, sequence: Sequence, state: _EncodeState) -> _Emitted:
        if state.has_sequence:
            raise InvalidContainer("A DLGE can only contain one Sequence container.")
        state.has_sequence = True

        container = Container(ContainerType.SEQUENCE, 0, 0)

        for child in sequence.containers:
            if not isinstance(child, (WavFile, Random, Switch)):
                raise InvalidReference(f"Sequence containers cannot hold {type(child).__name__}.")

            emitted = self._emit(w, child, state)
            container.metadata.append(Metadata(pack_type_index(emitted.type, emitted.shared_index), []))

        container.write(w)
        return state.assign(ContainerType.SEQUENCE)
