#!/usr/bin/env python3
# MIT License
#
# Copyright (c) 2026 sookyboo
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
"""
Codec for Steam's binary shortcuts.vdf (the list of non-Steam shortcuts).

    parse_shortcuts(data)         bytes -> [ShortcutRef, ...]
    shortcuts_to_bytes(records)   [Shortcut | ShortcutRef, ...] -> bytes
    derive_app_id(exe, app_name)  -> uint32 app id Steam expects

The codec never touches the file system; main() is a small CLI around it.
"""
import argparse
import json
import logging
import os
import platform
import shutil
import struct
import sys
import zlib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)


# ----------------------------
# AppID
# ----------------------------
def derive_app_id(exe: str, app_name: str) -> int:
    """
    Shortcut app id (top 32 bits): crc32(exe+appname) | 0x80000000
    """
    combined = (exe + app_name).encode("utf-8")
    crc = zlib.crc32(combined) & 0xFFFFFFFF
    return crc | 0x80000000


def derive_app_id_for(shortcut: "AnyShortcut") -> int:
    return derive_app_id(shortcut.exe, shortcut.app_name)


def signed_app_id(app_id: int) -> int:
    """
    Same 32 bits viewed as a signed int32 (how some tools print appid).
    """
    v = int(app_id) & 0xFFFFFFFF
    return v - 0x100000000 if v >= 0x80000000 else v


def long_app_id(app_id: int) -> int:
    """
    Long app id (Big Picture / artwork key):
      (top32 << 32) | 0x02000000
    """
    return ((int(app_id) & 0xFFFFFFFF) << 32) | 0x02000000


# ----------------------------
# Errors
# ----------------------------
class ShortcutsError(Exception):
    """Base error for this module."""


class DecodeError(ShortcutsError, ValueError):
    """
    Raised when a buffer is not a well-formed shortcuts.vdf.

    `offset` is the byte position where `expected` was not found. `key` is
    set when a field value is not valid UTF-8.
    """

    def __init__(self, expected: str, offset: int, key: Optional[str] = None):
        self.expected = expected
        self.offset = offset
        self.key = key
        msg = f"expected {expected} at offset {offset}"
        if key is not None:
            msg += f" (field {key!r})"
        super().__init__(msg)


# ----------------------------
# Record model
# ----------------------------
KV_NUL = 0x00
KV_SOH = 0x01  # text line, tag entry, short-form integer marker
KV_STX = 0x02  # integer line
KV_END = 0x08

HEADER = b"\x00shortcuts\x00"
TAGS_HEADER = b"\x00tags\x00"

KIND_INT = "int"
KIND_BOOL = "bool"
KIND_TEXT = "text"

# (attribute, key, kind) in the order the encoder writes them.
FIELD_KEYS: List[Tuple[str, str, str]] = [
    ("app_id", "appid", KIND_INT),
    ("app_name", "AppName", KIND_TEXT),
    ("exe", "Exe", KIND_TEXT),
    ("start_dir", "StartDir", KIND_TEXT),
    ("icon", "icon", KIND_TEXT),
    ("shortcut_path", "ShortcutPath", KIND_TEXT),
    ("launch_options", "LaunchOptions", KIND_TEXT),
    ("is_hidden", "IsHidden", KIND_BOOL),
    ("allow_desktop_config", "AllowDesktopConfig", KIND_BOOL),
    ("allow_overlay", "AllowOverlay", KIND_BOOL),
    ("open_vr", "openvr", KIND_INT),
    ("dev_kit", "Devkit", KIND_INT),
    ("dev_kit_game_id", "DevkitGameID", KIND_TEXT),
    ("dev_kit_override_app_id", "DevkitOverrideAppID", KIND_INT),
    ("last_play_time", "LastPlayTime", KIND_INT),
]

SHORTCUT_FIELDS: Tuple[str, ...] = ("order",) + tuple(a for a, _k, _t in FIELD_KEYS) + ("tags",)
TEXT_FIELDS: Tuple[str, ...] = tuple(a for a, _k, t in FIELD_KEYS if t == KIND_TEXT)

# Steam's own writer packs these two flags; everything else is a full int32.
SHORT_FORM_KEYS = frozenset(("AllowDesktopConfig", "AllowOverlay"))

DEFAULT_TAGS: Tuple[str, ...] = ("Installed", "Ready To Play")


def _fields_dict(shortcut: "AnyShortcut") -> Dict[str, Any]:
    d = {name: getattr(shortcut, name) for name in SHORTCUT_FIELDS}
    d["tags"] = list(d["tags"])
    return d


@dataclass
class Shortcut:
    """
    Owning shortcut record: every text field and tag is an independent str.
    """
    order: int
    app_id: int
    app_name: str
    exe: str
    start_dir: str = ""
    icon: str = ""
    shortcut_path: str = ""
    launch_options: str = ""
    is_hidden: bool = False
    allow_desktop_config: bool = True
    allow_overlay: bool = True
    open_vr: int = 0
    dev_kit: int = 0
    dev_kit_game_id: str = ""
    dev_kit_override_app_id: int = 0
    last_play_time: int = 0
    tags: List[str] = field(default_factory=lambda: list(DEFAULT_TAGS))

    @classmethod
    def new(
            cls,
            order: int,
            app_name: str,
            exe: str,
            start_dir: str = "",
            icon: str = "",
            shortcut_path: str = "",
            launch_options: str = "",
    ) -> "Shortcut":
        """
        New shortcut with the defaults Steam uses for a freshly added entry
        and an app id derived from exe + app_name.
        """
        return cls(
            order=order,
            app_id=derive_app_id(exe, app_name),
            app_name=app_name,
            exe=exe,
            start_dir=start_dir,
            icon=icon,
            shortcut_path=shortcut_path,
            launch_options=launch_options,
        )

    def to_owned(self) -> "Shortcut":
        return replace(self, tags=list(self.tags))

    def to_dict(self) -> Dict[str, Any]:
        return _fields_dict(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Shortcut, ShortcutRef)):
            return _fields_dict(self) == _fields_dict(other)
        return NotImplemented


class _TextSpan:
    """Text attribute of a ShortcutRef, decoded from its span on access."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Optional["ShortcutRef"], objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return str(obj.raw(self.name), "utf-8")


class ShortcutRef:
    """
    Borrowing shortcut record returned by parse_shortcuts().

    Text fields and tags are (start, end) spans into the decoded buffer and
    are only turned into str when read, so decoding copies no text. The ref
    keeps the buffer alive through its memoryview, and in-place edits to a
    bytearray source show through. Call to_owned() to detach.
    """

    __slots__ = (
        "_source", "_spans", "_tag_spans",
        "order", "app_id", "is_hidden", "allow_desktop_config", "allow_overlay",
        "open_vr", "dev_kit", "dev_kit_override_app_id", "last_play_time",
    )

    app_name = _TextSpan()
    exe = _TextSpan()
    start_dir = _TextSpan()
    icon = _TextSpan()
    shortcut_path = _TextSpan()
    launch_options = _TextSpan()
    dev_kit_game_id = _TextSpan()

    def __init__(
            self,
            source: memoryview,
            order: int,
            numbers: Dict[str, int],
            spans: Dict[str, Tuple[int, int]],
            tag_spans: List[Tuple[int, int]],
    ):
        self._source = source
        self._spans = spans
        self._tag_spans = tag_spans
        self.order = order
        self.app_id = numbers["app_id"]
        self.is_hidden = numbers["is_hidden"] != 0
        self.allow_desktop_config = numbers["allow_desktop_config"] != 0
        self.allow_overlay = numbers["allow_overlay"] != 0
        self.open_vr = numbers["open_vr"]
        self.dev_kit = numbers["dev_kit"]
        self.dev_kit_override_app_id = numbers["dev_kit_override_app_id"]
        self.last_play_time = numbers["last_play_time"]

    @property
    def tags(self) -> List[str]:
        return [str(self._source[s:e], "utf-8") for s, e in self._tag_spans]

    def raw(self, name: str) -> memoryview:
        """Zero-copy bytes of a text field (e.g. raw("exe"))."""
        start, end = self._spans[name]
        return self._source[start:end]

    def to_owned(self) -> Shortcut:
        return Shortcut(**_fields_dict(self))

    def to_dict(self) -> Dict[str, Any]:
        return _fields_dict(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (Shortcut, ShortcutRef)):
            return _fields_dict(self) == _fields_dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in _fields_dict(self).items())
        return f"ShortcutRef({inner})"


AnyShortcut = Union[Shortcut, ShortcutRef]


# ----------------------------
# Binary shortcuts.vdf parsing
# ----------------------------
def _expect(buf: bytes, i: int, token: bytes, what: str) -> int:
    if not buf.startswith(token, i):
        raise DecodeError(what, i)
    return i + len(token)


def _read_cstring(buf: bytes, i: int, what: str) -> Tuple[int, int, int]:
    """
    Span of a NUL-terminated run starting at i: (start, end, next).
    """
    j = buf.find(b"\x00", i)
    if j < 0:
        raise DecodeError(f"NUL terminating {what}", len(buf))
    return i, j, j + 1


def _check_utf8(buf: bytes, start: int, end: int, key: Optional[str]) -> str:
    try:
        return str(buf[start:end], "utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("UTF-8 text" if key else "UTF-8 field key", start + e.start, key=key) from e


def _continues_record(buf: bytes, i: int) -> bool:
    # After an integer value the next byte must open another line or the tags block.
    if i >= len(buf):
        return False
    t = buf[i]
    return t == KV_SOH or t == KV_STX or buf.startswith(TAGS_HEADER, i)


def _read_int(buf: bytes, i: int) -> Tuple[int, int]:
    """
    Integer value in either encoding:
      long form:  4 bytes, little-endian uint32
      short form: SOH NUL + 3 bytes, little-endian, zero-extended
    The long form wins when both would leave the cursor on a valid line.
    """
    n = len(buf)
    if i + 4 <= n and _continues_record(buf, i + 4):
        return struct.unpack_from("<I", buf, i)[0], i + 4
    if i + 5 <= n and buf[i] == KV_SOH and buf[i + 1] == KV_NUL and _continues_record(buf, i + 5):
        return int.from_bytes(buf[i + 2:i + 5], "little"), i + 5
    if i + 4 > n:
        raise DecodeError("4-byte integer", i)
    # Neither form is followed by a line; the next token reports the error.
    return struct.unpack_from("<I", buf, i)[0], i + 4


def _parse_lines(buf: bytes, i: int) -> Tuple[Dict[str, Tuple[int, Any, str]], int]:
    """
    Collect field lines up to the tags block.

    Returns {key as written: (line type, value)}; value is an int for STX
    lines and a (start, end) span for SOH lines.
    """
    lines: Dict[str, Tuple[int, Any]] = {}
    while True:
        if i >= len(buf):
            raise DecodeError("field line or tags block", i)
        t = buf[i]
        if t == KV_NUL:
            return lines, i
        if t != KV_SOH and t != KV_STX:
            raise DecodeError("field line or tags block", i)

        ks, ke, i = _read_cstring(buf, i + 1, "field key")
        key = _check_utf8(buf, ks, ke, None)

        if t == KV_SOH:
            start, end, i = _read_cstring(buf, i, f"value of {key!r}")
            lines[key] = (t, (start, end))
        else:
            val, i = _read_int(buf, i)
            lines[key] = (t, val)


def _caseless_pop(lines: Dict[str, Tuple[int, Any]], key: str) -> Optional[Tuple[int, Any]]:
    """
    Exact key first; otherwise the last line whose key differs only by case.
    """
    if key in lines:
        return lines.pop(key)
    kl = key.lower()
    found = None
    for k in list(lines.keys()):
        if k.lower() == kl:
            found = k
    return lines.pop(found) if found is not None else None


def _parse_tags(buf: bytes, i: int) -> Tuple[List[Tuple[int, int]], int]:
    i = _expect(buf, i, TAGS_HEADER, "'\\x00tags\\x00' block")
    spans: List[Tuple[int, int]] = []
    while True:
        if i >= len(buf):
            raise DecodeError("tag entry or BACKSPACE ending tags", i)
        t = buf[i]
        if t == KV_END:
            return spans, i + 1
        if t != KV_SOH:
            raise DecodeError("tag entry or BACKSPACE ending tags", i)

        # Index digits are positional only.
        _s, _e, i = _read_cstring(buf, i + 1, "tag index")
        start, end, i = _read_cstring(buf, i, "tag text")
        _check_utf8(buf, start, end, "tags")
        spans.append((start, end))


def _parse_shortcut(buf: bytes, view: memoryview, i: int) -> Tuple[ShortcutRef, int]:
    i = _expect(buf, i, b"\x00", "NUL opening record")
    start, end, i = _read_cstring(buf, i, "record order")
    digits = bytes(buf[start:end])
    if not digits.isdigit():
        raise DecodeError("decimal record order", start)
    order = int(digits)

    lines, i = _parse_lines(buf, i)
    tag_spans, i = _parse_tags(buf, i)
    if i >= len(buf) or buf[i] != KV_END:
        raise DecodeError("BACKSPACE ending record", i)

    numbers: Dict[str, int] = {}
    spans: Dict[str, Tuple[int, int]] = {}
    for attr, key, kind in FIELD_KEYS:
        entry = _caseless_pop(lines, key)
        if kind == KIND_TEXT:
            if entry is None or entry[0] != KV_SOH:
                spans[attr] = (0, 0)
            else:
                s, e = entry[1]
                _check_utf8(buf, s, e, key)
                spans[attr] = (s, e)
        else:
            numbers[attr] = entry[1] if entry is not None and entry[0] == KV_STX else 0

    if lines:
        logger.debug("record %d: ignoring keys %s", order, sorted(lines))

    return ShortcutRef(view, order, numbers, spans, tag_spans), i + 1


def parse_shortcuts(data: Union[bytes, bytearray, memoryview]) -> List[ShortcutRef]:
    """
    Decode a shortcuts.vdf buffer.

    Layout:
      NUL "shortcuts" NUL
        ( NUL <order> NUL <field lines> NUL "tags" NUL (SOH <n> NUL <tag> NUL)* BS BS )*
      BS [BS]

    Raises DecodeError on the first structural problem; nothing partial is
    returned. The refs borrow from `data`. bytes and bytearray are scanned
    in place; any other buffer is copied once for scanning, while the refs
    still point into the caller's buffer.
    """
    view = memoryview(data).cast("B")
    buf = data if isinstance(data, (bytes, bytearray)) else view.tobytes()

    i = _expect(buf, 0, HEADER, "'\\x00shortcuts\\x00' header")
    out: List[ShortcutRef] = []
    while i < len(buf) and buf[i] == KV_NUL:
        sc, i = _parse_shortcut(buf, view, i)
        out.append(sc)

    if i >= len(buf) or buf[i] != KV_END:
        raise DecodeError("record or BACKSPACE ending shortcut list", i)
    i += 1
    # Steam closes the root object too; older writers may omit it.
    if i < len(buf) and buf[i] == KV_END:
        i += 1
    if i < len(buf):
        logger.debug("ignoring %d trailing bytes after shortcut list", len(buf) - i)

    logger.debug("decoded %d shortcuts from %d bytes", len(out), len(buf))
    return out


# ----------------------------
# Binary shortcuts.vdf writing
# ----------------------------
def _write_cstring(b: Union[bytes, memoryview], out: bytearray) -> None:
    out += b
    out.append(KV_NUL)


def _text_bytes(shortcut: AnyShortcut, attr: str) -> Union[bytes, memoryview]:
    if isinstance(shortcut, ShortcutRef):
        return shortcut.raw(attr)
    return (getattr(shortcut, attr) or "").encode("utf-8")


def _write_text_line(key: str, value: Union[bytes, memoryview], out: bytearray) -> None:
    out.append(KV_SOH)
    _write_cstring(key.encode("ascii"), out)
    _write_cstring(value, out)


def _write_int_line(key: str, value: int, out: bytearray) -> None:
    out.append(KV_STX)
    _write_cstring(key.encode("ascii"), out)
    if key in SHORT_FORM_KEYS:
        out.append(KV_SOH)
        out.append(KV_NUL)
        out += (int(value) & 0xFFFFFF).to_bytes(3, "little")
    else:
        out += struct.pack("<I", int(value) & 0xFFFFFFFF)


def _write_shortcut(shortcut: AnyShortcut, out: bytearray) -> None:
    out.append(KV_NUL)
    _write_cstring(str(int(shortcut.order)).encode("ascii"), out)

    for attr, key, kind in FIELD_KEYS:
        if kind == KIND_TEXT:
            _write_text_line(key, _text_bytes(shortcut, attr), out)
        else:
            _write_int_line(key, int(getattr(shortcut, attr)), out)

    out += TAGS_HEADER
    for idx, tag in enumerate(shortcut.tags):
        out.append(KV_SOH)
        _write_cstring(str(idx).encode("ascii"), out)
        _write_cstring(tag.encode("utf-8"), out)
    out.append(KV_END)  # tags
    out.append(KV_END)  # record


def shortcuts_to_bytes(shortcuts: Iterable[AnyShortcut]) -> bytes:
    """
    Encode records (owning or borrowing) into shortcuts.vdf bytes.

    Field lines are written in a fixed order with full int32 values, apart
    from AllowDesktopConfig/AllowOverlay which use the packed short form.
    Text must not contain NUL; there is no escaping in this format.
    """
    out = bytearray(HEADER)
    count = 0
    for sc in shortcuts:
        _write_shortcut(sc, out)
        count += 1
    out.append(KV_END)  # shortcuts
    out.append(KV_END)  # root
    logger.debug("encoded %d shortcuts into %d bytes", count, len(out))
    return bytes(out)


def verify_roundtrip(data: Union[bytes, bytearray, memoryview]) -> Tuple[int, bool]:
    """
    Check that decode -> encode -> decode gives the same records.

    Raises DecodeError if `data` itself does not parse.
    """
    a = parse_shortcuts(data)
    rebuilt = shortcuts_to_bytes(a)
    try:
        b = parse_shortcuts(rebuilt)
    except DecodeError as e:
        logger.warning("re-encoded shortcuts do not parse: %s", e)
        return len(a), False
    return len(a), a == b


# ----------------------------
# Steam path detection
# ----------------------------
def steam_root_candidates() -> List[Path]:
    """
    Usual install locations, most common first:
      Windows: %PROGRAMFILES(X86)%/Steam, %PROGRAMFILES%/Steam, C:/Steam
      Linux:   ~/.steam/steam, ~/.local/share/Steam, Flatpak, Snap
    """
    if "windows" in platform.system().lower():
        roots = [os.environ.get("PROGRAMFILES(X86)"), os.environ.get("PROGRAMFILES")]
        return [Path(r) / "Steam" for r in roots if r] + [Path("C:/Steam")]

    home = Path.home()
    return [
        home / ".steam" / "steam",
        home / ".local" / "share" / "Steam",
        home / ".var" / "app" / "com.valvesoftware.Steam" / "data" / "Steam",
        home / "snap" / "steam" / "common" / ".local" / "share" / "Steam",
    ]


def detect_steam_root() -> Optional[Path]:
    """First candidate that has a userdata/ folder, or None."""
    return next((c for c in steam_root_candidates() if (c / "userdata").is_dir()), None)


def choose_userdata_dir(steam_root: Path, steamid: Optional[str]) -> Tuple[Path, str]:
    """
    userdata/<steamid>, or the user whose shortcuts.vdf changed last.
    """
    userdata = steam_root / "userdata"
    if not userdata.is_dir():
        raise FileNotFoundError(f"No userdata dir under {steam_root}")

    if steamid:
        d = userdata / steamid
        if not d.is_dir():
            raise FileNotFoundError(f"SteamID folder not found: {d}")
        return d, steamid

    best: Optional[Path] = None
    best_mtime = -1.0
    fallback: Optional[Path] = None
    fallback_mtime = -1.0

    for d in userdata.iterdir():
        if not d.is_dir() or not d.name.isdigit():
            continue
        vdf = d / "config" / "shortcuts.vdf"
        if vdf.exists() and vdf.stat().st_mtime > best_mtime:
            best_mtime = vdf.stat().st_mtime
            best = d
        if d.stat().st_mtime > fallback_mtime:
            fallback_mtime = d.stat().st_mtime
            fallback = d

    chosen = best or fallback
    if chosen is None:
        raise FileNotFoundError(f"Could not find any SteamID folders under {userdata}")
    return chosen, chosen.name


# ----------------------------
# CLI helpers
# ----------------------------
def _id_views(app_id: int) -> Dict[str, object]:
    appid32 = int(app_id) & 0xFFFFFFFF
    long_id = long_app_id(appid32)
    return {
        "dec": appid32,
        "hex": f"0x{appid32:08x}",
        "signed": signed_app_id(appid32),
        "long": {"dec": long_id, "hex": f"0x{long_id:016x}"},
    }


def _dump_json(vdf_path: Path, dump_name: Optional[str], dump_appid: Optional[int], dump_list: bool) -> int:
    result: Dict[str, Any] = {
        "shortcuts_vdf": str(vdf_path),
        "verification": {"present": vdf_path.exists(), "roundtrip_ok": None, "count": 0, "error": None},
        "list": [],
        "matches": [],
    }

    shortcuts: List[ShortcutRef] = []
    if vdf_path.exists():
        data = vdf_path.read_bytes()
        try:
            count, ok = verify_roundtrip(data)
            result["verification"]["roundtrip_ok"] = ok
            result["verification"]["count"] = count
            shortcuts = parse_shortcuts(data)
        except DecodeError as e:
            result["verification"]["roundtrip_ok"] = False
            result["verification"]["error"] = str(e)

    if dump_list:
        result["list"] = [{
            "order": s.order,
            "app_name": s.app_name,
            "appid": _id_views(s.app_id),
            "exe": s.exe,
        } for s in shortcuts]

    selection: Dict[str, Any] = {"by": None, "value": None}
    matches: List[ShortcutRef] = []
    if dump_appid is not None:
        selection = {"by": "appid", "value": dump_appid}
        matches = [s for s in shortcuts if (s.app_id & 0xFFFFFFFF) == dump_appid]
    elif dump_name is not None:
        selection = {"by": "name", "value": dump_name}
        matches = [s for s in shortcuts if s.app_name == dump_name]
        if not matches:
            dn = dump_name.casefold()
            matches = [s for s in shortcuts if s.app_name.casefold() == dn]

    for s in matches:
        computed = derive_app_id_for(s)
        result["matches"].append({
            "selection": selection,
            "shortcut": s.to_dict(),
            "appid": _id_views(s.app_id),
            "computed_appid": dict(_id_views(computed), matches_stored=(computed == (s.app_id & 0xFFFFFFFF))),
        })

    print(json.dumps(result, indent=2, sort_keys=True))
    return 0


def _apply_update(vdf_path: Path, args: argparse.Namespace) -> Tuple[int, str]:
    sc_new = Shortcut.new(
        order=0,
        app_name=args.name,
        exe=args.exe,
        start_dir=args.startdir,
        icon=args.icon,
        shortcut_path=args.shortcutpath,
        launch_options=args.launch,
    )
    sc_new.is_hidden = bool(args.hidden)
    sc_new.allow_overlay = not args.no_overlay
    sc_new.allow_desktop_config = not args.no_desktop_config
    if args.tags is not None:
        sc_new.tags = [t.strip() for t in args.tags.split(",") if t.strip()]

    existing: List[Shortcut] = []
    if vdf_path.exists():
        data = vdf_path.read_bytes()
        try:
            count, ok = verify_roundtrip(data)
        except DecodeError as e:
            return 4, f"shortcuts.vdf verification failed for {vdf_path}: {e}"
        if not ok:
            return 4, f"shortcuts.vdf verification failed for {vdf_path}: round-trip mismatch ({count} shortcuts)"
        existing = [sc.to_owned() for sc in parse_shortcuts(data)]

    # Match by appid first, then by exe+launch options.
    idx = next((n for n, sc in enumerate(existing) if sc.app_id == sc_new.app_id), None)
    if idx is None:
        idx = next((n for n, sc in enumerate(existing)
                    if sc.exe and sc.exe == sc_new.exe and sc.launch_options == sc_new.launch_options), None)

    if idx is not None:
        old = existing[idx]
        sc_new.last_play_time = old.last_play_time
        if args.tags is None:
            sc_new.tags = list(old.tags)
        existing[idx] = sc_new
        action = "Updated"
    else:
        existing.append(sc_new)
        action = "Added"

    for n, sc in enumerate(existing):
        sc.order = n

    out_bytes = shortcuts_to_bytes(existing)
    try:
        _count, ok = verify_roundtrip(out_bytes)
    except DecodeError as e:
        return 5, f"generated shortcuts.vdf verification failed: {e}"
    if not ok:
        return 5, "generated shortcuts.vdf verification failed: round-trip mismatch"

    if args.verify_only:
        return 0, f"Verification OK for {vdf_path} (would be {action.lower()}, {len(existing)} shortcuts)."

    if vdf_path.exists():
        shutil.copyfile(vdf_path, vdf_path.with_suffix(".vdf.bak"))
    vdf_path.parent.mkdir(parents=True, exist_ok=True)
    vdf_path.write_bytes(out_bytes)

    appid32 = sc_new.app_id & 0xFFFFFFFF
    msg = [
        f"{action} shortcut {sc_new.app_name!r}",
        f"shortcuts.vdf: {vdf_path}",
        f"appid: {appid32} (0x{appid32:08x})",
        f"long_appid: {long_app_id(appid32)}",
    ]
    return 0, "\n".join(msg)


# ----------------------------
# Main
# ----------------------------
def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="Inspect, verify and add/update entries in Steam's shortcuts.vdf. No dependencies.",
        epilog=(
            "Note: AllowDesktopConfig/AllowOverlay are written in the packed short form, and written "
            "files are checked only by this tool's own decode/encode round-trip, not against a Steam "
            "client. Keep the .vdf.bak backup until Steam has loaded the new file."
        ),
    )
    ap.add_argument("--steam-root", type=str, default=None, help="Path to Steam root (auto-detect if omitted)")
    ap.add_argument("--steamid", type=str, default=None, help="SteamID folder under userdata/ (auto-pick if omitted)")
    ap.add_argument("--file", type=str, default=None, help="Explicit shortcuts.vdf path (skips Steam discovery)")

    ap.add_argument("--name", help="AppName shown in Steam (e.g. 'My Game')")
    ap.add_argument("--exe", help="Exe path (Steam usually stores this quoted on Windows)")
    ap.add_argument("--startdir", default="", help="Working directory (StartDir)")
    ap.add_argument("--icon", default="", help="Icon path")
    ap.add_argument("--launch", default="", help="LaunchOptions")
    ap.add_argument("--shortcutpath", default="", help="ShortcutPath")
    ap.add_argument("--tags", default=None, help="Comma-separated tags (default: keep existing, or Installed,Ready To Play)")
    ap.add_argument("--hidden", action="store_true", help="Set IsHidden=1")
    ap.add_argument("--no-overlay", action="store_true", help="Disable AllowOverlay")
    ap.add_argument("--no-desktop-config", action="store_true", help="Disable AllowDesktopConfig")

    ap.add_argument("--appid", action="store_true", help="Print the app id derived from --exe and --name and exit.")
    ap.add_argument(
        "--verify-only",
        action="store_true",
        help="Verify shortcuts.vdf parses and round-trips and that the update would too; do not write anything.",
    )
    ap.add_argument("--dump-json", action="store_true", help="Dump shortcuts as JSON and exit (no writes).")
    ap.add_argument("--dump-name", type=str, default=None, help="AppName to dump (exact match, falls back to case-insensitive).")
    ap.add_argument("--dump-appid", type=str, default=None, help="Shortcut appid to dump (decimal or 0xhex).")
    ap.add_argument("--dump-list", action="store_true", help="Include a list of all shortcuts in the JSON dump.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.appid:
        if not args.name or not args.exe:
            print("--appid requires --name and --exe", file=sys.stderr)
            return 2
        print(json.dumps(_id_views(derive_app_id(args.exe, args.name)), indent=2, sort_keys=True))
        return 0

    if args.file:
        vdf_path = Path(args.file)
    else:
        steam_root = Path(args.steam_root) if args.steam_root else detect_steam_root()
        if not steam_root:
            print("Could not auto-detect Steam root. Pass --steam-root or --file.", file=sys.stderr)
            return 2
        userdir, _steamid = choose_userdata_dir(steam_root, args.steamid)
        vdf_path = userdir / "config" / "shortcuts.vdf"

    if args.dump_json:
        if (args.dump_name is None) and (args.dump_appid is None) and (not args.dump_list):
            print("dump-json requires --dump-name or --dump-appid or --dump-list", file=sys.stderr)
            return 7

        dump_appid = None
        if args.dump_appid is not None:
            try:
                dump_appid = int(str(args.dump_appid), 0) & 0xFFFFFFFF
            except ValueError:
                print(f"invalid --dump-appid: {args.dump_appid!r}", file=sys.stderr)
                return 7

        return _dump_json(vdf_path, args.dump_name, dump_appid, bool(args.dump_list))

    if not args.name or not args.exe:
        print("the following arguments are required: --name, --exe", file=sys.stderr)
        return 2

    rc, msg = _apply_update(vdf_path, args)
    if rc != 0:
        print(msg, file=sys.stderr)
        return rc
    print(msg)
    if not args.verify_only:
        print("Restart Steam to see changes.")
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
