import itertools

import pytest

from steam_shortcuts import DecodeError, Shortcut, parse_shortcuts, shortcuts_to_bytes, verify_roundtrip

from builders import BS, HEADER, full_lines, int_line, record, short_line, stream, text_line


def _game(order=0, **kw):
    sc = Shortcut(
        order=order,
        app_id=0x8C1F0F8D,
        app_name="Game",
        exe="/usr/bin/game",
        start_dir="/usr/bin",
        launch_options="-fullscreen",
        allow_overlay=False,
        last_play_time=1628913700,
        tags=["favorite", "Installed"],
    )
    for k, v in kw.items():
        setattr(sc, k, v)
    return sc


def test_exact_layout():
    expected = stream(record(0, full_lines(), tags=["favorite", "Installed"]))
    assert shortcuts_to_bytes([_game()]) == expected


def test_empty_list():
    assert shortcuts_to_bytes([]) == HEADER + BS + BS


def test_ends_with_closing_backspaces():
    data = shortcuts_to_bytes([_game(), _game(1, tags=[])])
    assert data.endswith(BS * 4)


def test_flags_use_short_form_and_others_long():
    data = shortcuts_to_bytes([_game(is_hidden=True)])
    assert short_line("AllowDesktopConfig", 1) in data
    assert short_line("AllowOverlay", 0) in data
    assert int_line("IsHidden", 1) in data


@pytest.mark.parametrize("hidden,desktop,overlay", list(itertools.product([False, True], repeat=3)))
def test_round_trip_flags(hidden, desktop, overlay):
    sc = _game(is_hidden=hidden, allow_desktop_config=desktop, allow_overlay=overlay)
    assert parse_shortcuts(shortcuts_to_bytes([sc])) == [sc]


@pytest.mark.parametrize("tags", [[], ["Installed"], ["a", "b", "c"], ["Ready TO Play", "", "ゲーム"]])
def test_round_trip_tags(tags):
    sc = _game(tags=tags)
    assert parse_shortcuts(shortcuts_to_bytes([sc]))[0].tags == tags


@pytest.mark.parametrize("count", [0, 1, 5])
def test_round_trip_many(count):
    records = [
        Shortcut.new(n, f"Game {n}", f"/games/{n}/run.sh", start_dir=f"/games/{n}", launch_options="%command%")
        for n in range(count)
    ]
    assert parse_shortcuts(shortcuts_to_bytes(records)) == records


def test_round_trip_all_values():
    sc = _game(
        order=12,
        app_id=0xFFFFFFFF,
        icon="C:\\icons\\game.ico",
        shortcut_path="C:\\Users\\me\\Desktop\\Game.lnk",
        open_vr=1,
        dev_kit=3,
        dev_kit_game_id="devkit-42",
        dev_kit_override_app_id=0x80000000,
        app_name="Ünïcødé",
    )
    out = parse_shortcuts(shortcuts_to_bytes([sc]))
    assert out == [sc]
    assert out[0].order == 12


def test_ints_are_masked_to_32_bits():
    sc = _game(app_id=-1)
    assert parse_shortcuts(shortcuts_to_bytes([sc]))[0].app_id == 0xFFFFFFFF


def test_long_form_stream_reencodes_except_flags():
    original = stream(record(0, full_lines(short_flags=False), tags=["a"]))
    canonical = stream(record(0, full_lines(short_flags=True), tags=["a"]))
    assert original != canonical
    assert shortcuts_to_bytes(parse_shortcuts(original)) == canonical
    assert parse_shortcuts(original) == parse_shortcuts(canonical)


def test_short_form_ints_are_normalised():
    lines = [short_line("IsHidden", 1), text_line("AppName", "Game")]
    sc = parse_shortcuts(stream(record(0, lines)))[0]
    data = shortcuts_to_bytes([sc])
    assert int_line("IsHidden", 1) in data
    assert parse_shortcuts(data) == [sc]


def test_canonical_field_order():
    lines = list(reversed(full_lines()))
    scrambled = stream(record(0, lines, tags=["favorite", "Installed"]))
    assert shortcuts_to_bytes(parse_shortcuts(scrambled)) == shortcuts_to_bytes([_game()])


def test_mixed_owning_and_borrowing():
    refs = parse_shortcuts(shortcuts_to_bytes([_game(0)]))
    data = shortcuts_to_bytes(refs + [_game(1, app_name="Other")])
    out = parse_shortcuts(data)
    assert [s.app_name for s in out] == ["Game", "Other"]
    assert out[0] == refs[0]


def test_borrowed_records_reencode_identically():
    data = shortcuts_to_bytes([_game(0), _game(1, tags=[])])
    assert shortcuts_to_bytes(parse_shortcuts(data)) == data


def test_verify_roundtrip():
    data = shortcuts_to_bytes([_game(0), _game(1)])
    assert verify_roundtrip(data) == (2, True)
    assert verify_roundtrip(HEADER + BS + BS) == (0, True)


def test_verify_roundtrip_rejects_garbage():
    with pytest.raises(DecodeError):
        verify_roundtrip(b"\x00nope\x00")
