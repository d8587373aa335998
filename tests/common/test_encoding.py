from __future__ import annotations

import pytest

from src.pase_lista.pase_lista.common.encoding import (
    CANDIDATE_ENCODINGS,
    REPLACEMENT_CHAR,
    has_artifacts,
    repair_buffer,
    repair_text,
    strip_bom,
)


def _mojibake(text: str) -> str:
    return text.encode("utf-8").decode("latin-1")


@pytest.mark.parametrize(
    "text",
    ["JosÃ©", "MarÃ­a", "InfanterÃ\xada", "Â¿QuÃ© tal?", "Jos" + REPLACEMENT_CHAR],
)
def test_has_artifacts_detects_fingerprints(text):
    assert has_artifacts(text) is True


@pytest.mark.parametrize("text", ["José", "María", "INFORMÁTICA", "plain ascii", "Ã", "Â"])
def test_has_artifacts_clean_text(text):
    assert has_artifacts(text) is False


@pytest.mark.parametrize("value", [None, "", 0, 123, b"Jos\xc3\xa9", ["JosÃ©"]])
def test_has_artifacts_non_text_is_clean(value):
    assert has_artifacts(value) is False


@pytest.mark.parametrize("text", ["Ã\n", "Ã\r", "Ã\u2028", "Â\u2029", "Â\r\n"])
def test_lead_character_before_line_terminator_is_not_flagged(text):
    assert has_artifacts(text) is False


def test_line_terminator_does_not_hide_later_artifact():
    assert has_artifacts("Ã\rJosÃ©") is True


@pytest.mark.parametrize(
    "original",
    ["José López", "José", "María-José", "Infantería", "Ana María", "INFORMACIÓN", "Peña Ñúñez", "¿Qué?"],
)
def test_repair_text_recovers_double_decoded_utf8(original):
    broken = _mojibake(original)
    assert has_artifacts(broken)
    assert repair_text(broken) == original


@pytest.mark.parametrize("text", ["José", "María", "hello", "Ã", "日本語"])
def test_repair_text_leaves_clean_text_unchanged(text):
    assert repair_text(text) == text


@pytest.mark.parametrize("value", [None, "", 0, 42, 1.5, b"Jos\xc3\xa9"])
def test_repair_text_passes_non_text_through(value):
    assert repair_text(value) is value


def test_repair_text_keeps_replacement_character():
    text = "Jos" + REPLACEMENT_CHAR + " MarÃ­a"
    assert repair_text(text) == text


def test_repair_text_gives_up_on_code_points_above_latin1():
    text = "JosÃ© 日本"
    assert repair_text(text) == text


def test_repair_text_returns_input_when_no_candidate_is_clean():
    # "Ã(" re-encodes to C3 28, which is invalid UTF-8 and stays "Ã(" elsewhere.
    text = "Ã("
    assert repair_text(text) == text


def test_repair_text_is_idempotent():
    once = repair_text(_mojibake("Infantería"))
    assert repair_text(once) == once


def test_candidate_order_starts_with_utf8():
    assert CANDIDATE_ENCODINGS[0] == "utf-8"
    assert CANDIDATE_ENCODINGS[-1] == "latin-1"


def test_repair_buffer_utf8():
    assert repair_buffer("José,Infantería".encode("utf-8")) == "José,Infantería"


def test_repair_buffer_latin1_file():
    data = "matricula,nombre\nA1,José\nA2,Ana María\n".encode("latin-1")
    assert repair_buffer(data) == "matricula,nombre\nA1,José\nA2,Ana María\n"


def test_repair_buffer_windows1252_specific_bytes():
    # 0x93/0x94 are curly quotes only in windows-1252.
    data = "“Peña”".encode("windows-1252")
    assert repair_buffer(data) == "“Peña”"


def test_repair_buffer_falls_through_to_iso_8859_1():
    # 0x81 is undefined in windows-1252 and decodes to U+FFFD there.
    data = b"Jos\xe9 \x81"
    assert repair_buffer(data) == "José \x81"


@pytest.mark.parametrize("value", [None, b"", bytearray(), []])
def test_repair_buffer_empty_inputs(value):
    assert repair_buffer(value) == ""


def test_repair_buffer_accepts_bytearray_and_int_lists():
    assert repair_buffer(bytearray(b"Jos\xe9")) == "José"
    assert repair_buffer([74, 111, 115, 195, 169]) == "José"
    assert repair_buffer(memoryview(b"abc")) == "abc"


@pytest.mark.parametrize("value", [5, 0, True, 1024])
def test_repair_buffer_rejects_integers(value):
    assert repair_buffer(value) == ""


def test_repair_buffer_unconvertible_input_is_empty():
    assert repair_buffer(object()) == ""
    assert repair_buffer([300, 1]) == ""


def test_repair_buffer_falls_back_to_lenient_utf8():
    # A valid UTF-8 "Ã©" pair stays an artifact under every single-byte code page too.
    data = "JosÃ©".encode("utf-8")
    result = repair_buffer(data)
    assert result == "JosÃ©"


def test_repair_buffer_never_raises_on_any_byte():
    data = bytes(range(256))
    assert isinstance(repair_buffer(data), str)
    for b in range(256):
        assert isinstance(repair_buffer(bytes([b, b, 0xC3])), str)


def test_strip_bom():
    assert strip_bom("\ufeffmatricula") == "matricula"
    assert strip_bom("matricula") == "matricula"
    assert strip_bom(None) is None


def test_latin1_roster_buffer_round_trip():
    data = "matricula,nombre,grupo\n001,José,Infantería\n002,Ana María,Informática\n".encode("latin-1")
    text = repair_buffer(data)

    for word in ("José", "Infantería", "Ana María", "Informática"):
        assert word in text
    assert REPLACEMENT_CHAR not in text
    assert not has_artifacts(text)


@pytest.mark.parametrize("text", ["José López", "naïve café", "日本語 ✓", "plain"])
def test_valid_utf8_buffer_is_never_worse_than_plain_decode(text):
    data = text.encode("utf-8")
    assert repair_buffer(data) == data.decode("utf-8")
