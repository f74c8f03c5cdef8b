from __future__ import annotations

import logging
from pathlib import Path

import pytest

from capture_script.controls import (
    ControlId,
    ControlInfo,
    ControlType,
    ControlValue,
    StaticCamera,
)
from capture_script.errors import (
    ScriptGrammarError,
    ScriptOpenError,
    ScriptSyntaxError,
    UnsupportedControlError,
    UnsupportedSectionError,
)
from capture_script.script import CaptureScript


BRIGHTNESS = ControlId(1, "brightness", ControlType.BYTE)
AWB = ControlId(2, "awb", ControlType.BOOL)
EXPOSURE = ControlId(3, "ExposureTime", ControlType.INT32)
GAIN = ControlId(4, "AnalogueGain", ControlType.FLOAT)
CROP = ControlId(5, "ScalerCrop", ControlType.RECTANGLE)
MODE = ControlId(6, "Mode", ControlType.STRING)

CAMERA = StaticCamera(
    name="test",
    catalog={c: ControlInfo() for c in (BRIGHTNESS, AWB, EXPOSURE, GAIN, CROP, MODE)},
)

EXAMPLE = '{frames: [{0: {brightness: "128"}}, {5: {awb: "true"}}]}'

BLOCK_SCRIPT = """\
frames:
  - 1:
      ExposureTime: 10000
      AnalogueGain: 1.5
  - 2:
      Mode: night
      ScalerCrop: "[0, 0, 640, 480]"
  - 10:
      brightness: 300
"""


def _compile(text: str) -> CaptureScript:
    return CaptureScript.from_text(CAMERA, text)


def test_flow_example_builds_frame_table() -> None:
    s = _compile(EXAMPLE)

    assert s.valid and s.is_valid()
    assert s.error is None
    assert s.frames() == [0, 5]
    assert s.frame_controls(0).by_name() == {"brightness": ControlValue(ControlType.BYTE, 128)}
    assert s.frame_controls(5).by_name() == {"awb": ControlValue(ControlType.BOOL, True)}
    assert len(s.frame_controls(3)) == 0


def test_only_scripted_frames_have_controls() -> None:
    s = _compile(BLOCK_SCRIPT)

    assert s.valid
    scripted = {1, 2, 10}
    for frame in range(0, 20):
        assert bool(s.frame_controls(frame)) == (frame in scripted)

    f1 = s.frame_controls(1)
    assert f1[EXPOSURE] == ControlValue(ControlType.INT32, 10000)
    assert f1[GAIN].value == 1.5

    f2 = s.frame_controls(2)
    assert f2[MODE].value == "night"
    # Rectangles are not decoded; the control is present with an empty value.
    assert CROP in f2
    assert f2[CROP].is_none

    assert s.frame_controls(10)[BRIGHTNESS].value == 44


def test_missing_frame_lookup_returns_fresh_empty_list() -> None:
    s = _compile(EXAMPLE)
    a = s.frame_controls(7)
    b = s.frame_controls(7)
    assert len(a) == 0 and len(b) == 0
    assert a is not b


def test_frame_table_is_read_only_after_parse() -> None:
    s = _compile(EXAMPLE)
    with pytest.raises(RuntimeError):
        s.frame_controls(0).set(AWB, ControlValue(ControlType.BOOL, False))
    with pytest.raises(RuntimeError):
        s.frame_controls(3).set(AWB, ControlValue(ControlType.BOOL, False))


def test_empty_top_mapping_is_a_valid_empty_script() -> None:
    s = _compile("{}")
    assert s.valid
    assert s.frames() == []

    s = _compile("frames: []\n")
    assert s.valid
    assert len(s) == 0


def test_unknown_section_aborts() -> None:
    s = _compile("shots:\n  - 0: {brightness: 1}\n")

    assert not s.valid
    assert isinstance(s.error, UnsupportedSectionError)
    assert s.error.section == "shots"
    assert "Unsupported section 'shots'" in str(s.error)


def test_unknown_section_after_frames_aborts_whole_script() -> None:
    s = _compile("frames:\n  - 0: {brightness: 1}\nextras: {}\n")
    assert not s.valid
    assert isinstance(s.error, UnsupportedSectionError)
    assert s.frames() == []
    assert len(s.frame_controls(0)) == 0


def test_unknown_control_aborts_whole_script(caplog) -> None:
    text = """\
frames:
  - 0:
      brightness: 10
  - 1:
      Sharpness: 2
"""
    with caplog.at_level(logging.ERROR, logger="capture_script.script"):
        s = _compile(text)

    assert not s.valid
    assert isinstance(s.error, UnsupportedControlError)
    assert s.error.name == "Sharpness"
    assert (s.error.line, s.error.column) == (4, 6)
    # Frame 0 parsed before the failure but must not be exposed.
    assert s.frames() == []
    assert len(s.frame_controls(0)) == 0
    assert "Unsupported control 'Sharpness'" in caplog.text


@pytest.mark.parametrize(
    "text, expected, actual",
    [
        ("", "document-start", "stream-end"),
        ("just text\n", "mapping-start", "scalar"),
        ("- 0\n- 1\n", "mapping-start", "sequence-start"),
        ("frames: 3\n", "sequence-start", "scalar"),
        ("frames:\n  - 3\n", "mapping-start", "scalar"),
        ("frames:\n  - 0: 5\n", "mapping-start", "scalar"),
        ("frames:\n  - 0:\n      brightness: [1, 2]\n", "scalar", "sequence-start"),
        ("frames:\n  - [0]\n", "mapping-start", "sequence-start"),
        ("frames:\n  - {[0]: {}}\n", "scalar", "sequence-start"),
        ("frames: *frames\n", "sequence-start", "alias"),
        ("{[a]: 1}\n", "scalar", "sequence-start"),
    ],
)
def test_grammar_violations_report_expected_and_actual(text: str, expected: str, actual: str) -> None:
    s = _compile(text)

    assert not s.valid
    assert isinstance(s.error, ScriptGrammarError)
    assert s.error.expected == expected
    assert s.error.actual == actual


def test_frame_with_two_keys_is_rejected() -> None:
    text = "frames:\n  - 0: {brightness: 1}\n    1: {brightness: 2}\n"
    s = _compile(text)
    assert not s.valid
    assert isinstance(s.error, ScriptGrammarError)
    assert s.error.expected == "mapping-end"
    assert s.error.actual == "scalar"


def test_empty_values_are_rejected() -> None:
    for text in (
        'frames:\n  - 0: {brightness: ""}\n',
        "frames:\n  - 0:\n      brightness:\n",
        'frames:\n  - "": {brightness: 1}\n',
        'frames:\n  - 0: {"": 1}\n',
    ):
        s = _compile(text)
        assert not s.valid, text
        assert isinstance(s.error, ScriptGrammarError), text


def test_frame_number_text_rules() -> None:
    # Non-numeric frame numbers read as 0.
    s = _compile("frames:\n  - first: {brightness: 1}\n")
    assert s.valid
    assert s.frames() == [0]

    # Negative numbers wrap like the unsigned frame counter.
    s = _compile("frames:\n  - -2: {brightness: 1}\n")
    assert s.valid
    assert s.frames() == [2**32 - 2]
    assert s.frame_controls(2**32 - 2)[BRIGHTNESS].value == 1


def test_duplicate_frame_keeps_last_entry(caplog) -> None:
    text = "frames:\n  - 4: {brightness: 1}\n  - 4: {awb: false}\n"
    with caplog.at_level(logging.WARNING, logger="capture_script.script"):
        s = _compile(text)

    assert s.valid
    assert s.frame_controls(4).by_name() == {"awb": ControlValue(ControlType.BOOL, False)}
    assert "scripted more than once" in caplog.text


def test_bad_bool_value_does_not_abort() -> None:
    s = _compile("frames:\n  - 0: {awb: yes, brightness: 7}\n")

    assert s.valid
    ctrls = s.frame_controls(0)
    assert ctrls[AWB].is_none
    assert ctrls[BRIGHTNESS].value == 7
    assert [i.message for i in s.issues] == ["Unsupported control 'yes' for bool control awb"]


def test_repeated_frames_sections_merge() -> None:
    s = _compile("frames:\n  - 0: {brightness: 1}\nframes:\n  - 2: {brightness: 3}\n")
    assert s.valid
    assert s.frames() == [0, 2]


def test_malformed_yaml_is_reported_as_syntax_error() -> None:
    s = _compile("frames: [{0: {brightness: 1}\n")
    assert not s.valid
    assert isinstance(s.error, ScriptSyntaxError)


def test_script_file_is_read(tmp_path: Path) -> None:
    p = tmp_path / "script.yaml"
    p.write_text(BLOCK_SCRIPT, encoding="utf-8")

    s = CaptureScript(CAMERA, p)
    assert s.valid
    assert s.file_name == str(p)
    assert s.frames() == [1, 2, 10]


def test_missing_script_file_leaves_object_invalid(tmp_path: Path) -> None:
    s = CaptureScript(CAMERA, tmp_path / "nope.yaml")

    assert not s.valid
    assert isinstance(s.error, ScriptOpenError)
    assert "Failed to open capture script" in str(s.error)
    assert len(s.frame_controls(0)) == 0


def test_any_object_with_controls_can_be_the_camera() -> None:
    class Device:
        def controls(self):
            return {AWB: ControlInfo(default=False)}

    s = CaptureScript.from_text(Device(), "frames:\n  - 1: {awb: true}\n")
    assert s.valid
    assert s.frame_controls(1)[AWB].value is True
