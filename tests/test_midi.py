import logging

import mido
import pytest

from particlefield import midi
from particlefield.midi import MidoOutput, find_port_name, note_name, note_off, note_on, open_output


class FakePort:
    def __init__(self, name):
        self.name = name
        self.closed = False
        self.sent = []

    def send(self, msg):
        self.sent.append(msg)

    def close(self):
        self.closed = True


def test_note_on_bytes():
    assert note_on(60, 100) == [144, 60, 100]


def test_note_off_bytes():
    assert note_off(60) == [128, 60, 0]


def test_values_are_clamped_to_seven_bits():
    assert note_on(200, -5) == [144, 127, 0]
    assert note_off(-1) == [128, 0, 0]


def test_note_name():
    assert note_name(60) == "C4"
    assert note_name(36) == "C2"


@pytest.mark.parametrize(
    "names, wanted, expected",
    [
        (["IAC Bus 1", "Synth"], None, "IAC Bus 1"),
        (["IAC Bus 1", "Synth"], "Syn", "Synth"),
        (["IAC Bus 1"], "nope", None),
        ([], None, None),
    ],
)
def test_find_port_name(names, wanted, expected):
    assert find_port_name(names, wanted) == expected


def test_mido_output_sends_messages():
    port = FakePort("Synth")
    out = MidoOutput(port)
    out.send(note_on(64, 90))
    out.send(note_off(64))

    on, off = port.sent
    assert on.type == "note_on" and on.note == 64 and on.velocity == 90
    assert off.type == "note_off" and off.note == 64 and off.velocity == 0
    assert off.bytes() == [128, 64, 0]


def test_mido_output_closes_port():
    port = FakePort("Synth")
    with MidoOutput(port) as out:
        assert out.name == "Synth"
    assert port.closed


def test_mido_output_logs_note_names(caplog):
    out = MidoOutput(FakePort("Synth"))
    with caplog.at_level(logging.DEBUG, logger="particlefield.midi"):
        out.send(note_on(60, 80))
    assert "C4" in caplog.text


def test_open_output_picks_first_port(monkeypatch):
    opened = []

    def fake_open(name):
        opened.append(name)
        return FakePort(name)

    monkeypatch.setattr(mido, "get_output_names", lambda: ["First", "Second"])
    monkeypatch.setattr(mido, "open_output", fake_open)

    out = open_output()
    assert isinstance(out, MidoOutput)
    assert opened == ["First"]


def test_open_output_by_name(monkeypatch):
    monkeypatch.setattr(mido, "get_output_names", lambda: ["First", "Second"])
    monkeypatch.setattr(mido, "open_output", FakePort)
    assert open_output("Sec").name == "Second"


def test_no_devices_is_not_fatal(monkeypatch, caplog):
    monkeypatch.setattr(mido, "get_output_names", lambda: [])
    with caplog.at_level(logging.WARNING, logger=midi.__name__):
        assert open_output() is None
    assert "Could not find a MIDI output" in caplog.text


def test_missing_backend_is_not_fatal(monkeypatch, caplog):
    def no_backend():
        raise ImportError("No module named 'rtmidi'")

    monkeypatch.setattr(mido, "get_output_names", no_backend)
    with caplog.at_level(logging.WARNING, logger=midi.__name__):
        assert open_output() is None
    assert "not supported" in caplog.text


def test_port_that_fails_to_open_is_not_fatal(monkeypatch, caplog):
    def busy(name):
        raise OSError("MidiOutAlsa::openPort: error creating ALSA sequencer port")

    monkeypatch.setattr(mido, "get_output_names", lambda: ["Synth"])
    monkeypatch.setattr(mido, "open_output", busy)
    with caplog.at_level(logging.WARNING, logger=midi.__name__):
        assert open_output() is None
    assert "Could not open MIDI output 'Synth'" in caplog.text
