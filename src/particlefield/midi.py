"""
MIDI output for the particle field.

A sink is any object with a `send(message)` method taking raw MIDI bytes,
e.g. `[144, 60, 100]`. `MidoOutput` is the real one; tests pass their own.
"""

import logging

import librosa
import mido

from particlefield.constants import NOTE_OFF, NOTE_ON

logger = logging.getLogger(__name__)


def _clamp7(value):
    return max(0, min(127, int(value)))


def note_on(note, velocity):
    return [NOTE_ON, _clamp7(note), _clamp7(velocity)]


def note_off(note):
    return [NOTE_OFF, _clamp7(note), 0]


def note_name(note):
    return librosa.midi_to_note(note)


class MidoOutput:
    """
    Output endpoint backed by a mido port.
    Converts raw byte messages to mido Messages before sending.
    """

    def __init__(self, port):
        self.port = port
        self.name = getattr(port, "name", "?")

    def send(self, message):
        msg = mido.Message.from_bytes(list(message))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{msg.type} {note_name(msg.note)} vel={msg.velocity}")
        self.port.send(msg)

    def close(self):
        if not self.port.closed:
            self.port.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def find_port_name(names, port_name=None):
    """
    Pick an output port: the first one whose name contains `port_name`,
    or simply the first one when no name is given.
    """
    try:
        if port_name is None:
            return names[0]
        return [name for name in names if port_name in name][0]
    except IndexError:
        return None


def open_output(port_name=None):
    """
    Look for a MIDI output once at startup.
    Returns None (and keeps the animation running silently) when there is
    no backend, no device, or the device cannot be opened.
    """
    try:
        names = mido.get_output_names()
    except (ImportError, OSError) as e:
        logger.warning(f"[!] MIDI is not supported on this system: {e}")
        return None

    selected = find_port_name(names, port_name)
    if selected is None:
        wanted = f" matching '{port_name}'" if port_name else ""
        logger.warning(f"[!] Could not find a MIDI output{wanted}; notes disabled.")
        return None

    try:
        port = mido.open_output(selected)
    except OSError as e:
        logger.warning(f"[!] Could not open MIDI output '{selected}': {e}; notes disabled.")
        return None

    logger.info(f"[+] MIDI output selected: {selected}")
    return MidoOutput(port)
