"""Shared fixtures: seeded randomness, a recording MIDI sink and a canvas stub."""

import numpy as np
import pytest


class RecordingSink:
    def __init__(self):
        self.messages = []

    def send(self, message):
        self.messages.append(list(message))

    def of_status(self, status):
        return [m for m in self.messages if m[0] == status]


class StubCanvas:
    def __init__(self):
        self.calls = []
        self.frame = None

    def fill_rect(self, x, y, w, h, rgba):
        self.calls.append(("rect", (x, y, w, h), rgba))

    def stroke_line(self, p1, p2, rgba, width=1.0):
        self.calls.append(("line", (p1, p2, width), rgba))

    def fill_circle(self, center, radius, rgba):
        self.calls.append(("circle", (center, radius), rgba))

    def of_kind(self, kind):
        return [c for c in self.calls if c[0] == kind]


@pytest.fixture()
def rng():
    return np.random.default_rng(12345)


@pytest.fixture()
def sink():
    return RecordingSink()


@pytest.fixture()
def canvas():
    return StubCanvas()
