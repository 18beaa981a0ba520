import dataclasses

import pytest

from linksim.settings import (
    ErrorControl,
    Framing,
    ReceiveModulation,
    ReceiverSettings,
    TransmitModulation,
    TransmitterSettings,
)


def test_transmitter_defaults():
    settings = TransmitterSettings()
    assert settings.frequency == 10
    assert settings.resolution == 4
    assert settings.error_chance == 0
    assert settings.modulation is TransmitModulation.NRZ_POLAR
    assert settings.framing is Framing.BYTE_COUNT
    assert settings.error_control is ErrorControl.NONE


def test_receiver_defaults():
    settings = ReceiverSettings()
    assert settings.frequency == 10
    assert settings.resolution == 10
    assert settings.modulation is ReceiveModulation.NRZ_POLAR
    assert settings.framing is Framing.BYTE_COUNT
    assert settings.error_control is ErrorControl.NONE


def test_settings_are_immutable():
    settings = TransmitterSettings()
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.frequency = 20  # type: ignore[misc]
    assert settings.frequency == 10


def test_replace_changes_only_given_field():
    original = ReceiverSettings()
    changed = dataclasses.replace(original, framing=Framing.BYTE_INSERTION)
    assert changed.framing is Framing.BYTE_INSERTION
    assert original.framing is Framing.BYTE_COUNT
    assert changed.resolution == original.resolution
    assert changed.error_control is original.error_control


def test_settings_compare_by_value():
    first = TransmitterSettings(resolution=10, error_control=ErrorControl.CRC)
    second = TransmitterSettings(resolution=10, error_control=ErrorControl.CRC)
    assert first == second
    assert first != TransmitterSettings()


@pytest.mark.parametrize("received", list(ReceiveModulation))
def test_every_receiver_modulation_has_a_transmitter_counterpart(received):
    sent = TransmitterSettings(modulation=TransmitModulation[received.name])
    heard = ReceiverSettings(modulation=received)
    assert sent.modulation.name == heard.modulation.name