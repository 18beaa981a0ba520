import pytest

from linksim.medium import Medium, Permission


def test_fresh_reader_hears_zero():
    with Medium() as medium:
        medium.narrow(Permission.READ)
        assert medium.listen() == 0.0


def test_fresh_reader_keeps_hearing_zero():
    with Medium() as medium:
        medium.narrow(Permission.READ)
        assert [medium.listen() for _ in range(3)] == [0.0, 0.0, 0.0]


def test_narrow_sets_permission():
    with Medium() as medium:
        assert medium.permission is Permission.NOT_SET
        medium.narrow(Permission.WRITE)
        assert medium.permission is Permission.WRITE


def test_narrow_same_end_again_is_allowed():
    with Medium() as medium:
        medium.narrow(Permission.READ)
        medium.narrow(Permission.READ)
        assert medium.permission is Permission.READ


def test_narrow_to_other_end_fails():
    with Medium() as medium:
        medium.narrow(Permission.READ)
        with pytest.raises(RuntimeError):
            medium.narrow(Permission.WRITE)


def test_narrow_to_not_set_fails():
    with Medium() as medium:
        with pytest.raises(ValueError):
            medium.narrow(Permission.NOT_SET)


def test_transmit_needs_write_end():
    with Medium() as medium:
        with pytest.raises(ValueError):
            medium.transmit(1.0)
        medium.narrow(Permission.READ)
        with pytest.raises(ValueError):
            medium.transmit(1.0)


def test_listen_needs_read_end():
    with Medium() as medium:
        medium.narrow(Permission.WRITE)
        with pytest.raises(ValueError):
            medium.listen()


def test_closed_medium_rejects_use():
    medium = Medium()
    medium.narrow(Permission.READ)
    medium.close()
    with pytest.raises(ValueError):
        medium.listen()