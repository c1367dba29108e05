"""Unit tests for the fallback xtables file lock."""

import errno
import fcntl
import os

import pytest
from unittest.mock import Mock, patch

from iptctl.core.config import LockConfig
from iptctl.core.exceptions import LockError, LockTimeoutError
from iptctl.services.lock import FileLock


@pytest.fixture
def lock_path(tmp_path):
    return tmp_path / "xtables_old.lock"


@pytest.fixture
def file_lock(lock_path):
    return FileLock(lock_path, retry_delay=0, console=Mock())


def _hold(path):
    """Take the lock through a separate open file description."""
    fd = os.open(str(path), os.O_CREAT | os.O_WRONLY, 0o600)
    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    return fd


def _release(fd):
    fcntl.flock(fd, fcntl.LOCK_UN)
    os.close(fd)


class TestFileLock:
    """Tests for FileLock."""

    def test_default_is_eleven_attempts(self, lock_path):
        assert FileLock(lock_path).attempts == 11

    def test_creates_missing_lock_file(self, file_lock, lock_path):
        assert not lock_path.exists()
        with file_lock.acquire():
            assert lock_path.exists()

    def test_never_deletes_lock_file(self, file_lock, lock_path):
        with file_lock.acquire():
            pass
        assert lock_path.exists()

    def test_released_after_block(self, file_lock, lock_path):
        with file_lock.acquire():
            pass
        # Would raise BlockingIOError if still held
        fd = _hold(lock_path)
        _release(fd)

    def test_released_when_block_raises(self, file_lock, lock_path):
        with pytest.raises(RuntimeError):
            with file_lock.acquire():
                raise RuntimeError("boom")
        fd = _hold(lock_path)
        _release(fd)

    def test_reusable(self, file_lock):
        for _ in range(3):
            with file_lock.acquire():
                pass

    def test_timeout_when_held_elsewhere(self, file_lock, lock_path):
        fd = _hold(lock_path)
        try:
            with pytest.raises(LockTimeoutError) as exc:
                with file_lock.acquire():
                    pytest.fail("lock should not have been acquired")
        finally:
            _release(fd)

        assert exc.value.attempts == 11
        assert exc.value.path == str(lock_path)
        assert "get lock failed" in str(exc.value)

    def test_retries_exactly_ten_times(self, file_lock):
        busy = BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable")
        with patch("iptctl.services.lock.fcntl.flock", side_effect=busy) as flock:
            with pytest.raises(LockTimeoutError):
                with file_lock.acquire():
                    pass
        assert flock.call_count == 11

    def test_succeeds_after_contention(self, file_lock):
        busy = BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable")
        with patch(
            "iptctl.services.lock.fcntl.flock",
            side_effect=[busy, busy, busy, None, None],
        ) as flock:
            with file_lock.acquire():
                pass
        # 4 lock attempts plus the unlock
        assert flock.call_count == 5

    def test_no_sleep_when_delay_zero(self, file_lock):
        busy = BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable")
        with patch("iptctl.services.lock.fcntl.flock", side_effect=busy), \
                patch("iptctl.services.lock.time.sleep") as sleep:
            with pytest.raises(LockTimeoutError):
                with file_lock.acquire():
                    pass
        sleep.assert_not_called()

    def test_sleeps_between_attempts_only(self, lock_path):
        lock = FileLock(lock_path, retries=3, retry_delay=0.05, console=Mock())
        busy = BlockingIOError(errno.EAGAIN, "Resource temporarily unavailable")
        with patch("iptctl.services.lock.fcntl.flock", side_effect=busy), \
                patch("iptctl.services.lock.time.sleep") as sleep:
            with pytest.raises(LockTimeoutError):
                with lock.acquire():
                    pass
        assert sleep.call_count == 3
        sleep.assert_called_with(0.05)

    def test_other_flock_errors_not_retried(self, file_lock):
        err = OSError(errno.ENOLCK, "No locks available")
        with patch("iptctl.services.lock.fcntl.flock", side_effect=err) as flock:
            with pytest.raises(LockError) as exc:
                with file_lock.acquire():
                    pass
        assert not isinstance(exc.value, LockTimeoutError)
        assert flock.call_count == 1

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        lock = FileLock(blocker / "xtables.lock", console=Mock())
        with pytest.raises(LockError) as exc:
            with lock.acquire():
                pass
        assert "Cannot open lock file" in str(exc.value)

    def test_from_config(self, lock_path):
        config = LockConfig(path=lock_path, retries=4, retry_delay=0.2)
        lock = FileLock.from_config(config)
        assert lock.path == lock_path
        assert lock.attempts == 5
        assert lock.retry_delay == 0.2
