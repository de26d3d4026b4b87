"""Tests for TransferProgress."""

import threading

import pytest

from transfer.progress import TransferProgress


class TestTransferProgress:
    def test_initial_state(self):
        progress = TransferProgress("file.bin", total_size=1000)

        assert progress.get_complete_percent() == "0.0"
        assert progress.get_complete_size(False) == 0
        assert progress.get_total_size(False) == 1000
        assert not progress.is_complete()

    def test_percent_rounds_down(self):
        progress = TransferProgress("file.bin", total_size=3)
        progress.report_chunk_complete(1)
        assert progress.get_complete_percent() == "33.3"

        progress.report_chunk_complete(1)
        assert progress.get_complete_percent() == "66.6"

    def test_almost_done_is_not_100(self):
        progress = TransferProgress("file.bin", total_size=10000)
        progress.report_chunk_complete(9999)
        assert progress.get_complete_percent() == "99.9"

    def test_complete_reports_100(self):
        progress = TransferProgress("file.bin", total_size=2048)
        progress.report_chunk_complete(1024)
        progress.report_chunk_complete(1024)

        assert progress.get_complete_percent() == "100.0"
        assert progress.get_complete_size(False) == progress.get_total_size(False)
        assert progress.is_complete()

    def test_counter_is_capped_at_total(self):
        progress = TransferProgress("file.bin", total_size=100)
        progress.report_chunk_complete(80)
        progress.report_chunk_complete(80)
        assert progress.get_complete_size(False) == 100

    def test_zero_byte_transfer_reports_100_when_finished(self):
        progress = TransferProgress("empty.bin", total_size=0)
        assert progress.get_complete_percent() == "0.0"

        progress.mark_finished()

        assert progress.get_complete_percent() == "100.0"
        assert progress.is_complete()

    def test_digits(self):
        progress = TransferProgress("file.bin", total_size=3)
        progress.report_chunk_complete(2)
        assert progress.get_complete_percent(digits=3) == "66.666"

    def test_human_readable_sizes(self):
        progress = TransferProgress("file.bin", total_size=2 * 1024 * 1024)
        progress.report_chunk_complete(1024)

        assert progress.get_total_size() == "2.00 MiB"
        assert progress.get_complete_size() == "1.00 KiB"

    def test_concurrent_reporters(self):
        progress = TransferProgress("file.bin", total_size=8 * 1000)

        def report():
            for _ in range(1000):
                progress.report_chunk_complete(1)

        threads = [threading.Thread(target=report) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert progress.get_complete_size(False) == 8000
        assert progress.get_completed_chunks() == 8000
        assert progress.get_complete_percent() == "100.0"

    def test_callback_receives_updates(self):
        seen = []
        progress = TransferProgress("file.bin", total_size=10, callback=lambda p: seen.append(p.get_complete_size(False)))

        progress.report_chunk_complete(4)
        progress.report_chunk_complete(6)

        assert seen == [4, 10]

    def test_negative_sizes_are_rejected(self):
        progress = TransferProgress("file.bin")
        with pytest.raises(ValueError):
            progress.report_chunk_complete(-1)
        with pytest.raises(ValueError):
            progress.set_total_size(-5)

    def test_to_dict(self):
        progress = TransferProgress("file.bin", total_size=10)
        progress.report_chunk_complete(5)

        data = progress.to_dict()

        assert data['name'] == "file.bin"
        assert data['total_size'] == 10
        assert data['complete_size'] == 5
        assert data['complete_percent'] == "50.0"
        assert data['completed_chunks'] == 1
        assert data['average_speed'] >= 0

    def test_speed_is_non_negative(self):
        progress = TransferProgress("file.bin", total_size=10)
        assert progress.get_speed(False) == 0.0
        progress.report_chunk_complete(5)
        assert progress.get_speed(False) >= 0.0
        assert progress.get_average_speed().endswith("/s")
