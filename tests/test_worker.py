"""Tests for the worker task."""

import pytest

from rgbblit.core.errors import InputError
from rgbblit.pipeline.channel import PointChannel
from rgbblit.pipeline.data import Chunk, PixelPoint, RunContext, WorkerFailure
from rgbblit.pipeline.filters import FilterChain
from rgbblit.pipeline.worker import Worker, WorkerJob, worker_main


def _drain(channel: PointChannel) -> list[PixelPoint]:
    points = []
    while True:
        item = channel.recv(timeout=0.01)
        if item is None:
            return points
        if isinstance(item, WorkerFailure):
            raise AssertionError(f"unexpected failure: {item}")
        points.extend(PixelPoint.from_record(r) for r in item)


@pytest.fixture
def channel():
    return PointChannel.for_threads(maxsize=1000)


class TestWorker:
    """Tests for reading a chunk and emitting points."""

    def test_emits_one_point_per_triplet(self, write_raw, channel):
        data = bytes(range(36))  # 12 pixels
        path = write_raw(data)
        worker = Worker(
            context=RunContext(index=1, size=2),
            chunk=Chunk(start=18, end=35),
            filters=FilterChain(),
            channel=channel,
            input_path=path,
            width=4,
        )

        assert worker.run() == 6
        points = _drain(channel)

        # Offset 18 is pixel 6 -> (2, 1) on a 4-wide canvas
        assert points[0] == PixelPoint(x=2, y=1, r=18, g=19, b=20)
        assert points[-1] == PixelPoint(x=3, y=2, r=33, g=34, b=35)
        assert len({(p.x, p.y) for p in points}) == 6

    def test_applies_filters(self, write_raw, channel):
        path = write_raw(bytes([255, 0, 0] * 2))
        worker = Worker(
            context=RunContext(index=0, size=1),
            chunk=Chunk(0, 5),
            filters=FilterChain.parse("i"),
            channel=channel,
            input_path=path,
            width=2,
        )
        worker.run()

        assert [p.rgb for p in _drain(channel)] == [(0, 255, 255), (0, 255, 255)]

    def test_batches(self, write_raw, channel):
        """Points are framed into batch_size records per message."""
        path = write_raw(bytes(30))
        worker = Worker(
            context=RunContext(index=0, size=1),
            chunk=Chunk(0, 29),
            filters=FilterChain(),
            channel=channel,
            input_path=path,
            width=10,
            batch_size=4,
        )
        worker.run()

        sizes = []
        while (item := channel.recv(timeout=0.01)) is not None:
            sizes.append(len(item))
        assert sizes == [4, 4, 2]

    def test_empty_chunk(self, write_raw, channel):
        path = write_raw(bytes(6))
        worker = Worker(RunContext(0, 3), Chunk(0, -1), FilterChain(), channel, path, width=2)
        assert worker.run() == 0
        assert channel.recv(timeout=0.01) is None

    def test_misaligned_chunk_rejected(self, write_raw, channel):
        """A chunk that splits a triplet is refused, not painted wrong."""
        path = write_raw(bytes(12))
        worker = Worker(RunContext(1, 5), Chunk(2, 3), FilterChain(), channel, path, width=2)

        with pytest.raises(InputError):
            worker.run()
        assert channel.recv(timeout=0.01) is None

    def test_missing_file(self, tmp_path, channel):
        worker = Worker(RunContext(0, 1), Chunk(0, 5), FilterChain(), channel, tmp_path / "nope.rgb", width=2)
        with pytest.raises(InputError):
            worker.run()

    def test_short_read(self, write_raw, channel):
        """File shrank after validation."""
        path = write_raw(bytes(6))
        worker = Worker(RunContext(0, 1), Chunk(0, 11), FilterChain(), channel, path, width=2)
        with pytest.raises(InputError):
            worker.run()


class TestWorkerMain:
    """Tests for the launcher entry point."""

    def test_success(self, write_raw, channel, random_image):
        image = random_image(4, 3)
        path = write_raw(image)
        job = WorkerJob(input_path=str(path), length=image.nbytes, width=4)

        codes = [worker_main(RunContext(i, 2), job, channel) for i in range(2)]
        points = _drain(channel)

        assert codes == [0, 0]
        assert len(points) == 12
        for p in points:
            assert p.rgb == tuple(image[p.y, p.x].tolist())

    def test_failure_reported(self, tmp_path, channel):
        job = WorkerJob(input_path=str(tmp_path / "missing.rgb"), length=12, width=2)

        assert worker_main(RunContext(1, 2), job, channel) == 1
        failure = channel.recv(timeout=1.0)
        assert isinstance(failure, WorkerFailure)
        assert failure.worker_index == 1
        assert failure.kind == "InputError"

    def test_byte_exact_misaligned_fails(self, write_raw, channel):
        """Byte-exact partition with N not dividing L/3 aborts the worker."""
        path = write_raw(bytes(12))
        job = WorkerJob(input_path=str(path), length=12, width=2, align_chunks=False)

        # floor(12 / 5) = 2 bytes -> worker 1 gets [2, 3]
        assert worker_main(RunContext(1, 5), job, channel) == 1
        failure = channel.recv(timeout=1.0)
        assert failure.kind == "InputError"
        assert failure.operation == "partition"

    def test_job_is_picklable(self):
        import pickle

        job = WorkerJob(input_path="x.rgb", length=12, width=2, filters=FilterChain.parse("gi"))
        assert pickle.loads(pickle.dumps(job)) == job
